"""
Repostrap provisioning pipeline.

Runs the bootstrap as an ordered list of named steps:

1. Create the private repository
2. Create the matching public repository
3. Generate an SSH keypair
4. Register the public key as a writable deploy key on the private repo
5. Fetch the private repo's Actions public key
6. Seal the SSH private key to it
7. Upload the sealed value as a repository secret

The first failing step stops the run. Nothing is rolled back: repositories
created before the failure are listed in the report so the operator can
clean them up.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from .config import Config
from .errors import BootstrapError, ConfigurationError
from .models import DeployKey, Repository, RepositorySecret
from .sealing import seal_secret
from .sshkeys import KeyPair, generate_keypair


def derive_public_name(private_name: str, suffix: str = "-private") -> str:
    """
    Derive the public repository name from the private one.

    "widgets-private" -> "widgets"
    """
    private_name = private_name.strip()
    if not private_name.endswith(suffix):
        raise ConfigurationError(
            f"Private repository name must end with '{suffix}': {private_name!r}"
        )
    public_name = private_name[: -len(suffix)]
    if not public_name:
        raise ConfigurationError(
            f"Private repository name needs a base name before '{suffix}'"
        )
    return public_name


@dataclass
class Step:
    """One named unit of the pipeline."""

    name: str
    description: str
    action: Callable[[], None]


@dataclass
class ProvisioningReport:
    """Outcome of a pipeline run."""

    completed: list[str] = field(default_factory=list)
    failed_step: Optional[str] = None
    error: Optional[BootstrapError] = None
    created_repositories: list[str] = field(default_factory=list)
    repository_urls: list[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def orphaned_repositories(self) -> list[str]:
        """Repositories left behind by a failed run."""
        return [] if self.ok else list(self.created_repositories)

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class ProvisioningPipeline:
    """Bootstrap a private/public repository pair with a deploy key secret."""

    def __init__(
        self,
        api,
        config: Config,
        private_name: str,
        deploy_key_title: Optional[str] = None,
        keygen: Callable[..., KeyPair] = generate_keypair,
        sealer: Callable[[bytes, str], str] = seal_secret,
        dry_run: bool = False,
    ):
        self.api = api
        self.config = config
        self.private_name = private_name.strip()
        # validated here so a bad name never reaches the network
        self.public_name = derive_public_name(self.private_name, config.private_suffix)
        self.deploy_key_title = deploy_key_title or f"{self.public_name} deploy key"
        self.keygen = keygen
        self.sealer = sealer
        self.dry_run = dry_run

        self._report = ProvisioningReport(dry_run=dry_run)
        self._keys: Optional[KeyPair] = None
        self._public_key = None
        self._sealed: Optional[str] = None

    def _full_name(self, name: str) -> str:
        return f"{self.config.org}/{name}"

    def steps(self) -> list[Step]:
        """The pipeline steps, in execution order."""
        return [
            Step("create_private_repository",
                 f"Create private repository {self._full_name(self.private_name)}",
                 lambda: self._create_repository(self.private_name, "private")),
            Step("create_public_repository",
                 f"Create public repository {self._full_name(self.public_name)}",
                 lambda: self._create_repository(self.public_name, "public")),
            Step("generate_ssh_keys", "Generate Ed25519 SSH keypair",
                 self._generate_keys),
            Step("register_deploy_key",
                 f"Register deploy key on {self._full_name(self.private_name)}",
                 self._register_deploy_key),
            Step("fetch_public_key",
                 f"Fetch Actions public key of {self._full_name(self.private_name)}",
                 self._fetch_public_key),
            Step("seal_private_key", "Seal SSH private key", self._seal_private_key),
            Step("upload_secret",
                 f"Upload secret {self.config.secret_name} to {self._full_name(self.private_name)}",
                 self._upload_secret),
        ]

    def run(self) -> ProvisioningReport:
        """Execute every step in order, stopping at the first failure."""
        report = self._report = ProvisioningReport(dry_run=self.dry_run)
        for step in self.steps():
            if self.dry_run:
                print(f"  [DRY RUN] Would {step.description[0].lower()}{step.description[1:]}")
                report.completed.append(step.name)
                continue

            try:
                step.action()
            except BootstrapError as e:
                print(f"  [FAILED] {step.description}: {e}")
                report.failed_step = step.name
                report.error = e
                break
            report.completed.append(step.name)

        # the private key only lives for the duration of the run
        self._keys = None
        self._sealed = None
        return report

    def _create_repository(self, name: str, visibility: str) -> None:
        repository = Repository(name=name, visibility=visibility, org=self.config.org)
        created = self.api.create_repository(repository)
        self._report.created_repositories.append(self._full_name(name))
        if created.html_url:
            self._report.repository_urls.append(created.html_url)
        print(f"  [CREATED] {self._full_name(created.name or name)} ({visibility})")

    def _generate_keys(self) -> None:
        self._keys = self.keygen()
        print("  [OK] Generated SSH keypair")

    def _register_deploy_key(self) -> None:
        deploy_key = DeployKey(
            key=self._keys.public_key.decode("ascii").strip(),
            title=self.deploy_key_title,
            repository_name=self.private_name,
            read_only=False,
        )
        info = self.api.create_deploy_key(deploy_key)
        print(f"  [CREATED] Deploy key '{info.title or deploy_key.title}'")
        print(f"    read_only={info.read_only} verified={info.verified} enabled={info.enabled}")
        if info.added_by:
            print(f"    added_by={info.added_by}")

    def _fetch_public_key(self) -> None:
        self._public_key = self.api.get_repository_public_key(self.private_name)
        print(f"  [OK] Fetched repository public key (key_id={self._public_key.key_id})")

    def _seal_private_key(self) -> None:
        self._sealed = self.sealer(self._keys.private_key, self._public_key.key)
        print("  [OK] Sealed SSH private key")

    def _upload_secret(self) -> None:
        secret = RepositorySecret(
            repository_name=self.private_name,
            secret_name=self.config.secret_name,
            encrypted_value=self._sealed,
            key_id=self._public_key.key_id,
        )
        self.api.create_repository_secret(secret)
        print(f"  [CREATED] Secret {secret.secret_name} on {self._full_name(self.private_name)}")
