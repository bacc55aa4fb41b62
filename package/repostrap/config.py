"""
Repostrap configuration.

The auth token and organization details live in a Config value that is
built once at startup and handed to the API gateway. Nothing reads the
environment after that.
"""

import os
from dataclasses import dataclass, replace
from typing import Optional

from .errors import ConfigurationError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_API_VERSION = "2022-11-28"
DEFAULT_SECRET_NAME = "SSH_DEPLOY_KEY"
DEFAULT_PRIVATE_SUFFIX = "-private"
DEFAULT_TIMEOUT = 5.0


@dataclass(frozen=True)
class Config:
    """Settings for one bootstrap run."""

    token: str = ""
    org: str = ""
    owner: Optional[str] = None  # defaults to org
    secret_name: str = DEFAULT_SECRET_NAME
    private_suffix: str = DEFAULT_PRIVATE_SUFFIX
    api_url: str = DEFAULT_API_URL
    api_version: str = DEFAULT_API_VERSION
    timeout: float = DEFAULT_TIMEOUT

    @property
    def repo_owner(self) -> str:
        return self.owner or self.org

    @classmethod
    def from_env(cls, environ=None) -> "Config":
        """Build a config from environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            token=env.get("GH_TOKEN") or env.get("GITHUB_TOKEN") or "",
            org=env.get("REPOSTRAP_ORG", ""),
            owner=env.get("REPOSTRAP_OWNER") or None,
            secret_name=env.get("REPOSTRAP_SECRET_NAME") or DEFAULT_SECRET_NAME,
            api_url=env.get("GITHUB_API_URL") or DEFAULT_API_URL,
        )

    def with_overrides(self, **overrides) -> "Config":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    def validate(self) -> "Config":
        if not self.token:
            raise ConfigurationError(
                "GitHub token not found. Set GH_TOKEN or GITHUB_TOKEN environment variable."
            )
        if not self.org:
            raise ConfigurationError("GitHub organization not set (--org or REPOSTRAP_ORG)")
        if not self.secret_name:
            raise ConfigurationError("Secret name must not be empty")
        if not self.private_suffix:
            raise ConfigurationError("Private repository suffix must not be empty")
        if self.timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got {self.timeout}")
        return self

    def to_summary(self) -> dict:
        """Printable view with the token masked."""
        masked = f"{self.token[:4]}..." if len(self.token) > 8 else "***"
        return {
            "auth_token": masked if self.token else "",
            "organization": self.org,
            "owner": self.repo_owner,
            "secret_name": self.secret_name,
            "api_url": self.api_url,
        }
