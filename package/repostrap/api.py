"""
GitHub REST gateway.

Endpoint builders are pure functions of their inputs. GitHubAPI sends the
requests with the auth headers and timeout from Config and decodes the
JSON responses; the resource methods turn rejected calls into
RemoteRejection.
"""

import json
from typing import Any, Optional

import requests
from github import Auth, Github, GithubException

from .config import DEFAULT_API_URL, Config
from .errors import ConfigurationError, DecodingError, RemoteRejection, TransportError
from .models import (
    CreatedRepository,
    DeployKey,
    DeployKeyInfo,
    Repository,
    RepositoryPublicKey,
    RepositorySecret,
)


def _base(api_url: str) -> str:
    return api_url.rstrip("/")


def create_repository_url(org: str, api_url: str = DEFAULT_API_URL) -> str:
    # https://api.github.com/orgs/ORG/repos
    return f"{_base(api_url)}/orgs/{org}/repos"


def deploy_keys_url(owner: str, repository_name: str, api_url: str = DEFAULT_API_URL) -> str:
    # https://api.github.com/repos/OWNER/REPO/keys
    return f"{_base(api_url)}/repos/{owner}/{repository_name}/keys"


def repository_public_key_url(
    owner: str, repository_name: str, api_url: str = DEFAULT_API_URL
) -> str:
    # https://api.github.com/repos/OWNER/REPO/actions/secrets/public-key
    return f"{_base(api_url)}/repos/{owner}/{repository_name}/actions/secrets/public-key"


def repository_secret_url(
    owner: str, repository_name: str, secret_name: str, api_url: str = DEFAULT_API_URL
) -> str:
    # https://api.github.com/repos/OWNER/REPO/actions/secrets/SECRET_NAME
    return f"{_base(api_url)}/repos/{owner}/{repository_name}/actions/secrets/{secret_name}"


def request_body(data: Any) -> bytes:
    """Serialize a record (anything with to_dict) or a plain mapping to JSON bytes."""
    if hasattr(data, "to_dict"):
        data = data.to_dict()
    return json.dumps(data, separators=(",", ":")).encode("utf-8")


def request_headers(config: Config) -> dict:
    return {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": config.api_version,
        "Authorization": f"Bearer {config.token}",
    }


def decode_response(response: requests.Response) -> Any:
    """Decode a JSON body; an empty body decodes to None."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise DecodingError(
            f"Invalid JSON in response from {response.url} (HTTP {response.status_code}): {e}"
        ) from e


def _error_message(decoded: Any) -> str:
    if isinstance(decoded, dict):
        return decoded.get("message", "")
    return ""


def _expect_object(decoded: Any, url: str) -> dict:
    if not isinstance(decoded, dict):
        raise DecodingError(f"Expected a JSON object from {url}, got {type(decoded).__name__}")
    return decoded


class GitHubAPI:
    """Authenticated access to the handful of endpoints the bootstrap needs."""

    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update(request_headers(config))

    def send(self, method: str, url: str, body: Any = None) -> tuple[int, Any]:
        """
        Send one request and decode the response.

        Returns:
            (status_code, decoded JSON or None)

        Raises:
            TransportError: on network failure or timeout
            DecodingError: if a non-empty body is not JSON
        """
        kwargs = {"timeout": self.config.timeout}
        if body is not None:
            kwargs["data"] = request_body(body)
            kwargs["headers"] = {"Content-Type": "application/json"}

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        return response.status_code, decode_response(response)

    def _call(self, method: str, url: str, body: Any = None, expected=None) -> Any:
        status, decoded = self.send(method, url, body)
        accepted = status in expected if expected else 200 <= status < 300
        if not accepted:
            raise RemoteRejection(status, _error_message(decoded), url)
        return decoded

    def create_repository(self, repository: Repository) -> CreatedRepository:
        url = create_repository_url(repository.org, self.config.api_url)
        decoded = self._call("POST", url, repository)
        return CreatedRepository.from_dict(_expect_object(decoded, url))

    def create_deploy_key(self, deploy_key: DeployKey) -> DeployKeyInfo:
        url = deploy_keys_url(
            self.config.repo_owner, deploy_key.repository_name, self.config.api_url
        )
        decoded = self._call("POST", url, deploy_key)
        return DeployKeyInfo.from_dict(_expect_object(decoded, url))

    def get_repository_public_key(self, repository_name: str) -> RepositoryPublicKey:
        url = repository_public_key_url(
            self.config.repo_owner, repository_name, self.config.api_url
        )
        decoded = _expect_object(self._call("GET", url), url)
        if not decoded.get("key_id") or not decoded.get("key"):
            raise DecodingError(f"Public key response from {url} is missing key_id or key")
        return RepositoryPublicKey.from_dict(decoded)

    def create_repository_secret(self, secret: RepositorySecret) -> None:
        """Upload a sealed secret. Only 201 Created counts as success."""
        url = repository_secret_url(
            self.config.repo_owner,
            secret.repository_name,
            secret.secret_name,
            self.config.api_url,
        )
        self._call("PUT", url, secret, expected=(201,))


def verify_token(config: Config) -> str:
    """Check the token against the API and return the authenticated login."""
    # single attempt, no retry or backoff
    gh = Github(
        base_url=_base(config.api_url),
        auth=Auth.Token(config.token),
        timeout=config.timeout,
        retry=None,
    )
    try:
        return gh.get_user().login
    except GithubException as e:
        message = e.data.get("message", str(e)) if isinstance(e.data, dict) else str(e)
        if e.status and e.status >= 500:
            raise TransportError(f"GitHub unavailable (HTTP {e.status}): {message}") from e
        raise ConfigurationError(f"Failed to authenticate with GitHub: {message}") from e
    except requests.RequestException as e:
        raise TransportError(f"Failed to reach GitHub: {e}") from e
