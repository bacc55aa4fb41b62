"""GitHub gateway tests."""

import json
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest
import requests
from github import BadCredentialsException

from repostrap import api
from repostrap.api import (
    GitHubAPI,
    create_repository_url,
    deploy_keys_url,
    repository_public_key_url,
    repository_secret_url,
    request_body,
    request_headers,
)
from repostrap.config import Config
from repostrap.errors import (
    ConfigurationError,
    DecodingError,
    RemoteRejection,
    TransportError,
)
from repostrap.models import DeployKey, Repository, RepositorySecret


class TestEndpoints:
    """Endpoint builders are pure functions of their inputs."""

    @pytest.mark.parametrize(
        "repository_name, want",
        [
            ("my-repo", "https://api.github.com/repos/acme/my-repo/keys"),
            ("widgets-private", "https://api.github.com/repos/acme/widgets-private/keys"),
        ],
    )
    def test_deploy_keys_url(self, repository_name, want) -> None:
        assert deploy_keys_url("acme", repository_name) == want
        assert deploy_keys_url("acme", repository_name) == deploy_keys_url("acme", repository_name)

    def test_create_repository_url(self) -> None:
        assert create_repository_url("acme") == "https://api.github.com/orgs/acme/repos"

    def test_repository_public_key_url(self) -> None:
        assert (
            repository_public_key_url("acme", "widgets-private")
            == "https://api.github.com/repos/acme/widgets-private/actions/secrets/public-key"
        )

    def test_repository_secret_url(self) -> None:
        assert (
            repository_secret_url("acme", "widgets-private", "SSH_DEPLOY_KEY")
            == "https://api.github.com/repos/acme/widgets-private/actions/secrets/SSH_DEPLOY_KEY"
        )

    def test_custom_api_url(self) -> None:
        assert (
            create_repository_url("acme", "https://ghe.example.com/api/v3/")
            == "https://ghe.example.com/api/v3/orgs/acme/repos"
        )


class TestRequestBody:
    def test_repository_round_trip(self) -> None:
        repository = Repository(name="widgets", visibility="public", org="acme")

        assert Repository.from_dict(json.loads(request_body(repository))) == repository

    def test_deploy_key_round_trip(self) -> None:
        deploy_key = DeployKey(key="ssh-ed25519 AAAA", title="t", repository_name="widgets-private")
        decoded = json.loads(request_body(deploy_key))

        assert decoded == {"key": "ssh-ed25519 AAAA", "title": "t", "read_only": False}
        assert DeployKey.from_dict(decoded, "widgets-private") == deploy_key

    def test_secret_round_trip(self) -> None:
        secret = RepositorySecret("widgets-private", "SSH_DEPLOY_KEY", "c2VhbGVk", "123")
        decoded = json.loads(request_body(secret))

        assert decoded == {"encrypted_value": "c2VhbGVk", "key_id": "123"}
        assert RepositorySecret.from_dict(decoded, "widgets-private", "SSH_DEPLOY_KEY") == secret

    def test_plain_mapping(self) -> None:
        assert request_body({"a": "string field", "b": 32}) == b'{"a":"string field","b":32}'


class TestHeaders:
    def test_request_headers(self, config) -> None:
        assert request_headers(config) == {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "Authorization": "Bearer test-token-123456",
        }

    def test_session_carries_headers(self, config, fake_session) -> None:
        session = fake_session(lambda *a: None)

        GitHubAPI(config, session=session)

        assert session.headers["Authorization"] == "Bearer test-token-123456"
        assert session.headers["X-GitHub-Api-Version"] == "2022-11-28"


class TestSend:
    def test_decodes_json_and_applies_timeout(self, config, fake_session, make_response) -> None:
        session = fake_session(lambda m, u, kw: make_response(200, {"key_id": "1"}, u))
        gateway = GitHubAPI(config, session=session)

        status, decoded = gateway.send("GET", "https://api.github.com/x")

        assert (status, decoded) == (200, {"key_id": "1"})
        assert session.calls[0]["timeout"] == 5.0
        assert "data" not in session.calls[0]

    def test_sends_json_body(self, config, fake_session, make_response) -> None:
        session = fake_session(lambda m, u, kw: make_response(201, {}, u))
        gateway = GitHubAPI(config, session=session)

        gateway.send("POST", "https://api.github.com/x", {"name": "widgets"})

        call = session.calls[0]
        assert call["method"] == "POST"
        assert json.loads(call["data"]) == {"name": "widgets"}
        assert call["headers"]["Content-Type"] == "application/json"

    def test_empty_body_is_none(self, config, fake_session, make_response) -> None:
        gateway = GitHubAPI(config, session=fake_session(lambda m, u, kw: make_response(204)))

        assert gateway.send("PUT", "https://api.github.com/x", {}) == (204, None)

    def test_invalid_json(self, config, fake_session, make_response) -> None:
        gateway = GitHubAPI(
            config, session=fake_session(lambda m, u, kw: make_response(200, "<html>oops"))
        )

        with pytest.raises(DecodingError):
            gateway.send("GET", "https://api.github.com/x")

    def test_timeout_is_transport_error(self, config, fake_session) -> None:
        def handler(method, url, kwargs):
            raise requests.Timeout("read timed out")

        gateway = GitHubAPI(config, session=fake_session(handler))

        with pytest.raises(TransportError):
            gateway.send("GET", "https://api.github.com/x")


class TestResources:
    def test_create_repository(self, config, fake_session, make_response) -> None:
        session = fake_session(
            lambda m, u, kw: make_response(
                201, {"name": "widgets", "html_url": "https://github.com/acme/widgets"}, u
            )
        )
        gateway = GitHubAPI(config, session=session)

        created = gateway.create_repository(Repository("widgets", "public", "acme"))

        assert created.html_url == "https://github.com/acme/widgets"
        assert session.calls[0]["url"] == "https://api.github.com/orgs/acme/repos"

    def test_create_repository_rejected(self, config, fake_session, make_response) -> None:
        gateway = GitHubAPI(
            config,
            session=fake_session(
                lambda m, u, kw: make_response(422, {"message": "Repository creation failed."}, u)
            ),
        )

        with pytest.raises(RemoteRejection) as exc_info:
            gateway.create_repository(Repository("widgets", "public", "acme"))

        assert exc_info.value.status_code == 422
        assert "Repository creation failed." in str(exc_info.value)

    def test_owner_overrides_org_in_repo_urls(self, fake_session, make_response) -> None:
        config = Config(token="t", org="acme", owner="someone")
        session = fake_session(lambda m, u, kw: make_response(200, {"key_id": "1", "key": "k"}, u))

        GitHubAPI(config, session=session).get_repository_public_key("widgets-private")

        assert session.calls[0]["url"].startswith("https://api.github.com/repos/someone/")

    def test_public_key_missing_fields(self, config, fake_session, make_response) -> None:
        gateway = GitHubAPI(config, session=fake_session(lambda m, u, kw: make_response(200, {})))

        with pytest.raises(DecodingError):
            gateway.get_repository_public_key("widgets-private")

    @pytest.mark.parametrize("status", [200, 204, 400, 404, 422, 500])
    def test_secret_upload_requires_201(self, config, fake_session, make_response, status) -> None:
        gateway = GitHubAPI(config, session=fake_session(lambda m, u, kw: make_response(status)))
        secret = RepositorySecret("widgets-private", "SSH_DEPLOY_KEY", "c2VhbGVk", "123")

        with pytest.raises(RemoteRejection) as exc_info:
            gateway.create_repository_secret(secret)

        assert exc_info.value.status_code == status

    def test_secret_upload_created(self, config, fake_session, make_response) -> None:
        session = fake_session(lambda m, u, kw: make_response(201))
        secret = RepositorySecret("widgets-private", "SSH_DEPLOY_KEY", "c2VhbGVk", "123")

        GitHubAPI(config, session=session).create_repository_secret(secret)

        call = session.calls[0]
        assert call["method"] == "PUT"
        assert call["url"].endswith("/repos/acme/widgets-private/actions/secrets/SSH_DEPLOY_KEY")


class TestVerifyToken:
    def test_returns_login(self, config, monkeypatch) -> None:
        class FakeUser:
            login = "octocat"

        class FakeGithub:
            def __init__(self, **kwargs):
                self.kwargs = kwargs

            def get_user(self):
                return FakeUser()

        monkeypatch.setattr(api, "Github", FakeGithub)

        assert api.verify_token(config) == "octocat"

    def test_bad_credentials(self, config, monkeypatch) -> None:
        class FakeGithub:
            def __init__(self, **kwargs):
                pass

            def get_user(self):
                raise BadCredentialsException(401, {"message": "Bad credentials"}, None)

        monkeypatch.setattr(api, "Github", FakeGithub)

        with pytest.raises(ConfigurationError, match="Bad credentials"):
            api.verify_token(config)

    def test_client_has_no_retry_and_keeps_float_timeout(self, monkeypatch) -> None:
        seen = {}

        class FakeGithub:
            def __init__(self, **kwargs):
                seen.update(kwargs)

            def get_user(self):
                class FakeUser:
                    login = "octocat"

                return FakeUser()

        monkeypatch.setattr(api, "Github", FakeGithub)

        api.verify_token(Config(token="t", org="acme", timeout=0.5))

        assert seen["retry"] is None
        assert seen["timeout"] == 0.5


@pytest.fixture
def github_server():
    """Local HTTP server standing in for the GitHub API; records request paths."""
    hits = []

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self):
            hits.append(self.path)
            status, payload = self.server.reply
            body = json.dumps(payload).encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, *args):
            pass

    server = HTTPServer(("127.0.0.1", 0), Handler)
    server.reply = (200, {})
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server, hits
    server.shutdown()
    server.server_close()


class TestVerifyTokenOverHTTP:
    """verify_token against a real HTTP endpoint."""

    def _config(self, server) -> Config:
        host, port = server.server_address
        return Config(token="t", org="acme", api_url=f"http://{host}:{port}")

    def test_server_error_is_sent_once(self, github_server) -> None:
        server, hits = github_server
        server.reply = (502, {"message": "Bad Gateway"})

        with pytest.raises(TransportError, match="502"):
            api.verify_token(self._config(server))

        assert hits == ["/user"]

    def test_unauthorized_is_configuration_error(self, github_server) -> None:
        server, hits = github_server
        server.reply = (401, {"message": "Bad credentials"})

        with pytest.raises(ConfigurationError, match="Bad credentials"):
            api.verify_token(self._config(server))

        assert hits == ["/user"]

    def test_returns_login(self, github_server) -> None:
        server, hits = github_server
        server.reply = (200, {"login": "octocat", "id": 1})

        assert api.verify_token(self._config(server)) == "octocat"
        assert hits == ["/user"]
