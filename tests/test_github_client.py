"""Tests for skillsync.repository.github_client."""

from unittest.mock import Mock

import pytest
import requests

from skillsync.config import GitHubConfig
from skillsync.error_handling import AuthenticationError, RemoteUnavailableError
from skillsync.repository import GitHubAPIError, GitHubClient


def make_response(status_code=200, json_data=None, text="", headers=None):
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = json_data if json_data is not None else {}
    response.text = text
    response.headers = headers or {}
    return response


@pytest.fixture
def session():
    session = Mock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def client(session):
    config = GitHubConfig(backend="api", access_token="ghp_test", timeout=10)
    return GitHubClient(config, session=session)


class TestGitHubClient:
    """Test GitHubClient over a mocked requests session."""

    def test_session_headers(self, client, session):
        assert session.headers["Authorization"] == "token ghp_test"
        assert session.headers["Accept"] == "application/vnd.github+json"

    def test_current_user(self, client, session):
        session.request.return_value = make_response(json_data={"login": "alice"})

        assert client.current_user() == "alice"
        assert client.current_user() == "alice"

        assert session.request.call_count == 1
        assert session.request.call_args.kwargs["url"] == "https://api.github.com/user"

    def test_check_auth_without_token(self, session):
        client = GitHubClient(GitHubConfig(backend="api"), session=session)

        with pytest.raises(AuthenticationError):
            client.check_auth()

        session.request.assert_not_called()

    def test_unauthorized(self, client, session):
        session.request.return_value = make_response(401, {"message": "Bad credentials"})

        with pytest.raises(AuthenticationError) as exc_info:
            client.current_user()

        assert "GITHUB_TOKEN" in exc_info.value.remediation

    def test_repository_exists(self, client, session):
        session.request.return_value = make_response(json_data={"full_name": "alice/claude-env"})
        assert client.repository_exists("alice/claude-env") is True

    def test_repository_missing(self, client, session):
        session.request.return_value = make_response(404, {"message": "Not Found"})
        assert client.repository_exists("alice/claude-env") is False

    def test_other_errors_propagate(self, client, session):
        session.request.return_value = make_response(422, {"message": "Validation Failed"})

        with pytest.raises(GitHubAPIError) as exc_info:
            client.repository_exists("alice/claude-env")

        assert exc_info.value.status_code == 422

    def test_server_error_is_not_retried(self, client, session):
        session.request.return_value = make_response(502, {"message": "Bad Gateway"})

        with pytest.raises(RemoteUnavailableError):
            client.current_user()

        assert session.request.call_count == 1

    def test_connection_error(self, client, session):
        session.request.side_effect = requests.exceptions.ConnectionError("no route to host")

        with pytest.raises(RemoteUnavailableError):
            client.current_user()

    def test_rate_limited(self, client, session):
        session.request.return_value = make_response(
            403, {"message": "API rate limit exceeded"}, text="API rate limit exceeded",
            headers={"X-RateLimit-Limit": "60", "X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1700000000"}
        )

        with pytest.raises(RemoteUnavailableError):
            client.current_user()

        assert client.rate_limit_remaining == 0

    def test_create_fork_posts_once(self, client, session):
        session.request.return_value = make_response(202, {"full_name": "alice/claude-env"})

        client.create_fork("r-aas/claude-env")

        assert session.request.call_count == 1
        assert session.request.call_args.kwargs["method"] == "POST"
        assert session.request.call_args.kwargs["url"] == "https://api.github.com/repos/r-aas/claude-env/forks"

    def test_clone_url(self, client):
        assert client.clone_url("alice/claude-env") == "https://github.com/alice/claude-env.git"
