"""Tests for BitbucketPullRequests using pytest-httpx."""

import httpx
from pytest_httpx import HTTPXMock

from jact.models import Outcome
from jact.providers.bitbucket import BitbucketPullRequests
from jact.settings import JactSettings

COMMIT = "abc123def456"
REMOTES = {"origin": "git@bitbucket.example.com:proj/backend.git"}
API_URL = (
    "https://bitbucket.example.com/rest/api/latest/projects/PROJ/repos/backend"
    f"/commits/{COMMIT}/pull-requests?start=0&limit=25"
)
PR_URL = "https://bitbucket.example.com/projects/PROJ/repos/backend/pull-requests/{}"


def _server(**kwargs) -> BitbucketPullRequests:
    defaults = {"bitbucket_token": "bb_pat_test"}
    defaults.update(kwargs)
    return BitbucketPullRequests(JactSettings(**defaults))  # type: ignore[arg-type]


class TestResolvePullRequests:
    def test_returns_pull_requests(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=API_URL,
            json={"values": [{"id": 42, "title": "ABC-1 Fix", "state": "MERGED"}, {"id": 43, "title": "Backport", "state": "OPEN"}]},
        )
        lookup = _server().resolve_pull_requests(COMMIT, REMOTES)

        assert lookup.outcome is Outcome.OK
        assert [pr.id for pr in lookup.pull_requests] == [42, 43]
        assert lookup.pull_requests[0].title == "ABC-1 Fix"
        assert lookup.pull_requests[0].state == "MERGED"
        assert lookup.pull_requests[0].url == PR_URL.format(42)

    def test_uses_review_token(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=API_URL, json={"values": []})
        _server().resolve_pull_requests(COMMIT, REMOTES)
        request = httpx_mock.get_request()
        assert request is not None
        assert request.headers["Authorization"] == "Bearer bb_pat_test"

    def test_malformed_element_skipped(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=API_URL,
            json={"values": [{"id": 1, "title": "no state"}, "junk", {"id": 2, "title": "ok", "state": "OPEN"}]},
        )
        lookup = _server().resolve_pull_requests(COMMIT, REMOTES)
        assert [pr.id for pr in lookup.pull_requests] == [2]

    def test_null_and_nested_fields_skipped(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=API_URL,
            json={
                "values": [
                    {"id": 1, "title": None, "state": None},
                    {"id": 2, "title": {"raw": "x"}, "state": "OPEN"},
                    {"id": 3, "title": "ok", "state": "MERGED"},
                ]
            },
        )
        lookup = _server().resolve_pull_requests(COMMIT, REMOTES)
        assert [(pr.id, pr.title, pr.state) for pr in lookup.pull_requests] == [(3, "ok", "MERGED")]

    def test_bad_ids_skipped(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=API_URL,
            json={
                "values": [
                    {"id": True, "title": "bool id", "state": "OPEN"},
                    {"id": 1.5, "title": "fractional id", "state": "OPEN"},
                    {"id": None, "title": "null id", "state": "OPEN"},
                    {"id": 7.0, "title": "whole float id", "state": "OPEN"},
                ]
            },
        )
        lookup = _server().resolve_pull_requests(COMMIT, REMOTES)
        assert [(pr.id, pr.title) for pr in lookup.pull_requests] == [(7, "whole float id")]

    def test_empty_values(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=API_URL, json={"values": [], "size": 0})
        lookup = _server().resolve_pull_requests(COMMIT, REMOTES)
        assert lookup.outcome is Outcome.EMPTY
        assert lookup.pull_requests == []

    def test_invalid_json_fails(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=API_URL, text="oops")
        lookup = _server().resolve_pull_requests(COMMIT, REMOTES)
        assert lookup.outcome is Outcome.FAILED
        assert lookup.pull_requests == []

    def test_http_error_fails(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=API_URL, status_code=404, json={"errors": [{"message": "No such commit"}]})
        assert _server().resolve_pull_requests(COMMIT, REMOTES).outcome is Outcome.FAILED

    def test_network_error_fails(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("slow"))
        assert _server().resolve_pull_requests(COMMIT, REMOTES).outcome is Outcome.FAILED

    def test_unsupported_remote_makes_no_request(self, httpx_mock: HTTPXMock) -> None:
        lookup = _server().resolve_pull_requests(COMMIT, {"origin": "https://host/a/b/c"})
        assert lookup.outcome is Outcome.NOT_APPLICABLE
        assert lookup.pull_requests == []
        assert httpx_mock.get_requests() == []

    def test_no_candidate_remote(self, httpx_mock: HTTPXMock) -> None:
        lookup = _server().resolve_pull_requests(COMMIT, {"upstream": "git@bitbucket.example.com:proj/backend.git"})
        assert lookup.outcome is Outcome.NOT_APPLICABLE
        assert httpx_mock.get_requests() == []

    def test_blank_token_not_configured(self, httpx_mock: HTTPXMock) -> None:
        lookup = _server(bitbucket_token=" ").resolve_pull_requests(COMMIT, REMOTES)
        assert lookup.outcome is Outcome.NOT_CONFIGURED
        assert httpx_mock.get_requests() == []


class TestNavigationUrl:
    def test_inline_reference_skips_network(self, httpx_mock: HTTPXMock) -> None:
        url = _server().navigation_url(COMMIT, "Merged pull request #42 from feature/ABC-1", REMOTES)
        assert url == PR_URL.format(42)
        assert httpx_mock.get_requests() == []

    def test_api_result_when_no_inline_reference(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=API_URL, json={"values": [{"id": 7, "title": "t", "state": "MERGED"}]})
        assert _server().navigation_url(COMMIT, "ABC-1 fix", REMOTES) == PR_URL.format(7)

    def test_falls_back_to_commit_page(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=API_URL, json={"values": []})
        url = _server().navigation_url(COMMIT, "ABC-1 fix", REMOTES)
        assert url == f"https://bitbucket.example.com/projects/PROJ/repos/backend/commits/{COMMIT}"

    def test_commit_page_without_token(self, httpx_mock: HTTPXMock) -> None:
        url = _server(bitbucket_token=None).navigation_url(COMMIT, None, REMOTES)
        assert url == f"https://bitbucket.example.com/projects/PROJ/repos/backend/commits/{COMMIT}"
        assert httpx_mock.get_requests() == []

    def test_unsupported_remote(self) -> None:
        assert _server().navigation_url(COMMIT, "PR #42", {"origin": "https://host/only"}) is None
