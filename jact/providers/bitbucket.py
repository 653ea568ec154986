"""Bitbucket Server provider: pull requests that introduced a commit."""

import json
import logging
from collections.abc import Mapping

from jact import rest
from jact.identifiers import extract_pull_request_number
from jact.models import Outcome, PullRequest, PullRequestLookup, RepositoryEndpoint
from jact.providers.base import ReviewServer
from jact.remote import resolve_from_remotes
from jact.settings import JactSettings, secret_value

logger = logging.getLogger(__name__)


def _pull_request_id(value: object) -> int:
    # JSON booleans are ints in Python; 1.5 must not collapse to 1
    if isinstance(value, bool):
        raise TypeError(f"id is a boolean: {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"id is not integral: {value!r}")
        return int(value)
    if isinstance(value, (int, str)):
        return int(value)
    raise TypeError(f"id has unexpected type {type(value).__name__}")


def _required_text(node: dict, field: str) -> str:
    value = node[field]
    if value is None or isinstance(value, (dict, list)):
        raise TypeError(f"{field} is {type(value).__name__}")
    return str(value)


class BitbucketPullRequests(ReviewServer):
    def __init__(self, settings: JactSettings) -> None:
        self._token = secret_value(settings.bitbucket_token)

    def _pull_request_from_node(self, node: dict, endpoint: RepositoryEndpoint) -> PullRequest | None:
        try:
            pr_id = _pull_request_id(node["id"])
            return PullRequest(
                id=pr_id,
                title=_required_text(node, "title"),
                state=_required_text(node, "state"),
                url=endpoint.pull_request_url(pr_id),
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Failed to parse individual pull request: %s", exc)
            return None

    def parse_pull_requests(self, body: str, endpoint: RepositoryEndpoint) -> list[PullRequest] | None:
        """Map a commit pull-requests page to records; None if the payload is malformed."""
        try:
            payload = json.loads(body)
            values = payload.get("values")
        except (ValueError, AttributeError) as exc:
            logger.warning("Failed to parse pull requests response: %s", exc)
            return None
        if values is None:
            return []
        if not isinstance(values, list):
            logger.warning("Failed to parse pull requests response: 'values' is %s", type(values).__name__)
            return None
        result = []
        for node in values:
            if not isinstance(node, dict):
                logger.warning("Skipping pull request entry that is not an object: %r", node)
                continue
            pr = self._pull_request_from_node(node, endpoint)
            if pr is not None:
                result.append(pr)
        return result

    def _lookup(self, endpoint: RepositoryEndpoint, commit_hash: str) -> PullRequestLookup:
        if not self._token:
            logger.warning("No Bitbucket token configured")
            return PullRequestLookup(outcome=Outcome.NOT_CONFIGURED)

        body = rest.get(endpoint.pull_requests_api_url(commit_hash), self._token)
        if body is None:
            return PullRequestLookup(outcome=Outcome.FAILED)

        pull_requests = self.parse_pull_requests(body, endpoint)
        if pull_requests is None:
            return PullRequestLookup(outcome=Outcome.FAILED)
        if not pull_requests:
            return PullRequestLookup(outcome=Outcome.EMPTY)
        return PullRequestLookup(outcome=Outcome.OK, pull_requests=pull_requests)

    def resolve_pull_requests(self, commit_hash: str, remotes: Mapping[str, str]) -> PullRequestLookup:
        endpoint = resolve_from_remotes(remotes)
        if endpoint is None:
            logger.info("No Bitbucket Server URL found for repository")
            return PullRequestLookup(outcome=Outcome.NOT_APPLICABLE)
        return self._lookup(endpoint, commit_hash)

    def navigation_url(self, commit_hash: str, message: str | None, remotes: Mapping[str, str]) -> str | None:
        """Page to open for a commit: inline PR reference, else the API's first PR, else the commit.

        An inline ``Merged pull request #42`` reference is trusted without a network call.
        """
        endpoint = resolve_from_remotes(remotes)
        if endpoint is None:
            return None

        pr_number = extract_pull_request_number(message)
        if pr_number is not None:
            return endpoint.pull_request_url(pr_number)

        lookup = self._lookup(endpoint, commit_hash)
        if lookup.pull_requests:
            return lookup.pull_requests[0].url
        return endpoint.commit_url(commit_hash)
