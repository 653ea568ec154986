"""Git remote URL -> Bitbucket Server repository endpoint."""

import logging
import re
from collections.abc import Mapping

from jact.models import RepositoryEndpoint

logger = logging.getLogger(__name__)

# Used both to validate remotes and to re-parse URLs built by RepositoryEndpoint.
BITBUCKET_URL_PATTERN = re.compile(r"^https?://([^/]+)/(?:scm/)?([^/]+)/([^/]+)/?$")

# git@host:project/repo
_SCP_LIKE = re.compile(r"^[^@/\s]+@([^:/]+):(.+)$")
# ssh://git@host:7999/project/repo
_SSH_URL = re.compile(r"^ssh://(?:[^@/]+@)?([^:/]+)(?::\d+)?/(.+)$")


def normalize_remote_url(url: str) -> str:
    """Rewrite a remote URL into the https form the review server serves.

    git@bitbucket.example.com:proj/repo.git -> https://bitbucket.example.com/proj/repo
    """
    normalized = url.strip().removesuffix(".git")
    if match := _SCP_LIKE.match(normalized):
        return f"https://{match.group(1)}/{match.group(2)}"
    if match := _SSH_URL.match(normalized):
        return f"https://{match.group(1)}/{match.group(2)}"
    return normalized


def resolve_endpoint(url: str | None) -> RepositoryEndpoint | None:
    """Parse a remote URL into {server, project, repo}, or None if it doesn't look like Bitbucket."""
    if not url:
        return None
    normalized = normalize_remote_url(url)
    match = BITBUCKET_URL_PATTERN.match(normalized)
    if not match:
        logger.debug("Remote %s is not a supported review server URL", url)
        return None
    server, project, repo = match.groups()
    return RepositoryEndpoint(server=server, project=project, repo=repo)


def select_remote(remotes: Mapping[str, str]) -> str | None:
    """Pick the remote URL to resolve: ``origin`` first, then any remote named like bitbucket."""
    if "origin" in remotes:
        return remotes["origin"]
    for name, url in remotes.items():
        if "bitbucket" in name.lower():
            return url
    return None


def resolve_from_remotes(remotes: Mapping[str, str]) -> RepositoryEndpoint | None:
    remote_url = select_remote(remotes)
    if remote_url is None:
        logger.debug("No origin or bitbucket remote among %s", list(remotes))
        return None
    return resolve_endpoint(remote_url)
