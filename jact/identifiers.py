"""Ticket and pull-request reference extraction from branch names and commit messages."""

import re

TICKET_KEY_PATTERN = re.compile(r"[A-Z]+-[0-9]+")

# feature/ABC-123-description, bugfix/XYZ-456, ABC-789
BRANCH_TICKET_PATTERN = re.compile(r"(?:feature/|bugfix/|hotfix/|release/)?([A-Z]+-\d+)", re.IGNORECASE)

# Order matters: the most specific phrasing is tried first.
PR_REFERENCE_PATTERNS = (
    re.compile(r"merged? (pull request|pr) #?(\d+)", re.IGNORECASE),
    re.compile(r"pull request #?(\d+)", re.IGNORECASE),
    re.compile(r"pr #?(\d+)", re.IGNORECASE),
)


def extract_ticket_key(text: str | None) -> str | None:
    """Return the first ``ABC-123`` style key in text, case-sensitive."""
    if not text:
        return None
    match = TICKET_KEY_PATTERN.search(text)
    return match.group() if match else None


def branch_ticket(branch: str | None) -> str | None:
    """Ticket key from the part of a branch name after its first ``/``.

    ``feature/ABC-12-login`` -> ``ABC-12``; a branch without ``/`` has no key.
    """
    if not branch or "/" not in branch:
        return None
    return extract_ticket_key(branch.split("/", 1)[1])


def extract_ticket(text: str | None) -> str | None:
    """Looser variant for navigation: any case, optional conventional prefix.

    ``Feature/abc-12-login`` -> ``ABC-12``.
    """
    if not text:
        return None
    match = BRANCH_TICKET_PATTERN.search(text)
    return match.group(1).upper() if match else None


def extract_pull_request_number(message: str | None) -> int | None:
    """PR number referenced inline in a commit message, e.g. ``Merged pull request #42``."""
    if not message:
        return None
    for pattern in PR_REFERENCE_PATTERNS:
        match = pattern.search(message)
        if not match:
            continue
        for group in match.groups():
            if group and group.isdigit():
                return int(group)
    return None
