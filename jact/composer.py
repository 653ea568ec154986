"""Prefix commit messages with the ticket key from the current branch."""

from jact.identifiers import branch_ticket

# Long-lived branches never carry a ticket reference.
SKIP_BRANCHES = frozenset({"main", "master", "develop", "dev"})


def compose_message(branch: str | None, draft: str | None) -> str:
    """Return the commit message with the branch's ticket key prepended.

    feature/ABC-1-login + "fix bug" -> "ABC-1\\n\\nfix bug". The draft is
    returned unchanged when the branch is skipped, has no key, or the draft
    already mentions it.
    """
    draft = draft or ""
    if not branch or branch in SKIP_BRANCHES:
        return draft

    reference = branch_ticket(branch)
    if not reference:
        return draft

    current = draft.strip()
    if not current:
        return f"{reference}\n\n"
    if reference in current or current.startswith(branch):
        return draft
    return f"{reference}\n\n{current}"
