"""Thin subprocess wrappers for the git data the resolvers consume."""

import logging
import re
import subprocess
from pathlib import Path

from jact.models import FileAnnotation

logger = logging.getLogger(__name__)

# Porcelain blame header: <40-hex sha> <orig line> <final line> [<group size>]
_BLAME_HEADER = re.compile(r"^([0-9a-f]{40}) \d+ (\d+)(?: \d+)?$")
_UNCOMMITTED = "0" * 40


def _git(*args: str, cwd: Path | None = None) -> str | None:
    result = subprocess.run(["git", *args], capture_output=True, text=True, cwd=cwd)
    if result.returncode != 0 or not isinstance(result.stdout, str):
        logger.debug("git %s failed: %s", " ".join(args), (result.stderr or "").strip())
        return None
    return result.stdout


def repo_root(cwd: Path | None = None) -> Path | None:
    out = _git("rev-parse", "--show-toplevel", cwd=cwd)
    return Path(out.strip()) if out else None


def hooks_dir(cwd: Path | None = None) -> Path | None:
    """Hooks directory of the repository (worktree aware)."""
    out = _git("rev-parse", "--path-format=absolute", "--git-path", "hooks", cwd=cwd)
    return Path(out.strip()) if out else None


def current_branch(cwd: Path | None = None) -> str | None:
    """Short name of the checked-out branch; None when detached or outside a repo."""
    out = _git("symbolic-ref", "--short", "HEAD", cwd=cwd)
    return (out.strip() or None) if out else None


def list_remotes(cwd: Path | None = None) -> dict[str, str]:
    """Remote name -> first fetch URL, in git's order."""
    out = _git("remote", "-v", cwd=cwd)
    remotes: dict[str, str] = {}
    for line in (out or "").splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] not in remotes:
            remotes[parts[0]] = parts[1]
    return remotes


def resolve_revision(rev: str, cwd: Path | None = None) -> str | None:
    out = _git("rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}", cwd=cwd)
    return (out.strip() or None) if out else None


def commit_message(rev: str, cwd: Path | None = None) -> str | None:
    out = _git("log", "-1", "--format=%B", rev, cwd=cwd)
    return out.strip() if out else None


def blame(path: Path, cwd: Path | None = None) -> FileAnnotation | None:
    """Annotate a file: 0-based line number -> commit hash of the last change."""
    out = _git("blame", "--porcelain", "--", str(path), cwd=cwd)
    if out is None:
        return None
    revisions: dict[int, str] = {}
    for line in out.splitlines():
        match = _BLAME_HEADER.match(line)
        # all-zero sha marks uncommitted lines
        if match and match.group(1) != _UNCOMMITTED:
            revisions[int(match.group(2)) - 1] = match.group(1)
    return FileAnnotation(path=str(path), revisions=revisions)
