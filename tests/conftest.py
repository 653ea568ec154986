"""Shared test fixtures."""

import os
from pathlib import Path

import pytest

import jact.settings as settings_module
from jact.models import PullRequest, RepositoryEndpoint, Ticket
from jact.settings import JactSettings


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config file at tmp and drop JACT_* env vars from the developer's shell."""
    config_path = tmp_path / "jact-config.toml"
    monkeypatch.setattr(settings_module, "CONFIG_PATH", config_path)
    for name in list(os.environ):
        if name.startswith("JACT_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)  # no stray .env
    return config_path


@pytest.fixture
def settings() -> JactSettings:
    return JactSettings(
        jira_base_url="https://jira.example.com/browse/",
        jira_token="jira_pat_test",  # type: ignore[arg-type]
        bitbucket_token="bb_pat_test",  # type: ignore[arg-type]
    )


@pytest.fixture
def endpoint() -> RepositoryEndpoint:
    return RepositoryEndpoint(server="bitbucket.example.com", project="proj", repo="backend")


@pytest.fixture
def remotes() -> dict[str, str]:
    return {"origin": "git@bitbucket.example.com:proj/backend.git"}


@pytest.fixture
def ticket() -> Ticket:
    return Ticket(
        key="ABC-123",
        summary="Fix null check in auth middleware",
        status="In Progress",
        priority="High",
        assignee="Jane Doe",
        url="https://jira.example.com/browse/ABC-123",
    )


@pytest.fixture
def pull_request() -> PullRequest:
    return PullRequest(
        id=42,
        title="ABC-123 Fix null check",
        state="MERGED",
        url="https://bitbucket.example.com/projects/PROJ/repos/backend/pull-requests/42",
    )
