"""Shared pydantic models — the contract between providers and main.py."""

from enum import Enum

from pydantic import BaseModel, ConfigDict

API_PATH_TEMPLATE = (
    "https://{server}/rest/api/latest/projects/{project}/repos/{repo}/commits/{commit}/pull-requests?start=0&limit=25"
)
PR_URL_TEMPLATE = "https://{server}/projects/{project}/repos/{repo}/pull-requests/{id}"
COMMIT_URL_TEMPLATE = "https://{server}/projects/{project}/repos/{repo}/commits/{commit}"


class Outcome(str, Enum):
    """How a lookup ended; presentation picks its message from this."""

    OK = "ok"
    EMPTY = "empty"
    NOT_CONFIGURED = "not_configured"
    NOT_APPLICABLE = "not_applicable"
    FAILED = "failed"


class Ticket(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str  # ABC-123
    summary: str
    status: str
    priority: str
    assignee: str
    url: str


class PullRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    state: str  # OPEN | MERGED | DECLINED
    url: str

    def __str__(self) -> str:
        return f"PR #{self.id}: {self.title} [{self.state}]"


class RepositoryEndpoint(BaseModel):
    """A repository on the review server, as parsed from a git remote."""

    model_config = ConfigDict(frozen=True)

    server: str  # host, optionally with port
    project: str
    repo: str

    @property
    def project_key(self) -> str:
        # Bitbucket Server project keys are case-sensitive and always upper case
        return self.project.upper()

    @property
    def remote_url(self) -> str:
        return f"https://{self.server}/{self.project_key}/{self.repo}"

    def pull_requests_api_url(self, commit_hash: str) -> str:
        return API_PATH_TEMPLATE.format(
            server=self.server, project=self.project_key, repo=self.repo, commit=commit_hash
        )

    def pull_request_url(self, pr_id: int) -> str:
        return PR_URL_TEMPLATE.format(server=self.server, project=self.project_key, repo=self.repo, id=pr_id)

    def commit_url(self, commit_hash: str) -> str:
        return COMMIT_URL_TEMPLATE.format(
            server=self.server, project=self.project_key, repo=self.repo, commit=commit_hash
        )


class FileAnnotation(BaseModel):
    """Blame data for one file: 0-based line number -> commit hash."""

    model_config = ConfigDict(frozen=True)

    path: str
    revisions: dict[int, str] = {}

    def revision_for_line(self, line_number: int) -> str | None:
        return self.revisions.get(line_number)


class TicketBatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    outcome: Outcome
    tickets: list[Ticket] = []


class PullRequestLookup(BaseModel):
    model_config = ConfigDict(frozen=True)

    outcome: Outcome
    pull_requests: list[PullRequest] = []
