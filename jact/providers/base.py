"""Abstract base classes for the ticket tracker and the review server."""

from abc import ABC, abstractmethod
from collections.abc import Mapping

from jact.models import PullRequestLookup, TicketBatch


class TicketTracker(ABC):
    @abstractmethod
    def list_assigned_tickets(self) -> TicketBatch: ...

    @abstractmethod
    def ticket_url(self, key: str) -> str | None: ...


class ReviewServer(ABC):
    @abstractmethod
    def resolve_pull_requests(self, commit_hash: str, remotes: Mapping[str, str]) -> PullRequestLookup: ...

    @abstractmethod
    def navigation_url(self, commit_hash: str, message: str | None, remotes: Mapping[str, str]) -> str | None: ...
