"""Jira REST API v2 provider: assigned-ticket search."""

import json
import logging
from urllib.parse import quote_plus

from jact import rest
from jact.models import Outcome, Ticket, TicketBatch
from jact.providers.base import TicketTracker
from jact.settings import JactSettings, secret_value

logger = logging.getLogger(__name__)

ASSIGNED_JQL = "assignee = currentUser() AND statusCategory != Done ORDER BY priority DESC"
SEARCH_FIELDS = "key,summary,status,priority,assignee"


def _scalar_text(value: object, default: str) -> str:
    # objects and arrays have no display text of their own
    if value is None or isinstance(value, (dict, list)):
        return default
    return str(value)


def _string_value(fields: dict, field: str, default: str) -> str:
    return _scalar_text(fields.get(field), default)


def _nested_string_value(fields: dict, field: str, nested: str, default: str) -> str:
    value = fields.get(field)
    if isinstance(value, dict):
        return _scalar_text(value.get(nested), default)
    return default


class JiraTicketSearch(TicketTracker):
    def __init__(self, settings: JactSettings) -> None:
        self._configured = settings.jira_configured
        self._base_url = settings.jira_base_url or ""
        self._token = secret_value(settings.jira_token)

    @property
    def search_url(self) -> str:
        api_root = self._base_url.replace("/browse/", "").rstrip("/")
        return f"{api_root}/rest/api/2/search?jql={quote_plus(ASSIGNED_JQL)}&fields={SEARCH_FIELDS}"

    def ticket_url(self, key: str) -> str | None:
        if not self._configured:
            return None
        return f"{self._base_url}{key}"

    def navigation_url(self, key: str) -> str | None:
        """Ticket page with the development panel opened on its pull requests."""
        url = self.ticket_url(key)
        return f"{url}?devStatusDetailDialog=pullrequest" if url else None

    def _ticket_from_node(self, node: dict) -> Ticket | None:
        key = node.get("key")
        if not isinstance(key, str) or not key:
            logger.warning("Skipping Jira issue without a key: %s", node.get("id"))
            return None
        fields = node.get("fields")
        if not isinstance(fields, dict):
            fields = {}
        return Ticket(
            key=str(key),
            summary=_string_value(fields, "summary", "No Summary"),
            status=_nested_string_value(fields, "status", "name", "Unknown"),
            priority=_nested_string_value(fields, "priority", "name", "None"),
            assignee=_nested_string_value(fields, "assignee", "displayName", "Unassigned"),
            url=f"{self._base_url}{key}",
        )

    def parse_tickets(self, body: str) -> list[Ticket] | None:
        """Map a search response to tickets; None if the payload itself is malformed."""
        try:
            payload = json.loads(body)
            issues = payload["issues"]
            if not isinstance(issues, list):
                raise TypeError(f"'issues' is {type(issues).__name__}, expected list")
            tickets = []
            for node in issues:
                ticket = self._ticket_from_node(node)
                if ticket is not None:
                    tickets.append(ticket)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Error parsing Jira response: %s", exc)
            return None
        return tickets

    def list_assigned_tickets(self) -> TicketBatch:
        if not self._configured or not self._token:
            return TicketBatch(outcome=Outcome.NOT_CONFIGURED)

        body = rest.get(self.search_url, self._token)
        if body is None:
            return TicketBatch(outcome=Outcome.FAILED)

        tickets = self.parse_tickets(body)
        if tickets is None:
            return TicketBatch(outcome=Outcome.FAILED)
        if not tickets:
            return TicketBatch(outcome=Outcome.EMPTY)
        return TicketBatch(outcome=Outcome.OK, tickets=tickets)
