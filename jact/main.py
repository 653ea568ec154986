"""jact CLI — all commands."""

import logging
import stat
from pathlib import Path
from typing import Annotated

import tomlkit
import typer
from pydantic import SecretStr
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from jact import git, worker
from jact.commits import resolve_commit
from jact.composer import compose_message
from jact.identifiers import extract_ticket
from jact.models import Outcome, PullRequestLookup, TicketBatch
from jact.providers.bitbucket import BitbucketPullRequests
from jact.providers.jira import JiraTicketSearch
from jact.settings import CONFIG_PATH, PLACEHOLDER_BASE_URL, JactSettings, _list_profiles, get_settings

app = typer.Typer(
    help="jact: link git branches and commits to Jira tickets and Bitbucket pull requests",
    no_args_is_help=True,
)

ProfileOpt = Annotated[
    str | None,
    typer.Option("--profile", "-p", help="Profile name from ~/.config/jact/config.toml"),
]

HOOK_MARKER = "# installed by jact"

_HOOK_SCRIPT = f"""\
#!/bin/sh
{HOOK_MARKER}
command -v jact >/dev/null 2>&1 || exit 0
exec jact prepare-commit-msg "$@"
"""

_TICKET_MESSAGES = {
    Outcome.EMPTY: "[dim]No open tickets assigned to you.[/dim]",
    Outcome.FAILED: "[red]Could not fetch Jira tickets. Run with --verbose for details.[/red]",
    Outcome.NOT_CONFIGURED: "[yellow]Jira is not configured.[/yellow] Set jira_base_url and jira_token (run: jact init).",
}

_PR_MESSAGES = {
    Outcome.EMPTY: "[dim]No pull requests found for this commit.[/dim]",
    Outcome.FAILED: "[red]Could not fetch pull requests. Run with --verbose for details.[/red]",
    Outcome.NOT_CONFIGURED: "[yellow]Bitbucket is not configured.[/yellow] Set bitbucket_token (run: jact init).",
    Outcome.NOT_APPLICABLE: "[dim]No Bitbucket Server remote found for this repository.[/dim]",
}


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log HTTP and git details")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


# ---------------------------------------------------------------------------
# Provider factory
# ---------------------------------------------------------------------------


def get_tracker(profile: str | None = None) -> JiraTicketSearch:
    return JiraTicketSearch(get_settings(profile=profile))


def get_review_server(profile: str | None = None) -> BitbucketPullRequests:
    return BitbucketPullRequests(get_settings(profile=profile))


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_tickets(batch: TicketBatch) -> None:
    if batch.outcome is not Outcome.OK:
        rprint(_TICKET_MESSAGES[batch.outcome])
        return

    table = Table(title="My Tickets")
    table.add_column("Key", style="cyan")
    table.add_column("Status")
    table.add_column("Priority")
    table.add_column("Summary")
    table.add_column("URL", style="dim")

    for ticket in batch.tickets:
        table.add_row(ticket.key, ticket.status, ticket.priority, ticket.summary, ticket.url)

    rprint(table)


def render_pull_requests(lookup: PullRequestLookup, commit_hash: str) -> None:
    if lookup.outcome is not Outcome.OK:
        rprint(_PR_MESSAGES[lookup.outcome])
        return

    table = Table(title=f"Pull Requests for {commit_hash[:12]}")
    table.add_column("ID", style="cyan")
    table.add_column("State")
    table.add_column("Title")
    table.add_column("URL", style="dim")

    for pr in lookup.pull_requests:
        table.add_row(str(pr.id), pr.state, pr.title, pr.url)

    rprint(table)


def _split_comments(text: str) -> tuple[str, str]:
    """Separate git's ``#`` template lines from the message body."""
    body, comments = [], []
    for line in text.splitlines(keepends=True):
        (comments if line.startswith("#") else body).append(line)
    return "".join(body), "".join(comments)


def _require_repo() -> Path:
    root = git.repo_root()
    if root is None:
        typer.echo("error: not inside a git repository", err=True)
        raise typer.Exit(1)
    return root


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("tickets")
def tickets_cmd(profile: ProfileOpt = None) -> None:
    """List open Jira tickets assigned to me."""
    tracker = get_tracker(profile)
    render_tickets(tracker.list_assigned_tickets())


@app.command("open-ticket")
def open_ticket(
    profile: ProfileOpt = None,
    print_only: Annotated[bool, typer.Option("--print", help="Print the URL instead of opening it")] = False,
) -> None:
    """Open the Jira ticket named by the current branch."""
    branch = git.current_branch()
    if branch is None:
        rprint("[yellow]No Git repository found or not on any branch.[/yellow]")
        raise typer.Exit(1)

    key = extract_ticket(branch)
    if key is None:
        rprint(f"[yellow]No Jira ticket found in branch: {branch}[/yellow]")
        return

    url = get_tracker(profile).navigation_url(key)
    if url is None:
        rprint(_TICKET_MESSAGES[Outcome.NOT_CONFIGURED])
        return

    if print_only:
        typer.echo(url, nl=False)
        return
    rprint(f"Opening Jira ticket: [bold]{key}[/bold]")
    typer.launch(url)


@app.command("prs")
def prs_cmd(
    commit: Annotated[str | None, typer.Argument(help="Commit to look up (default: HEAD)")] = None,
    file: Annotated[Path | None, typer.Option("--file", "-f", help="Annotated file; requires --line")] = None,
    line: Annotated[int | None, typer.Option("--line", "-l", min=1, help="1-based line in --file")] = None,
    open_page: Annotated[
        bool, typer.Option("--open", help="Open the pull request (or commit) page in a browser")
    ] = False,
    profile: ProfileOpt = None,
) -> None:
    """Show the pull requests that introduced a commit or a line of a file."""
    if (file is None) != (line is None):
        raise typer.BadParameter("--file and --line must be used together")
    _require_repo()

    line_number = line - 1 if line is not None else None
    annotation = git.blame(file) if file is not None else None
    selected = git.resolve_revision(commit or "HEAD")
    commit_hash = resolve_commit(line_number, annotation, [selected] if selected else [])
    if commit_hash is None:
        typer.echo("error: no commit found for the given context", err=True)
        raise typer.Exit(1)

    remotes = git.list_remotes()
    server = get_review_server(profile)

    if open_page:
        url = server.navigation_url(commit_hash, git.commit_message(commit_hash), remotes)
        if url is None:
            rprint(_PR_MESSAGES[Outcome.NOT_APPLICABLE])
            return
        rprint(f"Opening {url}")
        typer.launch(url)
        return

    lookup = worker.submit(server.resolve_pull_requests, commit_hash, remotes).result()
    render_pull_requests(lookup, commit_hash)


@app.command("status")
def status_cmd(profile: ProfileOpt = None) -> None:
    """Show the branch ticket, my tickets and HEAD's pull requests."""
    _require_repo()
    settings = get_settings(profile=profile)
    tracker = JiraTicketSearch(settings)
    server = BitbucketPullRequests(settings)

    head = git.resolve_revision("HEAD")
    tickets_future = worker.submit(tracker.list_assigned_tickets)
    prs_future = worker.submit(server.resolve_pull_requests, head, git.list_remotes()) if head else None

    branch = git.current_branch()
    key = extract_ticket(branch)
    rprint(f"[bold]Branch:[/bold] {branch or '(detached)'}")
    if key:
        rprint(f"[bold]Ticket:[/bold] {key}  {tracker.ticket_url(key) or ''}")
    else:
        rprint("[bold]Ticket:[/bold] [dim]none[/dim]")
    rprint("")

    render_tickets(tickets_future.result())
    if prs_future is not None:
        rprint("")
        render_pull_requests(prs_future.result(), head)  # type: ignore[arg-type]


@app.command("prepare-commit-msg")
def prepare_commit_msg(
    msg_file: Annotated[Path, typer.Argument(help="Commit message file passed by git")],
    source: Annotated[str | None, typer.Argument(help="Message source passed by git")] = None,
    sha: Annotated[str | None, typer.Argument(help="Commit SHA passed by git")] = None,
) -> None:
    """Git prepare-commit-msg hook: prefix the message with the branch ticket."""
    branch = git.current_branch()
    if branch is None:
        return

    draft = msg_file.read_text() if msg_file.exists() else ""
    body, comments = _split_comments(draft)
    composed = compose_message(branch, body)
    if composed == body:
        return

    msg_file.write_text(f"{composed}\n{comments}" if comments else composed)


@app.command("install-hook")
def install_hook(
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing prepare-commit-msg hook")] = False,
) -> None:
    """Install the prepare-commit-msg hook into the current repository."""
    hooks = git.hooks_dir()
    if hooks is None:
        typer.echo("error: not inside a git repository", err=True)
        raise typer.Exit(1)

    target = hooks / "prepare-commit-msg"
    if target.exists() and HOOK_MARKER not in target.read_text() and not force:
        rprint(f"[yellow]{target} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)

    hooks.mkdir(parents=True, exist_ok=True)
    target.write_text(_HOOK_SCRIPT)
    target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    rprint(f"[green]✓[/green] Installed {target}")


@app.command("set-default")
def set_default(
    profile: Annotated[str, typer.Argument(help="Profile name to set as default")],
) -> None:
    """Set the default profile in ~/.config/jact/config.toml."""
    if not CONFIG_PATH.exists():
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        doc = tomlkit.document()
        doc.add("default_profile", profile)
        CONFIG_PATH.write_text(tomlkit.dumps(doc))
        rprint(f'[green]✓[/green] Default profile set to "{profile}" in {CONFIG_PATH}')
        return

    doc = tomlkit.parse(CONFIG_PATH.read_text())
    profiles = _list_profiles(doc)
    if profile not in profiles:
        rprint(f"[red]Profile '{profile}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}[/red]")
        raise typer.Exit(1)

    doc["default_profile"] = profile
    CONFIG_PATH.write_text(tomlkit.dumps(doc))
    rprint(f'[green]✓[/green] Default profile set to "{profile}" in {CONFIG_PATH}')


@app.command("config-show")
def config_show(profile: ProfileOpt = None) -> None:
    """Show resolved configuration (masks credentials)."""
    settings = get_settings(profile=profile)

    def mask(val: str | None) -> str:
        if not val:
            return "[dim](not set)[/dim]"
        if len(val) <= 5:
            return "***"
        return f"...{val[-5:]}"

    table = Table(title="jact Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("default_profile", settings.default_profile or "[dim](not set)[/dim]")
    table.add_row("jira_base_url", settings.jira_base_url or "[dim](not set)[/dim]")
    table.add_row("jira_token", mask(settings.jira_token.get_secret_value() if settings.jira_token else None))
    table.add_row(
        "bitbucket_token",
        mask(settings.bitbucket_token.get_secret_value() if settings.bitbucket_token else None),
    )

    rprint(table)


@app.command("init")
def init_cmd() -> None:
    """Interactive first-time setup wizard."""
    rprint("[bold]jact Setup Wizard[/bold]")
    rprint("")

    profile_name = typer.prompt("Profile name (e.g. work)").strip()
    if not profile_name:
        rprint("[red]Profile name cannot be empty.[/red]")
        raise typer.Exit(1)

    base_url = typer.prompt("Jira browse URL", default=PLACEHOLDER_BASE_URL).strip()
    if not base_url.endswith("/"):
        base_url += "/"
    profile_config: dict = {"jira_base_url": base_url}

    rprint("Create a Personal Access Token in Jira: Profile -> Personal Access Tokens")
    jira_token = typer.prompt("Jira token (blank to skip)", default="", show_default=False, hide_input=True).strip()
    if jira_token:
        profile_config["jira_token"] = jira_token

        verify = typer.confirm("Fetch assigned tickets to confirm the token works?", default=True)
        if verify:
            # model_construct skips env and .env so the entered values are the ones checked
            settings = JactSettings.model_construct(jira_base_url=base_url, jira_token=SecretStr(jira_token))
            batch = JiraTicketSearch(settings).list_assigned_tickets()
            if batch.outcome in (Outcome.OK, Outcome.EMPTY):
                rprint(f"[green]✓[/green] Connected. Found {len(batch.tickets)} open ticket(s).")
            else:
                rprint("[yellow]Warning:[/yellow] Could not fetch tickets with this URL and token.")

    rprint("Create an HTTP access token in Bitbucket: Manage account -> HTTP access tokens")
    bb_token = typer.prompt("Bitbucket token (blank to skip)", default="", show_default=False, hide_input=True).strip()
    if bb_token:
        profile_config["bitbucket_token"] = bb_token

    set_as_default = typer.confirm(f"Set '{profile_name}' as default profile?", default=True)

    # round-trip preserves any existing comments
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    doc = tomlkit.parse(CONFIG_PATH.read_text()) if CONFIG_PATH.exists() else tomlkit.document()

    doc[profile_name] = profile_config
    if set_as_default:
        doc["default_profile"] = profile_name

    CONFIG_PATH.write_text(tomlkit.dumps(doc))
    rprint(f"[green]✓[/green] Profile '{profile_name}' written to {CONFIG_PATH}")

    rprint("")
    config_show(profile=profile_name)
