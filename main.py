"""
Main CLI entry point for Toboro.
"""

import json
import sys
import time
from typing import Optional

import click
from rich.console import Console
from rich.live import Live

from toboro.config import Config
from toboro.display import DisplayKind, DisplayState, StatusViewer, derive_display_state
from toboro.fetcher import HttpStatusFetcher, IndexNodeStatusFetcher, StatusFetcher
from toboro.identifiers import IdentifierKind, classify, parse_identifier
from toboro.query_store import FileQueryStore
from toboro.render import render_state, state_to_dict
from toboro.subgraph_client import IndexNodeClient
from toboro.utils import setup_logging

console = Console()

EXIT_INVALID = 2
EXIT_ERROR = 1


def build_fetcher(
    direct: bool,
    status_url: Optional[str] = None,
    index_node_url: Optional[str] = None,
) -> StatusFetcher:
    """
    Pick a fetcher: a status endpoint if one is configured, else the index node.

    Args:
        direct: Always query the index node
        status_url: Status endpoint override
        index_node_url: Index node endpoint override

    Returns:
        StatusFetcher
    """
    status_url = status_url or Config.STATUS_URL
    if status_url and not direct:
        return HttpStatusFetcher(status_url)
    return IndexNodeStatusFetcher(IndexNodeClient(index_node_url))


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def cli(debug):
    """Toboro - Stay on top of your web3 stack."""
    log_level = "DEBUG" if debug else Config.LOG_LEVEL
    setup_logging(log_level, Config.LOG_FILE)


@cli.command()
@click.argument("query")
def validate(query):
    """Check whether QUERY is a Qm-ID or an org/subgraph name."""
    kind = classify(query)
    if kind is IdentifierKind.CONTENT:
        console.print(f"✅ [green]{query}[/green] is a deployment ID")
    elif kind is IdentifierKind.NAMED:
        console.print(f"✅ [green]{query}[/green] is a subgraph name")
    else:
        console.print(f"[red]❌ Invalid subgraph ID: {query!r}[/red]")
        sys.exit(EXIT_INVALID)


@cli.command()
@click.argument("query")
@click.option("--watch", is_flag=True, help="Keep refreshing while the subgraph is live")
@click.option("--direct", is_flag=True, help="Query the index node instead of STATUS_URL")
@click.option("--status-url", default=None, help="Status endpoint URL")
@click.option("--index-node-url", default=None, help="Index node GraphQL URL")
@click.option("--format", type=click.Choice(["rich", "json"]), default="rich")
def status(query, watch, direct, status_url, index_node_url, format):
    """Show the indexing status of QUERY ("Qm..." or "org/subgraph")."""
    fetcher = build_fetcher(direct, status_url, index_node_url)
    store = FileQueryStore(Config.QUERY_STATE_FILE)

    if watch:
        sys.exit(watch_query(StatusViewer(fetcher, store=store), query))

    sys.exit(show_once(fetcher, store, query, format))


@cli.command()
@click.option("--watch", is_flag=True, help="Keep refreshing while the subgraph is live")
@click.option("--direct", is_flag=True, help="Query the index node instead of STATUS_URL")
def last(watch, direct):
    """Re-run the last submitted query."""
    store = FileQueryStore(Config.QUERY_STATE_FILE)
    query = store.get()
    if not query:
        console.print("[yellow]No previous query saved[/yellow]")
        return

    fetcher = build_fetcher(direct)
    if watch:
        viewer = StatusViewer(fetcher, store=store)
        sys.exit(watch_query(viewer, None))

    sys.exit(show_once(fetcher, store, query, "rich"))


@cli.command("config-check")
def config_check():
    """Validate configuration."""
    errors = Config.validate()
    if errors:
        console.print("[bold red]Configuration errors:[/bold red]")
        for error in errors:
            console.print(f"  ❌ {error}")
        sys.exit(EXIT_ERROR)

    console.print("✅ Configuration valid")
    console.print(f"  Status endpoint: {Config.STATUS_URL or '(none, using index node)'}")
    console.print(f"  Index node: {Config.INDEX_NODE_URL}")
    console.print(f"  Auto-refresh interval: {Config.AUTO_REFRESH_INTERVAL}s")


def show_once(fetcher: StatusFetcher, store: FileQueryStore, query: str, format: str) -> int:
    """
    Fetch once and print the resulting display state.

    Returns:
        Process exit code
    """
    store.set(query)
    outcome = None
    if classify(query) is not IdentifierKind.INVALID:
        identifier = parse_identifier(query)
        if format == "rich":
            with console.status("Loading ..."):
                outcome = fetcher.fetch(identifier)
        else:
            outcome = fetcher.fetch(identifier)

    state = derive_display_state(query, False, outcome)
    if format == "json":
        click.echo(json.dumps(state_to_dict(state), indent=2))
    else:
        console.print(render_state(state, query))

    return exit_code_for(state)


def exit_code_for(state: DisplayState) -> int:
    """Process exit code for the final display state."""
    if state.kind in (DisplayKind.EMPTY, DisplayKind.INVALID):
        return EXIT_INVALID
    if state.kind in (DisplayKind.ERROR, DisplayKind.UNREACHABLE):
        return EXIT_ERROR
    return 0


def watch_query(viewer: StatusViewer, query: Optional[str]) -> int:
    """
    Live view that follows the viewer until polling stops or Ctrl+C.

    Args:
        viewer: Status viewer
        query: Query to submit, or None to restore the saved one

    Returns:
        Process exit code for the last state shown
    """
    console.print(f"Auto-refresh every {viewer.controller.interval:g} seconds while live")
    console.print("Press Ctrl+C to stop\n")

    with Live(console=console, refresh_per_second=4) as live:

        def refresh(state):
            live.update(
                render_state(state, viewer.query, viewer.auto_refresh, viewer.updated_at)
            )

        unsubscribe = viewer.subscribe(refresh)
        try:
            if query is None:
                viewer.restore()
            else:
                viewer.submit_query(query)
            while (
                viewer.current_display_state().kind is DisplayKind.LOADING
                or viewer.auto_refresh
            ):
                time.sleep(0.5)
            state = viewer.current_display_state()
            refresh(state)
            return exit_code_for(state)
        except KeyboardInterrupt:
            console.print("\n[yellow]Stopped by user[/yellow]")
            return 0
        finally:
            unsubscribe()
            viewer.close()


if __name__ == "__main__":
    cli()
