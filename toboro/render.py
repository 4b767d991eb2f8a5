"""
Terminal rendering of display states with rich.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from toboro.display import DisplayKind, DisplayState
from toboro.models import SubgraphIndexingStatus
from toboro.progress import block_progress, blocks_behind, format_progress, progress, status_progress
from toboro.utils import (
    format_block_number,
    format_count,
    format_percentage,
    format_timestamp,
    truncate_id,
)

HEALTH_STYLES = {
    "healthy": "green",
    "unhealthy": "yellow",
    "failed": "red",
}

EMPTY_HINT = 'Tired of checking subgraph health? Put a Qm-ID or a name ("org/subgraph")'


def create_status_table(status: SubgraphIndexingStatus) -> Panel:
    """
    Create rich display for one deployment's indexing status.

    Args:
        status: Indexing status record

    Returns:
        Rich Panel for display
    """
    health_style = HEALTH_STYLES.get(status.health, "white")

    info = Table.grid(padding=(0, 2))
    info.add_column(style="bold")
    info.add_column()
    info.add_row("Deployment", status.subgraph)
    info.add_row("Health", Text(status.health, style=health_style))
    info.add_row("Synced", "✅ yes" if status.synced else "⏳ no")
    info.add_row("Entities", format_count(status.entity_count))
    info.add_row("Progress", format_percentage(status_progress(status)))
    info.add_row("Node", status.node or "-")
    if status.fatal_error:
        error = status.fatal_error
        where = f" at block {format_block_number(error.block.height)}" if error.block else ""
        kind = "deterministic" if error.deterministic else "non-deterministic"
        info.add_row("Fatal error", Text(f"{error.message}{where} ({kind})", style="red"))
    if status.non_fatal_errors:
        info.add_row("Non-fatal errors", str(len(status.non_fatal_errors)))

    chains = Table(show_header=True, header_style="bold magenta")
    chains.add_column("Network", style="cyan")
    chains.add_column("Earliest", justify="right")
    chains.add_column("Latest / Head", justify="right", style="yellow")
    chains.add_column("Behind", justify="right")
    chains.add_column("Progress", justify="right", style="green")

    for chain in status.chains:
        earliest = chain.earliest_block.height if chain.earliest_block else None
        pair = block_progress(chain)
        latest_head = (
            f"{format_block_number(pair[0])} / {format_block_number(pair[1])}" if pair else "-"
        )
        chains.add_row(
            chain.network,
            format_block_number(earliest),
            latest_head,
            format_block_number(blocks_behind(chain)),
            format_progress(chain),
        )

    return Panel.fit(
        Group(info, chains),
        title=truncate_id(status.subgraph),
        border_style=health_style,
    )


def render_state(
    state: DisplayState,
    query: str = "",
    auto_refresh: bool = False,
    updated_at: Optional[datetime] = None,
) -> RenderableType:
    """
    Turn a DisplayState into something rich can print.

    Args:
        state: Current display state
        query: Raw query text, shown as the title
        auto_refresh: Whether the viewer is still polling
        updated_at: Time of the last successful fetch

    Returns:
        Rich renderable
    """
    if state.kind is DisplayKind.EMPTY:
        return Text(EMPTY_HINT, justify="center")
    if state.kind is DisplayKind.INVALID:
        return Text("Invalid subgraph ID", style="red", justify="center")
    if state.kind is DisplayKind.LOADING:
        return Text("Loading ...", style="dim", justify="center")
    if state.kind is DisplayKind.ERROR:
        return Text(state.message or "Unknown error", style="bold red", justify="center")
    if state.kind is DisplayKind.UNREACHABLE:
        return Text("This should not happen", style="bold red", justify="center")

    footer = Text(
        f"Last Updated: {format_timestamp(updated_at)}"
        f"  ·  Auto-refresh: {'on' if auto_refresh else 'off'}",
        style="dim",
    )
    return Panel(
        Group(*[create_status_table(s) for s in state.statuses], footer),
        title=f"Toboro: {query}",
        border_style="blue",
    )


def state_to_dict(state: DisplayState) -> Dict[str, Any]:
    """JSON-friendly form of a display state."""
    result: Dict[str, Any] = {"state": state.kind.value}
    if state.message is not None:
        result["message"] = state.message
    if state.kind is DisplayKind.READY:
        result["data"] = [s.to_dict() for s in state.statuses]
        result["progress"] = [
            {"subgraph": s.subgraph, "network": c.network, "percentage": progress(c)}
            for s in state.statuses
            for c in s.chains
        ]
    return result
