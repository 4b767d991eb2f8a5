"""
Display state derivation and the StatusViewer that owns the query state.

The view layer only ever sees a DisplayState; it subscribes to the viewer to
be told when that state changes.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Tuple

from toboro.fetcher import StatusFetcher
from toboro.identifiers import is_valid, parse_identifier
from toboro.models import FetchOutcome, SubgraphIndexingStatus
from toboro.polling import PollingController, wait_for_refresh
from toboro.query_store import MemoryQueryStore, QueryStore
from toboro.utils import utc_now

logger = logging.getLogger(__name__)


class DisplayKind(str, Enum):
    EMPTY = "empty"
    INVALID = "invalid"
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class DisplayState:
    """What the view should show right now."""

    kind: DisplayKind
    message: Optional[str] = None
    statuses: Tuple[SubgraphIndexingStatus, ...] = ()

    @classmethod
    def empty(cls) -> "DisplayState":
        return cls(DisplayKind.EMPTY)

    @classmethod
    def invalid(cls) -> "DisplayState":
        return cls(DisplayKind.INVALID)

    @classmethod
    def loading(cls) -> "DisplayState":
        return cls(DisplayKind.LOADING)

    @classmethod
    def error(cls, message: str) -> "DisplayState":
        return cls(DisplayKind.ERROR, message=message)

    @classmethod
    def ready(cls, statuses: List[SubgraphIndexingStatus]) -> "DisplayState":
        return cls(DisplayKind.READY, statuses=tuple(statuses))

    @classmethod
    def unreachable(cls) -> "DisplayState":
        return cls(DisplayKind.UNREACHABLE)


def derive_display_state(
    query: Optional[str],
    loading: bool,
    outcome: Optional[FetchOutcome],
) -> DisplayState:
    """
    Map the viewer's inputs to exactly one DisplayState.

    Precedence: empty, invalid, loading, error, ready.

    Args:
        query: Raw identifier text
        loading: Whether a fetch is in flight
        outcome: Last fetch outcome, if any

    Returns:
        DisplayState
    """
    if not query:
        return DisplayState.empty()
    if not is_valid(query):
        return DisplayState.invalid()
    if loading:
        return DisplayState.loading()
    if outcome is not None and outcome.error is not None:
        return DisplayState.error(outcome.error)
    if outcome is not None and outcome.data is not None:
        return DisplayState.ready(outcome.data)

    logger.error(f"No display state for query {query!r} (not loading, no outcome)")
    return DisplayState.unreachable()


class StatusViewer:
    """Holds the current query and its fetched statuses."""

    def __init__(
        self,
        fetcher: StatusFetcher,
        store: Optional[QueryStore] = None,
        interval: Optional[float] = None,
        wait: Callable[[threading.Event, float], bool] = wait_for_refresh,
    ):
        """
        Initialize status viewer.

        Args:
            fetcher: Status fetcher
            store: Where the shareable "q" parameter is kept
            interval: Auto-refresh interval in seconds
            wait: Refresh timer, see PollingController
        """
        self.store = store or MemoryQueryStore()
        self.controller = PollingController(
            fetcher,
            on_outcome=self._handle_outcome,
            on_fetch_start=self._handle_fetch_start,
            interval=interval,
            wait=wait,
        )

        self._lock = threading.Lock()
        self._query = ""
        self._loading = False
        self._outcome: Optional[FetchOutcome] = None
        self._updated_at: Optional[datetime] = None
        self._subscribers: List[Callable[[DisplayState], None]] = []

    @property
    def query(self) -> str:
        return self._query

    @property
    def auto_refresh(self) -> bool:
        return self.controller.auto_refresh

    @property
    def updated_at(self) -> Optional[datetime]:
        return self._updated_at

    def restore(self) -> DisplayState:
        """Load "q" from the store and fetch it if it is a valid identifier."""
        query = self.store.get()
        if query:
            return self.submit_query(query)
        return self.current_display_state()

    def submit_query(self, raw: str) -> DisplayState:
        """
        Replace the current query.

        Any running sequence is cancelled first; a new one starts only when
        the input is a valid identifier.

        Args:
            raw: Raw user input

        Returns:
            DisplayState right after submission
        """
        raw = raw or ""
        self.controller.cancel()

        valid = is_valid(raw)
        with self._lock:
            self._query = raw
            self._outcome = None
            self._loading = valid

        self.store.set(raw)

        if valid:
            self.controller.start(parse_identifier(raw))
        else:
            logger.debug(f"Not fetching invalid or empty query {raw!r}")

        self._notify()
        return self.current_display_state()

    def current_display_state(self) -> DisplayState:
        with self._lock:
            return derive_display_state(self._query, self._loading, self._outcome)

    def subscribe(self, callback: Callable[[DisplayState], None]) -> Callable[[], None]:
        """
        Register for display state changes.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def close(self) -> None:
        self.controller.cancel()

    def _handle_fetch_start(self) -> None:
        with self._lock:
            self._loading = True
        self._notify()

    def _handle_outcome(self, outcome: FetchOutcome, auto_refresh: bool) -> None:
        with self._lock:
            self._loading = False
            self._outcome = outcome
            if outcome.ok:
                self._updated_at = utc_now()
        if outcome.ok:
            logger.info(
                f"{self._query}: {len(outcome.data)} status(es), "
                f"auto-refresh {'on' if auto_refresh else 'off'}"
            )
        else:
            logger.warning(f"{self._query}: {outcome.error}")
        self._notify()

    def _notify(self) -> None:
        state = self.current_display_state()
        for callback in list(self._subscribers):
            try:
                callback(state)
            except Exception:
                logger.exception("Display state subscriber failed")
