"""
Auto-refresh of a subgraph's status while it is still live.

Each submitted identifier starts a new fetch sequence on a worker thread.
Starting a sequence cancels the previous one: its refresh timer is woken up
and any result it produces afterwards is discarded.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from toboro.config import Config
from toboro.fetcher import StatusFetcher
from toboro.identifiers import Identifier
from toboro.models import FetchOutcome

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "Unexpected error while fetching status"


class PollState(str, Enum):
    """Lifecycle of the current fetch sequence."""

    IDLE = "idle"
    FETCHING = "fetching"
    WAITING = "waiting"  # fetched, next refresh scheduled
    DONE = "done"  # fetched, nothing live left to poll
    FAILED = "failed"


def should_auto_refresh(outcome: Optional[FetchOutcome]) -> bool:
    """
    Decide whether to keep polling after an outcome.

    A single status without a fatal error keeps polling on, even if other
    statuses in the same response have failed.

    Args:
        outcome: Latest fetch outcome

    Returns:
        True if at least one returned status is still live
    """
    if outcome is None or not outcome.ok:
        return False
    return any(status.is_live for status in outcome.data)


def wait_for_refresh(cancelled: threading.Event, interval: float) -> bool:
    return cancelled.wait(interval)


class PollingController:
    """Drives fetch -> wait -> fetch for the most recently started identifier."""

    def __init__(
        self,
        fetcher: StatusFetcher,
        on_outcome: Callable[[FetchOutcome, bool], None],
        on_fetch_start: Optional[Callable[[], None]] = None,
        interval: Optional[float] = None,
        wait: Callable[[threading.Event, float], bool] = wait_for_refresh,
    ):
        """
        Initialize polling controller.

        Args:
            fetcher: Status fetcher used for every fetch
            on_outcome: Called with (outcome, auto_refresh) for current
                sequences only
            on_fetch_start: Called before each fetch of a current sequence
            interval: Seconds between the end of a fetch and the next one
            wait: Blocks for the interval; returns True if cancelled
        """
        self.fetcher = fetcher
        self.on_outcome = on_outcome
        self.on_fetch_start = on_fetch_start
        self.interval = interval if interval is not None else Config.AUTO_REFRESH_INTERVAL
        self._wait = wait

        # Held while publishing, so a cancel() that returns guarantees no
        # superseded sequence publishes afterwards.
        self._lock = threading.RLock()
        self._generation = 0
        self._cancelled: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._state = PollState.IDLE
        self._auto_refresh = False

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def auto_refresh(self) -> bool:
        return self._auto_refresh

    @property
    def generation(self) -> int:
        return self._generation

    def start(self, identifier: Identifier) -> int:
        """
        Cancel any running sequence and start fetching identifier.

        Args:
            identifier: Validated identifier

        Returns:
            Generation number of the new sequence
        """
        with self._lock:
            self.cancel()
            generation = self._generation
            cancelled = threading.Event()
            self._cancelled = cancelled
            self._thread = threading.Thread(
                target=self._run,
                args=(generation, identifier, cancelled),
                name=f"toboro-poll-{generation}",
                daemon=True,
            )
            self._thread.start()

        logger.info(f"Started status sequence {generation} for {identifier}")
        return generation

    def cancel(self) -> None:
        """Stop the current sequence; its pending refresh never fires."""
        with self._lock:
            self._generation += 1
            if self._cancelled is not None:
                self._cancelled.set()
                self._cancelled = None
            self._state = PollState.IDLE
            self._auto_refresh = False

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the current worker thread to exit.

        Returns:
            True if no worker is running anymore
        """
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _run(self, generation: int, identifier: Identifier, cancelled: threading.Event) -> None:
        while not cancelled.is_set():
            with self._lock:
                if not self.is_current(generation):
                    return
                self._state = PollState.FETCHING
                if self.on_fetch_start:
                    self.on_fetch_start()

            outcome = self._fetch(identifier)

            with self._lock:
                if not self.is_current(generation):
                    logger.debug(f"Discarding result of superseded sequence {generation}")
                    return
                active = should_auto_refresh(outcome)
                self._auto_refresh = active
                if not outcome.ok:
                    self._state = PollState.FAILED
                elif active:
                    self._state = PollState.WAITING
                else:
                    self._state = PollState.DONE
                self.on_outcome(outcome, active)

            if not active:
                logger.info(f"Auto-refresh off for {identifier}")
                return

            logger.debug(f"Next refresh of {identifier} in {self.interval}s")
            if self._wait(cancelled, self.interval):
                return

    def _fetch(self, identifier: Identifier) -> FetchOutcome:
        try:
            return self.fetcher.fetch(identifier)
        except Exception:
            logger.exception(f"Fetcher raised for {identifier}")
            return FetchOutcome.failure(UNEXPECTED_ERROR_MESSAGE)
