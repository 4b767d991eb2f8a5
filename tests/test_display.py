"""Tests for display state derivation and the StatusViewer."""

from __future__ import annotations

import logging

import pytest

from conftest import (
    DEPLOYMENT_ID,
    SUBGRAPH_NAME,
    FakeFetcher,
    GatedFetcher,
    RecordingWait,
    failed_outcome,
    live_outcome,
)
from toboro.display import DisplayKind, DisplayState, StatusViewer, derive_display_state
from toboro.identifiers import parse_identifier
from toboro.models import FetchOutcome
from toboro.query_store import FileQueryStore, MemoryQueryStore


class TestDeriveDisplayState:
    def test_empty_query_wins_over_everything(self) -> None:
        assert derive_display_state("", True, live_outcome()) == DisplayState.empty()
        assert derive_display_state(None, False, None).kind is DisplayKind.EMPTY

    def test_invalid_query_wins_over_loading(self) -> None:
        assert derive_display_state("a/b/c", True, None).kind is DisplayKind.INVALID

    def test_loading_wins_over_outcome(self) -> None:
        state = derive_display_state(DEPLOYMENT_ID, True, FetchOutcome.failure("x"))
        assert state.kind is DisplayKind.LOADING

    def test_error_outcome(self) -> None:
        state = derive_display_state(SUBGRAPH_NAME, False, FetchOutcome.failure("not found"))
        assert state == DisplayState.error("not found")

    def test_ready_outcome_carries_statuses(self) -> None:
        outcome = live_outcome()
        state = derive_display_state(DEPLOYMENT_ID, False, outcome)
        assert state.kind is DisplayKind.READY
        assert list(state.statuses) == outcome.data

    def test_no_outcome_is_reported_as_unreachable(self, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="toboro.display"):
            state = derive_display_state(DEPLOYMENT_ID, False, None)
        assert state.kind is DisplayKind.UNREACHABLE
        assert "No display state" in caplog.text


def _viewer(fetcher, wait=None, store=None) -> StatusViewer:
    return StatusViewer(fetcher, store=store, interval=30, wait=wait or RecordingWait())


def test_scenario_a_content_id_is_fetched() -> None:
    fetcher = FakeFetcher(failed_outcome())
    viewer = _viewer(fetcher)

    viewer.submit_query(DEPLOYMENT_ID)
    assert viewer.controller.join(5)

    assert fetcher.calls == [parse_identifier(DEPLOYMENT_ID)]


def test_scenario_b_name_is_fetched() -> None:
    fetcher = FakeFetcher(failed_outcome())
    viewer = _viewer(fetcher)

    state = viewer.submit_query(SUBGRAPH_NAME)
    assert viewer.controller.join(5)

    assert state.kind is not DisplayKind.INVALID
    assert fetcher.calls[0].is_named


def test_scenario_c_live_status_is_ready_and_polling() -> None:
    wait = RecordingWait()
    viewer = _viewer(FakeFetcher(live_outcome()), wait=wait)

    viewer.submit_query(DEPLOYMENT_ID)
    assert wait.waiting.wait(5)

    assert viewer.current_display_state().kind is DisplayKind.READY
    assert viewer.auto_refresh
    assert wait.intervals == [30]
    assert viewer.updated_at is not None
    viewer.close()


def test_scenario_d_fatal_error_is_ready_without_polling() -> None:
    wait = RecordingWait()
    viewer = _viewer(FakeFetcher(failed_outcome()), wait=wait)

    viewer.submit_query(DEPLOYMENT_ID)
    assert viewer.controller.join(5)

    state = viewer.current_display_state()
    assert state.kind is DisplayKind.READY
    assert state.statuses[0].fatal_error.message == "x"
    assert not viewer.auto_refresh
    assert wait.intervals == []


def test_scenario_e_remote_error_is_shown_without_polling() -> None:
    wait = RecordingWait()
    viewer = _viewer(FakeFetcher(FetchOutcome.failure("not found")), wait=wait)

    viewer.submit_query(SUBGRAPH_NAME)
    assert viewer.controller.join(5)

    assert viewer.current_display_state() == DisplayState.error("not found")
    assert not viewer.auto_refresh
    assert wait.intervals == []


def test_scenario_f_new_submission_cancels_pending_refresh() -> None:
    wait = RecordingWait()
    fetcher = FakeFetcher(live_outcome())
    viewer = _viewer(fetcher, wait=wait)
    seen: list[DisplayState] = []

    viewer.submit_query(DEPLOYMENT_ID)
    assert wait.waiting.wait(5)
    old_thread = viewer.controller._thread
    viewer.subscribe(seen.append)

    fetcher.outcomes = [FetchOutcome.failure("not found")]
    viewer.submit_query(SUBGRAPH_NAME)
    assert viewer.controller.join(5)
    old_thread.join(5)

    assert not old_thread.is_alive()
    assert [c.value for c in fetcher.calls] == [DEPLOYMENT_ID, SUBGRAPH_NAME]
    assert all(s.kind is not DisplayKind.READY for s in seen)
    assert viewer.current_display_state() == DisplayState.error("not found")


def test_stale_in_flight_result_never_reaches_display() -> None:
    gated = GatedFetcher(live_outcome())
    viewer = _viewer(gated)
    seen: list[DisplayState] = []
    viewer.subscribe(seen.append)

    viewer.submit_query(DEPLOYMENT_ID)
    assert gated.started.wait(5)
    stale_thread = viewer.controller._thread

    viewer.submit_query("")
    gated.release.set()
    stale_thread.join(5)

    assert viewer.current_display_state() == DisplayState.empty()
    assert not any(s.kind is DisplayKind.READY for s in seen)
    assert not viewer.auto_refresh


def test_invalid_submission_cancels_polling_and_skips_fetch() -> None:
    wait = RecordingWait()
    fetcher = FakeFetcher(live_outcome())
    viewer = _viewer(fetcher, wait=wait)

    viewer.submit_query(DEPLOYMENT_ID)
    assert wait.waiting.wait(5)
    state = viewer.submit_query("org/name/extra")
    assert viewer.controller.join(5)

    assert state == DisplayState.invalid()
    assert len(fetcher.calls) == 1
    assert not viewer.auto_refresh


def test_submission_reports_loading_before_outcome() -> None:
    gated = GatedFetcher(live_outcome())
    viewer = _viewer(gated)

    state = viewer.submit_query(DEPLOYMENT_ID)
    assert state == DisplayState.loading()

    gated.release.set()
    viewer.close()
    assert viewer.controller.join(5)


def test_subscribers_are_notified_and_can_unsubscribe() -> None:
    viewer = _viewer(FakeFetcher(failed_outcome()))
    seen: list[DisplayState] = []
    unsubscribe = viewer.subscribe(seen.append)

    viewer.submit_query(DEPLOYMENT_ID)
    assert viewer.controller.join(5)
    unsubscribe()
    viewer.submit_query("")

    kinds = [s.kind for s in seen]
    assert kinds[0] is DisplayKind.LOADING
    assert DisplayKind.READY in kinds
    assert DisplayKind.EMPTY not in kinds


def test_failing_subscriber_does_not_break_others() -> None:
    viewer = _viewer(FakeFetcher(failed_outcome()))
    seen: list[DisplayState] = []

    def broken(state: DisplayState) -> None:
        raise RuntimeError("render failed")

    viewer.subscribe(broken)
    viewer.subscribe(seen.append)
    viewer.submit_query("")

    assert seen == [DisplayState.empty()]


def test_submission_writes_query_parameter() -> None:
    store = MemoryQueryStore()
    viewer = _viewer(FakeFetcher(failed_outcome()), store=store)

    viewer.submit_query("a/b/c")

    assert store.get() == "a/b/c"


def test_restore_fetches_saved_valid_query() -> None:
    fetcher = FakeFetcher(failed_outcome())
    viewer = _viewer(fetcher, store=MemoryQueryStore(SUBGRAPH_NAME))

    viewer.restore()
    assert viewer.controller.join(5)

    assert viewer.query == SUBGRAPH_NAME
    assert fetcher.calls == [parse_identifier(SUBGRAPH_NAME)]


@pytest.mark.parametrize("saved", [None, ""])
def test_restore_without_saved_query_is_empty(saved) -> None:
    fetcher = FakeFetcher(failed_outcome())
    viewer = _viewer(fetcher, store=MemoryQueryStore(saved))

    assert viewer.restore() == DisplayState.empty()
    assert fetcher.calls == []


def test_file_query_store_round_trip(tmp_path) -> None:
    store = FileQueryStore(str(tmp_path / "q.json"))
    assert store.get() is None

    store.set(SUBGRAPH_NAME)

    assert FileQueryStore(str(tmp_path / "q.json")).get() == SUBGRAPH_NAME


def test_file_query_store_ignores_corrupt_file(tmp_path) -> None:
    path = tmp_path / "q.json"
    path.write_text("{not json", encoding="utf-8")
    assert FileQueryStore(str(path)).get() is None
