"""Shared fixtures for the Toboro test suite."""

from __future__ import annotations

import threading
from typing import Any, Optional

import pytest
import requests

from toboro.identifiers import Identifier
from toboro.models import FetchOutcome

DEPLOYMENT_ID = "QmTransparentBig" + "1" * 30
SUBGRAPH_NAME = "graphprotocol/uniswap"


def block(number: int | str, hash: str = "0xabc") -> dict[str, Any]:
    return {"hash": hash, "number": str(number)}


def chain_dict(
    network: str = "mainnet",
    earliest: Optional[int] = 100,
    latest: Optional[int] = 150,
    head: Optional[int] = 200,
) -> dict[str, Any]:
    return {
        "network": network,
        "chainHeadBlock": block(head) if head is not None else None,
        "earliestBlock": block(earliest) if earliest is not None else None,
        "latestBlock": block(latest) if latest is not None else None,
        "lastHealthyBlock": None,
    }


def status_dict(
    subgraph: str = DEPLOYMENT_ID,
    fatal_error: Optional[dict[str, Any]] = None,
    **overrides: Any,
) -> dict[str, Any]:
    """Return a raw indexing status record as the index node sends it."""
    raw = {
        "subgraph": subgraph,
        "synced": False,
        "health": "failed" if fatal_error else "healthy",
        "entityCount": "12345",
        "fatalError": fatal_error,
        "nonFatalErrors": [],
        "chains": [chain_dict()],
        "node": "indexer_node_1",
    }
    raw.update(overrides)
    return raw


FATAL_ERROR = {"message": "x", "deterministic": True, "block": block(170), "handler": None}


def live_outcome() -> FetchOutcome:
    return FetchOutcome.from_dict({"data": [status_dict()]})


def failed_outcome() -> FetchOutcome:
    return FetchOutcome.from_dict({"data": [status_dict(fatal_error=FATAL_ERROR)]})


class FakeFetcher:
    """Returns queued outcomes and records every identifier fetched."""

    def __init__(self, *outcomes: FetchOutcome):
        self.outcomes = list(outcomes)
        self.calls: list[Identifier] = []
        self.called = threading.Event()

    def fetch(self, identifier: Identifier) -> FetchOutcome:
        self.calls.append(identifier)
        self.called.set()
        if len(self.outcomes) > 1:
            return self.outcomes.pop(0)
        return self.outcomes[0]


class GatedFetcher:
    """Blocks each fetch until released, to hold a sequence mid-flight."""

    def __init__(self, outcome: FetchOutcome):
        self.outcome = outcome
        self.calls: list[Identifier] = []
        self.started = threading.Event()
        self.release = threading.Event()

    def fetch(self, identifier: Identifier) -> FetchOutcome:
        self.calls.append(identifier)
        self.started.set()
        self.release.wait(5)
        return self.outcome


class RecordingWait:
    """Refresh timer stand-in: records intervals and stops after N waits."""

    def __init__(self, refreshes: int = 0):
        self.intervals: list[float] = []
        self.refreshes = refreshes
        self.waiting = threading.Event()
        self.resume = threading.Event()

    def __call__(self, cancelled: threading.Event, interval: float) -> bool:
        self.intervals.append(interval)
        if len(self.intervals) <= self.refreshes:
            return False
        self.waiting.set()
        # Park until cancelled, like a real pending timer.
        cancelled.wait(5)
        return True


@pytest.fixture
def fake_response():
    """Factory for stand-ins of requests.Response."""

    class FakeResponse:
        def __init__(self, payload: Any = None, status_code: int = 200, json_error: bool = False):
            self.payload = payload
            self.status_code = status_code
            self.json_error = json_error

        def raise_for_status(self) -> None:
            if self.status_code >= 400:
                raise requests.HTTPError(f"{self.status_code} Server Error")

        def json(self) -> Any:
            if self.json_error:
                raise ValueError("Expecting value: line 1 column 1 (char 0)")
            return self.payload

    return FakeResponse
