"""
Indexing status records as returned by the index node, and the
data-or-error FetchOutcome wrapper that travels between components.

Field names on the wire are camelCase; the dataclasses use snake_case.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _require_dict(raw: Any, what: str) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise ValueError(f"{what} is not an object: {raw!r}")
    return raw


@dataclass(frozen=True)
class Block:
    """Block reference. Numbers are decimal strings on the wire."""

    hash: str
    number: str

    @property
    def height(self) -> int:
        """Block number as an arbitrary-precision int."""
        return int(self.number)

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> Optional["Block"]:
        if raw is None:
            return None
        raw = _require_dict(raw, "block")
        number = str(raw["number"])
        if not (number.isascii() and number.isdigit()):
            raise ValueError(f"block number is not decimal: {number!r}")
        return cls(hash=raw.get("hash") or "", number=number)

    def to_dict(self) -> Dict[str, Any]:
        return {"hash": self.hash, "number": self.number}


@dataclass(frozen=True)
class SubgraphError:
    """Error reported by the indexer for a deployment."""

    message: str
    deterministic: bool
    block: Optional[Block] = None
    handler: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> Optional["SubgraphError"]:
        if raw is None:
            return None
        raw = _require_dict(raw, "subgraph error")
        return cls(
            message=raw.get("message", ""),
            deterministic=bool(raw.get("deterministic", False)),
            block=Block.from_dict(raw.get("block")),
            handler=raw.get("handler"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "deterministic": self.deterministic,
            "block": self.block.to_dict() if self.block else None,
            "handler": self.handler,
        }


@dataclass(frozen=True)
class ChainIndexingStatus:
    """Indexing progress on one source chain."""

    network: str
    chain_head_block: Optional[Block] = None
    earliest_block: Optional[Block] = None
    latest_block: Optional[Block] = None
    last_healthy_block: Optional[Block] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ChainIndexingStatus":
        raw = _require_dict(raw, "chain status")
        return cls(
            network=raw.get("network", ""),
            chain_head_block=Block.from_dict(raw.get("chainHeadBlock")),
            earliest_block=Block.from_dict(raw.get("earliestBlock")),
            latest_block=Block.from_dict(raw.get("latestBlock")),
            last_healthy_block=Block.from_dict(raw.get("lastHealthyBlock")),
        )

    def to_dict(self) -> Dict[str, Any]:
        def dump(block: Optional[Block]) -> Optional[Dict[str, Any]]:
            return block.to_dict() if block else None

        return {
            "network": self.network,
            "chainHeadBlock": dump(self.chain_head_block),
            "earliestBlock": dump(self.earliest_block),
            "latestBlock": dump(self.latest_block),
            "lastHealthyBlock": dump(self.last_healthy_block),
        }


@dataclass(frozen=True)
class SubgraphIndexingStatus:
    """Indexing status of one deployment on one node."""

    subgraph: str
    synced: bool
    health: str
    entity_count: str
    chains: List[ChainIndexingStatus]
    node: Optional[str] = None
    fatal_error: Optional[SubgraphError] = None
    non_fatal_errors: List[SubgraphError] = field(default_factory=list)

    @property
    def is_live(self) -> bool:
        """A deployment without a fatal error is still making progress."""
        return self.fatal_error is None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "SubgraphIndexingStatus":
        raw = _require_dict(raw, "indexing status")
        return cls(
            subgraph=raw["subgraph"],
            synced=bool(raw.get("synced", False)),
            health=raw.get("health", ""),
            entity_count=str(raw.get("entityCount", "0")),
            chains=[ChainIndexingStatus.from_dict(c) for c in raw.get("chains") or []],
            node=raw.get("node"),
            fatal_error=SubgraphError.from_dict(raw.get("fatalError")),
            non_fatal_errors=[
                SubgraphError.from_dict(_require_dict(e, "non-fatal error"))
                for e in raw.get("nonFatalErrors") or []
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subgraph": self.subgraph,
            "synced": self.synced,
            "health": self.health,
            "entityCount": self.entity_count,
            "fatalError": self.fatal_error.to_dict() if self.fatal_error else None,
            "nonFatalErrors": [e.to_dict() for e in self.non_fatal_errors],
            "chains": [c.to_dict() for c in self.chains],
            "node": self.node,
        }


@dataclass(frozen=True)
class FetchOutcome:
    """
    Result of one status fetch: data XOR an error message.

    Use FetchOutcome.success() / FetchOutcome.failure() rather than the
    constructor.
    """

    data: Optional[List[SubgraphIndexingStatus]] = None
    error: Optional[str] = None

    def __post_init__(self):
        if (self.data is None) == (self.error is None):
            raise ValueError("FetchOutcome must carry exactly one of data or error")

    @classmethod
    def success(cls, statuses: List[SubgraphIndexingStatus]) -> "FetchOutcome":
        return cls(data=list(statuses))

    @classmethod
    def failure(cls, message: str) -> "FetchOutcome":
        return cls(error=message)

    @property
    def ok(self) -> bool:
        return self.data is not None

    @classmethod
    def from_dict(cls, body: Any) -> "FetchOutcome":
        """
        Parse the JSON wire form.

        Args:
            body: Decoded JSON, {"data": [...]} or {"error": {"message": ...}}

        Returns:
            FetchOutcome

        Raises:
            ValueError: If the body matches neither form
        """
        if not isinstance(body, dict):
            raise ValueError("Response body is not a JSON object")

        error = body.get("error")
        data = body.get("data")
        if error is not None and data is not None:
            raise ValueError("Response body carries both data and error")
        if error is not None:
            if isinstance(error, dict):
                return cls.failure(str(error.get("message", "Unknown error")))
            return cls.failure(str(error))
        if isinstance(data, list):
            return cls.success([SubgraphIndexingStatus.from_dict(s) for s in data])
        raise ValueError("Response body carries neither data nor error")

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"error": {"message": self.error}}
        return {"data": [s.to_dict() for s in self.data]}
