"""
Sync progress derived from a chain's block references.
"""

from typing import Optional, Tuple

from toboro.models import ChainIndexingStatus, SubgraphIndexingStatus
from toboro.utils import format_percentage


def progress(chain: ChainIndexingStatus) -> Optional[float]:
    """
    Percentage of the chain range [earliest, head] already processed.

    Block numbers are parsed as ints so the subtraction is exact; only the
    final ratio is a float.

    Args:
        chain: Chain indexing status

    Returns:
        Percentage rounded to two decimals, or None when a block reference
        is missing or the range is empty
    """
    if (
        chain.earliest_block is None
        or chain.latest_block is None
        or chain.chain_head_block is None
    ):
        return None

    earliest = chain.earliest_block.height
    processed = chain.latest_block.height - earliest
    total = chain.chain_head_block.height - earliest
    if total == 0:
        return None

    return round(100 * processed / total, 2)


def block_progress(chain: ChainIndexingStatus) -> Optional[Tuple[int, int]]:
    """
    Latest processed block and chain head, for "latest / head" display.

    Returns:
        (latest, head) or None when either block is missing
    """
    if chain.latest_block is None or chain.chain_head_block is None:
        return None
    return chain.latest_block.height, chain.chain_head_block.height


def blocks_behind(chain: ChainIndexingStatus) -> Optional[int]:
    """Number of blocks between the latest processed block and the head."""
    pair = block_progress(chain)
    if pair is None:
        return None
    latest, head = pair
    return max(head - latest, 0)


def status_progress(status: SubgraphIndexingStatus) -> Optional[float]:
    """
    Overall progress of a deployment: the slowest chain wins.

    Returns:
        Lowest defined per-chain percentage, or None if no chain has one
    """
    values = [p for p in (progress(c) for c in status.chains) if p is not None]
    if not values:
        return None
    return min(values)


def format_progress(chain: ChainIndexingStatus) -> str:
    return format_percentage(progress(chain))
