"""
Utility functions for Toboro.
"""

import logging
from datetime import datetime, timezone
from typing import Optional


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Setup logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
    """
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def format_percentage(value: Optional[float]) -> str:
    """
    Format percentage with two decimal places.

    Args:
        value: Percentage value (0-100), or None when unknown

    Returns:
        Formatted string (e.g., "45.00%"), "n/a" when value is None
    """
    if value is None:
        return "n/a"
    return f"{value:.2f}%"


def format_block_number(number: Optional[int]) -> str:
    """Format a block number with thousands separators."""
    if number is None:
        return "-"
    return f"{number:,}"


def format_count(value: str) -> str:
    """
    Format a string-encoded integer (e.g. entityCount) for display.

    Args:
        value: Decimal string as transported by the index node

    Returns:
        Value with thousands separators, or the raw string if unparseable
    """
    try:
        return f"{int(value):,}"
    except (TypeError, ValueError):
        return str(value)


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


def format_timestamp(dt: Optional[datetime]) -> str:
    """
    Format a datetime for the "last updated" line.

    Args:
        dt: Datetime object (UTC)

    Returns:
        Formatted string (e.g., "2024-01-31 12:00:00 UTC")
    """
    if dt is None:
        return "never"
    return dt.strftime("%Y-%m-%d %H:%M:%S UTC")


def truncate_id(value: str, chars: int = 6) -> str:
    """
    Truncate a long identifier (deployment hash, block hash) for display.

    Args:
        value: Identifier string
        chars: Number of characters to show on each end

    Returns:
        Truncated identifier (e.g., "QmTran...1111")
    """
    if len(value) <= chars * 2 + 3:
        return value
    return f"{value[:chars]}...{value[-chars:]}"
