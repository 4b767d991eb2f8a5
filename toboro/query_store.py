"""
Persistence of the shareable "q" query parameter.
"""

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class QueryStore:
    """Reads and writes the raw "q" text."""

    def get(self) -> Optional[str]:
        raise NotImplementedError

    def set(self, value: Optional[str]) -> None:
        raise NotImplementedError


class MemoryQueryStore(QueryStore):
    def __init__(self, value: Optional[str] = None):
        self.value = value

    def get(self) -> Optional[str]:
        return self.value

    def set(self, value: Optional[str]) -> None:
        self.value = value


class FileQueryStore(QueryStore):
    """Keeps "q" in a small JSON file so the last query can be re-run."""

    def __init__(self, path: str):
        self.path = Path(path)

    def get(self) -> Optional[str]:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                state = json.load(handle)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable query state {self.path}: {e}")
            return None
        if not isinstance(state, dict):
            return None
        value = state.get("q")
        return value if isinstance(value, str) else None

    def set(self, value: Optional[str]) -> None:
        try:
            with self.path.open("w", encoding="utf-8") as handle:
                json.dump({"q": value}, handle)
        except OSError as e:
            logger.warning(f"Could not save query state to {self.path}: {e}")
