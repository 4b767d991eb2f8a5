"""
Subgraph identifier validation.

A query is either a deployment hash ("Qm..." content identifier) or a
subgraph name of the form "organization/name".
"""

from dataclasses import dataclass
from enum import Enum

from toboro.errors import ValidationError

CONTENT_ID_LENGTH = 46
CONTENT_ID_PREFIX = "Qm"


class IdentifierKind(str, Enum):
    """Shape of a user-supplied identifier."""

    CONTENT = "content"
    NAMED = "named"
    INVALID = "invalid"


def is_valid_id(value: str) -> bool:
    """Check whether value looks like a deployment hash."""
    return len(value) == CONTENT_ID_LENGTH and value.startswith(CONTENT_ID_PREFIX)


def is_valid_name(value: str) -> bool:
    """
    Check whether value looks like "organization/name".

    Only the split count and the two boundary characters are checked, so
    empty inner segments are not rejected on their own.
    """
    return (
        len(value.split("/")) == 2
        and not value.startswith("/")
        and not value.endswith("/")
    )


def classify(value: str) -> IdentifierKind:
    """
    Classify free text as a content identifier, a subgraph name, or invalid.

    Args:
        value: Raw user input

    Returns:
        IdentifierKind
    """
    if is_valid_id(value):
        return IdentifierKind.CONTENT
    if is_valid_name(value):
        return IdentifierKind.NAMED
    return IdentifierKind.INVALID


def is_valid(value: str) -> bool:
    return classify(value) is not IdentifierKind.INVALID


@dataclass(frozen=True)
class Identifier:
    """A validated subgraph identifier."""

    value: str
    kind: IdentifierKind

    @property
    def is_content(self) -> bool:
        return self.kind is IdentifierKind.CONTENT

    @property
    def is_named(self) -> bool:
        return self.kind is IdentifierKind.NAMED

    def __str__(self) -> str:
        return self.value


def parse_identifier(value: str) -> Identifier:
    """
    Validate raw input and wrap it in an Identifier.

    Args:
        value: Raw user input

    Returns:
        Identifier of kind CONTENT or NAMED

    Raises:
        ValidationError: If the input matches neither shape
    """
    kind = classify(value)
    if kind is IdentifierKind.INVALID:
        raise ValidationError(value)
    return Identifier(value=value, kind=kind)
