"""
Exception hierarchy for Toboro.

None of these are fatal to the process: the viewer turns each of them into a
display state.
"""


class ToboroError(Exception):
    """Base class for all Toboro errors."""


class ValidationError(ToboroError, ValueError):
    """Input matches neither accepted identifier shape."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid subgraph ID: {value!r}")


class TransportError(ToboroError):
    """Network/HTTP failure or unparseable response body."""


class RemoteLogicalError(ToboroError):
    """The remote service answered but rejected the request."""
