from __future__ import annotations

from typing import Sequence, Tuple, Union


Candidate = Union[str, Tuple[str, int]]


class ToolError(Exception):
    """Base error for failures reported back to the tool caller."""


class ResolutionError(ToolError):
    """Raised when a server or channel identifier does not resolve to exactly one entity."""

    def __init__(self, message: str, candidates: Sequence[Candidate] = ()) -> None:
        super().__init__(message)
        self.candidates: tuple[Candidate, ...] = tuple(candidates)


class AmbiguousServerError(ResolutionError):
    """Raised when several connected servers match, or none was named and several exist."""


class ServerNotFoundError(ResolutionError):
    """Raised when no connected server matches the identifier."""


class AmbiguousChannelError(ResolutionError):
    """Raised when several channels in a server share the requested name."""


class ChannelNotFoundError(ResolutionError):
    """Raised when no text-capable channel in a server matches the identifier."""


class InvalidTimeFormatError(ToolError, ValueError):
    """Raised when a time boundary is neither ISO 8601 nor a relative duration."""


class InvalidArgumentsError(ToolError, ValueError):
    """Raised when a tool argument payload fails schema validation."""


class UnknownToolError(ToolError):
    """Raised when a tool name is not registered."""
