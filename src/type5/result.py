"""Tagged results returned by session operations."""

from dataclasses import dataclass
from typing import Any, Optional

from .exceptions import Type5Error


@dataclass(frozen=True)
class Result:
    """Outcome of a tag operation.

    A successful result carries ``value`` and the status ``"OK"``. A failed
    result carries the error ``kind`` (``transport``, ``framing``,
    ``capacity``, ``argument`` or ``codec``) and a descriptive ``message``.
    """
    ok: bool
    value: Any = None
    kind: Optional[str] = None
    message: str = "OK"

    @classmethod
    def success(cls, value: Any = None) -> 'Result':
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: str, message: str) -> 'Result':
        return cls(ok=False, kind=kind, message=message)

    @classmethod
    def from_error(cls, error: Type5Error, context: str = "") -> 'Result':
        """Build a failed result from an exception, prefixed with context."""
        message = f"{context}: {error}" if context else str(error)
        return cls.failure(error.kind, message)

    def __bool__(self):
        return self.ok
