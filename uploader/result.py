"""Tagged ok/err result returned by the remote store."""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from uploader.exceptions import CommitRejected

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Exactly one of ``ok`` or ``err`` is set.

    Store-side rejections travel as ``err`` data instead of exceptions so callers
    can tell "the call failed" apart from "the call ran and was refused".
    """
    ok: Optional[T] = None
    err: Optional[str] = None

    def __post_init__(self):
        if (self.ok is None) == (self.err is None):
            raise ValueError("Result requires exactly one of 'ok' or 'err'")

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(ok=value)

    @classmethod
    def failure(cls, message: str) -> "Result[T]":
        return cls(err=message)

    @classmethod
    def from_wire(cls, payload: Any) -> "Result[Any]":
        """
        Build a Result from the store's ``{"ok": ...}`` / ``{"err": ...}`` payload.

        Raises:
            ValueError: If the payload is not a tagged result
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Expected tagged result, got {type(payload).__name__}")
        if "ok" in payload and payload["ok"] is not None:
            return cls(ok=payload["ok"])
        if "err" in payload and payload["err"] is not None:
            return cls(err=str(payload["err"]))
        raise ValueError(f"Tagged result has neither 'ok' nor 'err': {payload!r}")

    @property
    def is_ok(self) -> bool:
        return self.ok is not None

    @property
    def is_err(self) -> bool:
        return self.err is not None

    def unwrap(self) -> T:
        """
        Return the ``ok`` value.

        Raises:
            CommitRejected: If the result carries an ``err``
        """
        if self.err is not None:
            raise CommitRejected(self.err)
        return self.ok
