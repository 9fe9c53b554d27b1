from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .enums import ErrorKind
from .exceptions import DomainError, StorageError, ValidationError


@dataclass(frozen=True)
class Result:
    """Uniform envelope returned by every store operation.

    ``ok=True`` carries ``data`` (and ``count`` where rows were matched);
    ``ok=False`` carries ``error`` and ``error_kind``.
    """

    ok: bool
    data: Any = None
    count: Optional[int] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def success(cls, data: Any = None, *, count: Optional[int] = None) -> "Result":
        return cls(ok=True, data=data, count=count)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Result":
        return cls(ok=False, error=message, error_kind=kind)

    @classmethod
    def from_error(cls, exc: DomainError) -> "Result":
        if isinstance(exc, ValidationError):
            return cls.failure(ErrorKind.INVALID_ARGUMENT, str(exc))
        if isinstance(exc, StorageError):
            return cls.failure(ErrorKind.STORAGE_ERROR, str(exc))
        raise TypeError(f"Unsupported error type: {type(exc)!r}")

    def to_dict(self) -> dict:
        if self.ok:
            out = {"ok": True, "data": self.data}
            if self.count is not None:
                out["count"] = self.count
            return out
        return {
            "ok": False,
            "error": self.error,
            "error_kind": self.error_kind.value if self.error_kind else None,
        }
