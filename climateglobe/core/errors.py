from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

from fastapi import HTTPException


T = TypeVar("T")


# ──────────────────────────────────────────────────────────────
# Adapter error taxonomy
# ──────────────────────────────────────────────────────────────

class AdapterError(Exception):
    """A source adapter could not produce records this cycle."""

    kind = "adapter_error"

    def __init__(self, source: str, reason: str):
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class TransportFailure(AdapterError):
    """Network error or non-2xx response."""

    kind = "transport_failure"

    def __init__(self, source: str, reason: str, *, status_code: Optional[int] = None):
        super().__init__(source, reason)
        self.status_code = status_code


class SchemaMismatch(AdapterError):
    """Payload decoded but lacks the expected top-level shape."""

    kind = "schema_mismatch"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: AdapterError

    def describe(self) -> str:
        return f"{self.error.source} {self.error.kind}: {self.error.reason}"


Result = Union[Ok[T], Err]


# ──────────────────────────────────────────────────────────────
# HTTP helpers
# ──────────────────────────────────────────────────────────────

def bad_request(code: str, message: str):
    raise HTTPException(status_code=400, detail={"code": code, "message": message})


def service_unavailable(code: str, message: str):
    raise HTTPException(status_code=503, detail={"code": code, "message": message})
