from __future__ import annotations

import base64
import hashlib
from typing import Any

import orjson


def _orjson_dumps(obj: Any) -> bytes:
    return orjson.dumps(
        obj,
        option=orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS,
    )


def sha256_b64(data: bytes) -> str:
    h = hashlib.sha256(data).digest()
    return base64.urlsafe_b64encode(h).decode("ascii").rstrip("=")


def stable_fallback_id(obj: Any, *, length: int = 16) -> str:
    """Deterministic id for records whose provider gave none."""
    return sha256_b64(_orjson_dumps(obj))[:length]


def namespaced_id(prefix: str, native_id: Any, *, fallback: Any = None) -> str:
    """
    "<prefix>-<native id>". Same prefix + native id collide on purpose so
    repeated records from one source dedupe; different prefixes never collide.

    When the native id is missing, a stable hash of `fallback` is used.
    """
    nid = "" if native_id is None else str(native_id).strip()
    if not nid:
        nid = stable_fallback_id(fallback)
    return f"{prefix}-{nid}"
