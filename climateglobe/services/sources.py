# climateglobe/services/sources.py
"""
Source adapter base.

An adapter does one outbound request per invocation, maps the payload to the
normalized model and reports the outcome as Ok(list) | Err(AdapterError).
Nothing raises past `fetch`: transport errors, non-2xx responses, undecodable
bodies and wrong top-level shapes all become Err. Single bad records are
skipped inside `parse`.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Tuple, TypeVar

import httpx

from climateglobe.core.errors import AdapterError, Err, Ok, Result, SchemaMismatch, TransportFailure
from climateglobe.core.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SourceAdapter(ABC, Generic[T]):
    #: short id, also the id prefix of produced records
    name: str = "source"

    def __init__(self, *, user_agent: Optional[str] = None):
        self.user_agent = user_agent or settings.user_agent

    # ── request ──

    @abstractmethod
    def build_request(self, client: httpx.AsyncClient) -> httpx.Request:
        ...

    # ── mapping ──

    @abstractmethod
    def parse(self, payload: Any) -> List[T]:
        """Map a decoded payload. Raise SchemaMismatch for a systemically wrong shape."""

    def headers(self) -> Dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": "application/json"}

    async def fetch(self, client: httpx.AsyncClient) -> Result[List[T]]:
        try:
            req = self.build_request(client)
            r = await client.send(req)
        except httpx.HTTPError as e:
            return Err(TransportFailure(self.name, f"{type(e).__name__}: {e}"))

        if r.status_code < 200 or r.status_code >= 300:
            return Err(
                TransportFailure(self.name, f"HTTP {r.status_code}", status_code=r.status_code)
            )

        try:
            payload = r.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(SchemaMismatch(self.name, f"invalid JSON: {e}"))

        try:
            items = self.parse(payload)
        except AdapterError as e:
            return Err(e)
        except Exception as e:
            # parsers skip bad records themselves; anything left is a shape we never saw
            logger.exception("parse_failed source=%s", self.name)
            return Err(SchemaMismatch(self.name, f"{type(e).__name__}: {e}"))

        return Ok(items)

    async def run(self, client: httpx.AsyncClient) -> List[T]:
        """fetch() unwrapped: records on success, [] (logged) on failure."""
        records, _ = settle(self.name, await self.fetch(client))
        return records


def settle(source: str, res: Result[List[T]]) -> Tuple[List[T], Optional[str]]:
    """Log one fetch outcome. Returns (records, None) or ([], warning line)."""
    if isinstance(res, Err):
        logger.warning("source_failed %s", res.describe())
        return [], res.describe()
    logger.info("source_ok source=%s records=%d", source, len(res.value))
    return res.value, None


def require_list(source: str, payload: Any, key: str) -> List[Any]:
    """payload[key] as a list, or SchemaMismatch."""
    if not isinstance(payload, dict):
        raise SchemaMismatch(source, f"expected object with '{key}', got {type(payload).__name__}")
    value = payload.get(key)
    if not isinstance(value, list):
        raise SchemaMismatch(source, f"missing '{key}' array")
    return value


def map_records(
    source: str, rows: Iterable[Any], to_record: Callable[[Any], Optional[T]]
) -> List[T]:
    """
    Apply `to_record` to each row, keeping non-None results.

    A row whose fields are malformed (wrong types, non-finite numbers, values
    the contract models reject) is skipped and logged; the rest of the batch
    still comes through.
    """
    out: List[T] = []
    for i, row in enumerate(rows):
        try:
            rec = to_record(row)
        except (ValueError, TypeError, AttributeError) as e:
            # pydantic.ValidationError is a ValueError
            logger.debug("record_skipped source=%s index=%d error=%r", source, i, e)
            continue
        if rec is not None:
            out.append(rec)
    return out
