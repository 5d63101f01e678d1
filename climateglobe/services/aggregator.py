# climateglobe/services/aggregator.py
"""
Aggregation cycle: all sources concurrently → merge → compose.

One cycle issues every adapter's request on a shared httpx.AsyncClient and
waits for all of them to settle (asyncio.gather with return_exceptions=True).
A failed source contributes [] plus a warning line; it never fails the cycle.

Cycles are numbered. A cycle's result is applied only if no newer cycle has
already been applied, so a slow, superseded refresh can never overwrite a
fresher snapshot.
"""
from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple

import httpx

from climateglobe.core.contracts import (
    AggregationSnapshot,
    EnvironmentalReading,
    HazardEvent,
    InfrastructureSite,
    OverlayPoint,
    RawCollections,
)
from climateglobe.core.settings import settings
from climateglobe.core.time import utc_now_iso
from climateglobe.services.air_quality import OpenAqSource
from climateglobe.services.hazards import default_hazard_sources
from climateglobe.services.infrastructure import OverpassInfrastructureSource
from climateglobe.services.merge import merge
from climateglobe.services.overlay import DEFAULT_PALETTE, OverlayPalette, compose
from climateglobe.services.sources import SourceAdapter, settle

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], httpx.AsyncClient]


def _default_client_factory() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.overlays_timeout_s, follow_redirects=True)


class Aggregator:
    def __init__(
        self,
        *,
        hazard_sources: Optional[Sequence[SourceAdapter[HazardEvent]]] = None,
        infrastructure_sources: Optional[Sequence[SourceAdapter[InfrastructureSite]]] = None,
        environmental_sources: Optional[Sequence[SourceAdapter[EnvironmentalReading]]] = None,
        palette: OverlayPalette = DEFAULT_PALETTE,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.hazard_sources = list(
            default_hazard_sources() if hazard_sources is None else hazard_sources
        )
        self.infrastructure_sources = list(
            [OverpassInfrastructureSource()] if infrastructure_sources is None else infrastructure_sources
        )
        self.environmental_sources = list(
            [OpenAqSource()] if environmental_sources is None else environmental_sources
        )
        self.palette = palette
        self.client_factory = client_factory or _default_client_factory

        self._tokens = itertools.count(1)
        self._applied_cycle = 0
        self.latest: Optional[AggregationSnapshot] = None

    # ── cycle tokens ──

    def next_cycle(self) -> int:
        return next(self._tokens)

    def apply(self, snapshot: AggregationSnapshot) -> bool:
        """Install `snapshot` as latest unless a newer cycle already landed."""
        if snapshot.cycle <= self._applied_cycle:
            logger.info(
                "aggregation_stale_dropped cycle=%d applied=%d",
                snapshot.cycle,
                self._applied_cycle,
            )
            return False
        self._applied_cycle = snapshot.cycle
        self.latest = snapshot
        return True

    # ── collection ──

    async def _settle(
        self, client: httpx.AsyncClient, sources: Sequence[SourceAdapter[Any]]
    ) -> Tuple[List[List[Any]], List[str]]:
        results = await asyncio.gather(
            *(src.fetch(client) for src in sources),
            return_exceptions=True,
        )

        batches: List[List[Any]] = []
        warnings_out: List[str] = []
        for src, res in zip(sources, results):
            if isinstance(res, BaseException):
                # adapters should never raise; treat it as that source failing
                if isinstance(res, asyncio.CancelledError):
                    raise res
                logger.warning("source_crashed source=%s error=%r", src.name, res)
                warnings_out.append(f"{src.name} crashed: {res!r}")
            else:
                records, warning = settle(src.name, res)
                if warning is None:
                    batches.append(records)
                else:
                    warnings_out.append(warning)
        return batches, warnings_out

    async def collect(self, *, cycle: Optional[int] = None) -> AggregationSnapshot:
        """Run one cycle. Never raises for source failures."""
        cycle_no = self.next_cycle() if cycle is None else cycle
        all_sources: List[SourceAdapter[Any]] = [
            *self.hazard_sources,
            *self.infrastructure_sources,
            *self.environmental_sources,
        ]
        n_h = len(self.hazard_sources)
        n_i = len(self.infrastructure_sources)

        async with self.client_factory() as client:
            results = await asyncio.gather(
                self._settle(client, all_sources[:n_h]),
                self._settle(client, all_sources[n_h:n_h + n_i]),
                self._settle(client, all_sources[n_h + n_i:]),
            )

        (h_batches, h_warn), (i_batches, i_warn), (e_batches, e_warn) = results
        hazards = merge(*h_batches)
        infrastructure = merge(*i_batches)
        environmental = merge(*e_batches)

        snapshot = AggregationSnapshot(
            cycle=cycle_no,
            created_at=utc_now_iso(),
            algo_version=settings.algo_version,
            hazards=hazards,
            infrastructure=infrastructure,
            environmental=environmental,
            overlay=compose(hazards, infrastructure, self.palette),
            warnings=[*h_warn, *i_warn, *e_warn],
        )
        logger.info(
            "aggregation_done cycle=%d hazards=%d infrastructure=%d environmental=%d warnings=%d",
            cycle_no,
            len(hazards),
            len(infrastructure),
            len(environmental),
            len(snapshot.warnings),
        )
        return snapshot

    async def refresh(self) -> AggregationSnapshot:
        """
        Collect and apply. Returns the snapshot that is current afterwards,
        which is a newer cycle's if this one was superseded while in flight.
        """
        snapshot = await self.collect()
        if not self.apply(snapshot) and self.latest is not None:
            return self.latest
        return snapshot

    # ── renderer contract ──

    async def overlay(self) -> List[OverlayPoint]:
        return (await self.refresh()).overlay

    async def raw(self) -> RawCollections:
        snap = await self.refresh()
        return RawCollections(hazards=snap.hazards, infrastructure=snap.infrastructure)
