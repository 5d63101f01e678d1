# climateglobe/services/overlay.py
"""
Overlay composition: normalized collections → renderer-ready points.

Visual weights live in an immutable OverlayPalette that callers may swap
(reskinning, tests). compose() is pure.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, List, Mapping, Tuple

from climateglobe.core.contracts import HazardEvent, InfrastructureSite, OverlayPoint
from climateglobe.services.classify import clamp_intensity


def _frozen(d: dict) -> Mapping:
    return MappingProxyType(dict(d))


@dataclass(frozen=True)
class OverlayPalette:
    hazard_colors: Mapping[str, str] = field(
        default_factory=lambda: _frozen(
            {
                "Wildfire": "#fb923c",
                "Flood": "#22d3ee",
                "Earthquake": "#a855f7",
                "Storm": "#6366f1",
            }
        )
    )
    hazard_fallback_color: str = "#3b82f6"

    # size = clamp(base + intensity * scale, base, max)
    hazard_size_base: float = 2.0
    hazard_size_scale: float = 0.5
    hazard_size_max: float = 6.0

    # status → (color, size); Operational < Degraded < Offline in weight
    status_styles: Mapping[str, Tuple[str, float]] = field(
        default_factory=lambda: _frozen(
            {
                "Operational": ("#10b981", 1.4),
                "Degraded": ("#f59e0b", 2.0),
                "Offline": ("#dc2626", 2.4),
            }
        )
    )

    def hazard_color(self, category: str) -> str:
        return self.hazard_colors.get(category, self.hazard_fallback_color)

    def hazard_size(self, intensity: float) -> float:
        raw = self.hazard_size_base + clamp_intensity(intensity) * self.hazard_size_scale
        return max(self.hazard_size_base, min(self.hazard_size_max, raw))

    def status_style(self, status: str) -> Tuple[str, float]:
        return self.status_styles.get(status, self.status_styles["Operational"])


DEFAULT_PALETTE = OverlayPalette()


def transform_hazards(
    hazards: Iterable[HazardEvent], palette: OverlayPalette = DEFAULT_PALETTE
) -> List[OverlayPoint]:
    return [
        OverlayPoint(
            lat=h.lat,
            lng=h.lng,
            size=palette.hazard_size(h.intensity),
            color=palette.hazard_color(h.category),
            label=h.title,
            kind="hazard",
            original=h,
        )
        for h in hazards
    ]


def transform_infrastructure(
    sites: Iterable[InfrastructureSite], palette: OverlayPalette = DEFAULT_PALETTE
) -> List[OverlayPoint]:
    out: List[OverlayPoint] = []
    for s in sites:
        color, size = palette.status_style(s.status)
        out.append(
            OverlayPoint(
                lat=s.lat,
                lng=s.lng,
                size=size,
                color=color,
                label=s.name,
                kind="infrastructure",
                original=s,
            )
        )
    return out


def compose(
    hazards: Iterable[HazardEvent],
    infrastructure: Iterable[InfrastructureSite],
    palette: OverlayPalette = DEFAULT_PALETTE,
) -> List[OverlayPoint]:
    """Hazard points first, then infrastructure."""
    return transform_hazards(hazards, palette) + transform_infrastructure(infrastructure, palette)
