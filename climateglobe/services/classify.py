# climateglobe/services/classify.py
"""
Free-text → category / severity classification.

Every table here is an ordered tuple of (keywords, label) rules. Matching is
case-insensitive substring search, evaluated top to bottom, first match wins,
so rule order is part of the contract ("Flash Flood / Fire" is a Flood).
"""
from __future__ import annotations

import math
from typing import Any, Optional, Tuple

from climateglobe.core.contracts import HazardCategory, HazardSeverity


Rule = Tuple[Tuple[str, ...], str]
RuleTable = Tuple[Rule, ...]


# ══════════════════════════════════════════════════════════════
# Rule tables
# ══════════════════════════════════════════════════════════════

# FEMA incidentType and generic incident text
CATEGORY_RULES: RuleTable = (
    (("flood",), "Flood"),
    (("fire",), "Wildfire"),
    (("earthquake",), "Earthquake"),
)

# EONET categories[].title ("Wildfires", "Severe Storms", "Floods", ...)
EONET_CATEGORY_RULES: RuleTable = (
    (("wildfire", "fire"), "Wildfire"),
    (("flood",), "Flood"),
    (("earthquake", "seismic"), "Earthquake"),
    (("storm", "cyclone", "hurricane"), "Storm"),
)

DEFAULT_CATEGORY: HazardCategory = "Storm"

FEMA_SEVERITY_RULES: RuleTable = (
    (("hurricane", "tornado", "earthquake"), "High"),
    (("flood", "fire", "severe storm"), "Medium"),
)

DEFAULT_SEVERITY: HazardSeverity = "Low"

# USGS magnitude thresholds, highest first
MAGNITUDE_THRESHOLDS: Tuple[Tuple[float, HazardSeverity], ...] = (
    (5.0, "High"),
    (4.0, "Medium"),
)

SEVERITY_INTENSITY = {"High": 7.0, "Medium": 5.0, "Low": 3.0}


# ══════════════════════════════════════════════════════════════
# Matching
# ══════════════════════════════════════════════════════════════

def match_rules(text: Optional[str], rules: RuleTable, default: str) -> str:
    t = (text or "").lower()
    for keywords, label in rules:
        for kw in keywords:
            if kw in t:
                return label
    return default


def category_for(text: Optional[str], rules: RuleTable = CATEGORY_RULES) -> HazardCategory:
    return match_rules(text, rules, DEFAULT_CATEGORY)  # type: ignore[return-value]


def severity_for(text: Optional[str], rules: RuleTable = FEMA_SEVERITY_RULES) -> HazardSeverity:
    return match_rules(text, rules, DEFAULT_SEVERITY)  # type: ignore[return-value]


def classify(
    raw_text: Optional[str],
    *,
    category_rules: RuleTable = CATEGORY_RULES,
    severity_rules: RuleTable = FEMA_SEVERITY_RULES,
) -> Tuple[HazardCategory, HazardSeverity]:
    """
    Incident text → (category, severity).

    >>> classify("Major Flooding Event")
    ('Flood', 'Medium')
    >>> classify("Severe Storms")
    ('Storm', 'Medium')
    """
    return category_for(raw_text, category_rules), severity_for(raw_text, severity_rules)


def magnitude_severity(mag: Any) -> HazardSeverity:
    m = coerce_float(mag, 0.0)
    for threshold, label in MAGNITUDE_THRESHOLDS:
        if m >= threshold:
            return label
    return DEFAULT_SEVERITY


def severity_intensity(severity: str) -> float:
    return SEVERITY_INTENSITY.get(severity, SEVERITY_INTENSITY[DEFAULT_SEVERITY])


# ══════════════════════════════════════════════════════════════
# Numeric coercion
# ══════════════════════════════════════════════════════════════

def coerce_float(x: Any, default: float) -> float:
    if isinstance(x, bool) or x is None:
        return default
    try:
        f = float(x)
    except (TypeError, ValueError):
        return default
    return f if math.isfinite(f) else default


def clamp_intensity(x: Any, lo: float = 0.0, hi: float = 10.0) -> float:
    f = coerce_float(x, lo)
    return max(lo, min(hi, f))
