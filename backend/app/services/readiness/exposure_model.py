"""
Exposure Model

Maps a severity class to its calibrated exposure:
- cost range (SEK)
- time range (operator hours)
- fragility points

Pure and total over Severity. Constants are calibration values, hard-locked.
BLOCKING is strictly worse than WARNING on every axis, and its ranges are
wider, so removing a WARNING unit bound-by-bound from any non-empty baseline
keeps min <= max.
"""

from typing import Dict

from app.models.readiness import Exposure, ExposureRange, ExposureUnit, Severity


# =============================================================================
# CALIBRATION CONSTANTS (HARD-LOCKED)
# =============================================================================

COST_ENGINE: Dict[Severity, Dict[str, int]] = {
    Severity.BLOCKING: {
        "cost_min": 15_000,
        "cost_max": 60_000,
        "hours_min": 8,
        "hours_max": 24,
    },
    Severity.WARNING: {
        "cost_min": 3_000,
        "cost_max": 12_000,
        "hours_min": 2,
        "hours_max": 6,
    },
}

FRAGILITY_PTS: Dict[Severity, int] = {
    Severity.BLOCKING: 25,
    Severity.WARNING: 8,
}

FRAGILITY_CAP = 100


# =============================================================================
# LOOKUP
# =============================================================================

_EXPOSURES: Dict[Severity, Exposure] = {
    severity: Exposure(
        severity=severity,
        cost=ExposureRange(values["cost_min"], values["cost_max"], ExposureUnit.SEK),
        time=ExposureRange(values["hours_min"], values["hours_max"], ExposureUnit.HOURS),
        fragility_points=FRAGILITY_PTS[severity],
    )
    for severity, values in COST_ENGINE.items()
}


def exposure_for(severity: Severity) -> Exposure:
    """Calibrated exposure of one issue of the given severity."""
    return _EXPOSURES[Severity(severity)]


def fragility_points(severity: Severity) -> int:
    return FRAGILITY_PTS[Severity(severity)]


def cap_fragility(value: float) -> int:
    """Clamp a raw fragility value into [0, 100]."""
    return int(min(FRAGILITY_CAP, max(0, value)))


# =============================================================================
# FORMATTING
# =============================================================================

def _format_amount(value: float) -> str:
    # Swedish grouping: space as thousands separator
    return f"{abs(value):,.0f}".replace(",", " ")


def format_sek_range(low: float, high: float) -> str:
    """Render a cost range, e.g. "3 000–12 000 SEK" or "−3 000–12 000 SEK"."""
    sign = "−" if low < 0 or high < 0 else ""
    return f"{sign}{_format_amount(low)}–{_format_amount(high)} SEK"


def format_hours_range(low: float, high: float) -> str:
    """Render an operator-hours range, e.g. "2–6 op·h"."""
    sign = "−" if low < 0 or high < 0 else ""
    return f"{sign}{abs(low):g}–{abs(high):g} op·h"
