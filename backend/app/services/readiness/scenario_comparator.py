"""
Scenario Comparator

Projects "current vs. after" exposure for a hypothetical workforce change:
- AddStation      -> one WARNING unit of exposure removed
- IncreaseDemand  -> one WARNING unit, or one BLOCKING unit at >= 20 hours
- RemoveCapacity  -> min(4, people_removed) BLOCKING units

Also derives top blockers from skill-requirement data, a fixed-length
remediation plan whose outcome text is built from the computed deltas, a
scenario readiness status and a one-line board summary.

Read-only: baseline issues are never mutated. Missing reference data
degrades to generic guidance, never to an error.
"""

import logging
import math
from typing import Callable, Dict, Iterable, Optional, Tuple

from app.config import TOP_BLOCKERS_LIMIT
from app.models.readiness import (
    AddStation,
    ExposureRange,
    ExposureSnapshot,
    ExposureUnit,
    IncreaseDemand,
    Issue,
    LineRequirements,
    PlanItem,
    PlanOwner,
    RemoveCapacity,
    ScenarioInput,
    ScenarioKind,
    ScenarioReadiness,
    ScenarioReadinessStatus,
    ScenarioResult,
    Severity,
    TrainingLoad,
)
from .exposure_model import (
    FRAGILITY_CAP,
    cap_fragility,
    exposure_for,
    format_hours_range,
    format_sek_range,
)

logger = logging.getLogger(__name__)


# =============================================================================
# POLICY CONSTANTS
# =============================================================================

# Demand increases at or above this many hours are sized as BLOCKING
DEMAND_ESCALATION_HOURS = 20

# Upper bound on people removed in a single scenario
MAX_PEOPLE_REMOVED = 4

# IncreaseDemand lead time: min(8, 2 + ceil(hours / 15)) weeks
DEMAND_BASE_WEEKS = 2
DEMAND_HOURS_PER_WEEK = 15
DEMAND_MAX_WEEKS = 8

PLACEHOLDER_BLOCKERS: Dict[ScenarioKind, Tuple[str, ...]] = {
    ScenarioKind.ADD_STATION: (
        "Select a station to see required skills",
        "Certification may be required",
    ),
    ScenarioKind.INCREASE_DEMAND: (
        "Select a line to see coverage blockers",
        "Capacity and shift overlap",
    ),
    ScenarioKind.REMOVE_CAPACITY: (
        "Coverage gap on {shift}",
        "Backfill for removed capacity",
    ),
}


# =============================================================================
# SCOPE
# =============================================================================

def relevant_issues(scenario: ScenarioInput, baseline_issues: Iterable[Issue]) -> Tuple[Issue, ...]:
    """
    Unresolved baseline issues inside the scenario's scope.

    Line-scoped for demand and capacity changes. For AddStation, issues on the
    same station, or on the station's line when the line is known.
    """
    active = [issue for issue in baseline_issues if not issue.resolved]

    if isinstance(scenario, AddStation):
        return tuple(
            issue for issue in active
            if (scenario.station_id and issue.station_id == scenario.station_id)
            or (scenario.line and issue.line == scenario.line)
        )

    if not scenario.line:
        return ()
    return tuple(issue for issue in active if issue.line == scenario.line)


# =============================================================================
# TOP BLOCKERS
# =============================================================================

def resolve_top_blockers(
    scenario: ScenarioInput,
    requirements: Optional[LineRequirements],
    limit: int = TOP_BLOCKERS_LIMIT,
) -> Optional[Tuple[str, ...]]:
    """
    "<skill> at <station>" labels from requirement data.

    Returns None when no data is available or nothing matches, so callers can
    fall back to placeholders.
    """
    if requirements is None or not requirements.requirements:
        return None

    skill_labels = {skill.id: skill.label for skill in requirements.skills}
    station_names = {station.id: station.name or station.id for station in requirements.stations}

    if isinstance(scenario, AddStation) and scenario.station_id:
        station_name = (
            scenario.station_name
            or station_names.get(scenario.station_id)
            or scenario.station_id
        )
        labels = [
            f"{skill_labels.get(req.skill_id, req.skill_id)} at {station_name}"
            for req in requirements.requirements
            if req.station_id == scenario.station_id
        ]
        return tuple(labels[:limit]) or None

    seen = set()
    labels = []
    for req in requirements.requirements:
        label = (
            f"{skill_labels.get(req.skill_id, req.skill_id)} at "
            f"{station_names.get(req.station_id, req.station_id)}"
        )
        if label in seen:
            continue
        seen.add(label)
        labels.append(label)
    return tuple(labels[:limit]) or None


def placeholder_blockers(scenario: ScenarioInput) -> Tuple[str, ...]:
    return tuple(
        text.format(shift=scenario.shift)
        for text in PLACEHOLDER_BLOCKERS[scenario.kind]
    )


# =============================================================================
# SNAPSHOTS
# =============================================================================

def current_snapshot(relevant: Tuple[Issue, ...], blocker_count: int) -> ExposureSnapshot:
    """
    Baseline exposure.

    Scoped issues contribute their own severity's exposure. Without scoped
    issues, each requirement blocker counts as one WARNING unit: existing gaps
    are already-tolerated risk.
    """
    cost = ExposureRange.zero(ExposureUnit.SEK)
    time = ExposureRange.zero(ExposureUnit.HOURS)
    points = 0

    if relevant:
        for issue in relevant:
            exposure = exposure_for(issue.severity)
            cost = cost.plus(exposure.cost)
            time = time.plus(exposure.time)
            points += exposure.fragility_points
        has_gaps = True
    else:
        warning = exposure_for(Severity.WARNING)
        cost = warning.cost.scaled(blocker_count)
        time = warning.time.scaled(blocker_count)
        points = blocker_count * warning.fragility_points
        has_gaps = blocker_count > 0

    return ExposureSnapshot(
        fragility=cap_fragility(points),
        cost=cost,
        time=time,
        time_to_readiness_weeks=1 if has_gaps else 0,
        training_load=TrainingLoad(existing_gaps=has_gaps),
    )


def _add_station_delta(scenario: AddStation) -> Tuple[int, ExposureRange, ExposureRange]:
    warning = exposure_for(Severity.WARNING)
    return -warning.fragility_points, warning.cost.negated(), warning.time.negated()


def _increase_demand_delta(scenario: IncreaseDemand) -> Tuple[int, ExposureRange, ExposureRange]:
    severity = (
        Severity.BLOCKING
        if scenario.delta_hours >= DEMAND_ESCALATION_HOURS
        else Severity.WARNING
    )
    exposure = exposure_for(severity)
    return exposure.fragility_points, exposure.cost, exposure.time


def _remove_capacity_delta(scenario: RemoveCapacity) -> Tuple[int, ExposureRange, ExposureRange]:
    n = min(MAX_PEOPLE_REMOVED, scenario.people_removed)
    blocking = exposure_for(Severity.BLOCKING)
    return (
        min(FRAGILITY_CAP, n * blocking.fragility_points),
        blocking.cost.scaled(n),
        blocking.time.scaled(n),
    )


_DELTAS: Dict[ScenarioKind, Callable] = {
    ScenarioKind.ADD_STATION: _add_station_delta,
    ScenarioKind.INCREASE_DEMAND: _increase_demand_delta,
    ScenarioKind.REMOVE_CAPACITY: _remove_capacity_delta,
}


def lead_time(scenario: ScenarioInput) -> Tuple[int, TrainingLoad]:
    """Operational lead time and training load, independent of exposure."""
    if isinstance(scenario, AddStation):
        return 2, TrainingLoad(people=2, level_upgrades=1)
    if isinstance(scenario, IncreaseDemand):
        weeks = min(
            DEMAND_MAX_WEEKS,
            DEMAND_BASE_WEEKS + math.ceil(scenario.delta_hours / DEMAND_HOURS_PER_WEEK),
        )
        return weeks, TrainingLoad(people=3, level_upgrades=2)
    return 1, TrainingLoad()


# =============================================================================
# PLAN
# =============================================================================

def _signed(value: float) -> str:
    return f"+{value:g}" if value > 0 else f"{value:g}".replace("-", "−")


def _outcome_fragments(delta: ExposureSnapshot) -> Dict[str, str]:
    fragments = {"fragility": "", "cost": "", "time": "", "readiness": ""}
    if delta.fragility != 0:
        fragments["fragility"] = f"Fragility Δ {_signed(delta.fragility)}. "
    if not delta.cost.is_zero:
        plus = "+" if delta.cost.min >= 0 else ""
        fragments["cost"] = f"Cost exposure Δ {plus}{format_sek_range(delta.cost.min, delta.cost.max)}. "
    if not delta.time.is_zero:
        plus = "+" if delta.time.min >= 0 else ""
        fragments["time"] = f"Time exposure Δ {plus}{format_hours_range(delta.time.min, delta.time.max)}. "
    if delta.time_to_readiness_weeks != 0:
        fragments["readiness"] = f"Time-to-readiness {_signed(delta.time_to_readiness_weeks)} wk. "
    return fragments


def _item(title: str, owner: PlanOwner, eta_weeks: int, outcome: str) -> PlanItem:
    outcome = outcome.strip()
    return PlanItem(
        title=title,
        owner=owner,
        eta_weeks=max(0, int(eta_weeks)),
        outcome=outcome or "No measurable change in exposure.",
    )


def build_plan(scenario: ScenarioInput, after: ExposureSnapshot, delta: ExposureSnapshot) -> Tuple[PlanItem, ...]:
    """Fixed-length, kind-specific remediation plan."""
    f = _outcome_fragments(delta)
    weeks = after.time_to_readiness_weeks
    training = after.training_load.label

    if isinstance(scenario, AddStation):
        return (
            _item("Staff station and run trials", PlanOwner.OPS, 1,
                  f"{f['fragility']}{f['cost']}Station ready for handover."),
            _item("Sign-off certifications", PlanOwner.SUPERVISOR, 1,
                  f"Readiness in {weeks} wk. {f['readiness']}"),
            _item("Plan level upgrades for station", PlanOwner.OPS, 2,
                  f"{training}. {f['time']}"),
            _item("Review fragility and cost after go-live", PlanOwner.OPS, 3,
                  f"{f['fragility']}{f['cost']}"),
        )

    if isinstance(scenario, IncreaseDemand):
        return (
            _item("Confirm shift coverage for extra hours", PlanOwner.SUPERVISOR, 1,
                  f"{f['fragility']}{f['cost']}"),
            _item("Assign capacity or overtime", PlanOwner.OPS, 1,
                  f"{f['time']}{f['readiness']}"),
            _item("Schedule training for demand increase", PlanOwner.OPS, min(4, weeks),
                  f"{training}. Readiness in {weeks} wk."),
            _item("Track cost and time exposure", PlanOwner.OPS, 2,
                  f"{f['cost']}{f['time']}"),
            _item("Recheck blockers before ramp", PlanOwner.SUPERVISOR, weeks,
                  f"{f['fragility']}{f['readiness']}"),
        )

    return (
        _item("Backfill roster for affected shift", PlanOwner.OPS, 1,
              f"{f['fragility']}{f['cost']}"),
        _item("Confirm coverage and handover", PlanOwner.SUPERVISOR, 1,
              f"{f['time']}{f['readiness']}"),
        _item("Update competence matrix and coverage", PlanOwner.SUPERVISOR, 2,
              f"{f['fragility']}{f['cost']}"),
        _item("Monitor fragility and cost exposure", PlanOwner.OPS, 3,
              f"{f['cost']}{f['time']}"),
    )


# =============================================================================
# READINESS AND SUMMARY
# =============================================================================

def scenario_readiness(
    scenario: ScenarioInput,
    current: ExposureSnapshot,
    after: ExposureSnapshot,
) -> ScenarioReadiness:
    has_blockers = current.training_load.existing_gaps

    if isinstance(scenario, RemoveCapacity) and has_blockers:
        return ScenarioReadiness(
            status=ScenarioReadinessStatus.BLOCKED,
            bullets=(
                "Coverage gaps on affected shift",
                "Backfill required before execution",
                "Shift risk until roster filled",
            ),
        )

    if not after.training_load.is_empty:
        bullets = [
            "Training needed before full execution",
            "Level upgrades or certifications pending",
        ]
        if after.time_to_readiness_weeks > 2:
            bullets.append(f"Time to readiness {after.time_to_readiness_weeks} weeks")
        return ScenarioReadiness(
            status=ScenarioReadinessStatus.PARTIALLY_READY,
            bullets=tuple(bullets[:3]),
        )

    return ScenarioReadiness(
        status=ScenarioReadinessStatus.READY,
        bullets=("No blockers identified.",),
    )


def _weeks(n: int) -> str:
    return f"{n} wk{'s' if n != 1 else ''}"


def board_summary(current: ExposureSnapshot, after: ExposureSnapshot) -> str:
    """One-line "from -> to" sentence for status reports."""
    if current.fragility != after.fragility:
        fragility = f"Fragility from {current.fragility} to {after.fragility}"
    else:
        fragility = "Fragility unchanged"

    if current.cost != after.cost:
        cost = (
            f"cost exposure from {format_sek_range(current.cost.min, current.cost.max)} "
            f"to {format_sek_range(after.cost.min, after.cost.max)}"
        )
    else:
        cost = "cost exposure unchanged"

    readiness = ""
    if current.time_to_readiness_weeks != after.time_to_readiness_weeks:
        readiness = (
            f"; time-to-readiness from {_weeks(current.time_to_readiness_weeks)} "
            f"to {_weeks(after.time_to_readiness_weeks)}"
        )

    training = ""
    if not after.training_load.is_empty:
        training = f"; training load: {after.training_load.label}"

    return f"{fragility}; {cost}{readiness}{training}."


# =============================================================================
# COMPARE
# =============================================================================

def compare(
    scenario: ScenarioInput,
    baseline_issues: Iterable[Issue],
    requirements: Optional[LineRequirements] = None,
) -> ScenarioResult:
    """
    Compare a scenario against a baseline issue snapshot.

    Any reference-data fetch happens before this call; pass None when it was
    unavailable. Never raises for well-typed input.
    """
    relevant = relevant_issues(scenario, tuple(baseline_issues))

    labels = resolve_top_blockers(scenario, requirements)
    if labels is None:
        logger.info(f"No requirement data for {scenario.kind.value} scenario, using generic blockers")
        top_blockers = placeholder_blockers(scenario)
        blocker_count = len(requirements.requirements) if requirements else 0
    else:
        top_blockers = labels
        blocker_count = len(labels)

    current = current_snapshot(relevant, blocker_count)

    delta_fragility, delta_cost, delta_time = _DELTAS[scenario.kind](scenario)
    weeks, training = lead_time(scenario)

    after = ExposureSnapshot(
        fragility=cap_fragility(current.fragility + delta_fragility),
        cost=current.cost.plus(delta_cost).clamped(),
        time=current.time.plus(delta_time).clamped(),
        time_to_readiness_weeks=weeks,
        training_load=training,
    )
    delta = ExposureSnapshot(
        fragility=delta_fragility,
        cost=delta_cost,
        time=delta_time,
        time_to_readiness_weeks=weeks - current.time_to_readiness_weeks,
        training_load=training,
    )

    logger.debug(
        f"Scenario {scenario.title}: fragility {current.fragility} -> {after.fragility} "
        f"({len(relevant)} scoped issues, {blocker_count} requirement blockers)"
    )

    return ScenarioResult(
        scenario=scenario,
        current=current,
        after=after,
        delta=delta,
        top_blockers=top_blockers,
        plan=build_plan(scenario, after, delta),
        readiness=scenario_readiness(scenario, current, after),
        summary=board_summary(current, after),
    )
