"""
Readiness Engine - Core Data Contracts

Canonical dataclasses shared by the exposure model, the fragility aggregator,
the scenario comparator and the decision lifecycle manager.

Issues are immutable values. Engine code replaces them, it never edits them.
Timestamps are injected by the caller's clock, never generated in contracts.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Union

from dateutil.parser import isoparse


# =============================================================================
# ENUMS
# =============================================================================

class Severity(str, Enum):
    """Severity class of an issue. BLOCKING sorts first."""
    BLOCKING = "BLOCKING"
    WARNING = "WARNING"

    @property
    def ordinal(self) -> int:
        return 0 if self is Severity.BLOCKING else 1


class IssueType(str, Enum):
    ILLEGAL = "ILLEGAL"
    UNSTAFFED = "UNSTAFFED"
    NO_GO = "NO_GO"
    WARNING = "WARNING"
    GO = "GO"


# Display priority for ranking; anything not listed sorts last
ISSUE_TYPE_PRIORITY: Dict[IssueType, int] = {
    IssueType.ILLEGAL: 0,
    IssueType.UNSTAFFED: 1,
    IssueType.NO_GO: 2,
}
DEFAULT_ISSUE_TYPE_PRIORITY = 3


class ReadinessVerdict(str, Enum):
    GO = "GO"
    WARNING = "WARNING"
    NO_GO = "NO-GO"


class DecisionAction(str, Enum):
    """Actions a supervisor can record against an issue."""
    ACKNOWLEDGED = "acknowledged"
    PLAN_TRAINING = "plan_training"
    SWAP = "swap"
    ESCALATE = "escalate"


class DecisionState(str, Enum):
    """Lifecycle state of a decision against one issue."""
    OPEN = "OPEN"
    PENDING_WRITE = "PENDING_WRITE"
    COMMITTED = "COMMITTED"
    ROLLED_BACK = "ROLLED_BACK"


class ScenarioKind(str, Enum):
    ADD_STATION = "add_station"
    INCREASE_DEMAND = "increase_demand"
    REMOVE_CAPACITY = "remove_capacity"


class PlanOwner(str, Enum):
    OPS = "Ops"
    SUPERVISOR = "Supervisor"
    HR = "HR"


class ScenarioReadinessStatus(str, Enum):
    READY = "Ready"
    PARTIALLY_READY = "Partially ready"
    BLOCKED = "Blocked"


class ExposureUnit(str, Enum):
    SEK = "SEK"
    HOURS = "hours"


def normalize_issue_type(raw: Any) -> IssueType:
    """
    Normalize a raw feed value to an IssueType.

    Upper-cases, maps "-" to "_", and falls back to NO_GO for anything
    unrecognised (the generic default).
    """
    if isinstance(raw, IssueType):
        return raw
    value = str(raw or "").strip().upper().replace("-", "_")
    try:
        return IssueType(value)
    except ValueError:
        return IssueType.NO_GO


def _parse_date(raw: Any) -> Optional[date]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    return isoparse(str(raw)).date()


# =============================================================================
# ISSUES
# =============================================================================

@dataclass(frozen=True)
class RootCause:
    """Structured explanation attached to an issue by the classification feed."""
    primary: str
    type: str = "station_issue"
    causes: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "primary": self.primary, "causes": list(self.causes)}

    @classmethod
    def from_value(cls, raw: Any) -> Optional["RootCause"]:
        if raw is None:
            return None
        if isinstance(raw, RootCause):
            return raw
        if isinstance(raw, str):
            return cls(primary=raw)
        if isinstance(raw, Mapping):
            return cls(
                primary=str(raw.get("primary") or ""),
                type=str(raw.get("type") or "station_issue"),
                causes=tuple(str(c) for c in raw.get("causes") or ()),
            )
        return None


@dataclass(frozen=True)
class Issue:
    """
    One detected staffing or compliance problem for a station/shift/date.

    issue_id is stable and unique within the active issue set. Severity is
    assigned upstream and never changes without re-evaluation upstream.
    """
    issue_id: str
    severity: Severity
    issue_type: IssueType
    shift_code: str
    date: Optional[date] = None
    station_id: Optional[str] = None
    station_name: Optional[str] = None
    station_code: Optional[str] = None
    line: Optional[str] = None
    root_cause: Optional[RootCause] = None
    resolved: bool = False
    decision_actions: Tuple[str, ...] = ()

    @property
    def station_label(self) -> str:
        """Name, then code, then the first 8 characters of the id."""
        if self.station_name:
            return self.station_name
        if self.station_code:
            return self.station_code
        if self.station_id:
            return self.station_id[:8]
        return "—"

    @property
    def root_cause_primary(self) -> str:
        return self.root_cause.primary if self.root_cause else ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "issue_id": self.issue_id,
            "severity": self.severity.value,
            "issue_type": self.issue_type.value,
            "shift_code": self.shift_code,
            "date": self.date.isoformat() if self.date else None,
            "station_id": self.station_id,
            "station_name": self.station_name,
            "station_code": self.station_code,
            "line": self.line,
            "root_cause": self.root_cause.to_dict() if self.root_cause else None,
            "resolved": self.resolved,
            "decision_actions": list(self.decision_actions),
        }

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "Issue":
        """
        Build an issue from a feed row.

        Accepts "area" as an alias for "line". Severity falls back to the
        issue type: NO_GO, ILLEGAL and UNSTAFFED rows are BLOCKING.
        """
        issue_type = normalize_issue_type(row.get("issue_type"))
        raw_severity = row.get("severity")
        if raw_severity:
            severity = Severity(str(raw_severity).upper())
        elif issue_type in (IssueType.NO_GO, IssueType.ILLEGAL, IssueType.UNSTAFFED):
            severity = Severity.BLOCKING
        else:
            severity = Severity.WARNING

        return cls(
            issue_id=str(row["issue_id"]),
            severity=severity,
            issue_type=issue_type,
            shift_code=str(row.get("shift_code") or ""),
            date=_parse_date(row.get("date")),
            station_id=row.get("station_id"),
            station_name=row.get("station_name"),
            station_code=row.get("station_code"),
            line=row.get("line") or row.get("area"),
            root_cause=RootCause.from_value(row.get("root_cause")),
            resolved=bool(row.get("resolved", False)),
            decision_actions=tuple(row.get("decision_actions") or ()),
        )


# =============================================================================
# EXPOSURE
# =============================================================================

@dataclass(frozen=True)
class ExposureRange:
    """
    A {min, max} pair tagged with a unit.

    Absolute ranges (current, after) are non-negative with min <= max.
    Delta ranges are bound-wise: min is the change to the lower bound and max
    the change to the upper bound. They may be negative and are not ordered,
    e.g. removing one WARNING unit is {min: -3000, max: -12000}.
    """
    min: float
    max: float
    unit: ExposureUnit

    def scaled(self, factor: float) -> "ExposureRange":
        return ExposureRange(self.min * factor, self.max * factor, self.unit)

    def negated(self) -> "ExposureRange":
        """Bound-wise negation; the result is a delta range, not ordered."""
        return ExposureRange(-self.min, -self.max, self.unit)

    def plus(self, other: "ExposureRange") -> "ExposureRange":
        return ExposureRange(self.min + other.min, self.max + other.max, self.unit)

    def clamped(self) -> "ExposureRange":
        """Clamp both bounds to >= 0 and restore min <= max."""
        low = max(0, self.min)
        return ExposureRange(low, max(low, self.max), self.unit)

    @property
    def is_zero(self) -> bool:
        return self.min == 0 and self.max == 0

    def to_dict(self) -> Dict[str, Any]:
        return {"min": self.min, "max": self.max, "unit": self.unit.value}

    @classmethod
    def zero(cls, unit: ExposureUnit) -> "ExposureRange":
        return cls(0, 0, unit)


@dataclass(frozen=True)
class Exposure:
    """Calibrated exposure of a single issue of a given severity."""
    severity: Severity
    cost: ExposureRange
    time: ExposureRange
    fragility_points: int


# =============================================================================
# READINESS SUMMARY (Output of Fragility Aggregator)
# =============================================================================

@dataclass(frozen=True)
class ReadinessCounts:
    total_active: int = 0
    blocking: int = 0
    warning: int = 0
    illegal: int = 0
    unstaffed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_active": self.total_active,
            "blocking": self.blocking,
            "warning": self.warning,
            "illegal": self.illegal,
            "unstaffed": self.unstaffed,
        }


@dataclass(frozen=True)
class TopStationRow:
    station_name: str
    station_id: Optional[str]
    issue_type: IssueType
    root_cause_primary: str
    shift_code: str
    date: Optional[date]
    issue: Issue

    def to_dict(self) -> Dict[str, Any]:
        return {
            "station_name": self.station_name,
            "station_id": self.station_id,
            "issue_type": self.issue_type.value,
            "root_cause_primary": self.root_cause_primary,
            "shift_code": self.shift_code,
            "date": self.date.isoformat() if self.date else None,
            "issue_id": self.issue.issue_id,
        }


@dataclass(frozen=True)
class ReadinessSummary:
    fragility_index: int
    verdict: ReadinessVerdict
    counts: ReadinessCounts
    top_stations: Tuple[TopStationRow, ...]
    subtitle: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fragility_index": self.fragility_index,
            "verdict": self.verdict.value,
            "counts": self.counts.to_dict(),
            "top_stations": [row.to_dict() for row in self.top_stations],
            "subtitle": self.subtitle,
        }


# =============================================================================
# SCENARIO INPUT (tagged variant keyed by ScenarioKind)
# =============================================================================

def _non_negative_float(raw: Any) -> float:
    """Parse a number; NaN, infinities, negatives and junk become 0."""
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return max(0.0, value)


def _non_negative_int(raw: Any) -> int:
    return int(_non_negative_float(raw))


DEFAULT_SHIFT = "Day"
SHIFT_OPTIONS = ("Day", "Evening", "Night")


@dataclass(frozen=True)
class AddStation:
    """Add a station or machine; absorbs one blocker's worth of exposure."""
    kind: ClassVar[ScenarioKind] = ScenarioKind.ADD_STATION

    station_id: str = ""
    skill_id: str = ""
    shift: str = DEFAULT_SHIFT
    line: Optional[str] = None
    station_name: Optional[str] = None

    @property
    def title(self) -> str:
        name = self.station_name or self.station_id or "Station"
        return f"Add station – {name} ({self.shift or '—'})"

    def to_params(self) -> Dict[str, str]:
        params = {"t": self.kind.value, "sh": self.shift}
        if self.station_id:
            params["s"] = self.station_id
        if self.skill_id:
            params["sk"] = self.skill_id
        if self.line:
            params["l"] = self.line
        return params


@dataclass(frozen=True)
class IncreaseDemand:
    """Add demand hours to a line."""
    kind: ClassVar[ScenarioKind] = ScenarioKind.INCREASE_DEMAND

    line: str = ""
    delta_hours: float = 10
    shift: str = DEFAULT_SHIFT

    def __post_init__(self):
        object.__setattr__(self, "delta_hours", _non_negative_float(self.delta_hours))

    @property
    def title(self) -> str:
        hours = f"+{self.delta_hours:g}h" if self.delta_hours else ""
        return f"Increase demand – {self.line or 'Line'} {hours} ({self.shift or '—'})"

    def to_params(self) -> Dict[str, str]:
        params = {"t": self.kind.value, "dh": f"{self.delta_hours:g}", "sh": self.shift}
        if self.line:
            params["l"] = self.line
        return params


@dataclass(frozen=True)
class RemoveCapacity:
    """Remove people from a line's roster."""
    kind: ClassVar[ScenarioKind] = ScenarioKind.REMOVE_CAPACITY

    line: str = ""
    people_removed: int = 2
    shift: str = DEFAULT_SHIFT

    def __post_init__(self):
        object.__setattr__(self, "people_removed", _non_negative_int(self.people_removed))

    @property
    def title(self) -> str:
        people = f"−{self.people_removed}" if self.people_removed else ""
        return f"Remove capacity – {self.line or 'Line'} {people} ({self.shift or '—'})"

    def to_params(self) -> Dict[str, str]:
        params = {"t": self.kind.value, "pr": str(self.people_removed), "sh": self.shift}
        if self.line:
            params["l"] = self.line
        return params


ScenarioInput = Union[AddStation, IncreaseDemand, RemoveCapacity]


def scenario_from_params(params: Mapping[str, Any]) -> Optional[ScenarioInput]:
    """
    Rebuild a scenario from its compact query-parameter form.

    Returns None when the kind is missing or unknown. Numeric values that do
    not parse, or are negative, become zero.
    """
    try:
        kind = ScenarioKind(params.get("t"))
    except ValueError:
        return None

    shift = params.get("sh") or DEFAULT_SHIFT
    line = params.get("l") or ""

    if kind is ScenarioKind.ADD_STATION:
        return AddStation(
            station_id=params.get("s") or "",
            skill_id=params.get("sk") or "",
            shift=shift,
            line=line or None,
        )
    if kind is ScenarioKind.INCREASE_DEMAND:
        return IncreaseDemand(line=line, delta_hours=params.get("dh", 10), shift=shift)
    return RemoveCapacity(line=line, people_removed=params.get("pr", 2), shift=shift)


# =============================================================================
# REFERENCE DATA (skill requirements)
# =============================================================================

@dataclass(frozen=True)
class StationRef:
    id: str
    name: Optional[str] = None


@dataclass(frozen=True)
class SkillRef:
    id: str
    code: Optional[str] = None
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.code or self.name or self.id


@dataclass(frozen=True)
class SkillRequirement:
    station_id: str
    skill_id: str


@dataclass(frozen=True)
class LineRequirements:
    """Stations, skills and (station, skill) requirement pairs for one line."""
    line: str
    stations: Tuple[StationRef, ...] = ()
    skills: Tuple[SkillRef, ...] = ()
    requirements: Tuple[SkillRequirement, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LineRequirements":
        return cls(
            line=str(data.get("line") or ""),
            stations=tuple(
                StationRef(id=str(s["id"]), name=s.get("name"))
                for s in data.get("stations") or ()
            ),
            skills=tuple(
                SkillRef(id=str(s["id"]), code=s.get("code"), name=s.get("name"))
                for s in data.get("skills") or ()
            ),
            requirements=tuple(
                SkillRequirement(station_id=str(r["station_id"]), skill_id=str(r["skill_id"]))
                for r in data.get("requirements") or ()
            ),
        )


# =============================================================================
# SCENARIO RESULT (Output of Scenario Comparator)
# =============================================================================

@dataclass(frozen=True)
class TrainingLoad:
    people: int = 0
    level_upgrades: int = 0
    existing_gaps: bool = False

    @property
    def label(self) -> str:
        if self.existing_gaps:
            return "1+ people (existing gaps)"
        if self.people <= 0:
            return "—"
        plural = "s" if self.level_upgrades != 1 else ""
        return f"{self.people} people × {self.level_upgrades} level upgrade{plural}"

    @property
    def is_empty(self) -> bool:
        return self.people <= 0 and not self.existing_gaps

    def to_dict(self) -> Dict[str, Any]:
        return {
            "people": self.people,
            "level_upgrades": self.level_upgrades,
            "label": self.label,
        }


@dataclass(frozen=True)
class ExposureSnapshot:
    fragility: int
    cost: ExposureRange
    time: ExposureRange
    time_to_readiness_weeks: int
    training_load: TrainingLoad

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fragility": self.fragility,
            "cost": self.cost.to_dict(),
            "time": self.time.to_dict(),
            "time_to_readiness_weeks": self.time_to_readiness_weeks,
            "training_load": self.training_load.to_dict(),
        }


@dataclass(frozen=True)
class PlanItem:
    title: str
    owner: PlanOwner
    eta_weeks: int
    outcome: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "owner": self.owner.value,
            "eta_weeks": self.eta_weeks,
            "outcome": self.outcome,
        }


@dataclass(frozen=True)
class ScenarioReadiness:
    status: ScenarioReadinessStatus
    bullets: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status.value, "bullets": list(self.bullets)}


@dataclass(frozen=True)
class ScenarioResult:
    scenario: ScenarioInput
    current: ExposureSnapshot
    after: ExposureSnapshot
    delta: ExposureSnapshot
    top_blockers: Tuple[str, ...]
    plan: Tuple[PlanItem, ...]
    readiness: ScenarioReadiness
    summary: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenario": {
                "kind": self.scenario.kind.value,
                "title": self.scenario.title,
                "params": self.scenario.to_params(),
            },
            "current": self.current.to_dict(),
            "after": self.after.to_dict(),
            "delta": self.delta.to_dict(),
            "top_blockers": list(self.top_blockers),
            "plan": [item.to_dict() for item in self.plan],
            "readiness": self.readiness.to_dict(),
            "summary": self.summary,
        }


# =============================================================================
# DECISIONS
# =============================================================================

@dataclass(frozen=True)
class DecisionPayload:
    """Body sent to the decision-write collaborator. Atomic on the remote side."""
    date: Optional[str]
    shift_code: str
    station_id: Optional[str]
    issue_type: str
    action: DecisionAction

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "shift_code": self.shift_code,
            "station_id": self.station_id,
            "issue_type": self.issue_type,
            "action": self.action.value,
        }

    @classmethod
    def for_issue(cls, issue: Issue, action: DecisionAction) -> "DecisionPayload":
        return cls(
            date=issue.date.isoformat() if issue.date else None,
            shift_code=issue.shift_code,
            station_id=issue.station_id,
            issue_type=issue.issue_type.value,
            action=action,
        )


@dataclass(frozen=True)
class UndoWindow:
    """Grace period in which a just-applied decision can be reversed locally."""
    resolved_issue: Issue
    action: DecisionAction
    expires_at: datetime  # MUST be timezone-aware UTC

    def is_live(self, now: datetime) -> bool:
        return now < self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "issue_id": self.resolved_issue.issue_id,
            "action": self.action.value,
            "expires_at": self.expires_at.isoformat(),
        }


@dataclass(frozen=True)
class DecisionApplied:
    """
    Result of an optimistic decision: new list, new window, payload to send.

    sequence identifies this decision; the write result must carry it back so
    acks from superseded or undone decisions on the same issue are ignored.
    """
    issues: Tuple[Issue, ...]
    undo_window: UndoWindow
    payload: DecisionPayload
    sequence: int = 0


@dataclass(frozen=True)
class DecisionOutcome:
    issue_id: str
    ok: bool
    state: DecisionState
    issues: Tuple[Issue, ...]
    error: Optional[str] = None
    ignored: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "issue_id": self.issue_id,
            "ok": self.ok,
            "state": self.state.value,
            "error": self.error,
            "ignored": self.ignored,
        }
