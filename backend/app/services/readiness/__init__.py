"""
Readiness Engine Services

Live readiness and scenario risk, sharing one exposure model:
- Exposure Model: severity -> cost / time / fragility points
- Fragility Aggregator: issues -> fragility index, verdict, counts, top stations
- Scenario Comparator: scenario + baseline -> current / after / delta, plan
- Decision Lifecycle Manager: optimistic decisions with a timed undo window
"""

from .exposure_model import (
    COST_ENGINE,
    FRAGILITY_PTS,
    exposure_for,
    fragility_points,
    format_sek_range,
    format_hours_range,
)

from .fragility_aggregator import (
    aggregate,
    count_issues,
    rank_issues,
    top_stations,
    verdict_for,
)

from .scenario_comparator import (
    compare,
    build_plan,
    placeholder_blockers,
    resolve_top_blockers,
)

from .decision_lifecycle import DecisionLifecycleManager

from .collaborators import (
    Clock,
    DecisionWriteError,
    DecisionWriter,
    InMemoryIssueFeed,
    InMemoryRequirementLookup,
    IssueFeed,
    RecordingDecisionWriter,
    RequirementLookup,
    SystemClock,
)


__all__ = [
    # Exposure Model
    "COST_ENGINE",
    "FRAGILITY_PTS",
    "exposure_for",
    "fragility_points",
    "format_sek_range",
    "format_hours_range",
    # Fragility Aggregator
    "aggregate",
    "count_issues",
    "rank_issues",
    "top_stations",
    "verdict_for",
    # Scenario Comparator
    "compare",
    "build_plan",
    "placeholder_blockers",
    "resolve_top_blockers",
    # Decision Lifecycle
    "DecisionLifecycleManager",
    # Collaborators
    "Clock",
    "DecisionWriteError",
    "DecisionWriter",
    "InMemoryIssueFeed",
    "InMemoryRequirementLookup",
    "IssueFeed",
    "RecordingDecisionWriter",
    "RequirementLookup",
    "SystemClock",
]
