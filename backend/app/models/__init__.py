"""Readiness Engine - Data Models"""
from .readiness import (
    # Enums
    Severity, IssueType, ReadinessVerdict, DecisionAction, DecisionState,
    ScenarioKind, PlanOwner, ScenarioReadinessStatus, ExposureUnit,
    # Issues
    RootCause, Issue, normalize_issue_type,
    # Exposure
    ExposureRange, Exposure,
    # Aggregator Output
    ReadinessCounts, TopStationRow, ReadinessSummary,
    # Scenario Input
    AddStation, IncreaseDemand, RemoveCapacity, ScenarioInput, scenario_from_params,
    # Reference Data
    StationRef, SkillRef, SkillRequirement, LineRequirements,
    # Comparator Output
    TrainingLoad, ExposureSnapshot, PlanItem, ScenarioReadiness, ScenarioResult,
    # Decisions
    DecisionPayload, UndoWindow, DecisionApplied, DecisionOutcome,
)

__all__ = [
    "Severity", "IssueType", "ReadinessVerdict", "DecisionAction", "DecisionState",
    "ScenarioKind", "PlanOwner", "ScenarioReadinessStatus", "ExposureUnit",
    "RootCause", "Issue", "normalize_issue_type",
    "ExposureRange", "Exposure",
    "ReadinessCounts", "TopStationRow", "ReadinessSummary",
    "AddStation", "IncreaseDemand", "RemoveCapacity", "ScenarioInput", "scenario_from_params",
    "StationRef", "SkillRef", "SkillRequirement", "LineRequirements",
    "TrainingLoad", "ExposureSnapshot", "PlanItem", "ScenarioReadiness", "ScenarioResult",
    "DecisionPayload", "UndoWindow", "DecisionApplied", "DecisionOutcome",
]
