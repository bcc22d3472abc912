"""
Readiness Engine - API Request Models

Pydantic bodies for the HTTP surface. Engine types stay dataclasses; these
models only validate incoming JSON and convert it.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.readiness import (
    DEFAULT_SHIFT,
    AddStation,
    IncreaseDemand,
    Issue,
    RemoveCapacity,
    ScenarioInput,
    ScenarioKind,
)


class RootCauseModel(BaseModel):
    primary: str = ""
    type: str = "station_issue"
    causes: List[str] = Field(default_factory=list)


class IssueModel(BaseModel):
    """One issue row as delivered by the classification feed."""
    issue_id: str
    severity: Optional[str] = None  # BLOCKING, WARNING; derived from issue_type when absent
    issue_type: Optional[str] = None  # ILLEGAL, UNSTAFFED, NO_GO, WARNING, GO
    shift_code: str = ""
    date: Optional[str] = None  # YYYY-MM-DD
    station_id: Optional[str] = None
    station_name: Optional[str] = None
    station_code: Optional[str] = None
    line: Optional[str] = None
    root_cause: Optional[RootCauseModel] = None
    resolved: bool = False
    decision_actions: List[str] = Field(default_factory=list)

    def to_issue(self) -> Issue:
        return Issue.from_dict(self.model_dump())


class AggregateRequest(BaseModel):
    issues: List[IssueModel] = Field(default_factory=list)


class ScenarioRequest(BaseModel):
    """
    Scenario to evaluate. Only the fields of the chosen kind are used.

    Negative hours or people are accepted and clamped to zero by the engine.
    """
    kind: ScenarioKind
    shift: str = DEFAULT_SHIFT
    line: Optional[str] = None
    station_id: Optional[str] = None
    station_name: Optional[str] = None
    skill_id: Optional[str] = None
    delta_hours: float = 10
    people_removed: int = 2
    baseline: Optional[List[IssueModel]] = None  # defaults to the live issue list

    def to_scenario(self) -> ScenarioInput:
        if self.kind is ScenarioKind.ADD_STATION:
            return AddStation(
                station_id=self.station_id or "",
                skill_id=self.skill_id or "",
                shift=self.shift,
                line=self.line,
                station_name=self.station_name,
            )
        if self.kind is ScenarioKind.INCREASE_DEMAND:
            return IncreaseDemand(line=self.line or "", delta_hours=self.delta_hours, shift=self.shift)
        return RemoveCapacity(line=self.line or "", people_removed=self.people_removed, shift=self.shift)


class DecisionRequest(BaseModel):
    issue_id: str
    action: str  # acknowledged, plan_training, swap, escalate
