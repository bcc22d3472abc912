"""Shared fixtures for readiness engine tests."""

from datetime import date, datetime, timedelta, timezone

import pytest

from app.models.readiness import Issue, IssueType, RootCause, Severity
from app.services.readiness.collaborators import Clock


class ManualClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current = self.current + timedelta(seconds=seconds)


def make_issue(
    issue_id: str,
    severity: Severity = Severity.WARNING,
    issue_type: IssueType = IssueType.WARNING,
    line: str = "Assembly",
    **overrides,
) -> Issue:
    fields = dict(
        issue_id=issue_id,
        severity=severity,
        issue_type=issue_type,
        shift_code="Day",
        date=date(2026, 3, 2),
        station_id=f"st-{issue_id}",
        station_name=f"Station {issue_id}",
        line=line,
        root_cause=RootCause(primary=f"{issue_type.value}: competence gap"),
    )
    fields.update(overrides)
    return Issue(**fields)


@pytest.fixture
def fixed_timestamp():
    """Fixed UTC timestamp for deterministic clocks."""
    return datetime(2026, 3, 2, 6, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_timestamp):
    return ManualClock(fixed_timestamp)


@pytest.fixture
def assembly_issues():
    """2 WARNING + 1 BLOCKING unresolved issues on line Assembly."""
    return [
        make_issue("asm-1", Severity.WARNING, IssueType.WARNING),
        make_issue("asm-2", Severity.BLOCKING, IssueType.NO_GO),
        make_issue("asm-3", Severity.WARNING, IssueType.WARNING),
    ]
