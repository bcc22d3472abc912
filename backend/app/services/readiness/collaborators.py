"""
External Collaborators

Interfaces the engine consumes but does not implement:
- IssueFeed: classified issues for a date/shift/line selection
- DecisionWriter: atomic decision submission to the authoritative store
- RequirementLookup: (station, skill) requirement records for a line
- Clock: wall-clock source for the undo window

In-memory implementations back the demo runtime and the test suite.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from app.models.readiness import DecisionPayload, Issue, LineRequirements

logger = logging.getLogger(__name__)


class DecisionWriteError(Exception):
    """Decision submission rejected or failed (network, auth, validation)."""


# =============================================================================
# INTERFACES
# =============================================================================

class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current time, timezone-aware UTC."""
        ...


class IssueFeed(ABC):
    @abstractmethod
    async def fetch(
        self,
        *,
        date: Optional[date] = None,
        shift_code: Optional[str] = None,
        line: Optional[str] = None,
        include_resolved: bool = False,
    ) -> List[Issue]:
        ...


class DecisionWriter(ABC):
    @abstractmethod
    async def write(self, payload: DecisionPayload) -> None:
        """Raise DecisionWriteError (or a transport error) on failure."""
        ...


class RequirementLookup(ABC):
    @abstractmethod
    async def for_line(self, line: str) -> Optional[LineRequirements]:
        ...


# =============================================================================
# IMPLEMENTATIONS
# =============================================================================

class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class InMemoryIssueFeed(IssueFeed):
    """Issue feed over a fixed list; the source of truth on every refresh."""

    def __init__(self, issues: Iterable[Issue] = ()):
        self._issues: Tuple[Issue, ...] = tuple(issues)

    def replace(self, issues: Iterable[Issue]) -> None:
        self._issues = tuple(issues)

    async def fetch(
        self,
        *,
        date: Optional[date] = None,
        shift_code: Optional[str] = None,
        line: Optional[str] = None,
        include_resolved: bool = False,
    ) -> List[Issue]:
        return [
            issue for issue in self._issues
            if (include_resolved or not issue.resolved)
            and (date is None or issue.date == date)
            and (not shift_code or issue.shift_code == shift_code)
            and (not line or issue.line == line)
        ]


class InMemoryRequirementLookup(RequirementLookup):
    def __init__(self, by_line: Optional[Dict[str, LineRequirements]] = None):
        self._by_line = dict(by_line or {})

    async def for_line(self, line: str) -> Optional[LineRequirements]:
        return self._by_line.get(line)


class RecordingDecisionWriter(DecisionWriter):
    """
    Decision writer that records accepted payloads in order.

    fail_with makes every subsequent write raise DecisionWriteError with the
    given message until cleared.
    """

    def __init__(self, fail_with: Optional[str] = None):
        self.fail_with = fail_with
        self.written: List[DecisionPayload] = []

    async def write(self, payload: DecisionPayload) -> None:
        if self.fail_with:
            raise DecisionWriteError(self.fail_with)
        if not payload.station_id:
            raise DecisionWriteError("station_id is required")
        if not payload.date:
            raise DecisionWriteError("date is required (YYYY-MM-DD)")
        self.written.append(payload)
        logger.info(f"Decision recorded: {payload.action.value} on {payload.station_id} {payload.date} {payload.shift_code}")
