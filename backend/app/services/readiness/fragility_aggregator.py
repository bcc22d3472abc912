"""
Fragility Aggregator

Combines classified issues into:
- a fragility index capped at 100
- a tri-state readiness verdict (GO / WARNING / NO-GO)
- counts by severity and issue type
- a ranked, bounded "top stations" list

Pure and synchronous. Only unresolved issues count. The input is read once
and never retained, so repeated calls on the same list are identical.
"""

from typing import Iterable, List, Optional, Tuple

from app.config import TOP_STATIONS_LIMIT
from app.models.readiness import (
    DEFAULT_ISSUE_TYPE_PRIORITY,
    ISSUE_TYPE_PRIORITY,
    Issue,
    IssueType,
    ReadinessCounts,
    ReadinessSummary,
    ReadinessVerdict,
    Severity,
    TopStationRow,
)
from .exposure_model import cap_fragility, fragility_points


# =============================================================================
# COUNTS AND SCORE
# =============================================================================

def count_issues(issues: Iterable[Issue]) -> ReadinessCounts:
    """Count unresolved issues by severity and by issue type."""
    active = [issue for issue in issues if not issue.resolved]
    return ReadinessCounts(
        total_active=len(active),
        blocking=sum(1 for i in active if i.severity is Severity.BLOCKING),
        warning=sum(1 for i in active if i.severity is Severity.WARNING),
        illegal=sum(1 for i in active if i.issue_type is IssueType.ILLEGAL),
        unstaffed=sum(1 for i in active if i.issue_type is IssueType.UNSTAFFED),
    )


def fragility_index(counts: ReadinessCounts) -> int:
    """min(100, blocking * 25 + warning * 8)."""
    return cap_fragility(
        counts.blocking * fragility_points(Severity.BLOCKING)
        + counts.warning * fragility_points(Severity.WARNING)
    )


def verdict_for(counts: ReadinessCounts) -> ReadinessVerdict:
    """
    Derive the readiness verdict. First match wins:

    1. any ILLEGAL issue  -> NO-GO
    2. any BLOCKING issue -> NO-GO
    3. any WARNING issue  -> WARNING
    4. otherwise          -> GO
    """
    if counts.illegal > 0:
        return ReadinessVerdict.NO_GO
    if counts.blocking > 0:
        return ReadinessVerdict.NO_GO
    if counts.warning > 0:
        return ReadinessVerdict.WARNING
    return ReadinessVerdict.GO


def subtitle_for(counts: ReadinessCounts) -> str:
    if counts.total_active == 0:
        return "All stations covered"
    parts = []
    if counts.illegal:
        parts.append(f"{counts.illegal} illegal")
    if counts.unstaffed:
        parts.append(f"{counts.unstaffed} unstaffed")
    if counts.blocking:
        parts.append(f"{counts.blocking} blocking")
    if counts.warning:
        parts.append(f"{counts.warning} at risk")
    return ", ".join(parts)


# =============================================================================
# RANKING
# =============================================================================

def _rank_key(issue: Issue) -> Tuple[int, int]:
    return (
        issue.severity.ordinal,
        ISSUE_TYPE_PRIORITY.get(issue.issue_type, DEFAULT_ISSUE_TYPE_PRIORITY),
    )


def rank_issues(issues: Iterable[Issue]) -> List[Issue]:
    """
    Order unresolved issues BLOCKING first, then ILLEGAL < UNSTAFFED < NO_GO <
    other. sorted() is stable, so ties keep input order.
    """
    return sorted((i for i in issues if not i.resolved), key=_rank_key)


def top_stations(
    issues: Iterable[Issue],
    limit: Optional[int] = None,
) -> Tuple[TopStationRow, ...]:
    """Ranked display rows, truncated to the configured prefix (default 8)."""
    limit = TOP_STATIONS_LIMIT if limit is None else max(0, limit)
    return tuple(
        TopStationRow(
            station_name=issue.station_label,
            station_id=issue.station_id,
            issue_type=issue.issue_type,
            root_cause_primary=issue.root_cause_primary,
            shift_code=issue.shift_code,
            date=issue.date,
            issue=issue,
        )
        for issue in rank_issues(issues)[:limit]
    )


# =============================================================================
# AGGREGATE
# =============================================================================

def aggregate(issues: Iterable[Issue], limit: Optional[int] = None) -> ReadinessSummary:
    """
    Aggregate an issue snapshot into a readiness summary.

    Never raises for well-typed input. An empty snapshot is
    {fragility 0, GO, all counts 0, no top stations}.
    """
    snapshot = tuple(issues)
    counts = count_issues(snapshot)
    return ReadinessSummary(
        fragility_index=fragility_index(counts),
        verdict=verdict_for(counts),
        counts=counts,
        top_stations=top_stations(snapshot, limit),
        subtitle=subtitle_for(counts),
    )
