"""
Decision Lifecycle Manager

Owns the active issue list and the state of in-flight decisions against it.

Per-issue states:
    OPEN --apply_decision--> PENDING_WRITE --ack ok-----> COMMITTED
                                           --ack failed-> ROLLED_BACK

Orthogonal to those states is a single undo window (30 s by default):
- applying a decision opens a new window and silently discards the previous one
- undo() before expiry reinserts the issue locally (no remote call)
- expiry is decided by comparing clock time with expires_at, never by ticks

Every transition replaces the active list with a new tuple, so callers can
detect changes by identity. Write results are applied by issue_id and
decision sequence, regardless of what the caller is currently displaying.
An issue decided, undone and decided again has two writes in flight; only the
latest decision's result changes state.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from app.config import UNDO_WINDOW_SECONDS
from app.models.readiness import (
    DecisionAction,
    DecisionApplied,
    DecisionOutcome,
    DecisionPayload,
    DecisionState,
    Issue,
    UndoWindow,
)
from .collaborators import Clock, DecisionWriter, SystemClock

logger = logging.getLogger(__name__)


def _reinserted(issues: Tuple[Issue, ...], issue: Issue) -> Tuple[Issue, ...]:
    """Add an issue back and sort by issue_id so the list stays deterministic."""
    merged = [i for i in issues if i.issue_id != issue.issue_id]
    merged.append(issue)
    return tuple(sorted(merged, key=lambda i: i.issue_id))


class DecisionLifecycleManager:
    """
    Explicit state container for optimistic decisions.

    Single-threaded: meant to be driven from one event loop. The aggregator
    and comparator only ever receive the immutable `issues` snapshot.
    """

    def __init__(
        self,
        issues: Iterable[Issue] = (),
        *,
        clock: Optional[Clock] = None,
        undo_seconds: int = UNDO_WINDOW_SECONDS,
    ):
        self._issues: Tuple[Issue, ...] = tuple(issues)
        self._clock = clock or SystemClock()
        self._undo_seconds = undo_seconds
        self._undo: Optional[UndoWindow] = None
        self._states: Dict[str, DecisionState] = {}
        # Issues held out of the active list while their write is pending
        self._held: Dict[str, Issue] = {}
        self._sequence = 0
        # Sequences of writes sent per issue, oldest first, until acked
        self._in_flight: Dict[str, List[int]] = {}
        # The one decision per issue whose ack still counts
        self._current: Dict[str, int] = {}

    # =========================================================================
    # READ MODEL
    # =========================================================================

    @property
    def issues(self) -> Tuple[Issue, ...]:
        return self._issues

    @property
    def undo_window(self) -> Optional[UndoWindow]:
        """The live undo window, or None once it has expired or been used."""
        if self._undo is not None and not self._undo.is_live(self._now()):
            logger.debug(f"Undo window expired for {self._undo.resolved_issue.issue_id}")
            self._undo = None
        return self._undo

    @property
    def pending_ids(self) -> frozenset:
        return frozenset(
            issue_id for issue_id, state in self._states.items()
            if state is DecisionState.PENDING_WRITE
        )

    def state_of(self, issue_id: str) -> DecisionState:
        return self._states.get(issue_id, DecisionState.OPEN)

    def seconds_remaining(self) -> int:
        """Whole seconds left in the undo window, for countdown display."""
        window = self.undo_window
        if window is None:
            return 0
        remaining = (window.expires_at - self._now()).total_seconds()
        return max(0, math.ceil(remaining))

    def find(self, issue_id: str) -> Optional[Issue]:
        for issue in self._issues:
            if issue.issue_id == issue_id:
                return issue
        return None

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def apply_decision(self, issue: Issue, action) -> DecisionApplied:
        """
        OPEN -> PENDING_WRITE.

        Removes the issue from the active list immediately and opens a new undo
        window, superseding any previous one without applying its undo.

        Raises:
            ValueError: action is not a known DecisionAction
        """
        action = DecisionAction(action)
        now = self._now()

        previous = self._undo
        if previous is not None and previous.resolved_issue.issue_id != issue.issue_id:
            logger.info(
                f"Undo window for {previous.resolved_issue.issue_id} superseded by {issue.issue_id}"
            )

        self._issues = tuple(i for i in self._issues if i.issue_id != issue.issue_id)
        self._undo = UndoWindow(
            resolved_issue=issue,
            action=action,
            expires_at=now + timedelta(seconds=self._undo_seconds),
        )
        self._sequence += 1
        sequence = self._sequence
        self._states[issue.issue_id] = DecisionState.PENDING_WRITE
        self._held[issue.issue_id] = issue
        self._in_flight.setdefault(issue.issue_id, []).append(sequence)
        self._current[issue.issue_id] = sequence

        logger.info(f"Decision #{sequence} {action.value} applied to {issue.issue_id}, awaiting write")
        return DecisionApplied(
            issues=self._issues,
            undo_window=self._undo,
            payload=DecisionPayload.for_issue(issue, action),
            sequence=sequence,
        )

    def record_write_result(
        self,
        issue_id: str,
        ok: bool,
        error: Optional[str] = None,
        sequence: Optional[int] = None,
    ) -> DecisionOutcome:
        """
        PENDING_WRITE -> COMMITTED on success, ROLLED_BACK on failure.

        sequence names the decision the result belongs to. Without it, results
        for an issue are matched to its in-flight writes oldest first.

        A result for a decision the user already undid, or one superseded by a
        newer decision on the same issue, is ignored: undo is
        client-authoritative and final. Failures are never retried here.
        """
        in_flight = self._in_flight.get(issue_id, [])
        if sequence is None and in_flight:
            sequence = in_flight[0]
        if sequence in in_flight:
            in_flight.remove(sequence)
            if not in_flight:
                del self._in_flight[issue_id]

        if sequence is None or self._current.get(issue_id) != sequence:
            if sequence is None:
                logger.warning(f"Write result for {issue_id} with no pending decision ignored")
            elif ok:
                logger.info(f"Late write ack for superseded decision #{sequence} on {issue_id} ignored")
            else:
                logger.error(f"Decision write #{sequence} failed for {issue_id} after it was superseded: {error}")
            return DecisionOutcome(
                issue_id=issue_id,
                ok=ok,
                state=self.state_of(issue_id),
                issues=self._issues,
                error=None if ok else error,
                ignored=True,
            )

        del self._current[issue_id]
        issue = self._held.pop(issue_id)

        if ok:
            self._states[issue_id] = DecisionState.COMMITTED
            logger.info(f"Decision #{sequence} for {issue_id} committed")
            return DecisionOutcome(
                issue_id=issue_id,
                ok=True,
                state=DecisionState.COMMITTED,
                issues=self._issues,
            )

        self._states[issue_id] = DecisionState.ROLLED_BACK
        self._issues = _reinserted(self._issues, issue)
        if self._undo is not None and self._undo.resolved_issue.issue_id == issue_id:
            self._undo = None

        logger.error(f"Decision write #{sequence} failed for {issue_id}, rolled back: {error}")
        return DecisionOutcome(
            issue_id=issue_id,
            ok=False,
            state=DecisionState.ROLLED_BACK,
            issues=self._issues,
            error=error or "Decision could not be saved",
        )

    async def submit(self, applied: DecisionApplied, writer: DecisionWriter) -> DecisionOutcome:
        """
        Send an applied decision to the writer and reconcile with the result.

        Any exception from the writer is a recoverable failure: the issue is
        rolled back and the message surfaced in the outcome.
        """
        issue_id = applied.undo_window.resolved_issue.issue_id
        try:
            await writer.write(applied.payload)
        except Exception as e:
            return self.record_write_result(
                issue_id,
                ok=False,
                error=str(e) or type(e).__name__,
                sequence=applied.sequence,
            )
        return self.record_write_result(issue_id, ok=True, sequence=applied.sequence)

    def undo(self) -> Tuple[Issue, ...]:
        """
        Reverse the decision in the live undo window, locally only.

        No effect once the window has expired or been replaced by a rolled-back
        write. Returns the (possibly unchanged) active list.
        """
        window = self.undo_window
        if window is None:
            return self._issues

        issue = window.resolved_issue
        self._undo = None
        self._held.pop(issue.issue_id, None)
        # Any in-flight write for this issue no longer counts when it lands
        self._current.pop(issue.issue_id, None)
        self._states[issue.issue_id] = DecisionState.OPEN
        self._issues = _reinserted(self._issues, issue)

        logger.info(f"Decision {window.action.value} on {issue.issue_id} undone")
        return self._issues

    def refresh(self, feed_issues: Iterable[Issue]) -> Tuple[Issue, ...]:
        """
        Rebuild the active list from fresh feed contents.

        Issues pending write or committed in this session stay hidden even if
        the feed still returns them. Settled states the feed no longer backs
        are forgotten: committed issues the feed has dropped, and open or
        rolled-back ones.
        """
        feed = tuple(feed_issues)
        feed_ids = {issue.issue_id for issue in feed}

        self._states = {
            issue_id: state for issue_id, state in self._states.items()
            if state is DecisionState.PENDING_WRITE
            or (state is DecisionState.COMMITTED and issue_id in feed_ids)
        }
        hidden = set(self._states)
        self._issues = tuple(i for i in feed if i.issue_id not in hidden)
        return self._issues

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _now(self) -> datetime:
        now = self._clock.now()
        if now.tzinfo is None:
            raise ValueError("clock must return timezone-aware (UTC) datetimes")
        return now
