"""
Decision API Routes

Record a decision against an issue (acknowledge, plan training, swap,
escalate), undo it within the grace window, and poll the window.

The issue is removed optimistically before the write is sent; a failed write
rolls it back and is reported as 502 with the restored issue list.
"""
from fastapi import APIRouter, Depends, HTTPException

from ..config import UNDO_POLL_SECONDS
from ..models.readiness import DecisionAction
from ..runtime import ReadinessRuntime, get_runtime
from .schemas import DecisionRequest


router = APIRouter(prefix="/decisions", tags=["decisions"])


def _undo_window_state(runtime: ReadinessRuntime) -> dict:
    window = runtime.lifecycle.undo_window
    if window is None:
        return {"active": False, "seconds_remaining": 0, "poll_seconds": UNDO_POLL_SECONDS}
    return {
        "active": True,
        **window.to_dict(),
        "seconds_remaining": runtime.lifecycle.seconds_remaining(),
        "poll_seconds": UNDO_POLL_SECONDS,
    }


@router.get("/issues", response_model=dict)
async def list_active_issues(runtime: ReadinessRuntime = Depends(get_runtime)):
    """Current optimistic issue list."""
    issues = runtime.lifecycle.issues
    return {"issues": [issue.to_dict() for issue in issues], "total": len(issues)}


@router.post("", response_model=dict)
async def record_decision(
    request: DecisionRequest,
    runtime: ReadinessRuntime = Depends(get_runtime),
):
    """
    Apply a decision optimistically, submit it, and reconcile.

    Not retried on failure; the client re-submits.
    """
    try:
        action = DecisionAction(request.action)
    except ValueError:
        valid_actions = [a.value for a in DecisionAction]
        raise HTTPException(
            status_code=400,
            detail=f"Invalid action. Must be one of: {valid_actions}",
        )

    issue = runtime.lifecycle.find(request.issue_id)
    if issue is None:
        raise HTTPException(status_code=404, detail="Issue not found in active list")

    applied = runtime.lifecycle.apply_decision(issue, action)
    outcome = await runtime.lifecycle.submit(applied, runtime.writer)

    if not outcome.ok:
        raise HTTPException(
            status_code=502,
            detail={
                "message": outcome.error,
                "outcome": outcome.to_dict(),
                "issues": [i.to_dict() for i in outcome.issues],
            },
        )

    return {
        "outcome": outcome.to_dict(),
        "issues": [i.to_dict() for i in outcome.issues],
        "undo_window": _undo_window_state(runtime),
    }


@router.post("/undo", response_model=dict)
async def undo_decision(runtime: ReadinessRuntime = Depends(get_runtime)):
    """
    Reverse the most recent decision if its window is still open.

    Local only: the store reconciles on the next full refresh.
    """
    window = runtime.lifecycle.undo_window
    issues = runtime.lifecycle.undo()
    return {
        "restored": window.resolved_issue.issue_id if window else None,
        "issues": [i.to_dict() for i in issues],
    }


@router.get("/undo-window", response_model=dict)
async def get_undo_window(runtime: ReadinessRuntime = Depends(get_runtime)):
    """Undo window state for countdown display."""
    return _undo_window_state(runtime)
