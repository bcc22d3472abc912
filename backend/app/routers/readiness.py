"""
Readiness API Routes

Live fragility index, readiness verdict and top stations.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from ..runtime import ReadinessRuntime, get_runtime
from ..services.readiness import aggregate
from .schemas import AggregateRequest


router = APIRouter(prefix="/readiness", tags=["readiness"])


@router.get("", response_model=dict)
async def get_readiness(
    date: Optional[date] = None,
    shift: Optional[str] = None,
    line: Optional[str] = None,
    runtime: ReadinessRuntime = Depends(get_runtime),
):
    """
    Refresh the active issue list from the feed and aggregate it.

    Decisions pending or committed in this session stay hidden even when the
    feed still returns their issues.
    """
    feed_issues = await runtime.feed.fetch(date=date, shift_code=shift, line=line)
    issues = runtime.lifecycle.refresh(feed_issues)
    return aggregate(issues).to_dict()


@router.post("/aggregate", response_model=dict)
async def aggregate_issues(request: AggregateRequest):
    """Aggregate a posted issue list. Stateless."""
    return aggregate(model.to_issue() for model in request.issues).to_dict()
