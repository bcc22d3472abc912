"""
Scenario API Routes

What-if comparison of hypothetical workforce changes against the live
(or a posted) baseline. Requirement data is fetched before comparing;
when it is unavailable the comparison still succeeds with generic blockers.
"""
import logging
from typing import Iterable, Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from ..models.readiness import (
    AddStation,
    Issue,
    LineRequirements,
    ScenarioInput,
    scenario_from_params,
)
from ..runtime import ReadinessRuntime, get_runtime
from ..services.readiness import compare
from .schemas import ScenarioRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scenarios", tags=["scenarios"])


def _lookup_line(scenario: ScenarioInput, baseline: Iterable[Issue]) -> Optional[str]:
    """Line for the requirement lookup; AddStation falls back to its station's line."""
    if scenario.line:
        return scenario.line
    if isinstance(scenario, AddStation) and scenario.station_id:
        for issue in baseline:
            if issue.station_id == scenario.station_id and issue.line:
                return issue.line
    return None


async def _fetch_requirements(
    runtime: ReadinessRuntime,
    line: Optional[str],
) -> Optional[LineRequirements]:
    if not line:
        return None
    try:
        return await runtime.requirements.for_line(line)
    except Exception as e:
        logger.warning(f"Requirement lookup failed for line '{line}', using generic blockers: {e}")
        return None


async def _compare(runtime: ReadinessRuntime, scenario: ScenarioInput, baseline: tuple) -> dict:
    requirements = await _fetch_requirements(runtime, _lookup_line(scenario, baseline))
    return compare(scenario, baseline, requirements).to_dict()


@router.post("/compare", response_model=dict)
async def compare_scenario(
    request: ScenarioRequest,
    runtime: ReadinessRuntime = Depends(get_runtime),
):
    """Compare a scenario; the baseline defaults to the live issue list."""
    if request.baseline is None:
        baseline = runtime.lifecycle.issues
    else:
        baseline = tuple(model.to_issue() for model in request.baseline)
    return await _compare(runtime, request.to_scenario(), baseline)


@router.get("/compare", response_model=dict)
async def compare_scenario_link(
    request: Request,
    runtime: ReadinessRuntime = Depends(get_runtime),
):
    """
    Compare a scenario given in its shareable link form.

    Query parameters: t (kind), s (station), sk (skill), l (line),
    dh (delta hours), pr (people removed), sh (shift).
    """
    scenario = scenario_from_params(dict(request.query_params))
    if scenario is None:
        raise HTTPException(
            status_code=400,
            detail="Unknown scenario type. Use t=add_station, increase_demand or remove_capacity",
        )
    return await _compare(runtime, scenario, runtime.lifecycle.issues)
