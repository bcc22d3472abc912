"""
Readiness Engine - FastAPI Application

Main entry point for the Workforce Readiness & Scenario Risk Engine.

Architecture:
- Issues → FragilityAggregator → ReadinessSummary (fragility, verdict, top stations)
- Scenario + baseline issues → ScenarioComparator → ScenarioResult (deltas, plan)
- Issue + action → DecisionLifecycleManager → optimistic list + undo window
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import CORS_ORIGINS, LOG_LEVEL
from .routers import readiness_router, scenarios_router, decisions_router
from .runtime import init_runtime


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and install the runtime on startup."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_runtime()
    yield

# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="Readiness Engine",
    description="""
    Workforce Readiness & Scenario Risk Engine

    Classifies staffing and compliance issues by severity, aggregates them into
    a fragility index and a GO / WARNING / NO-GO verdict, and projects the risk
    delta of hypothetical workforce changes.

    ## Endpoints
    1. **Readiness**: issues → fragility index, verdict, counts, top stations
    2. **Scenarios**: add station / increase demand / remove capacity → current vs. after
    3. **Decisions**: acknowledge / plan training / swap / escalate, with a 30 s undo window

    ## Key Principles
    - Fragility is capped at 100
    - ILLEGAL or BLOCKING issues force NO-GO
    - Decisions apply optimistically and roll back if the write fails
    - Undo is local and final
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(readiness_router)
app.include_router(scenarios_router)
app.include_router(decisions_router)


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": "Readiness Engine",
        "version": "1.0.0",
        "description": "Workforce Readiness & Scenario Risk Engine",
        "docs": "/docs",
        "components": {
            "exposure_model": "Severity → cost, time and fragility points",
            "fragility_aggregator": "Issues → fragility index and verdict",
            "scenario_comparator": "Scenario → current vs. after exposure and plan",
            "decision_lifecycle": "Optimistic decisions with undo window",
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


# For running with: python -m app.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
