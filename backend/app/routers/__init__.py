"""Readiness Engine - API Routers"""
from .readiness import router as readiness_router
from .scenarios import router as scenarios_router
from .decisions import router as decisions_router

__all__ = [
    "readiness_router",
    "scenarios_router",
    "decisions_router",
]
