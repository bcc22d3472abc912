"""
Readiness Engine - Runtime Wiring
Collaborators and the decision lifecycle manager shared by the API routers.
"""
from dataclasses import dataclass
from typing import Optional

from .demo_data import demo_issues, demo_requirements
from .services.readiness import (
    DecisionLifecycleManager,
    InMemoryIssueFeed,
    InMemoryRequirementLookup,
    RecordingDecisionWriter,
)


@dataclass
class ReadinessRuntime:
    feed: InMemoryIssueFeed
    requirements: InMemoryRequirementLookup
    writer: RecordingDecisionWriter
    lifecycle: DecisionLifecycleManager


def build_demo_runtime() -> ReadinessRuntime:
    issues = demo_issues()
    return ReadinessRuntime(
        feed=InMemoryIssueFeed(issues),
        requirements=InMemoryRequirementLookup(demo_requirements()),
        writer=RecordingDecisionWriter(),
        lifecycle=DecisionLifecycleManager(issues),
    )


_runtime: Optional[ReadinessRuntime] = None


def get_runtime() -> ReadinessRuntime:
    """Dependency for FastAPI - the process-wide runtime."""
    global _runtime
    if _runtime is None:
        _runtime = build_demo_runtime()
    return _runtime


def init_runtime(runtime: Optional[ReadinessRuntime] = None) -> ReadinessRuntime:
    """Install a runtime (a fresh demo runtime by default)."""
    global _runtime
    _runtime = runtime or build_demo_runtime()
    return _runtime
