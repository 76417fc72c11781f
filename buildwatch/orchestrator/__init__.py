from buildwatch.orchestrator.scheduler import DeferredScheduler
from buildwatch.orchestrator.session import BuildSession, create_build_session

__all__ = [
    "DeferredScheduler",
    "BuildSession",
    "create_build_session",
]
