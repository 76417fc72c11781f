from buildwatch.common.config.settings import Settings, get_settings
from buildwatch.common.config.logging_config import setup_logging, get_logger, get_build_logger
from buildwatch.common.config.constants import (
    BuildState,
    ReentryPolicy,
    ConsoleChannel,
    DiagnosticDialect,
    EventType,
)

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "get_logger",
    "get_build_logger",
    "BuildState",
    "ReentryPolicy",
    "ConsoleChannel",
    "DiagnosticDialect",
    "EventType",
]
