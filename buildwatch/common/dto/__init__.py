from buildwatch.common.dto.base import PayloadModel
from buildwatch.common.dto.build import (
    BuildOutput,
    BuildResult,
    ClientEvent,
    CompileError,
    CompileErrorType,
)

__all__ = [
    "PayloadModel",
    "BuildOutput",
    "BuildResult",
    "ClientEvent",
    "CompileError",
    "CompileErrorType",
]
