from buildwatch.common.exceptions.base_exceptions import (
    BuildWatchException,
    ErrorCode,
)
from buildwatch.common.exceptions.build_exceptions import (
    BuildException,
    BuildSessionError,
    ConfigurationError,
    ToolchainNotFoundError,
)

__all__ = [
    "BuildWatchException",
    "ErrorCode",
    "BuildException",
    "BuildSessionError",
    "ConfigurationError",
    "ToolchainNotFoundError",
]
