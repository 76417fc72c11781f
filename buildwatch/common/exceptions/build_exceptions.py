from typing import Optional, Dict, Any, List

from buildwatch.common.exceptions.base_exceptions import (
    BuildWatchException,
    ErrorCode,
)


class BuildException(BuildWatchException):
    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.BUILD_FAILED,
        target_file: Optional[str] = None,
        stage: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        details = details or {}
        if target_file:
            details["target_file"] = target_file
        if stage:
            details["stage"] = stage
        super().__init__(message, error_code, details, cause)
        self.target_file = target_file
        self.stage = stage


class BuildSessionError(BuildException):
    def __init__(
        self,
        message: str,
        target_file: Optional[str] = None,
        state: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        details = details or {}
        if state:
            details["state"] = state
        super().__init__(
            message=message,
            error_code=ErrorCode.BUILD_SESSION_ERROR,
            target_file=target_file,
            stage="session",
            details=details,
            cause=cause,
        )
        self.state = state


class ConfigurationError(BuildException):
    def __init__(
        self,
        message: str,
        setting: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        details = details or {}
        if setting:
            details["setting"] = setting
        super().__init__(
            message=message,
            error_code=ErrorCode.BUILD_CONFIGURATION_ERROR,
            stage="configuration",
            details=details,
            cause=cause,
        )
        self.setting = setting


class ToolchainNotFoundError(BuildException):
    def __init__(
        self,
        message: str,
        missing_executables: Optional[List[str]] = None,
        searched_paths: Optional[List[str]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        if missing_executables:
            details["missing_executables"] = missing_executables
        if searched_paths:
            details["searched_paths"] = searched_paths
        super().__init__(
            message=message,
            error_code=ErrorCode.TOOLCHAIN_NOT_FOUND,
            stage="environment",
            details=details,
        )
        self.missing_executables = missing_executables or []
        self.searched_paths = searched_paths or []
