from enum import Enum
from typing import Optional, Dict, Any

from buildwatch.common.utils.time_utils import utc_now


class ErrorCode(str, Enum):
    UNKNOWN = "E0000"

    BUILD_FAILED = "E1000"
    BUILD_CONFIGURATION_ERROR = "E1001"
    BUILD_SESSION_ERROR = "E1003"

    TOOLCHAIN_NOT_FOUND = "E2000"


class BuildWatchException(Exception):
    """Root of every error raised by buildwatch.

    ``details`` carries machine-readable context; ``to_dict`` is what the
    CLI prints when a build cannot even be started.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = dict(details or {})
        self.cause = cause
        self.raised_at = utc_now()

    def __str__(self) -> str:
        return f"[{self.error_code.value}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "error_code": self.error_code.value,
            "exception_type": type(self).__name__,
            "message": self.message,
            "details": self.details,
            "raised_at": self.raised_at.isoformat(),
        }
        if self.cause is not None:
            data["cause"] = repr(self.cause)
        return data

    def with_context(self, **kwargs: Any) -> "BuildWatchException":
        self.details.update(kwargs)
        return self
