from enum import Enum
from typing import Final


class BuildState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    COMPLETION_PENDING = "completion_pending"


class ReentryPolicy(str, Enum):
    REPLACE = "replace"
    REJECT = "reject"


class ConsoleChannel(str, Enum):
    NORMAL = "normal"
    ERROR = "error"


class DiagnosticDialect(str, Enum):
    GCC = "gcc"
    MSVC = "msvc"


class EventType(str, Enum):
    BUILD_STARTED = "build_started"
    BUILD_COMPLETED = "build_completed"


DEFAULT_COMPLETION_DELAY_SECONDS: Final[float] = 0.2
DEFAULT_BUILD_TIMEOUT_SECONDS: Final[float] = 3600.0
DEFAULT_PATCH_VARIABLE: Final[str] = "PATH"
DEFAULT_TOOLCHAIN_EXECUTABLES: Final[tuple] = ("gcc", "g++")

BUILD_TIMEOUT_MESSAGE: Final[str] = "Build did not report completion within {timeout:g} seconds\n"
