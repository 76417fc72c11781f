from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from pydantic import Field

from buildwatch.common.dto.base import PayloadModel
from buildwatch.common.config.constants import ConsoleChannel, EventType
from buildwatch.common.utils.time_utils import utc_now


class CompileErrorType(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


class BuildOutput(PayloadModel):
    kind: ConsoleChannel = Field(default=ConsoleChannel.NORMAL)
    text: str = Field(default="")

    @classmethod
    def normal(cls, text: str) -> "BuildOutput":
        return cls(kind=ConsoleChannel.NORMAL, text=text)

    @classmethod
    def error(cls, text: str) -> "BuildOutput":
        return cls(kind=ConsoleChannel.ERROR, text=text)


class CompileError(PayloadModel):
    source_file: str
    line: int = Field(ge=0)
    column: int = Field(default=1, ge=0)
    severity: CompileErrorType = Field(default=CompileErrorType.ERROR)
    message: str = Field(default="")

    @property
    def is_error(self) -> bool:
        return self.severity == CompileErrorType.ERROR


class BuildResult(PayloadModel):
    target_file: str
    outputs: List[BuildOutput] = Field(default_factory=list)
    errors: List[CompileError] = Field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self.errors if e.severity == CompileErrorType.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self.errors if e.severity == CompileErrorType.WARNING)

    def output_text(self, kind: Optional[ConsoleChannel] = None) -> str:
        return "".join(o.text for o in self.outputs if kind is None or o.kind == kind)


class ClientEvent(PayloadModel):
    type: EventType
    sequence: int = Field(ge=0)
    timestamp: datetime = Field(default_factory=utc_now)
    data: Dict[str, Any] = Field(default_factory=dict)
