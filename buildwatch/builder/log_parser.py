from typing import Optional, List, Pattern, Protocol, Dict, Union
from dataclasses import dataclass
from pathlib import Path
import re

from buildwatch.common.config.constants import DiagnosticDialect
from buildwatch.common.config.logging_config import get_logger
from buildwatch.common.dto.build import CompileError, CompileErrorType
from buildwatch.common.exceptions.build_exceptions import ConfigurationError
from buildwatch.common.utils.file_utils import resolve_against


logger = get_logger(__name__)


class CompileErrorParser(Protocol):
    def parse(self, output: str) -> List[CompileError]:
        ...


@dataclass
class DiagnosticPattern:
    name: str
    pattern: Pattern


class RegexErrorParser:
    """Line-oriented parser driven by a single named-group pattern.

    The pattern must define ``file``, ``line``, ``severity`` and ``message``
    groups and may define ``column``. Lines that do not match are skipped.
    """

    PATTERN: DiagnosticPattern
    SEVERITY_MAP: Dict[str, CompileErrorType] = {}

    def __init__(self, base_dir: Optional[Union[str, Path]] = None):
        self._base_dir = str(base_dir) if base_dir else None

    @property
    def base_dir(self) -> Optional[str]:
        return self._base_dir

    def parse(self, output: str) -> List[CompileError]:
        errors: List[CompileError] = []
        if not output:
            return errors

        for line in output.splitlines():
            error = self._parse_line(line)
            if error is not None:
                errors.append(error)

        logger.debug(f"{self.PATTERN.name}: parsed {len(errors)} diagnostics")
        return errors

    def _parse_line(self, line: str) -> Optional[CompileError]:
        match = self.PATTERN.pattern.match(line.rstrip("\r"))
        if not match:
            return None

        severity = self.SEVERITY_MAP.get(match.group("severity").lower())
        if severity is None:
            return None

        column = match.groupdict().get("column")

        try:
            return CompileError(
                source_file=resolve_against(match.group("file").strip(), self._base_dir),
                line=int(match.group("line")),
                column=int(column) if column else 1,
                severity=severity,
                message=match.group("message").strip(),
            )
        except ValueError:
            return None


class GccErrorParser(RegexErrorParser):
    PATTERN = DiagnosticPattern(
        "gcc",
        re.compile(
            r"^(?P<file>[^:\s][^:]*?|[A-Za-z]:[\\/][^:]*?):(?P<line>\d+):(?:(?P<column>\d+):)?\s*"
            r"(?P<severity>fatal error|error|warning|note):\s*(?P<message>.*)$"
        ),
    )
    SEVERITY_MAP = {
        "fatal error": CompileErrorType.ERROR,
        "error": CompileErrorType.ERROR,
        "warning": CompileErrorType.WARNING,
        "note": CompileErrorType.NOTE,
    }


class MsvcErrorParser(RegexErrorParser):
    PATTERN = DiagnosticPattern(
        "msvc",
        re.compile(
            r"^\s*(?P<file>[^(]+)\((?P<line>\d+)(?:,(?P<column>\d+))?\)\s*:\s*"
            r"(?P<severity>fatal error|error|warning|note)(?:\s+[A-Za-z]+\d+)?\s*:\s*(?P<message>.*)$",
            re.IGNORECASE,
        ),
    )
    SEVERITY_MAP = {
        "fatal error": CompileErrorType.ERROR,
        "error": CompileErrorType.ERROR,
        "warning": CompileErrorType.WARNING,
        "note": CompileErrorType.NOTE,
    }


_PARSERS = {
    DiagnosticDialect.GCC: GccErrorParser,
    DiagnosticDialect.MSVC: MsvcErrorParser,
}


def get_error_parser(
    dialect: Union[DiagnosticDialect, str],
    base_dir: Optional[Union[str, Path]] = None,
) -> CompileErrorParser:
    try:
        parser_cls = _PARSERS[DiagnosticDialect(dialect)]
    except ValueError as e:
        raise ConfigurationError(
            message=f"Unknown diagnostic dialect: {dialect}",
            setting="diagnostic_dialect",
            cause=e,
        )
    return parser_cls(base_dir)
