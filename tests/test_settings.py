"""Tests for environment-driven settings and error types."""

import pytest
from pydantic import ValidationError

from buildwatch.common.config.constants import DiagnosticDialect, ReentryPolicy
from buildwatch.common.config.settings import Settings
from buildwatch.common.exceptions import BuildSessionError, ErrorCode, ToolchainNotFoundError
from buildwatch.common.utils.file_utils import alias_path, resolve_against
from buildwatch.common.utils.time_utils import Timer, format_duration


def test_defaults() -> None:
    settings = Settings()

    assert settings.completion_delay_seconds == 0.2
    assert settings.patch_variable == "PATH"
    assert settings.reentry_policy == ReentryPolicy.REPLACE
    assert settings.diagnostic_dialect == DiagnosticDialect.GCC


def test_env_prefix(monkeypatch) -> None:
    monkeypatch.setenv("BUILDWATCH_COMPLETION_DELAY_SECONDS", "0.5")
    monkeypatch.setenv("BUILDWATCH_REENTRY_POLICY", "reject")
    monkeypatch.setenv("BUILDWATCH_LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.completion_delay_seconds == 0.5
    assert settings.reentry_policy == ReentryPolicy.REJECT
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "overrides",
    [
        {"log_level": "chatty"},
        {"completion_delay_seconds": -1},
        {"build_timeout_seconds": 0},
        {"diagnostic_dialect": "cobol"},
    ],
)
def test_invalid_settings(overrides) -> None:
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_exception_serialization() -> None:
    error = BuildSessionError("boom", target_file="x.cpp", state="idle").with_context(attempt=2)

    data = error.to_dict()
    assert data["error_code"] == ErrorCode.BUILD_SESSION_ERROR.value
    assert data["details"] == {"target_file": "x.cpp", "stage": "session", "state": "idle", "attempt": 2}
    assert str(error) == "[E1003] boom"


def test_toolchain_error_details() -> None:
    error = ToolchainNotFoundError("missing", missing_executables=["gcc"], searched_paths=["/opt"])

    assert error.details["missing_executables"] == ["gcc"]
    assert error.error_code == ErrorCode.TOOLCHAIN_NOT_FOUND


def test_alias_path() -> None:
    assert alias_path("/home/me/proj/x.cpp", home="/home/me") == "~/proj/x.cpp"
    assert alias_path("/home/me", home="/home/me") == "~"
    assert alias_path("/home/meadow/x.cpp", home="/home/me") == "/home/meadow/x.cpp"


def test_resolve_against() -> None:
    assert resolve_against("x.cpp", "/src") == "/src/x.cpp"
    assert resolve_against("../inc/y.h", "/src/app") == "/src/inc/y.h"
    assert resolve_against("/abs/z.cpp", "/src") == "/abs/z.cpp"
    assert resolve_against("x.cpp", None) == "x.cpp"


@pytest.mark.parametrize(
    "seconds, expected",
    [(0.25, "250ms"), (4.2, "4.20s"), (125, "2m 05s"), (-1, "0ms")],
)
def test_format_duration(seconds, expected) -> None:
    assert format_duration(seconds) == expected


def test_timer_requires_start() -> None:
    with pytest.raises(RuntimeError):
        Timer().stop()

    timer = Timer().start()
    assert timer.stop() >= 0
