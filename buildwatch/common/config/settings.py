import sys
from functools import lru_cache
from typing import Optional, List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

from buildwatch.common.config.constants import (
    ReentryPolicy,
    DiagnosticDialect,
    DEFAULT_COMPLETION_DELAY_SECONDS,
    DEFAULT_BUILD_TIMEOUT_SECONDS,
    DEFAULT_PATCH_VARIABLE,
    DEFAULT_TOOLCHAIN_EXECUTABLES,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BUILDWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit logs as JSON")

    completion_delay_seconds: float = Field(
        default=DEFAULT_COMPLETION_DELAY_SECONDS,
        ge=0.0,
        description="Drain window between process exit and finalization",
    )
    build_timeout_seconds: Optional[float] = Field(
        default=DEFAULT_BUILD_TIMEOUT_SECONDS,
        description="Watchdog for builds that never report completion; None disables it",
    )
    reentry_policy: ReentryPolicy = Field(default=ReentryPolicy.REPLACE)

    patch_variable: str = Field(default=DEFAULT_PATCH_VARIABLE)
    toolchain_executables: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TOOLCHAIN_EXECUTABLES)
    )
    toolchain_search_paths: List[str] = Field(default_factory=list)

    normalize_newlines: bool = Field(
        default_factory=lambda: sys.platform == "win32",
        description="Terminate every console chunk with a newline",
    )
    diagnostic_dialect: DiagnosticDialect = Field(default=DiagnosticDialect.GCC)
    alias_home_paths: bool = Field(default=True)

    compiler: str = Field(default="g++")
    compiler_flags: List[str] = Field(default_factory=lambda: ["-fsyntax-only"])

    webhook_url: Optional[str] = Field(default=None)
    webhook_timeout_seconds: float = Field(default=10.0, gt=0.0)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    @field_validator("build_timeout_seconds")
    @classmethod
    def validate_build_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("build_timeout_seconds must be positive or unset")
        return v


@lru_cache()
def get_settings() -> Settings:
    return Settings()
