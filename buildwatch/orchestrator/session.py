"""Build session: tracks one compiler build from start to published result.

States::

    IDLE --start()--> BUILDING --on_build_complete()--> COMPLETION_PENDING
      ^                                                        |
      +------------------------ _finalize() <------------------+

Completion is deferred by ``completion_delay`` seconds because the build tool
can report process exit before its trailing stderr chunks have been delivered
through the console stream. The delay narrows that window; it does not close
it.
"""

import asyncio
from pathlib import Path
from typing import Optional, Union

from buildwatch.builder.console_capture import ConsoleCapture, ConsoleOutputStream
from buildwatch.builder.environment_manager import (
    EnvironmentPatch,
    EnvironmentPatcher,
    SearchPathToolchainLocator,
)
from buildwatch.builder.log_parser import get_error_parser
from buildwatch.common.config.constants import (
    BuildState,
    ConsoleChannel,
    DiagnosticDialect,
    ReentryPolicy,
    BUILD_TIMEOUT_MESSAGE,
    DEFAULT_COMPLETION_DELAY_SECONDS,
)
from buildwatch.common.config.logging_config import get_logger, get_build_logger
from buildwatch.common.config.settings import Settings, get_settings
from buildwatch.common.dto.build import BuildOutput, BuildResult
from buildwatch.common.exceptions.build_exceptions import BuildSessionError
from buildwatch.common.utils.file_utils import alias_path
from buildwatch.notification.notification_manager import BuildNotifier, EventNotifier
from buildwatch.orchestrator.scheduler import DeferredScheduler


logger = get_logger(__name__)


class BuildSession:
    def __init__(
        self,
        patcher: EnvironmentPatcher,
        stream: ConsoleOutputStream,
        notifier: BuildNotifier,
        scheduler: Optional[DeferredScheduler] = None,
        completion_delay: float = DEFAULT_COMPLETION_DELAY_SECONDS,
        build_timeout: Optional[float] = None,
        reentry_policy: ReentryPolicy = ReentryPolicy.REPLACE,
        dialect: DiagnosticDialect = DiagnosticDialect.GCC,
        normalize_newlines: bool = False,
        alias_home_paths: bool = False,
    ):
        # fail fast on an unknown dialect
        get_error_parser(dialect)

        self._patcher = patcher
        self._stream = stream
        self._notifier = notifier
        self._scheduler = scheduler or DeferredScheduler()
        self._completion_delay = completion_delay
        self._build_timeout = build_timeout
        self._reentry_policy = ReentryPolicy(reentry_policy)
        self._dialect = DiagnosticDialect(dialect)
        self._alias_home_paths = alias_home_paths

        self._capture = ConsoleCapture(stream, normalize_newlines=normalize_newlines)
        self._state = BuildState.IDLE
        self._generation = 0
        self._target_file: Optional[Path] = None
        self._from_code = False
        self._show_output = False
        self._patch: Optional[EnvironmentPatch] = None
        self._toolchain_warning: Optional[str] = None
        self._completion_handle: Optional[asyncio.TimerHandle] = None
        self._watchdog_handle: Optional[asyncio.TimerHandle] = None
        self._log = get_build_logger()

    @property
    def state(self) -> BuildState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state != BuildState.IDLE

    @property
    def generation(self) -> int:
        """Token of the current build; pass it back to ``on_build_complete``."""
        return self._generation

    @property
    def target_file(self) -> Optional[Path]:
        return self._target_file

    @property
    def from_code(self) -> bool:
        return self._from_code

    @property
    def show_output(self) -> bool:
        return self._show_output

    @property
    def toolchain_warning(self) -> Optional[str]:
        return self._toolchain_warning

    @property
    def capture(self) -> ConsoleCapture:
        return self._capture

    @property
    def completion_delay(self) -> float:
        return self._completion_delay

    def start(
        self,
        target_file: Union[str, Path],
        from_code: bool = False,
        show_output: bool = False,
    ) -> bool:
        """Begin a build of ``target_file``.

        Returns True when the caller may run the build tool. Under the reject
        policy a busy session returns False and is left untouched.
        """
        if self.is_busy:
            if self._reentry_policy == ReentryPolicy.REJECT:
                self._log.warning(f"Rejected build of {target_file}: session is {self._state.value}")
                return False
            self.discard()

        # always clear state before starting a new build
        self.reset()

        self._generation += 1
        self._target_file = Path(target_file)
        self._from_code = bool(from_code)
        self._show_output = bool(show_output)
        self._log = get_build_logger(target_file=str(self._target_file), generation=self._generation)

        try:
            self._patch = self._patcher.apply()
            self._toolchain_warning = self._patch.warning
            self._capture.subscribe()
            if self._build_timeout is not None:
                self._watchdog_handle = self._scheduler.schedule(
                    self._build_timeout, self._on_watchdog, self._generation
                )
            self._state = BuildState.BUILDING
            self._log.info("Build started")
            self._notifier.started(self._display_target())
        except Exception as e:
            self.reset()
            if isinstance(e, BuildSessionError):
                raise
            raise BuildSessionError(
                message=f"Failed to start build: {e}",
                target_file=str(target_file),
                state=BuildState.IDLE.value,
                cause=e,
            ) from e

        return True

    def on_build_complete(
        self,
        succeeded: bool,
        reported_output: Optional[str] = None,
        generation: Optional[int] = None,
    ) -> None:
        """Report that the build tool exited.

        Callers that may outlive their build (a replaced compile still running)
        pass the ``generation`` read after ``start``; a mismatch is dropped.
        """
        if generation is not None and generation != self._generation:
            self._log.warning(
                f"Ignoring completion of replaced build #{generation}",
                extra={"build_state": self._state.value},
            )
            return
        if self._state != BuildState.BUILDING:
            self._log.warning(
                "Ignoring build completion", extra={"build_state": self._state.value}
            )
            return

        self._completion_handle = self._scheduler.schedule(
            self._completion_delay,
            self._finalize,
            self._generation,
            bool(succeeded),
            reported_output or "",
        )
        self._state = BuildState.COMPLETION_PENDING

        self._scheduler.cancel(self._watchdog_handle)
        self._watchdog_handle = None

    def discard(self) -> None:
        """Drop the in-flight build without publishing a result."""
        if not self.is_busy:
            return
        self._log.warning(f"Discarding in-flight build ({self._state.value})")
        self.reset()

    def reset(self) -> None:
        self._capture.unsubscribe()
        self._capture.clear()

        if self._patch is not None:
            self._patcher.restore(self._patch)
            self._patch = None

        self._scheduler.cancel(self._completion_handle)
        self._scheduler.cancel(self._watchdog_handle)
        self._completion_handle = None
        self._watchdog_handle = None

        self._target_file = None
        self._from_code = False
        self._show_output = False
        self._toolchain_warning = None
        self._state = BuildState.IDLE

    def _finalize(self, generation: int, succeeded: bool, reported_output: str) -> None:
        if generation != self._generation or self._state != BuildState.COMPLETION_PENDING:
            logger.debug(f"Skipping stale completion for build #{generation}")
            return

        self._completion_handle = None
        try:
            self._patcher.restore(self._patch)

            console_output, error_output = self._capture.snapshot()
            if not succeeded or self._show_output:
                build_output = console_output
            else:
                build_output = reported_output

            # after the snapshot so the warning stays out of the error transcript
            if not succeeded and self._toolchain_warning:
                self._stream.write_error(self._toolchain_warning)

            errors = []
            if not self._from_code:
                parser = get_error_parser(self._dialect, self._target_file.parent)
                errors = parser.parse(build_output + "\n" + error_output)

            result = BuildResult(
                target_file=self._display_target(),
                outputs=[BuildOutput.normal(build_output), BuildOutput.error(error_output)],
                errors=errors,
            )

            self._log.info(
                f"Build {'succeeded' if succeeded else 'failed'} with "
                f"{result.error_count} errors, {result.warning_count} warnings"
            )
            self._notifier.completed(result)
        except Exception:
            self._log.exception("Failed to finalize build")
        finally:
            self.reset()

    def _on_watchdog(self, generation: int) -> None:
        if generation != self._generation or self._state != BuildState.BUILDING:
            return

        self._watchdog_handle = None
        self._log.error(f"Build did not complete within {self._build_timeout}s")
        self._capture.on_output_chunk(
            ConsoleChannel.ERROR, BUILD_TIMEOUT_MESSAGE.format(timeout=self._build_timeout)
        )
        self._state = BuildState.COMPLETION_PENDING
        self._finalize(generation, False, "")

    def _display_target(self) -> str:
        if self._target_file is None:
            return ""
        if self._alias_home_paths:
            return alias_path(self._target_file)
        return str(self._target_file)


def create_build_session(
    settings: Optional[Settings] = None,
    stream: Optional[ConsoleOutputStream] = None,
    notifier: Optional[BuildNotifier] = None,
    patcher: Optional[EnvironmentPatcher] = None,
) -> BuildSession:
    settings = settings or get_settings()

    if patcher is None:
        locator = SearchPathToolchainLocator(
            executables=settings.toolchain_executables,
            search_paths=settings.toolchain_search_paths,
        )
        patcher = EnvironmentPatcher(locator=locator, variable=settings.patch_variable)

    return BuildSession(
        patcher=patcher,
        stream=stream or ConsoleOutputStream(),
        notifier=notifier or EventNotifier(),
        completion_delay=settings.completion_delay_seconds,
        build_timeout=settings.build_timeout_seconds,
        reentry_policy=settings.reentry_policy,
        dialect=settings.diagnostic_dialect,
        normalize_newlines=settings.normalize_newlines,
        alias_home_paths=settings.alias_home_paths,
    )
