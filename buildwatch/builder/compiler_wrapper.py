from typing import Optional, Dict, List, TYPE_CHECKING
from dataclasses import dataclass, field
import asyncio
import codecs
import os
import tempfile
from pathlib import Path

from buildwatch.builder.console_capture import ConsoleOutputStream
from buildwatch.common.config.constants import ConsoleChannel
from buildwatch.common.config.logging_config import get_logger
from buildwatch.common.utils.time_utils import Timer, format_duration

if TYPE_CHECKING:
    from buildwatch.orchestrator.session import BuildSession


logger = get_logger(__name__)


@dataclass
class CompilerConfig:
    compiler: str = "g++"
    flags: List[str] = field(default_factory=lambda: ["-fsyntax-only"])
    include_paths: List[str] = field(default_factory=list)
    defines: Dict[str, Optional[str]] = field(default_factory=dict)
    output_file: Optional[str] = None
    source_suffix: str = ".cpp"


@dataclass
class CompilerResult:
    started: bool
    success: bool = False
    exit_code: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    compile_time_seconds: float = 0.0


class CompilerWrapper:
    """Runs the compiler for a build session and feeds it the child's output.

    Every accepted ``start`` is matched by exactly one ``on_build_complete``,
    including when the compiler cannot be spawned or the caller is cancelled.
    Completions and output are tagged with the session generation read right
    after ``start``, so a compile replaced by a newer build stays silent.
    """

    READ_CHUNK_SIZE = 4096

    def __init__(
        self,
        session: "BuildSession",
        stream: ConsoleOutputStream,
        config: Optional[CompilerConfig] = None,
    ):
        self._session = session
        self._stream = stream
        self._config = config or CompilerConfig()

    @property
    def config(self) -> CompilerConfig:
        return self._config

    def set_config(self, config: CompilerConfig) -> None:
        self._config = config

    def build_command(self, source_file: str) -> List[str]:
        cmd = [self._config.compiler]

        for path in self._config.include_paths:
            cmd.append(f"-I{path}")

        for name, value in self._config.defines.items():
            if value is not None:
                cmd.append(f"-D{name}={value}")
            else:
                cmd.append(f"-D{name}")

        cmd.extend(self._config.flags)
        cmd.append(source_file)

        if self._config.output_file:
            cmd.extend(["-o", self._config.output_file])

        return cmd

    async def build_file(self, source_file: str, show_output: bool = False) -> CompilerResult:
        return await self._build(source_file, from_code=False, show_output=show_output)

    async def build_code(self, code: str, show_output: bool = False) -> CompilerResult:
        fd, path = tempfile.mkstemp(suffix=self._config.source_suffix, prefix="buildwatch_")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(code)
            return await self._build(path, from_code=True, show_output=show_output)
        finally:
            Path(path).unlink(missing_ok=True)

    async def _build(self, source_file: str, from_code: bool, show_output: bool) -> CompilerResult:
        if not self._session.start(source_file, from_code=from_code, show_output=show_output):
            logger.info(f"Build of {source_file} was not accepted")
            return CompilerResult(started=False)
        generation = self._session.generation

        # compile from the source directory so diagnostics resolve against it
        working_dir = None if from_code else str(Path(source_file).parent)
        cmd = self.build_command(source_file if from_code else Path(source_file).name)
        logger.debug(f"Compile command: {' '.join(cmd)}")

        timer = Timer().start()

        try:
            # spawned after start() so the child sees the patched environment
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=working_dir,
                env=os.environ.copy(),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            message = f"Failed to run {self._config.compiler}: {e}\n"
            logger.error(message.strip())
            self._stream.write_error(message)
            self._session.on_build_complete(False, message, generation=generation)
            return CompilerResult(started=True, success=False, stderr=message)
        except asyncio.CancelledError:
            self._session.on_build_complete(False, "", generation=generation)
            raise

        try:
            stdout, stderr = await asyncio.gather(
                self._pump(process.stdout, ConsoleChannel.NORMAL, generation),
                self._pump(process.stderr, ConsoleChannel.ERROR, generation),
            )
            exit_code = await process.wait()
        except (Exception, asyncio.CancelledError) as e:
            logger.warning(f"Compilation of {source_file} aborted: {e!r}")
            await self._kill(process)
            self._session.on_build_complete(False, "", generation=generation)
            raise
        elapsed = timer.stop()

        success = exit_code == 0
        if success:
            logger.info(f"Compiled {source_file} in {format_duration(elapsed)}")
        else:
            logger.info(f"Compilation of {source_file} failed with exit code {exit_code}")

        self._session.on_build_complete(success, stdout, generation=generation)

        return CompilerResult(
            started=True,
            success=success,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            compile_time_seconds=elapsed,
        )

    async def _kill(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()

    async def _pump(
        self,
        reader: Optional[asyncio.StreamReader],
        channel: ConsoleChannel,
        generation: int,
    ) -> str:
        if reader is None:
            return ""

        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        collected: List[str] = []
        while True:
            chunk = await reader.read(self.READ_CHUNK_SIZE)
            text = decoder.decode(chunk, final=not chunk)
            if text:
                collected.append(text)
                if self._session.generation == generation:
                    self._stream.publish(channel, text)
            if not chunk:
                break

        return "".join(collected)
