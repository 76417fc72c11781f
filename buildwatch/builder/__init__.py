from buildwatch.builder.console_capture import ConsoleCapture, ConsoleOutputStream
from buildwatch.builder.environment_manager import (
    EnvironmentPatch,
    EnvironmentPatcher,
    NullToolchainLocator,
    SearchPathToolchainLocator,
    ToolchainLocation,
    ToolchainLocator,
)
from buildwatch.builder.log_parser import (
    CompileErrorParser,
    GccErrorParser,
    MsvcErrorParser,
    get_error_parser,
)
from buildwatch.builder.compiler_wrapper import CompilerWrapper, CompilerConfig, CompilerResult

__all__ = [
    "ConsoleCapture",
    "ConsoleOutputStream",
    "EnvironmentPatch",
    "EnvironmentPatcher",
    "NullToolchainLocator",
    "SearchPathToolchainLocator",
    "ToolchainLocation",
    "ToolchainLocator",
    "CompileErrorParser",
    "GccErrorParser",
    "MsvcErrorParser",
    "get_error_parser",
    "CompilerWrapper",
    "CompilerConfig",
    "CompilerResult",
]
