import argparse
import asyncio
import json
import sys
from typing import Optional, List

from buildwatch.builder.compiler_wrapper import CompilerWrapper, CompilerConfig
from buildwatch.builder.console_capture import ConsoleOutputStream
from buildwatch.common.config.constants import ConsoleChannel, DiagnosticDialect, EventType
from buildwatch.common.config.settings import Settings, get_settings
from buildwatch.common.config.logging_config import setup_logging, get_logger
from buildwatch.common.dto.build import ClientEvent
from buildwatch.common.exceptions import BuildWatchException
from buildwatch.notification.notification_manager import EventNotifier
from buildwatch.notification.webhook_notifier import WebhookNotifier
from buildwatch.orchestrator.session import create_build_session


logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="buildwatch",
        description="Compile a source file and report structured diagnostics.",
    )
    parser.add_argument("file", help="source file to compile")
    parser.add_argument("--show-output", action="store_true", help="report the full console transcript")
    parser.add_argument("--dialect", choices=[d.value for d in DiagnosticDialect], default=None)
    parser.add_argument("--compiler", default=None, help="compiler executable (default from settings)")
    parser.add_argument("--json", action="store_true", help="print the completed event payload as JSON")
    parser.add_argument("--quiet", action="store_true", help="do not echo compiler output")
    parser.add_argument("--json-logs", action="store_true", help="emit logs as JSON")
    parser.add_argument("--flag", dest="flags", action="append", default=[], help="extra compiler flag")
    return parser.parse_args(argv)


def _echo(channel: ConsoleChannel, text: str) -> None:
    target = sys.stdout if channel == ConsoleChannel.NORMAL else sys.stderr
    target.write(text)
    target.flush()


def _print_summary(event: ClientEvent) -> None:
    errors = event.data.get("errors", [])
    for error in errors:
        print(
            f"{error['sourceFile']}:{error['line']}:{error['column']}: "
            f"{error['severity']}: {error['message']}"
        )
    print(f"{len(errors)} diagnostic(s) in {event.data.get('targetFile')}")


async def run_build(args: argparse.Namespace, settings: Settings) -> int:
    loop = asyncio.get_running_loop()
    completed: asyncio.Future = loop.create_future()

    def on_event(event: ClientEvent) -> None:
        if event.type == EventType.BUILD_COMPLETED and not completed.done():
            completed.set_result(event)

    stream = ConsoleOutputStream()
    if not args.quiet:
        stream.connect(_echo)

    notifier = EventNotifier([on_event])
    if settings.webhook_url:
        notifier.add_listener(WebhookNotifier(settings.webhook_url, settings.webhook_timeout_seconds))

    session = create_build_session(settings, stream=stream, notifier=notifier)
    wrapper = CompilerWrapper(
        session,
        stream,
        CompilerConfig(compiler=settings.compiler, flags=settings.compiler_flags + args.flags),
    )

    result = await wrapper.build_file(args.file, show_output=args.show_output)
    if not result.started:
        logger.error(f"Build of {args.file} was rejected")
        return 2

    event = await completed
    await notifier.drain()

    if args.json:
        print(json.dumps(event.data, indent=2))
    else:
        _print_summary(event)

    return 0 if result.success else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()

    overrides = {}
    if args.dialect:
        overrides["diagnostic_dialect"] = DiagnosticDialect(args.dialect)
    if args.compiler:
        overrides["compiler"] = args.compiler
    if args.json_logs:
        overrides["json_logs"] = True
    if overrides:
        settings = settings.model_copy(update=overrides)

    setup_logging(log_level=settings.log_level, json_format=settings.json_logs)
    try:
        return asyncio.run(run_build(args, settings))
    except BuildWatchException as e:
        logger.error(f"Build of {args.file} could not run: {e}", extra={"error": e.to_dict()})
        return 3


if __name__ == "__main__":
    sys.exit(main())
