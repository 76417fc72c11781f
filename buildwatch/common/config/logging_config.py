import logging
import logging.config
from typing import Optional, Dict, Any

from pythonjsonlogger.json import JsonFormatter


BUILD_CONTEXT_FIELDS = ("target_file", "generation", "build_state")


class BuildJsonFormatter(JsonFormatter):
    """JSON formatter that lifts build context attributes to top-level keys."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["where"] = f"{record.funcName}:{record.lineno}"

        for field in BUILD_CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_record[field] = value

        if record.exc_info and "exc_info" not in log_record:
            log_record["exception"] = self.formatException(record.exc_info)


def get_logging_config(
    log_level: str = "INFO",
    json_format: bool = False,
) -> Dict[str, Any]:
    # stdout belongs to the build transcript, diagnostics go to stderr
    handler = {
        "class": "logging.StreamHandler",
        "level": log_level,
        "stream": "ext://sys.stderr",
        "formatter": "json" if json_format else "plain",
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {
                "format": "%(asctime)s %(levelname)-7s %(name)s: %(message)s",
                "datefmt": "%H:%M:%S",
            },
            "json": {
                "()": BuildJsonFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
                "timestamp": True,
            },
        },
        "handlers": {"stderr": handler},
        "loggers": {
            "buildwatch": {
                "handlers": ["stderr"],
                "level": log_level,
                "propagate": False,
            },
            "aiohttp": {
                "handlers": ["stderr"],
                "level": "WARNING",
                "propagate": False,
            },
        },
    }


def setup_logging(log_level: str = "INFO", json_format: bool = False) -> None:
    logging.config.dictConfig(get_logging_config(log_level=log_level, json_format=json_format))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class BuildLoggerAdapter(logging.LoggerAdapter):
    """Stamps every record with the context of the build being logged about.

    Per-call ``extra`` wins over the adapter's context, so a caller can
    report e.g. the session state at the moment of logging.
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_build_logger(
    target_file: Optional[str] = None,
    generation: Optional[int] = None,
) -> BuildLoggerAdapter:
    context: Dict[str, Any] = {}
    if target_file:
        context["target_file"] = target_file
    if generation is not None:
        context["generation"] = generation
    return BuildLoggerAdapter(get_logger("buildwatch.build"), context)
