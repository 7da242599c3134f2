import logging
import logging.config
import sys

import structlog
from opentelemetry import trace
from structlog.types import EventDict, Processor

SECRET_KEYS = frozenset({"api_token", "authorization", "x-api-token", "password"})

# Library loggers that only reach the handler at this level or above.
NOISY_LOGGERS = {
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "redis": "WARNING",
}


def add_opentelemetry_ids(_, __, event_dict: EventDict) -> EventDict:
    """
    Adds trace_id and span_id to the log record if a trace is active.
    """
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        event_dict["trace_id"] = trace.format_trace_id(span_context.trace_id)
        event_dict["span_id"] = trace.format_span_id(span_context.span_id)
    return event_dict


def service_info_adder(service_name: str, environment: str) -> Processor:
    def add_service_info(_, __, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        event_dict.setdefault("env", environment)
        return event_dict

    return add_service_info


def redact_secrets(_, __, event_dict: EventDict) -> EventDict:
    """Masks token and password values so they never reach a log line."""
    for key in event_dict.keys() & SECRET_KEYS:
        if event_dict[key]:
            event_dict[key] = "***"
    return event_dict


def drop_color_message_key(_, __, event_dict: EventDict) -> EventDict:
    event_dict.pop("color_message", None)
    return event_dict


def _logger_table(level: str) -> dict[str, dict]:
    table = {
        "": {"handlers": ["default"], "level": level, "propagate": True},
        "uvicorn": {"handlers": [], "level": level, "propagate": True},
        "uvicorn.error": {"handlers": [], "level": level, "propagate": True},
        # Requests are already logged once by the structured logging middleware.
        "uvicorn.access": {"handlers": [], "propagate": False},
    }
    for name, floor in NOISY_LOGGERS.items():
        table[name] = {"handlers": [], "level": floor, "propagate": True}
    return table


def setup_structlog(
    json_logs: bool = False,
    log_level: str = "INFO",
    service_name: str = "unknown",
    environment: str = "development",
):
    """
    Route structlog and stdlib logging (uvicorn, httpx, redis) through one handler.

    Records are rendered as JSON when ``json_logs`` is set, as colored console
    output otherwise, and carry the service name, the environment and the
    active trace ids.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        service_info_adder(service_name, environment),
        add_opentelemetry_ids,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        drop_color_message_key,
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    level = log_level.upper()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "()": "structlog.stdlib.ProcessorFormatter",
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                    "foreign_pre_chain": shared_processors,
                },
            },
            "handlers": {
                "default": {
                    "level": level,
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": _logger_table(level),
        }
    )

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    def log_uncaught(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        structlog.get_logger("uncaught_exception").critical(
            "Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback)
        )

    sys.excepthook = log_uncaught
