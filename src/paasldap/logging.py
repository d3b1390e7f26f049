"""Configure uvicorn logging for paasldap."""

from __future__ import annotations

import logging
import logging.config
import re

import structlog
import uvicorn
from safir.logging import LogLevel, add_log_severity
from structlog.types import EventDict

ACCESS_LOG_REGEX = re.compile(r'^([0-9.]+):([0-9]+) - "([^"]+)" ([0-9]+)$')

__all__ = ["configure_uvicorn_logging", "process_uvicorn_access_log"]


def process_uvicorn_access_log(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Parse a uvicorn access log entry into key/value pairs.

    Intended for use as a structlog processor.

    This checks whether the log message is a uvicorn access log entry and, if
    so, parses the message into key/value pairs for JSON logging so that the
    details can be programmatically extracted.

    Parameters
    ----------
    logger
        The wrapped logger object.
    method_name
        The name of the wrapped method (``warning`` or ``error``, for
        example).
    event_dict
        Current context and current event. This parameter is also modified in
        place, matching the normal behavior of structlog processors.

    Returns
    -------
    structlog.types.EventDict
        The modified event dict with the added key.
    """
    match = ACCESS_LOG_REGEX.match(event_dict["event"])
    if not match:
        return event_dict
    request = match.group(3)
    method, rest = request.split(" ", 1)
    url, protocol = rest.rsplit(" ", 1)
    http_request = event_dict.setdefault("httpRequest", {})
    http_request["protocol"] = protocol
    http_request["requestMethod"] = method
    http_request["requestUrl"] = url
    http_request["remoteIp"] = match.group(1)
    http_request["status"] = match.group(4)
    return event_dict


def configure_uvicorn_logging(log_level: LogLevel = LogLevel.INFO) -> None:
    """Route uvicorn logs through structlog as JSON.

    Used by the FastAPI application so that uvicorn's own messages and access
    log match the format of paasldap's log messages.

    Parameters
    ----------
    log_level
        Log level for uvicorn logging. Default is ``INFO``.
    """
    level = log_level.value
    processors = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        structlog.processors.JSONRenderer(),
    ]
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json-access": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processors": processors,
                    "foreign_pre_chain": [
                        add_log_severity,
                        process_uvicorn_access_log,
                    ],
                },
                "json": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processors": processors,
                    "foreign_pre_chain": [add_log_severity],
                },
                **uvicorn.config.LOGGING_CONFIG["formatters"],
            },
            "handlers": {
                "uvicorn.access": {
                    "level": level,
                    "class": "logging.StreamHandler",
                    "formatter": "json-access",
                },
                "uvicorn.default": {
                    "level": level,
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                },
            },
            "loggers": {
                "uvicorn.error": {
                    "handlers": ["uvicorn.default"],
                    "level": level,
                    "propagate": False,
                },
                "uvicorn.access": {
                    "handlers": ["uvicorn.access"],
                    "level": level,
                    "propagate": False,
                },
            },
        }
    )
