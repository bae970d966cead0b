"""Centralized logging configuration using Loguru.

Usage:
    from fwaudit.utils.logging import logger
    logger.info("Message")
    logger.debug("Debug message")  # Only shows if FWAUDIT_LOG_LEVEL=DEBUG

Environment Variables:
    FWAUDIT_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: WARNING)
    FWAUDIT_LOG_JSON: 0|1 (default: 0, human-readable)
    FWAUDIT_LOG_FILE: path to log file (optional)
"""

import json
import os
import sys

from loguru import logger

logger.remove()

NUMERIC_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

# WARNING by default: the CLI prints JSON envelopes on stdout
_log_level = os.environ.get("FWAUDIT_LOG_LEVEL", "WARNING").upper()
_json_mode = os.environ.get("FWAUDIT_LOG_JSON", "0") == "1"
_log_file = os.environ.get("FWAUDIT_LOG_FILE")


def _to_ndjson(record) -> str:
    """Serialize a loguru record as a single NDJSON line."""
    payload = {
        "level": NUMERIC_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "module": record["name"],
    }
    for key, value in record["extra"].items():
        payload[key] = value if isinstance(value, (str, int, float, bool)) else str(value)

    if record["exception"]:
        exc = record["exception"]
        payload["err"] = {
            "type": exc.type.__name__ if exc.type else "Error",
            "message": str(exc.value) if exc.value else "",
        }
    return json.dumps(payload)


def ndjson_sink(message):
    """Write log records to stderr as NDJSON.

    Never call logger.* inside a sink - it recurses.
    """
    sys.stderr.write(_to_ndjson(message.record) + "\n")
    sys.stderr.flush()


_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")

if _json_mode:
    logger.add(ndjson_sink, level=_log_level, colorize=False)
else:
    logger.add(
        sys.stderr,
        level=_log_level,
        format=_human_format,
        colorize=None,
    )

if _log_file:
    def _file_sink(message):
        """Append NDJSON records to the configured log file."""
        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(_to_ndjson(message.record) + "\n")

    logger.add(_file_sink, level="DEBUG")


__all__ = ["logger", "ndjson_sink"]
