"""
Logging configuration.
"""

import json
import logging
import sys
from typing import Any, Dict, cast

from loguru import logger

from inventory_api.core.config import settings

# Standard library loggers routed through loguru
INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "sqlalchemy.engine.Engine")


class InterceptHandler(logging.Handler):
    """
    Intercept standard logging messages toward Loguru.
    """

    def emit(self, record: Any) -> None:
        logger_opt = logger.opt(depth=6, exception=record.exc_info)
        msg = record.getMessage()
        level: int = record.levelno

        if level >= logging.CRITICAL:
            logger_opt.critical(msg)
        elif level >= logging.ERROR:
            logger_opt.error(msg)
        elif level >= logging.WARNING:
            logger_opt.warning(msg)
        elif level >= logging.INFO:
            logger_opt.info(msg)
        else:
            logger_opt.debug(msg)


def serialize_record(record: Dict[str, Any]) -> str:
    """
    Render a loguru record as a single JSON line.

    Bound context (``logger.bind(...)``) is merged into the top level; values
    JSON cannot encode are written as their ``str()``.
    """
    subset: Dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "service": settings.PROJECT_NAME,
        "environment": settings.ENVIRONMENT,
        "module": record["name"],
        "function": record["function"],
        "line": record["line"],
    }
    subset.update({key: value for key, value in record["extra"].items() if not key.startswith("_")})

    if record["exception"]:
        subset["exception"] = str(record["exception"])

    return json.dumps(subset, default=str)


def configure_logging() -> None:
    """
    Configure loguru logger.
    """
    logger.remove()

    if settings.JSON_LOGS:
        logger.add(
            lambda msg: print(serialize_record(cast(Dict[str, Any], msg.record)), file=sys.stderr),
            level=settings.LOG_LEVEL,
            backtrace=True,
            diagnose=settings.DEBUG,
        )
    else:
        logger.add(
            sys.stderr,
            level=settings.LOG_LEVEL,
            format="{time} | {level} | {name}:{function}:{line} | {message} | {extra}",
            backtrace=True,
            diagnose=settings.DEBUG,
        )

    logging.getLogger().handlers = [InterceptHandler()]

    for logger_name in INTERCEPTED_LOGGERS:
        logging_logger = logging.getLogger(logger_name)
        logging_logger.handlers = [InterceptHandler()]
        logging_logger.propagate = False

    logger.info("Logging configured successfully.")
