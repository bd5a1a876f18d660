"""Logging configuration."""

import re
import sys

from loguru import logger

from settings import LOG_DIR

_BEARER = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+")


def redact(text: str) -> str:
    """Mask bearer credentials that end up in log messages (e.g. echoed request headers)."""
    return _BEARER.sub(r"\1***", text)


def _patch(record) -> None:
    record["message"] = redact(record["message"])


def setup_logging(level: str = "INFO", to_file: bool = True, actor: str | None = None):
    """Configure console and optional daily file output; every record carries the session actor."""
    logger.remove()
    logger.configure(patcher=_patch, extra={"actor": actor or "-"})

    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | {extra[actor]} | <level>{message}</level>",
        level=level,
        colorize=True,
    )

    if to_file:
        LOG_DIR.mkdir(exist_ok=True)
        logger.add(
            LOG_DIR / "tally_{time:YYYY-MM-DD}.log",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {extra[actor]} | {name}:{function}:{line} | {message}",
            level="DEBUG",
            rotation="00:00",
            retention="7 days",
            compression="gz",
        )
        logger.info("Logging to {}", LOG_DIR)

    return logger
