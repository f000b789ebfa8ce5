"""Logging configuration for azreconcile."""

import logging
import re
import sys
from datetime import UTC, datetime
from pathlib import Path

LOGGER_NAME = "azreconcile"

# Credentials that may appear in request bodies or error text
_SECRET_PATTERNS = (
    re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*"),
    re.compile(r"(SharedAccessKey=)[^;\s\"']+"),
    re.compile(r"(\"(?:primaryKey|secondaryKey|client_secret|access_token)\"\s*:\s*\")[^\"]*"),
)
REDACTED = "***"
TRANSPORT_LOGGER_NAME = "httpx"

# Handlers installed by the last setup_logging call, on both loggers
_installed_handlers: list[logging.Handler] = []


def redact(text: str) -> str:
    """Mask bearer tokens, shared access keys and key fields in text."""
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(rf"\g<1>{REDACTED}", text)
    return text


class SecretRedactingFilter(logging.Filter):
    """Rewrites records so credentials never reach a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def setup_logging(verbose: int = 0, log_file: Path | None = None) -> None:
    """Configure logging based on verbosity level and optional file output.

    Args:
        verbose: Verbosity level (0=off, 1=INFO, 2+=DEBUG)
        log_file: Optional path to write logs to file

    At DEBUG the httpx transport logger is attached as well, so every
    request line shows up alongside the handler messages.
    """
    _remove_installed_handlers()

    if verbose == 0 and log_file is None:
        return

    level = logging.DEBUG if verbose >= 2 else logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    redacting = SecretRedactingFilter()

    handlers: list[logging.Handler] = []
    if verbose > 0:
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(redacting)
        logger.addHandler(handler)
    _installed_handlers.extend(handlers)

    transport = logging.getLogger(TRANSPORT_LOGGER_NAME)
    if level == logging.DEBUG:
        transport.setLevel(logging.DEBUG)
        for handler in handlers:
            transport.addHandler(handler)
    else:
        transport.setLevel(logging.WARNING)

    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")
    logger.info("")
    logger.info("=" * 60)
    logger.info(
        "azreconcile starting | %s | level=%s", timestamp, logging.getLevelName(level)
    )
    logger.info("=" * 60)


def _remove_installed_handlers() -> None:
    """Detach and close the handlers from a previous setup_logging call."""
    for name in (LOGGER_NAME, TRANSPORT_LOGGER_NAME):
        target = logging.getLogger(name)
        for handler in _installed_handlers:
            target.removeHandler(handler)
    for handler in _installed_handlers:
        handler.close()
    _installed_handlers.clear()
