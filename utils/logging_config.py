"""
Root logger configuration.

Modules log through ``logging.getLogger(__name__)``; this module attaches
handlers to the root logger exactly once, at application startup.
"""

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

CONSOLE_HANDLER = "customer-service.console"
FILE_HANDLER = "customer-service.file"


def setup_logging(level: str = "INFO", logfile: str | None = None) -> None:
    """
    Configure the root logger with a console and optional file handler.

    Does nothing if these handlers are already attached, so repeated
    calls from tests or app factories are harmless. Handlers installed
    by other tools (pytest, uvicorn) are left alone.

    Args:
        level: Logging level name, case insensitive ("debug", "INFO", ...)
        logfile: Optional path for a file handler
    """
    root = logging.getLogger()
    if any(h.get_name() in (CONSOLE_HANDLER, FILE_HANDLER) for h in root.handlers):
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.set_name(CONSOLE_HANDLER)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if logfile:
        file_handler = logging.FileHandler(Path(logfile).resolve(), encoding="utf-8")
        file_handler.set_name(FILE_HANDLER)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
