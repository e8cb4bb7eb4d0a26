"""Process-wide logging helpers writing key=value lines to standard output."""

from __future__ import annotations

import logging
import re
import sys

_VERB = re.compile(r"%(%|\+?v)")

_log = logging.getLogger("userapi")


class _StdoutHandler(logging.StreamHandler):
    """Stream handler that always writes to the current ``sys.stdout``."""

    def __init__(self) -> None:
        super().__init__(sys.stdout)

    def emit(self, record: logging.LogRecord) -> None:
        self.stream = sys.stdout
        super().emit(record)


def _format(message: str, args: tuple) -> str:
    if not args:
        return message
    template = _VERB.sub(lambda m: "%%" if m.group(1) == "%" else "%s", message)
    try:
        return template % args
    except (TypeError, ValueError):
        return " ".join([message, *(str(arg) for arg in args)])


def info(message: str, *args) -> None:
    """Log an informational message, formatting it with ``args``."""
    _log.info(_format(message, args))


def debug(message: str, *args) -> None:
    """Log a debug message, formatting it with ``args``."""
    _log.debug(_format(message, args))


def error(message: str, *args) -> None:
    """Log an error message, formatting it with ``args``."""
    _log.error(_format(message, args))


if not _log.handlers:
    _handler = _StdoutHandler()
    _handler.setFormatter(
        logging.Formatter('time=%(asctime)s level=%(levelname)s msg="%(message)s"')
    )
    _log.addHandler(_handler)
_log.setLevel(logging.DEBUG)

info("Initialized logger")