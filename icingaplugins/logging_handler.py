"""Console logging — routes log records to stderr through Rich.

stdout is reserved for the single plugin status line, so every log record
goes to stderr.
"""

from __future__ import annotations

import logging
from datetime import datetime

from rich.console import Console
from rich.text import Text

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Level tag + Rich style
_LEVEL_STYLES: dict[int, tuple[str, str]] = {
    TRACE:            ("TRC", "dim"),
    logging.DEBUG:    ("DBG", "dim cyan"),
    logging.INFO:     ("INF", "cyan"),
    logging.WARNING:  ("WRN", "yellow"),
    logging.ERROR:    ("ERR", "red"),
    logging.CRITICAL: ("CRT", "bold red"),
}


class ConsoleLogHandler(logging.Handler):
    """Logging handler that writes formatted records to a Rich console."""

    def __init__(self, console: Console | None = None) -> None:
        super().__init__()
        self._console = console or Console(stderr=True)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._console.print(self._format_record(record), soft_wrap=True)
        except Exception:
            self.handleError(record)

    @staticmethod
    def _format_record(record: logging.LogRecord) -> Text:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        tag, style = _LEVEL_STYLES.get(record.levelno, ("???", ""))
        name = record.name.rsplit(".", 1)[-1]
        msg = record.getMessage()

        text = Text()
        text.append(ts, style="dim")
        text.append(" ")
        text.append(tag, style=style)
        text.append(" ")
        text.append(f"{name}: ", style="dim")
        text.append(msg)
        return text


def verbosity_to_level(verbosity: int) -> int:
    """0 -> WARNING, 1 -> INFO, 2 -> DEBUG, 3 and above -> TRACE."""
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    if verbosity == 2:
        return logging.DEBUG
    return TRACE


def setup_logging(verbosity: int, console: Console | None = None) -> ConsoleLogHandler:
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, ConsoleLogHandler):
            root.removeHandler(handler)

    handler = ConsoleLogHandler(console)
    root.addHandler(handler)
    root.setLevel(verbosity_to_level(verbosity))

    # pysnmp logs every PDU at debug level
    logging.getLogger("pysnmp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    return handler
