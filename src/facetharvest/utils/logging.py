"""Logger factory for facetharvest: ``logger = get_logger(__name__)``."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "facetharvest"
LOG_FILE = Path(__file__).resolve().parents[3] / "logs" / "facetharvest.log"

_FORMAT = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"

_configured = False


class SafeStreamHandler(logging.StreamHandler):
    """Console handler that backslash-escapes labels the terminal cannot encode."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record) + self.terminator
            try:
                self.stream.write(line)
            except UnicodeEncodeError:
                encoding = getattr(self.stream, "encoding", None) or "utf-8"
                self.stream.write(line.encode(encoding, "backslashreplace").decode(encoding))
            self.flush()
        except Exception:
            self.handleError(record)


def _file_handler(path: Path) -> Optional[logging.Handler]:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        return None
    handler = logging.FileHandler(path, encoding="utf-8", delay=True)
    handler.setLevel(logging.DEBUG)
    return handler


def setup_logging(level: int = logging.INFO, log_file: Optional[Path] = None) -> None:
    """Attach console and run-log handlers to the ``facetharvest`` logger once.

    The console shows ``level`` and above; the log file keeps every poll
    round at DEBUG.
    """
    global _configured
    if _configured:
        return
    _configured = True

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(logging.DEBUG)
    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    console = SafeStreamHandler(sys.stdout)
    console.setLevel(level)
    handlers = [console]

    run_log = _file_handler(log_file or LOG_FILE)
    if run_log is not None:
        handlers.append(run_log)

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)


def set_console_level(level: int) -> None:
    setup_logging()
    for handler in logging.getLogger(ROOT_LOGGER).handlers:
        if isinstance(handler, SafeStreamHandler):
            handler.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
