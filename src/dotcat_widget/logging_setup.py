# src/dotcat_widget/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

_PACKAGE = "dotcat_widget"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - allow dotcat_widget logs
    - but keep the background refresh loops quiet unless WARNING+
    - everything else (third-party, captured py.warnings) only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name == _PACKAGE or name.startswith(_PACKAGE + "."):
            # The refresher ticks every few minutes per widget; only problems are interesting.
            if name == f"{_PACKAGE}.snapshot.refresh_scheduler":
                return record.levelno >= logging.WARNING
            return True

        return record.levelno >= logging.ERROR


_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Marks handlers installed here so a second call replaces only those.
_OWNED_ATTR = "_dotcat_widget_handler"


def _owned(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    setattr(handler, _OWNED_ATTR, True)
    return handler


def setup_logging(
    *,
    log_dir: str | Path | None = ".local/dotcat",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path | None:
    """
    Install the filtered console handler and, when log_dir is given, a full
    DEBUG file log at <log_dir>/dotcat_widget.log (returned).

    Widget hosts may already own root handlers; only handlers installed by a
    previous call are replaced.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in [h for h in root.handlers if getattr(h, _OWNED_ATTR, False)]:
        root.removeHandler(h)
        h.close()

    console = _owned(logging.StreamHandler(sys.stderr), console_level)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    log_file = None
    if log_dir is not None:
        log_file = Path(log_dir) / "dotcat_widget.log"
        log_file.parent.mkdir(parents=True, exist_ok=True)
        root.addHandler(_owned(logging.FileHandler(str(log_file), encoding="utf-8"), file_level))

    logging.captureWarnings(True)
    return log_file


def level_from_name(name: str | None, default: int = logging.INFO) -> int:
    level = logging.getLevelName(str(name or "").strip().upper())
    return level if isinstance(level, int) else default
