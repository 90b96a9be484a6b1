"""
Logging for loco.

Every module logs through `get_logger(__name__)`:
- the console gets Rich output;
- `loco replay` runs are also appended as JSON lines to `{cwd}/replay.log`,
  so a recorded walk can be matched against what the tracker did with it.

`LOCO_LOG_LEVEL` overrides the level passed by the caller.
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

# commands whose runs are also recorded as JSON lines in {cwd}/{command}.log
FILE_LOGGED_COMMANDS = ("replay",)
LEVEL_ENV = "LOCO_LOG_LEVEL"

# attributes every LogRecord has; anything else came in through `extra=`
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record, including fields passed with `extra=`
    (route ids and session counts from saves).
    """
    def format(self, record: logging.LogRecord) -> str:
        out = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level":     record.levelname,
            "logger":    record.name,
            "message":   record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                out[key] = value
        if record.exc_info:
            out["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(out, default=str)


def cli_command() -> Optional[str]:
    """The loco subcommand this process runs, if any."""
    return sys.argv[1] if len(sys.argv) > 1 else None


def _json_file_handler(command: str) -> logging.Handler:
    handler = logging.FileHandler(Path.cwd() / f"{command}.log", mode="a", encoding="utf-8")
    handler.setFormatter(JSONFormatter())
    return handler


def get_logger(name: str, level: int | str = logging.INFO) -> logging.Logger:
    """
    Return the logger for `name`, attaching handlers on first use.

    Parameters
    ----------
    name
        Logger name (typically __name__).
    level
        Log level (int or string), defaults to INFO; LOCO_LOG_LEVEL wins.
    """
    level = os.environ.get(LEVEL_ENV, level)
    if isinstance(level, str):
        level = level.upper()
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handlers: list[logging.Handler] = [RichHandler(rich_tracebacks=True)]
    command = cli_command()
    if command in FILE_LOGGED_COMMANDS:
        handlers.append(_json_file_handler(command))
    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)
    return logger
