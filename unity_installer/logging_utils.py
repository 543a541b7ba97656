from __future__ import annotations

import logging
import logging.handlers
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional, Union

PRODUCT_NAME = "unity-installer"

_FILE_HANDLER_NAME = f"{PRODUCT_NAME}-file"
_CONSOLE_HANDLER_NAME = f"{PRODUCT_NAME}-console"
_MAX_LOG_BYTES = 2_000_000

FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
CONSOLE_FORMAT = "%(levelname)s %(message)s"


def default_log_path() -> str:
    """%LOCALAPPDATA%/unity-installer on Windows, ~/.local/state/unity-installer elsewhere."""
    base = os.environ.get("LOCALAPPDATA") or os.path.join(str(Path.home()), ".local", "state")
    return os.path.join(base, PRODUCT_NAME, f"{PRODUCT_NAME}.log")


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def _find_handler(root: logging.Logger, name: str) -> Optional[logging.Handler]:
    for h in root.handlers:
        if h.get_name() == name:
            return h
    return None


def _open_file_handler(candidates: Iterable[str]) -> logging.Handler:
    """Rotating file handler on the first candidate path that can be opened."""

    last_error: Optional[OSError] = None
    for path in candidates:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            return logging.handlers.RotatingFileHandler(
                path, maxBytes=_MAX_LOG_BYTES, backupCount=3, encoding="utf-8"
            )
        except OSError as e:
            last_error = e
    assert last_error is not None
    raise last_error


def configure_logging(
    log_path: Optional[str] = None,
    level: Union[int, str] = logging.INFO,
    also_console: bool = True,
) -> str:
    """Attach this tool's file (and console) handlers to the root logger.

    Calling it again only updates the level; the file chosen first is kept.
    Returns the log file actually written, which is under the temp directory
    when the requested one cannot be opened.
    """

    requested = log_path or default_log_path()
    root = logging.getLogger()
    root.setLevel(_resolve_level(level))

    existing = _find_handler(root, _FILE_HANDLER_NAME)
    if isinstance(existing, logging.FileHandler):
        return existing.baseFilename

    fallback = os.path.join(tempfile.gettempdir(), f"{PRODUCT_NAME}.log")
    file_handler = _open_file_handler([requested, fallback])
    file_handler.set_name(_FILE_HANDLER_NAME)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    root.addHandler(file_handler)

    if also_console and _find_handler(root, _CONSOLE_HANDLER_NAME) is None:
        console = logging.StreamHandler()
        console.set_name(_CONSOLE_HANDLER_NAME)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        root.addHandler(console)

    actual = file_handler.baseFilename  # type: ignore[attr-defined]
    if os.path.abspath(requested) != actual:
        logging.getLogger(__name__).warning("Cannot write %s, logging to %s", requested, actual)
    return actual
