from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ..errors import DeleteFailed

logger = logging.getLogger(__name__)


def delete_tree(path: str) -> None:
    """Delete a directory tree.

    A partial delete leaves a broken installation behind, so failures are
    logged and raised, never ignored.
    """

    p = Path(path)
    logger.info("Deleting %s", str(p))
    try:
        shutil.rmtree(p)
    except OSError as e:
        logger.error("Deleting %s failed: %s", str(p), e)
        raise DeleteFailed(f"Could not delete {p}: {e}") from e


def move_tree(src: str, dst: str) -> str:
    s = Path(src)
    d = Path(dst)
    if not s.is_dir():
        raise FileNotFoundError(src)
    if d.exists():
        raise FileExistsError(dst)

    d.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Moving %s -> %s", str(s), str(d))
    shutil.move(str(s), str(d))
    return str(d)
