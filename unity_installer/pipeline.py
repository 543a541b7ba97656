from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

from .lifecycle import InstallLifecycle
from .models import InstallQueue, Installation, Package

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueResult:
    installation: Optional[Installation]
    installed: List[str]


def ordered_items(queue: InstallQueue) -> List[Package]:
    """Editor first, the rest in queue order."""

    return sorted(queue.items, key=lambda i: 0 if i.is_editor else 1)


def run_queue(
    lifecycle: InstallLifecycle,
    queue: InstallQueue,
    install_paths: str,
    *,
    cancel: Optional[threading.Event] = None,
) -> QueueResult:
    """Drain a queue through the lifecycle.

    Any failure aborts the lifecycle and is re-raised; packages already
    installed stay on disk.
    """

    installed: List[str] = []

    lifecycle.prepare_install(queue, install_paths)
    try:
        for item in ordered_items(queue):
            logger.info("Running package %s", item.name)
            lifecycle.install(queue, item, cancel=cancel)
            installed.append(item.name)
    except Exception:
        logger.exception("Install of %s failed after %s", queue.version, installed or "no packages")
        lifecycle.complete_install(aborted=True)
        raise

    installation = lifecycle.complete_install(aborted=False)
    return QueueResult(installation=installation, installed=installed)
