from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def split_arguments(arguments: str) -> list[str]:
    return shlex.split(arguments)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = False,
    timeout: float | None = None,
    hide_window: bool = False,
    command_line: str | None = None,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - Captures stdout/stderr in full; nothing is streamed.
    - timeout kills the child and raises subprocess.TimeoutExpired.
    - hide_window suppresses the console window on Windows.
    - command_line is handed to CreateProcess verbatim instead of quoting
      argv (NSIS wants `/D=` unquoted even with spaces). Windows only.

    Spawn errors (missing executable, permission denied) propagate as OSError.
    """

    argv_list = list(argv)
    logger.info("CMD %s", command_line or fmt_argv(argv_list))

    creationflags = 0
    if hide_window and os.name == "nt":
        creationflags = subprocess.CREATE_NO_WINDOW

    try:
        p = subprocess.run(
            command_line if command_line is not None else argv_list,
            stdin=subprocess.DEVNULL,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout,
            creationflags=creationflags,
        )
    except subprocess.TimeoutExpired:
        logger.warning("Timed out after %ss: %s", timeout, command_line or fmt_argv(argv_list))
        raise

    if p.stdout:
        logger.debug("STDOUT %s", p.stdout.strip())
    if p.stderr:
        logger.debug("STDERR %s", p.stderr.strip())

    if check and p.returncode != 0:
        raise RuntimeError(f"Command failed ({p.returncode}): {fmt_argv(argv_list)}\n{p.stderr}")

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)
