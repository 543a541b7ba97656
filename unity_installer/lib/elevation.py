from __future__ import annotations

import logging
import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Callable, Optional, Protocol, Sequence

from ..errors import LaunchFailed, OperationCancelled
from .command import CmdResult, run_cmd, split_arguments

logger = logging.getLogger(__name__)

# ShellExecuteEx reports a declined UAC prompt as ERROR_CANCELLED.
_ERROR_CANCELLED = 1223


class ElevatedRunner(Protocol):
    """Runs an executable with elevated privileges and captured stdio.

    Blocks until the child exits. A non-zero exit code is returned as data,
    only spawn/elevation failures raise (LaunchFailed).
    """

    def run_elevated(
        self,
        executable: str,
        arguments: str,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> CmdResult:
        ...


def _check_cancel(cancel: Optional[threading.Event], executable: str) -> None:
    # The elevated child cannot be killed once spawned; only honor it before.
    if cancel is not None and cancel.is_set():
        raise OperationCancelled(f"Cancelled before launching {executable}")


def _check_exists(executable: str) -> None:
    if not Path(executable).is_file():
        logger.error("Executable not found: %s", executable)
        raise LaunchFailed(f"Executable not found: {executable}")


class SudoElevatedRunner:
    """POSIX runner: spawn directly as root, otherwise through sudo (or similar).

    Before the child is spawned, the elevation command is run once with
    `validate_arguments` (`sudo -v`, or `<cmd> true` for pkexec/doas). A
    refusal there is a LaunchFailed, so a denied password is never reported
    as the installer's own exit code.
    """

    def __init__(
        self,
        elevation_command: Sequence[str] = ("sudo",),
        *,
        validate_arguments: Optional[Sequence[str]] = None,
        run: Callable[..., CmdResult] = run_cmd,
        is_root: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.elevation_command = list(elevation_command)
        if validate_arguments is None:
            # sudo caches credentials with -v; pkexec/doas just run `true`.
            validate_arguments = ["-v"] if os.path.basename(self.elevation_command[0]) == "sudo" else ["true"]
        self.validate_arguments = list(validate_arguments)
        self._run = run
        self._is_root = is_root or (lambda: os.geteuid() == 0)

    def _validate_elevation(self, executable: str) -> None:
        argv = [*self.elevation_command, *self.validate_arguments]
        try:
            r = self._run(argv)
        except OSError as e:
            logger.error("Elevation command %s could not be started: %s", self.elevation_command[0], e)
            raise LaunchFailed(f"Failed to launch {executable}: {e}") from e
        if r.returncode != 0:
            logger.error(
                "Elevation refused for %s (exit %d): %s", executable, r.returncode, (r.stderr or "").strip()
            )
            raise LaunchFailed(f"Elevation refused for {executable}: {(r.stderr or '').strip()}")

    def run_elevated(
        self,
        executable: str,
        arguments: str,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> CmdResult:
        _check_cancel(cancel, executable)
        _check_exists(executable)

        argv = [executable, *split_arguments(arguments)]
        if not self._is_root():
            self._validate_elevation(executable)
            argv = [*self.elevation_command, *argv]

        try:
            return self._run(argv)
        except OSError as e:
            logger.error("Failed to launch %s: %s", executable, e)
            raise LaunchFailed(f"Failed to launch {executable}: {e}") from e


class WindowsElevatedRunner:
    """Windows runner built on pywin32.

    Admin processes spawn the child directly with no console window. Otherwise
    a `runas` request starts `cmd.exe /c` (hidden), which redirects the
    child's stdout/stderr into temp files read back after exit. The UAC prompt
    may be shown to the user.
    """

    def __init__(
        self,
        *,
        run: Callable[..., CmdResult] = run_cmd,
        is_admin: Optional[Callable[[], bool]] = None,
    ) -> None:
        self._run = run
        if is_admin is not None:
            self.is_admin = is_admin  # type: ignore[method-assign]

    def is_admin(self) -> bool:
        try:
            from win32com.shell import shell  # type: ignore
        except Exception as e:  # pragma: no cover
            raise RuntimeError("pywin32 is required for elevation on Windows") from e
        return bool(shell.IsUserAnAdmin())

    def run_elevated(
        self,
        executable: str,
        arguments: str,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> CmdResult:
        _check_cancel(cancel, executable)
        _check_exists(executable)

        command_line = f'"{executable}" {arguments}'.rstrip()
        if self.is_admin():
            try:
                return self._run([executable], command_line=command_line, hide_window=True)
            except OSError as e:
                logger.error("Failed to launch %s: %s", executable, e)
                raise LaunchFailed(f"Failed to launch {executable}: {e}") from e

        return self._run_via_runas(executable, command_line)

    def _run_via_runas(self, executable: str, command_line: str) -> CmdResult:
        try:
            import pywintypes  # type: ignore
            import win32con  # type: ignore
            import win32event  # type: ignore
            import win32process  # type: ignore
            from win32com.shell import shell, shellcon  # type: ignore
        except Exception as e:  # pragma: no cover
            raise RuntimeError("pywin32 is required for elevation on Windows") from e

        capture_dir = tempfile.mkdtemp(prefix="unity-installer-")
        out_path = os.path.join(capture_dir, "stdout.txt")
        err_path = os.path.join(capture_dir, "stderr.txt")
        params = f'/d /s /c "{command_line} > "{out_path}" 2> "{err_path}""'
        logger.info("CMD (runas) cmd.exe %s", params)

        try:
            try:
                info = shell.ShellExecuteEx(
                    fMask=shellcon.SEE_MASK_NOCLOSEPROCESS | shellcon.SEE_MASK_NOASYNC,
                    lpVerb="runas",
                    lpFile="cmd.exe",
                    lpParameters=params,
                    nShow=win32con.SW_HIDE,
                )
            except pywintypes.error as e:
                if e.winerror == _ERROR_CANCELLED:
                    logger.error("Elevation request for %s was denied", executable)
                else:
                    logger.error("Failed to launch %s elevated: %s", executable, e)
                raise LaunchFailed(f"Failed to launch {executable} elevated: {e}") from e

            handle = info["hProcess"]
            try:
                win32event.WaitForSingleObject(handle, win32event.INFINITE)
                returncode = win32process.GetExitCodeProcess(handle)
            finally:
                handle.Close()

            stdout = _read_capture(out_path)
            stderr = _read_capture(err_path)
        finally:
            shutil.rmtree(capture_dir, ignore_errors=True)

        if stdout:
            logger.debug("STDOUT %s", stdout.strip())
        if stderr:
            logger.debug("STDERR %s", stderr.strip())

        return CmdResult(argv=[executable], returncode=returncode, stdout=stdout, stderr=stderr)


def _read_capture(path: str) -> str:
    p = Path(path)
    if not p.exists():
        return ""
    return p.read_text(errors="replace")
