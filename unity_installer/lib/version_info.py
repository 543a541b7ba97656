from __future__ import annotations

import logging
from typing import Callable

from .command import run_cmd

logger = logging.getLogger(__name__)

VersionReader = Callable[[str], str]

# An editor stuck on licensing must not stall a whole discovery scan.
VERSION_READ_TIMEOUT = 20.0


def strip_revision(product_version: str) -> str:
    """Drop the trailing revision of a 4-part product version.

    `2021.3.5f1.43210` -> `2021.3.5f1`; 3-part strings are returned as-is.
    """

    text = product_version.strip()
    if text.count(".") >= 3:
        return text[: text.rindex(".")]
    return text


def read_windows_product_version(executable: str) -> str:
    """ProductVersion from the executable's VS_VERSIONINFO string table."""

    try:
        import win32api  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("pywin32 is required to read executable versions") from e

    translations = win32api.GetFileVersionInfo(executable, "\\VarFileInfo\\Translation")
    if translations:
        lang, codepage = translations[0]
        lang_cp = f"{lang:04x}{codepage:04x}"
    else:
        lang_cp = "040904b0"
    value = win32api.GetFileVersionInfo(executable, f"\\StringFileInfo\\{lang_cp}\\ProductVersion")
    if not value:
        raise ValueError(f"No ProductVersion in {executable}")
    return str(value)


def read_cli_version(executable: str, timeout: float = VERSION_READ_TIMEOUT) -> str:
    """Ask the editor itself; `Unity -version` prints the version and quits.

    Raises subprocess.TimeoutExpired when the editor does not answer in time.
    """

    r = run_cmd([executable, "-version"], check=True, timeout=timeout)
    lines = [ln.strip() for ln in (r.stdout or "").splitlines() if ln.strip()]
    if not lines:
        raise ValueError(f"{executable} -version printed nothing")
    return lines[-1]
