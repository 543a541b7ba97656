from __future__ import annotations

import logging
from pathlib import Path

import pytest

from unity_installer import logging_utils
from unity_installer.logging_utils import configure_logging


@pytest.fixture
def clean_root():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield root
    for h in list(root.handlers):
        if h not in saved_handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(saved_level)


def _flush(root: logging.Logger) -> None:
    for h in root.handlers:
        h.flush()


def test_configure_once_and_write_file(clean_root, tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "installer.log"

    actual = configure_logging(str(log_path), also_console=False)
    again = configure_logging(str(tmp_path / "other.log"), level="debug", also_console=False)

    logging.getLogger("unity_installer.test").debug("hello from test")
    _flush(clean_root)

    assert actual == str(log_path)
    assert again == str(log_path)
    assert clean_root.level == logging.DEBUG
    assert "hello from test" in log_path.read_text(encoding="utf-8")
    assert not (tmp_path / "other.log").exists()


def test_unwritable_path_falls_back_to_temp(
    clean_root, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    monkeypatch.setattr(logging_utils.tempfile, "gettempdir", lambda: str(tmp_path / "tmp"))

    actual = configure_logging(str(blocker / "installer.log"), also_console=False)

    assert actual == str(tmp_path / "tmp" / "unity-installer.log")


def test_unknown_level_name_means_info(clean_root, tmp_path: Path) -> None:
    configure_logging(str(tmp_path / "x.log"), level="chatty", also_console=False)
    assert clean_root.level == logging.INFO
