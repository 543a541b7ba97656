from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .platforms import ScanRoot

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


@dataclass(frozen=True)
class InstallerConfig:
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def install_paths(self) -> Optional[str]:
        """`;`-separated install path templates, or None for the platform default."""

        value = self.raw.get("install_paths")
        if isinstance(value, list):
            value = ";".join(str(v) for v in value)
        return str(value) if value else None

    @property
    def extra_scan_roots(self) -> List[ScanRoot]:
        roots: List[ScanRoot] = []
        for entry in self.raw.get("scan_roots") or []:
            if isinstance(entry, str):
                roots.append(ScanRoot(entry, children=True))
            else:
                roots.append(ScanRoot(str(entry["path"]), children=bool(entry.get("children", True))))
        return roots

    @property
    def elevation_command(self) -> List[str]:
        value = self.raw.get("elevation_command") or ["sudo"]
        if isinstance(value, str):
            return value.split()
        return [str(v) for v in value]

    @property
    def log_path(self) -> Optional[str]:
        return ((self.raw.get("logging") or {}).get("path")) or None

    @property
    def log_level(self) -> str:
        return str(((self.raw.get("logging") or {}).get("level")) or "INFO").upper()


def load_config(path: Optional[str]) -> InstallerConfig:
    """Load settings from JSON or YAML; a missing file means defaults."""

    if not path:
        return InstallerConfig()
    p = Path(path)
    if not p.exists():
        logger.debug("No config at %s, using defaults", path)
        return InstallerConfig()

    fmt = _detect_format(p)
    if fmt in {"yaml", "yml"}:
        try:
            import yaml  # type: ignore
        except Exception as e:  # pragma: no cover
            raise RuntimeError("PyYAML is required to read YAML config") from e
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    else:
        raw = json.loads(p.read_text(encoding="utf-8"))

    if not isinstance(raw, dict):
        raise ValueError(f"Config must be an object/dict, got {type(raw)}")
    return InstallerConfig(raw=raw)
