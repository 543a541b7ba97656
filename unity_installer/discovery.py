from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List

from .lib.version_info import strip_revision
from .models import Installation, UnityVersion
from .platforms import PlatformLayout, ScanRoot

logger = logging.getLogger(__name__)


class InstallationScanner:
    """Find completed installations by checking the layout's scan roots.

    Read-only and restartable: every call rescans the filesystem. Results are
    not deduplicated; parallel installs of one version show up once each.
    """

    def __init__(self, layout: PlatformLayout) -> None:
        self.layout = layout

    def _root_candidates(self, root: ScanRoot) -> List[Path]:
        p = Path(root.path)
        if not p.is_dir():
            logger.debug("Scan root %s does not exist", str(p))
            return []
        if not root.children:
            return [p]
        return sorted((c for c in p.iterdir() if c.is_dir()), key=lambda c: c.name.lower())

    def _candidates(self) -> List[Path]:
        out: List[Path] = []
        for root in self.layout.scan_roots:
            try:
                out.extend(self._root_candidates(root))
            except OSError as e:
                logger.warning("Cannot scan %s: %s", root.path, e)
        return out

    def find_installations(self) -> List[Installation]:
        installations: List[Installation] = []
        for candidate in self._candidates():
            executable = Path(self.layout.executable_for(str(candidate)))
            if not executable.is_file():
                logger.debug("No %s in %s", self.layout.executable_rel, str(candidate))
                continue

            try:
                raw = self.layout.version_reader(str(executable))
                version = UnityVersion.parse(strip_revision(raw))
            except subprocess.TimeoutExpired:
                logger.warning("Reading version of %s timed out, skipping", str(executable))
                continue
            except Exception as e:
                logger.warning("Could not read version of %s: %s", str(executable), e)
                continue

            logger.debug("Found version %s in %s", version, str(candidate))
            installations.append(
                Installation(version=version, path=str(candidate), executable=str(executable))
            )
        return installations

    def find_version(self, version: UnityVersion) -> List[Installation]:
        return [i for i in self.find_installations() if i.version.matches(version)]
