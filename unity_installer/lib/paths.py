from __future__ import annotations

import logging
import os
import re
from typing import Dict, Iterable, Optional

from ..errors import ResolutionExhausted
from ..models import UnityVersion

logger = logging.getLogger(__name__)

TEMPLATE_SEPARATOR = ";"
PLACEHOLDERS = ("major", "minor", "patch", "type", "build", "hash")

_PLACEHOLDER_RE = re.compile(r"\{(" + "|".join(PLACEHOLDERS) + r")\}", re.IGNORECASE)


def split_templates(templates: Optional[str]) -> list[str]:
    if not templates:
        return []
    return [t.strip() for t in templates.split(TEMPLATE_SEPARATOR) if t.strip()]


def _placeholder_values(version: UnityVersion) -> Dict[str, str]:
    return {
        "major": str(version.major),
        "minor": str(version.minor),
        "patch": str(version.patch),
        "type": version.type.value if version.type else "",
        "build": str(version.build),
        "hash": version.hash,
    }


def expand_template(version: UnityVersion, template: str) -> str:
    """Replace `{major}`..`{hash}` (any case) with the version's fields."""

    values = _placeholder_values(version)
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(1).lower()], template.strip())


def generate_unique_path(path: str) -> str:
    """Append ` 2`, ` 3`, ... to path until nothing exists there."""

    if not os.path.exists(path):
        return path
    n = 2
    while os.path.exists(f"{path} {n}"):
        n += 1
    return f"{path} {n}"


def resolve_unique_path(version: UnityVersion, templates: Optional[str | Iterable[str]]) -> str:
    """Pick the install directory for version from prioritized templates.

    The first template whose expansion does not exist wins, in the order the
    caller listed them. When every expansion is taken, the last one is made
    unique with a numeric suffix.
    """

    if isinstance(templates, str) or templates is None:
        candidates = split_templates(templates)
    else:
        candidates = [t.strip() for t in templates if t and t.strip()]

    expanded: Optional[str] = None
    for template in candidates:
        expanded = expand_template(version, template)
        if not os.path.isdir(expanded):
            logger.debug("Install path %s is free", expanded)
            return expanded
        logger.debug("Install path %s already exists", expanded)

    if expanded is not None:
        unique = generate_unique_path(expanded)
        logger.info("All install paths taken, using %s", unique)
        return unique

    raise ResolutionExhausted(f"No install path templates given for {version}")
