from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional, Tuple

EDITOR_PACKAGE_NAME = "Unity"


class ReleaseType(str, Enum):
    ALPHA = "a"
    BETA = "b"
    FINAL = "f"
    PATCH = "p"
    EXPERIMENTAL = "x"


_VERSION_RE = re.compile(
    r"^\s*(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"
    r"(?P<type>[abfpx])(?P<build>\d+)"
    r"(?:\s*\((?P<hash_paren>[0-9a-fA-F]+)\)|_(?P<hash_us>[0-9a-fA-F]+))?\s*$"
)


@dataclass(frozen=True)
class UnityVersion:
    major: int = 0
    minor: int = 0
    patch: int = 0
    type: Optional[ReleaseType] = None
    build: int = 0
    hash: str = ""

    INVALID: ClassVar["UnityVersion"]

    @property
    def is_valid(self) -> bool:
        return self.type is not None and self.major > 0

    @classmethod
    def parse(cls, text: str) -> "UnityVersion":
        """Parse `2021.3.5f1`, `2021.3.5f1 (hash)` or `2021.3.5f1_hash`."""

        m = _VERSION_RE.match(text or "")
        if not m:
            raise ValueError(f"Not a Unity version: {text!r}")
        return cls(
            major=int(m.group("major")),
            minor=int(m.group("minor")),
            patch=int(m.group("patch")),
            type=ReleaseType(m.group("type")),
            build=int(m.group("build")),
            hash=(m.group("hash_paren") or m.group("hash_us") or "").lower(),
        )

    def _key(self) -> Tuple[int, int, int, str, int]:
        return (self.major, self.minor, self.patch, self.type.value if self.type else "", self.build)

    def matches(self, other: "UnityVersion") -> bool:
        """Same release; hashes only have to agree when both sides carry one."""

        if self._key() != other._key():
            return False
        if self.hash and other.hash:
            return self.hash == other.hash
        return True

    def __str__(self) -> str:
        if not self.is_valid:
            return "<invalid>"
        s = f"{self.major}.{self.minor}.{self.patch}{self.type.value}{self.build}"
        if self.hash:
            s += f" ({self.hash})"
        return s


UnityVersion.INVALID = UnityVersion()


@dataclass(frozen=True)
class Package:
    name: str
    file_path: str

    @property
    def is_editor(self) -> bool:
        return self.name == EDITOR_PACKAGE_NAME


@dataclass(frozen=True)
class InstallQueue:
    version: UnityVersion
    items: Tuple[Package, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, version: UnityVersion, items: List[Package]) -> "InstallQueue":
        return cls(version=version, items=tuple(items))

    @property
    def has_editor(self) -> bool:
        return any(i.is_editor for i in self.items)


@dataclass(frozen=True)
class Installation:
    version: UnityVersion
    path: str
    executable: str
