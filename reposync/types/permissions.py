"""Codespaces permission models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class AccessLevel(str, Enum):
    READ = "read"
    WRITE = "write"


class PermissionMode(str, Enum):
    """Global permission mode selected once per run."""

    DEFAULT = "default"
    ALL = "all"
    CONTENTS = "contents"


@dataclass(frozen=True)
class WriteAll:
    """Grants every scope with write access."""

    def to_dict(self) -> dict[str, Any]:
        return {"permissions": "write-all"}


@dataclass(frozen=True)
class ContentsOnly:
    """Grants write access to repository contents only."""

    def to_dict(self) -> dict[str, Any]:
        return {"permissions": {"contents": AccessLevel.WRITE.value}}


@dataclass(frozen=True)
class DefaultPermissions:
    """The standard per-scope grant."""

    actions: AccessLevel = AccessLevel.WRITE
    contents: AccessLevel = AccessLevel.WRITE
    packages: AccessLevel = AccessLevel.READ
    workflows: AccessLevel = AccessLevel.WRITE

    def to_dict(self) -> dict[str, Any]:
        return {
            "permissions": {
                "actions": self.actions.value,
                "contents": self.contents.value,
                "packages": self.packages.value,
                "workflows": self.workflows.value,
            }
        }


PermissionSet = WriteAll | ContentsOnly | DefaultPermissions


def permission_set_for(mode: PermissionMode | str) -> PermissionSet:
    """Map a permission mode to its permission set."""
    mode = PermissionMode(mode)
    if mode is PermissionMode.ALL:
        return WriteAll()
    if mode is PermissionMode.CONTENTS:
        return ContentsOnly()
    return DefaultPermissions()
