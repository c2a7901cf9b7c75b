"""reposync type definitions.

This module exports all data model types used by the package.
"""

from reposync.types.permissions import (
    AccessLevel,
    ContentsOnly,
    DefaultPermissions,
    PermissionMode,
    PermissionSet,
    WriteAll,
    permission_set_for,
)
from reposync.types.remote import (
    Action,
    CreateStatus,
    Probe,
    ReconcileReport,
    RemoteRepoState,
    SpecResult,
    create_status_from,
    probe_from_status,
)
from reposync.types.specs import RepoSpec

__all__ = [
    # Specifiers
    "RepoSpec",
    # Permissions
    "AccessLevel",
    "PermissionMode",
    "PermissionSet",
    "WriteAll",
    "ContentsOnly",
    "DefaultPermissions",
    "permission_set_for",
    # Remote state
    "Probe",
    "CreateStatus",
    "Action",
    "RemoteRepoState",
    "SpecResult",
    "ReconcileReport",
    "probe_from_status",
    "create_status_from",
]
