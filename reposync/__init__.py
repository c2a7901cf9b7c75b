"""reposync - provision GitHub repositories and Codespaces permissions from a repo list."""

from reposync.async_client import AsyncHostClient
from reposync.client import HostClient
from reposync.credentials import (
    ChainCredentialProvider,
    Credential,
    CredentialProvider,
    EnvCredentialProvider,
    GitCredentialProvider,
    require_credential,
)
from reposync.document import (
    DocumentMerger,
    JqMerger,
    NativeMerger,
    build_batch,
    merge_repositories,
    select_merger,
    update_document,
)
from reposync.exceptions import (
    ConfigurationError,
    CredentialError,
    DocumentIOError,
    HostAPIError,
    NoBackendError,
    ParseError,
    ReposyncError,
    ValidationError,
)
from reposync.logging import configure_logging, get_logger
from reposync.parser import normalize, parse_lines, parse_override, read_spec_file
from reposync.reconciler import AsyncRepositoryReconciler, RepositoryReconciler
from reposync.transport import HTTPTransport, RetryConfig
from reposync.types import PermissionMode, RepoSpec
from reposync.validator import filter_valid, validate

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Clients
    "HostClient",
    "AsyncHostClient",
    # Parsing and validation
    "RepoSpec",
    "normalize",
    "parse_lines",
    "parse_override",
    "read_spec_file",
    "validate",
    "filter_valid",
    # Reconciliation
    "RepositoryReconciler",
    "AsyncRepositoryReconciler",
    # Document merging
    "PermissionMode",
    "DocumentMerger",
    "JqMerger",
    "NativeMerger",
    "build_batch",
    "merge_repositories",
    "select_merger",
    "update_document",
    # Credentials
    "Credential",
    "CredentialProvider",
    "EnvCredentialProvider",
    "GitCredentialProvider",
    "ChainCredentialProvider",
    "require_credential",
    # Exceptions
    "ReposyncError",
    "ParseError",
    "ValidationError",
    "HostAPIError",
    "CredentialError",
    "NoBackendError",
    "DocumentIOError",
    "ConfigurationError",
    # Transport
    "HTTPTransport",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
]
