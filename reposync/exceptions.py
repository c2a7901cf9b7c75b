"""reposync exception classes."""


class ReposyncError(Exception):
    """Base exception for all reposync errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class ConfigurationError(ReposyncError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class ParseError(ReposyncError):
    """Raised when a raw specifier cannot be turned into owner/repo."""

    def __init__(self, raw: str, message: str) -> None:
        super().__init__("PARSE_ERROR", message)
        self.raw = raw


class ValidationError(ReposyncError):
    """Raised when a specifier is malformed or names a disallowed owner."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__("VALIDATION_ERROR", message)
        self.key = key


class HostAPIError(ReposyncError):
    """Raised on unexpected host responses, network failures and timeouts."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str = "HOST_API_ERROR",
    ) -> None:
        super().__init__(code, message)
        self.status_code = status_code


class CredentialError(ReposyncError):
    """Raised when no usable token can be found."""

    def __init__(self, message: str) -> None:
        super().__init__("CREDENTIAL_ERROR", message)


class NoBackendError(ReposyncError):
    """Raised when no structured-document backend is available."""

    def __init__(self, message: str) -> None:
        super().__init__("NO_BACKEND", message)


class DocumentIOError(ReposyncError):
    """Raised when a document or spec file cannot be read or written."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__("DOCUMENT_IO_ERROR", message)
        self.path = path
