"""
reposync logging utilities.

Provides configurable logging for HTTP requests/responses and document
merges. Ensures no credentials (tokens, Authorization headers) are logged.
"""

import logging
import re
from typing import Any

# Package-specific loggers
_pkg_logger = logging.getLogger("reposync")
_http_logger = logging.getLogger("reposync.http")
_merge_logger = logging.getLogger("reposync.merge")

# Patterns for sensitive data that should be masked
_SENSITIVE_PATTERNS = [
    # Authorization header values
    (re.compile(r"(Bearer|token)\s+[A-Za-z0-9_\-\.]{8,}", re.IGNORECASE), r"\1 [TOKEN_REDACTED]"),
    # GitHub token formats (classic, fine-grained, app, oauth)
    (re.compile(r"\b(ghp|gho|ghu|ghs|ghr)_[A-Za-z0-9]{20,}\b"), "[TOKEN_REDACTED]"),
    (re.compile(r"\bgithub_pat_[A-Za-z0-9_]{20,}\b"), "[TOKEN_REDACTED]"),
    # password= lines from git credential output
    (re.compile(r"^password=.*$", re.MULTILINE), "password=[REDACTED]"),
    # Secret/token key-value pairs
    (re.compile(r"(secret|token|password|api_key)['\"]?\s*[:=]\s*['\"][^'\"]+['\"]", re.IGNORECASE), r"\1: [REDACTED]"),
]

_DEFAULT_SENSITIVE_KEYS = {"authorization", "token", "password", "secret", "api_key"}

_installed_handler: logging.Handler | None = None


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    merge_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure reposync logging.

    Args:
        level: Default log level for all package loggers (default: INFO)
        http_level: Log level for HTTP request/response logging (default: same as level)
        merge_level: Log level for document merge logging (default: same as level)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string (default: level and message only)

    Example:
        ```python
        import logging
        from reposync.logging import configure_logging

        # Trace every host API call
        configure_logging(level=logging.INFO, http_level=logging.DEBUG)
        ```
    """
    if format_string is None:
        format_string = "%(levelname)s: %(message)s"

    formatter = logging.Formatter(format_string)

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(formatter)

    # Replace the handler from an earlier call instead of stacking them
    global _installed_handler
    if _installed_handler is not None:
        _pkg_logger.removeHandler(_installed_handler)
    _installed_handler = handler

    _pkg_logger.setLevel(level)
    _pkg_logger.addHandler(handler)

    _http_logger.setLevel(http_level if http_level is not None else level)
    _merge_logger.setLevel(merge_level if merge_level is not None else level)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a reposync logger.

    Args:
        name: Logger name suffix (e.g., "http", "merge"). If None, returns the package logger.
    """
    if name is None:
        return _pkg_logger
    return logging.getLogger(f"reposync.{name}")


def mask_sensitive_data(text: str) -> str:
    """
    Mask credentials in a string.

    Args:
        text: Text that may contain tokens or passwords

    Returns:
        Text with sensitive data masked
    """
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def safe_log_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """
    Create a copy of a dictionary with sensitive values masked.

    Args:
        data: Dictionary that may contain sensitive values
        sensitive_keys: Keys to mask (default: authorization, token, password, secret, api_key)

    Returns:
        Dictionary with sensitive values replaced with "[REDACTED]"
    """
    if sensitive_keys is None:
        sensitive_keys = _DEFAULT_SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = key.lower()
        if any(sk in key_lower for sk in sensitive_keys):
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value, sensitive_keys)
        elif isinstance(value, list):
            result[key] = [
                safe_log_dict(item, sensitive_keys) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            result[key] = value

    return result


def log_http_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    body: dict[str, Any] | None = None,
) -> None:
    """Log an HTTP request at DEBUG level with sensitive data masked."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{method} {url}"]

    if headers:
        log_parts.append(f"headers={safe_log_dict(headers)}")

    if body:
        log_parts.append(f"body={safe_log_dict(body)}")

    _http_logger.debug(" | ".join(log_parts))


def log_http_response(
    status_code: int,
    url: str,
    body: dict[str, Any] | None = None,
    elapsed_ms: float | None = None,
) -> None:
    """Log an HTTP response at DEBUG level with sensitive data masked."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"Response {status_code} from {url}"]

    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    if body:
        log_parts.append(f"body={safe_log_dict(body)}")

    _http_logger.debug(" | ".join(log_parts))


def log_merge(backend: str, path: str, keys: list[str], dry_run: bool) -> None:
    """Log a document merge at DEBUG level."""
    if not _merge_logger.isEnabledFor(logging.DEBUG):
        return

    mode = "dry-run" if dry_run else "in-place"
    _merge_logger.debug(
        f"merge via {backend} ({mode}) into {path}: {', '.join(keys) or '(none)'}"
    )


__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
    "log_merge",
]
