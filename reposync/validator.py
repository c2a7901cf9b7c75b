"""Specifier validation against format and namespace policy."""

from collections.abc import Iterable

from reposync.exceptions import ValidationError
from reposync.logging import get_logger
from reposync.types.specs import RepoSpec

# Owner reserved for dataset references, which are not repositories
DATASETS_NAMESPACE = "datasets"

_logger = get_logger()


def check(spec: RepoSpec) -> None:
    """
    Check a spec against the validation rules.

    Raises:
        ValidationError: If the specifier is malformed or disallowed
    """
    key = spec.key
    if key.count("/") != 1 or not spec.owner or not spec.name:
        raise ValidationError(key, f"Malformed owner/repo: {key}")
    if spec.owner == DATASETS_NAMESPACE:
        raise ValidationError(key, f"Disallowed namespace: {key}")


def validate(spec: RepoSpec) -> bool:
    """Return True if the specifier passes validation."""
    try:
        check(spec)
    except ValidationError:
        return False
    return True


def filter_valid(
    specs: Iterable[RepoSpec],
) -> tuple[list[RepoSpec], list[ValidationError]]:
    """
    Split specs into the valid ones and the rejected ones.

    Each rejection is logged; none of them is fatal.
    """
    valid: list[RepoSpec] = []
    errors: list[ValidationError] = []
    for spec in specs:
        try:
            check(spec)
        except ValidationError as e:
            _logger.warning("Skipping invalid or disallowed: %s", spec.key)
            errors.append(e)
            continue
        valid.append(spec)
    return valid, errors


def require_valid(specs: Iterable[RepoSpec]) -> list[RepoSpec]:
    """
    Filter specs and fail if nothing survives.

    Raises:
        ValidationError: If no valid specs remain
    """
    valid, _ = filter_valid(specs)
    if not valid:
        raise ValidationError("", "No valid repos found.")
    return valid
