"""Repository specifier data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RepoSpec:
    """A normalized repository specifier."""

    owner: str
    name: str
    branch: str | None = None

    @property
    def key(self) -> str:
        """The ``owner/name`` key used by the host API and the document."""
        return f"{self.owner}/{self.name}"

    @property
    def raw(self) -> str:
        """Render back to specifier form (``owner/name[@branch]``)."""
        if self.branch:
            return f"{self.key}@{self.branch}"
        return self.key

    def __str__(self) -> str:
        return self.raw
