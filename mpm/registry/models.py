"""Data models for registry search results."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ArtifactCandidate:
    """One artifact identity returned by a registry search.

    ``version_count`` is a popularity proxy used for ranking only.
    """

    group: str
    name: str
    latest_version: str
    version_count: int = 0

    @property
    def key(self) -> str:
        return f"{self.group}:{self.name}"

    @property
    def coordinates(self) -> str:
        return f"{self.group}:{self.name}:{self.latest_version}"

    def __str__(self) -> str:
        return f"{self.group}:{self.name}@{self.latest_version}"
