"""Data models for pom.xml dependencies."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_SCOPE = "compile"
VALID_SCOPES = ("compile", "test", "provided", "runtime", "system", "import")


@dataclass(frozen=True)
class DependencyEntry:
    """A ``<dependency>`` declared directly under ``<project><dependencies>``.

    ``scope`` is None when the element has no ``<scope>`` child; that
    matches ``compile`` but is kept as None.
    """

    group: str
    name: str
    version: str | None = None
    scope: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.group, self.name)

    @property
    def effective_scope(self) -> str:
        return self.scope or DEFAULT_SCOPE

    def to_dict(self) -> dict[str, str | None]:
        return {
            "groupId": self.group,
            "artifactId": self.name,
            "version": self.version,
            "scope": self.scope,
        }

    def __str__(self) -> str:
        result = f"{self.group}:{self.name}@{self.version}"
        if self.effective_scope != DEFAULT_SCOPE:
            result += f" ({self.scope})"
        return result
