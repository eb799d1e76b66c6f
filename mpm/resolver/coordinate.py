"""Parse artifact references typed on the command line.

Supported forms::

    lombok                          name only
    lombok@1.18.30                  name + version (npm style)
    org.projectlombok:lombok        group + name
    org.projectlombok:lombok:1.18.30
    org.projectlombok:lombok@1.18.30

No character-set validation happens here; a bad group or name fails later,
at the registry or when the pom is written.
"""

from __future__ import annotations

from dataclasses import dataclass

from mpm.exceptions import InputError


@dataclass(frozen=True)
class PartialCoordinate:
    """An artifact reference with the parts the user actually typed."""

    name: str
    group: str | None = None
    version: str | None = None


@dataclass(frozen=True)
class Coordinate:
    """A fully resolved ``group:name:version`` triple."""

    group: str
    name: str
    version: str

    @property
    def key(self) -> str:
        return f"{self.group}:{self.name}"

    def __str__(self) -> str:
        return f"{self.group}:{self.name}@{self.version}"


def parse_coordinate(text: str) -> PartialCoordinate:
    """Split *text* into group / name / version.

    A version after the last ``@`` wins over a third ``:`` piece. A leading
    ``@`` is part of the name, not a version marker. Empty pieces count as
    absent; a missing name raises :class:`InputError`.
    """
    remainder = (text or "").strip()
    if not remainder:
        raise InputError("artifact reference must not be empty")

    version: str | None = None
    at = remainder.rfind("@")
    if at > 0:
        version = remainder[at + 1 :].strip() or None
        remainder = remainder[:at]

    parts = [p.strip() for p in remainder.split(":")]
    group: str | None = None
    if len(parts) == 1:
        name = parts[0]
    else:
        group = parts[0] or None
        name = parts[1]
        if len(parts) >= 3 and version is None:
            version = parts[2] or None

    if not name:
        raise InputError(f"no artifact name in {text.strip()!r}")
    return PartialCoordinate(name=name, group=group, version=version)
