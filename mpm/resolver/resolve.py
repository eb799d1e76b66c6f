"""Fill in missing coordinate parts from the registry."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from mpm.exceptions import NotFoundError
from mpm.registry.client import MavenCentralClient
from mpm.resolver.coordinate import Coordinate, PartialCoordinate
from mpm.resolver.selector import Selection, select_candidate

log = structlog.get_logger("mpm.resolver")

SEARCH_ROWS = 10


@dataclass(frozen=True)
class Resolution:
    coordinate: Coordinate
    # Set only when the group had to be found by searching.
    selection: Selection | None = None


async def resolve_coordinate(
    client: MavenCentralClient,
    partial: PartialCoordinate,
    *,
    search_rows: int = SEARCH_ROWS,
) -> Resolution:
    """Resolve *partial* to a full coordinate.

    No group: search by name and select a candidate (its latest version is
    used unless one was pinned). Still no version: exact lookup for the
    latest. Raises :class:`NotFoundError` when the registry has nothing.
    """
    group, name, version = partial.group, partial.name, partial.version
    selection: Selection | None = None

    if group is None:
        results = await client.search(name, search_rows)
        if not results:
            raise NotFoundError(f"No artifacts found matching: {name}")
        selection = select_candidate(results, name)
        chosen = selection.candidate
        log.debug(
            "resolver.selected",
            query=name,
            candidate=chosen.key,
            exact=selection.exact,
        )
        group, name = chosen.group, chosen.name
        if version is None:
            version = chosen.latest_version

    if version is None:
        artifact = await client.search_exact(group, name)
        if artifact is None:
            raise NotFoundError(f"Artifact not found: {group}:{name}")
        version = artifact.latest_version

    return Resolution(coordinate=Coordinate(group=group, name=name, version=version), selection=selection)
