"""Pick the search result the user most likely meant."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from mpm.registry.models import ArtifactCandidate

MAX_ALTERNATIVES = 4


@dataclass(frozen=True)
class Selection:
    """The chosen candidate.

    ``exact`` is False when no result's name matched the query and the
    top-ranked result was taken as a best guess; ``alternatives`` then holds
    the next-ranked results for the user to choose from instead.
    """

    candidate: ArtifactCandidate
    exact: bool
    alternatives: tuple[ArtifactCandidate, ...] = field(default_factory=tuple)

    @property
    def ambiguous(self) -> bool:
        return not self.exact


def select_candidate(results: Sequence[ArtifactCandidate], query: str) -> Selection:
    """Choose from ranked *results* for *query*.

    1. The top result, when its name equals *query* (case-insensitive).
    2. Otherwise the first result in rank order whose name equals *query*.
    3. Otherwise the top result as a best guess, with up to
       :data:`MAX_ALTERNATIVES` runners-up.
    """
    if not results:
        raise ValueError("select_candidate() needs at least one result")

    wanted = query.strip().casefold()
    for candidate in results:
        if candidate.name.casefold() == wanted:
            return Selection(candidate=candidate, exact=True)

    return Selection(
        candidate=results[0],
        exact=False,
        alternatives=tuple(results[1 : 1 + MAX_ALTERNATIVES]),
    )
