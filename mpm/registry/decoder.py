"""Field extractor for Maven Central search responses.

This is not a JSON parser. It only looks at flat ``{...}`` objects in the
payload and pulls out the handful of fields mpm needs:

* artifact records need string fields ``g``, ``a`` and ``latestVersion``;
  ``versionCount`` is optional and defaults to 0.
* version records (``core=gav``) need a string field ``v``.

A record missing a required field is dropped on its own; the rest of the
batch is kept. Anything around the records (response header, facets,
truncated tails) is ignored.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from mpm.registry.models import ArtifactCandidate

# Innermost objects only; Solr docs never nest.
FLAT_OBJECT_PATTERN = re.compile(r"\{[^{}]*\}")


def _string_field(name: str) -> re.Pattern[str]:
    return re.compile(r'"' + re.escape(name) + r'"\s*:\s*"([^"]+)"')


GROUP_PATTERN = _string_field("g")
ARTIFACT_PATTERN = _string_field("a")
LATEST_VERSION_PATTERN = _string_field("latestVersion")
VERSION_PATTERN = _string_field("v")
VERSION_COUNT_PATTERN = re.compile(r'"versionCount"\s*:\s*(\d+)')


def _first(pattern: re.Pattern[str], record: str) -> str | None:
    m = pattern.search(record)
    return m.group(1) if m else None


def extract_candidates(payload: str) -> list[ArtifactCandidate]:
    """Return artifact records in payload order (unranked)."""
    candidates: list[ArtifactCandidate] = []
    for m in FLAT_OBJECT_PATTERN.finditer(payload):
        record = m.group(0)
        group = _first(GROUP_PATTERN, record)
        name = _first(ARTIFACT_PATTERN, record)
        latest = _first(LATEST_VERSION_PATTERN, record)
        if group is None or name is None or latest is None:
            continue
        count = _first(VERSION_COUNT_PATTERN, record)
        candidates.append(
            ArtifactCandidate(
                group=group,
                name=name,
                latest_version=latest,
                version_count=int(count) if count else 0,
            )
        )
    return candidates


def extract_versions(payload: str) -> list[str]:
    """Return every ``v`` field in payload order.

    The registry lists newest first; the order is kept as-is.
    """
    versions: list[str] = []
    for m in FLAT_OBJECT_PATTERN.finditer(payload):
        version = _first(VERSION_PATTERN, m.group(0))
        if version is not None:
            versions.append(version)
    return versions


def rank_candidates(candidates: Iterable[ArtifactCandidate]) -> list[ArtifactCandidate]:
    """Sort by ``version_count`` descending; ties keep their input order."""
    return sorted(candidates, key=lambda c: c.version_count, reverse=True)
