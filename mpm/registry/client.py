"""Async Maven Central search client.

Three read-only queries against the Solr search endpoint:

* :meth:`MavenCentralClient.search`: free-text artifact search, ranked by
  version count.
* :meth:`MavenCentralClient.search_exact`: ``g:<group> AND a:<name>``.
* :meth:`MavenCentralClient.list_versions`: the same query against the
  ``gav`` core, one record per released version.

Failures (transport errors, timeouts, non-200 responses) raise
:class:`~mpm.exceptions.RegistryError`. Nothing is retried here.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from mpm.core.config import DEFAULT_CONNECT_TIMEOUT, DEFAULT_SEARCH_URL, DEFAULT_TIMEOUT
from mpm.exceptions import RegistryError
from mpm.registry.decoder import extract_candidates, extract_versions, rank_candidates
from mpm.registry.models import ArtifactCandidate

log = structlog.get_logger("mpm.registry")

VERSIONS_ROWS = 100


def exact_query(group: str, name: str) -> str:
    return f"g:{group} AND a:{name}"


class MavenCentralClient:
    """Thin async wrapper around the Maven Central search API."""

    def __init__(
        self,
        search_url: str = DEFAULT_SEARCH_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.search_url = search_url
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=connect_timeout),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> MavenCentralClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def search(self, query: str, limit: int = 10) -> list[ArtifactCandidate]:
        """Search artifacts by (partial) name.

        Returns at most *limit* candidates sorted by version count, most
        first. ``limit <= 0`` returns ``[]`` without a request. An empty
        list means "no matches"; failures raise :class:`RegistryError`.
        """
        if limit <= 0:
            return []
        payload = await self._select({"q": query, "rows": limit, "wt": "json"})
        results = rank_candidates(extract_candidates(payload))
        log.debug("registry.search", query=query, rows=limit, results=len(results))
        return results

    async def search_exact(self, group: str, name: str) -> ArtifactCandidate | None:
        """Look up one artifact by coordinates; ``None`` when it does not exist."""
        payload = await self._select({"q": exact_query(group, name), "rows": 1, "wt": "json"})
        results = rank_candidates(extract_candidates(payload))
        if not results:
            log.debug("registry.exact_miss", group=group, name=name)
            return None
        return results[0]

    async def list_versions(self, group: str, name: str) -> list[str]:
        """Return released versions in registry order (newest first).

        The order is not re-sorted: release recency is only known to the
        registry.
        """
        payload = await self._select(
            {
                "q": exact_query(group, name),
                "core": "gav",
                "rows": VERSIONS_ROWS,
                "wt": "json",
            }
        )
        versions = extract_versions(payload)
        log.debug("registry.versions", group=group, name=name, count=len(versions))
        return versions

    # ── internal ───────────────────────────────────────────────────────────

    async def _select(self, params: dict[str, Any]) -> str:
        """GET the search endpoint and return the body text of a 200 response."""
        try:
            resp = await self._client.get(self.search_url, params=params)
        except httpx.TimeoutException as exc:
            log.warning("registry.timeout", url=self.search_url, query=params.get("q"))
            raise RegistryError(f"registry request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            log.warning("registry.request_failed", url=self.search_url, error=str(exc))
            raise RegistryError(f"registry request failed: {exc}") from exc

        if resp.status_code != 200:
            log.warning("registry.bad_status", url=self.search_url, status=resp.status_code)
            raise RegistryError(
                f"registry returned status {resp.status_code}", status_code=resp.status_code
            )
        return resp.text
