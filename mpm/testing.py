"""Test doubles for mpm: an in-memory Maven Central search endpoint.

Usage::

    from mpm.testing import FakeRegistry

    registry = FakeRegistry()
    registry.add("com.fasterxml.jackson.core", "jackson-databind", ["2.15.2", "2.15.1"])
    async with registry.client() as client:
        results = await client.search("jackson-databind")

Responses are shaped like real Solr ``select`` responses, so they go
through the same decoder as production traffic.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

import httpx

from mpm.core.config import DEFAULT_SEARCH_URL
from mpm.registry.client import MavenCentralClient

_EXACT_QUERY_RE = re.compile(r"^g:(?P<group>\S+) AND a:(?P<name>\S+)$")


@dataclass
class _Artifact:
    group: str
    name: str
    versions: list[str]  # newest first
    version_count: int


@dataclass
class FakeRegistry:
    """Serves artifacts registered with :meth:`add` over ``httpx.MockTransport``.

    Set ``status`` to make every request fail with that HTTP status, or
    ``error`` to raise that exception from the transport.
    """

    status: int = 200
    error: Exception | None = None
    artifacts: list[_Artifact] = field(default_factory=list)
    requests: list[httpx.Request] = field(default_factory=list)

    def add(
        self,
        group: str,
        name: str,
        versions: list[str],
        version_count: int | None = None,
    ) -> None:
        self.artifacts.append(
            _Artifact(
                group=group,
                name=name,
                versions=list(versions),
                version_count=len(versions) if version_count is None else version_count,
            )
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def client(self) -> MavenCentralClient:
        return MavenCentralClient(DEFAULT_SEARCH_URL, transport=self.transport)

    # ── internal ───────────────────────────────────────────────────────────

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.status != 200:
            return httpx.Response(self.status, text="<html>unavailable</html>")

        params = request.url.params
        query = params.get("q", "")
        rows = int(params.get("rows", "20"))
        exact = _EXACT_QUERY_RE.match(query)

        if exact:
            matches = [
                a
                for a in self.artifacts
                if a.group == exact.group("group") and a.name == exact.group("name")
            ]
        else:
            needle = query.lower()
            matches = [a for a in self.artifacts if needle in a.name.lower() or needle in a.group.lower()]

        if params.get("core") == "gav":
            docs = [self._version_doc(a, v) for a in matches for v in a.versions][:rows]
        else:
            docs = [self._artifact_doc(a) for a in matches][:rows]
        return httpx.Response(200, text=solr_response(docs, dict(params)))

    @staticmethod
    def _artifact_doc(artifact: _Artifact) -> dict[str, Any]:
        return {
            "id": f"{artifact.group}:{artifact.name}",
            "g": artifact.group,
            "a": artifact.name,
            "latestVersion": artifact.versions[0],
            "repositoryId": "central",
            "p": "jar",
            "timestamp": 1700000000000,
            "versionCount": artifact.version_count,
            "text": [artifact.group, artifact.name, ".jar"],
            "ec": ["-sources.jar", ".jar", ".pom"],
        }

    @staticmethod
    def _version_doc(artifact: _Artifact, version: str) -> dict[str, Any]:
        return {
            "id": f"{artifact.group}:{artifact.name}:{version}",
            "g": artifact.group,
            "a": artifact.name,
            "v": version,
            "p": "jar",
            "timestamp": 1700000000000,
            "ec": [".jar", ".pom"],
            "tags": ["maven"],
        }


def solr_response(docs: list[dict[str, Any]], params: dict[str, Any] | None = None) -> str:
    """Wrap *docs* in a Solr ``select`` response body."""
    return json.dumps(
        {
            "responseHeader": {"status": 0, "QTime": 1, "params": params or {}},
            "response": {"numFound": len(docs), "start": 0, "docs": docs},
        }
    )
