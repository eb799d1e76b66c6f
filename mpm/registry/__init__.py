"""Registry client: search Maven Central for artifact candidates."""

from mpm.registry.client import MavenCentralClient
from mpm.registry.models import ArtifactCandidate

__all__ = ["ArtifactCandidate", "MavenCentralClient"]
