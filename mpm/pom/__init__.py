"""pom.xml model and format-preserving editor."""

from mpm.pom.editor import EditorState, PomEditor
from mpm.pom.models import DEFAULT_SCOPE, VALID_SCOPES, DependencyEntry

__all__ = ["DEFAULT_SCOPE", "VALID_SCOPES", "DependencyEntry", "EditorState", "PomEditor"]
