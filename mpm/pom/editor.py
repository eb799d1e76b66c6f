"""Read and edit pom.xml without disturbing what mpm does not touch.

The document is parsed into an lxml tree (comments, processing
instructions and whitespace kept) for queries and edits, and the source
text is kept alongside it. On save, every node mpm did not change is
copied from the source verbatim; only the ``<dependencies>`` block being
edited (or created) and the new ``<dependency>`` elements are written out
fresh.

On save the whole file gets the same whitespace clean-up: line endings
become ``\\n`` and runs of blank lines collapse to one. Saving an unchanged
document twice yields identical bytes.
"""

from __future__ import annotations

import codecs
import enum
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from xml.sax.saxutils import escape

import structlog
from lxml import etree

from mpm.exceptions import (
    AlreadyExistsError,
    ManifestIOError,
    ManifestParseError,
    ManifestStateError,
)
from mpm.pom.models import DEFAULT_SCOPE, DependencyEntry
from mpm.pom.template import DEFAULT_JAVA_VERSION, render_pom

log = structlog.get_logger("mpm.pom")

DEFAULT_INDENT = "    "

_BLANK_LINES_RE = re.compile(r"\n(?:[ \t]*\n){2,}")
# Markup tokens; text between them is never matched.
_MARKUP_RE = re.compile(
    r"<!--.*?-->"
    r"|<!\[CDATA\[.*?\]\]>"
    r"|<\?.*?\?>"
    r"|<!DOCTYPE(?:[^\[>]|\[.*?\])*>"
    r"|</[^>]*>"
    r"|<(?:[^>\"']|\"[^\"]*\"|'[^']*')*>",
    re.S,
)
_TAG_NAME_RE = re.compile(r"</?([^\s/>]+)")


def normalize_whitespace(text: str) -> str:
    """Unify line endings, collapse blank-line runs, end with one newline."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _BLANK_LINES_RE.sub("\n\n", text)
    return text.rstrip("\n") + "\n"


@dataclass
class SourceSpan:
    """Where a node sits in the source text.

    ``inner_start``/``inner_end`` bound an element's content and are None
    for self-closing elements, comments and PIs. The ``*_src`` slices are the
    raw text and tail; ``*_val`` are the values lxml reported at load time.
    """

    start: int
    end: int
    inner_start: int | None = None
    inner_end: int | None = None
    text_src: str | None = None
    tail_src: str | None = None
    text_val: str | None = None
    tail_val: str | None = None


def scan_markup(text: str) -> list[SourceSpan]:
    """Spans of the root element and every node inside it, in document order."""
    spans: list[SourceSpan] = []
    stack: list[SourceSpan] = []
    for m in _MARKUP_RE.finditer(text):
        token = m.group(0)
        if token.startswith("<![CDATA["):
            continue
        if token.startswith("</"):
            if not stack:
                break
            span = stack.pop()
            span.inner_end, span.end = m.start(), m.end()
            if not stack:
                break
            continue
        leaf = token.startswith(("<!", "<?"))
        if leaf and not spans:
            # Prolog: declaration, comments, DOCTYPE.
            continue
        span = SourceSpan(m.start(), m.end())
        spans.append(span)
        if not leaf and not token.endswith("/>"):
            span.inner_start = m.end()
            stack.append(span)
        elif not stack:
            break
    return spans


def _new_parser() -> etree.XMLParser:
    return etree.XMLParser(
        remove_blank_text=False,
        remove_comments=False,
        remove_pis=False,
        strip_cdata=False,
        resolve_entities=False,
        no_network=True,
    )


def _is_element(node: etree._Element) -> bool:
    # Comments and PIs have a callable tag.
    return isinstance(node.tag, str)


def _token_matches(node: etree._Element, token: str) -> bool:
    if isinstance(node, etree._Comment):
        return token.startswith("<!--")
    if isinstance(node, etree._ProcessingInstruction):
        return token.startswith("<?")
    if not _is_element(node):
        return False
    m = _TAG_NAME_RE.match(token)
    return m is not None and m.group(1).rpartition(":")[2] == etree.QName(node).localname


def _bind_spans(root: etree._Element, source: str, spans: list[SourceSpan]) -> dict[etree._Element, SourceSpan]:
    """Pair tree nodes with their source spans; empty if they disagree."""
    nodes = list(root.iter())
    if len(nodes) != len(spans):
        return {}
    for node, span in zip(nodes, spans):
        if not _token_matches(node, source[span.start : span.end]):
            return {}

    bound = dict(zip(nodes, spans))
    for node, span in bound.items():
        span.tail_val = node.tail
        if span.inner_start is None:
            continue
        span.text_val = node.text
        kids = [bound[child] for child in node]
        span.text_src = source[span.inner_start : kids[0].start if kids else span.inner_end]
        for i, kid in enumerate(kids):
            following = kids[i + 1].start if i + 1 < len(kids) else span.inner_end
            kid.tail_src = source[kid.end : following]
    return bound


def _indent_of(whitespace: str | None) -> str | None:
    """Indentation after the last newline of *whitespace*, if it is pure whitespace."""
    if whitespace is None or whitespace.strip() or "\n" not in whitespace:
        return None
    return whitespace.rsplit("\n", 1)[1]


class EditorState(enum.Enum):
    UNLOADED = "unloaded"
    LOADED = "loaded"
    SAVED = "saved"


class PomEditor:
    """Loads, queries, mutates and saves a single pom.xml.

    Queries and mutations load the file on first use. ``save`` is never
    implicit.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._tree: etree._ElementTree | None = None
        self._ns: str | None = None
        self._source = ""
        self._bom = b""
        self._encoding = "UTF-8"
        self._root_span: SourceSpan | None = None
        self._spans: dict[etree._Element, SourceSpan] = {}
        # Elements whose own text, children or children's tails were edited.
        self._touched: set[etree._Element] = set()
        self._state = EditorState.UNLOADED

    @property
    def state(self) -> EditorState:
        return self._state

    def exists(self) -> bool:
        return self.path.exists()

    # ── load / save ───────────────────────────────────────────────────────

    def load(self) -> None:
        """Parse the file. Raises :class:`ManifestParseError` if missing or invalid."""
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            raise ManifestParseError(f"{self.path} not found") from None
        except OSError as exc:
            raise ManifestParseError(f"cannot read {self.path}: {exc}") from exc

        try:
            root = etree.fromstring(raw, _new_parser())
        except etree.XMLSyntaxError as exc:
            raise ManifestParseError(f"failed to parse {self.path}: {exc}") from exc
        if etree.QName(root).localname != "project":
            raise ManifestParseError(f"{self.path} is not a Maven project (root must be <project>)")

        encoding = root.getroottree().docinfo.encoding or "UTF-8"
        bom = codecs.BOM_UTF8 if raw.startswith(codecs.BOM_UTF8) else b""
        try:
            source = raw[len(bom) :].decode(encoding)
        except (LookupError, UnicodeDecodeError) as exc:
            raise ManifestParseError(f"cannot decode {self.path} as {encoding}: {exc}") from exc

        spans = scan_markup(source)
        self._spans = _bind_spans(root, source, spans)
        if not self._spans:
            log.warning("pom.source_unmapped", path=str(self.path))
        self._root_span = spans[0] if spans else None
        self._source = source
        self._bom = bom
        self._encoding = encoding
        self._touched = set()
        self._tree = root.getroottree()
        self._ns = etree.QName(root).namespace
        self._state = EditorState.LOADED
        log.debug("pom.loaded", path=str(self.path), namespace=self._ns)

    def serialize(self) -> bytes:
        """Render the current document as it would be saved."""
        root = self._loaded_tree().getroot()
        if root in self._spans:
            body = self._render(root)
        else:
            body = etree.tostring(root, encoding="unicode")
        span = self._root_span
        head = self._source[: span.start] if span else ""
        tail = self._source[span.end :] if span else ""
        text = normalize_whitespace(head + body + tail)
        return self._bom + text.encode(self._encoding, errors="xmlcharrefreplace")

    def save(self) -> None:
        """Write the document back to disk.

        The in-memory document is left untouched, so a failed save can simply
        be retried. Raises :class:`ManifestIOError` on write failure.
        """
        if self._tree is None:
            raise ManifestStateError("nothing to save: pom.xml was never loaded")
        _atomic_write(self.path, self.serialize())
        self._state = EditorState.SAVED
        log.debug("pom.saved", path=str(self.path))

    def create_new(
        self,
        group_id: str,
        artifact_id: str,
        version: str,
        *,
        java_version: str = DEFAULT_JAVA_VERSION,
    ) -> None:
        """Write a skeleton pom.xml and load it.

        Raises :class:`AlreadyExistsError` if the file is already there.
        """
        if self.exists():
            raise AlreadyExistsError(str(self.path))
        content = render_pom(group_id, artifact_id, version, java_version)
        _atomic_write(self.path, content.encode("utf-8"))
        log.info("pom.created", path=str(self.path), group=group_id, artifact=artifact_id)
        self.load()

    # ── queries ───────────────────────────────────────────────────────────

    def list_dependencies(self) -> list[DependencyEntry]:
        """Dependencies declared directly under ``<project><dependencies>``.

        ``<dependencyManagement>`` and profile dependencies are not included;
        entries without a groupId or artifactId are skipped.
        """
        deps_el = self._dependencies_element()
        if deps_el is None:
            return []
        entries: list[DependencyEntry] = []
        for dep_el in self._dependency_elements(deps_el):
            entry = self._to_entry(dep_el)
            if entry is not None:
                entries.append(entry)
        return entries

    def has_dependency(self, group_id: str, artifact_id: str) -> bool:
        return any(d.key == (group_id, artifact_id) for d in self.list_dependencies())

    def find_dependencies(self, artifact_id: str, group_id: str | None = None) -> list[DependencyEntry]:
        """Entries with this artifactId, optionally restricted to *group_id*."""
        return [
            d
            for d in self.list_dependencies()
            if d.name == artifact_id and (group_id is None or d.group == group_id)
        ]

    # ── mutations ─────────────────────────────────────────────────────────

    def add_dependency(
        self,
        group_id: str,
        artifact_id: str,
        version: str | None,
        scope: str | None = None,
    ) -> bool:
        """Append a ``<dependency>``; False (and no change) if the key exists.

        ``<scope>`` is only written for non-default scopes.
        """
        if self.has_dependency(group_id, artifact_id):
            log.debug("pom.dependency_exists", group=group_id, artifact=artifact_id)
            return False

        deps_el = self._dependencies_element(create=True)
        unit = self._indent_unit()
        outer = self._indent_before(deps_el) or unit

        children = list(deps_el)
        separator = deps_el.text if _indent_of(deps_el.text) is not None else None
        if not children or separator is None:
            separator = "\n" + outer + unit
        inner = _indent_of(separator) or outer + unit

        if children:
            last = children[-1]
            closing = last.tail if _indent_of(last.tail) is not None else "\n" + outer
            last.tail = separator
        else:
            closing = deps_el.text if _indent_of(deps_el.text) is not None else "\n" + outer
            deps_el.text = separator

        dep_el = etree.SubElement(deps_el, self._q("dependency"))
        dep_el.tail = closing

        fields = [("groupId", group_id), ("artifactId", artifact_id)]
        if version:
            fields.append(("version", version))
        if scope and scope != DEFAULT_SCOPE:
            fields.append(("scope", scope))

        field_indent = "\n" + inner + unit
        dep_el.text = field_indent
        for i, (tag, value) in enumerate(fields):
            child = etree.SubElement(dep_el, self._q(tag))
            child.text = value
            child.tail = field_indent if i < len(fields) - 1 else "\n" + inner

        self._touched.add(deps_el)
        self._state = EditorState.LOADED
        log.info("pom.dependency_added", group=group_id, artifact=artifact_id, version=version, scope=scope)
        return True

    def remove_dependency(self, group_id: str, artifact_id: str) -> bool:
        """Remove the entry with this key; False if there is none.

        The whitespace that preceded the element goes with it, so the
        remaining siblings keep their layout.
        """
        deps_el = self._dependencies_element()
        if deps_el is None:
            return False

        for dep_el in self._dependency_elements(deps_el):
            entry = self._to_entry(dep_el)
            if entry is None or entry.key != (group_id, artifact_id):
                continue
            prev = dep_el.getprevious()
            if prev is not None:
                prev.tail = dep_el.tail
            else:
                deps_el.text = dep_el.tail
            # lxml drops the tail together with the element.
            deps_el.remove(dep_el)
            self._touched.add(deps_el)
            self._state = EditorState.LOADED
            log.info("pom.dependency_removed", group=group_id, artifact=artifact_id)
            return True
        return False

    # ── internal ──────────────────────────────────────────────────────────

    def _loaded_tree(self) -> etree._ElementTree:
        if self._tree is None:
            try:
                self.load()
            except ManifestParseError as exc:
                raise ManifestStateError(f"pom.xml could not be loaded: {exc}") from exc
        tree = self._tree
        if tree is None:
            raise ManifestStateError(f"{self.path} was not loaded")
        return tree

    def _q(self, name: str) -> str:
        return f"{{{self._ns}}}{name}" if self._ns else name

    def _render(self, node: etree._Element) -> str:
        """Source text for *node*, rebuilt only where it was edited."""
        span = self._spans.get(node)
        if span is None:
            return self._render_new(node)
        if node not in self._touched:
            return self._source[span.start : span.end]

        if span.inner_start is None:
            # Was <tag/>; it needs an end tag now.
            start_tag = self._source[span.start : span.end]
            open_tag = start_tag[:-2].rstrip() + ">"
            close_tag = f"</{_TAG_NAME_RE.match(start_tag).group(1)}>"
        else:
            open_tag = self._source[span.start : span.inner_start]
            close_tag = self._source[span.inner_end : span.end]

        if node.text == span.text_val and span.text_src is not None:
            parts = [open_tag, span.text_src]
        else:
            parts = [open_tag, escape(node.text or "")]
        for child in node:
            parts.append(self._render(child))
            child_span = self._spans.get(child)
            if child_span is not None and child.tail == child_span.tail_val and child_span.tail_src is not None:
                parts.append(child_span.tail_src)
            else:
                parts.append(escape(child.tail or ""))
        parts.append(close_tag)
        return "".join(parts)

    def _render_new(self, element: etree._Element) -> str:
        """Serialize an element mpm created, in the document's namespace prefix."""
        local = etree.QName(element).localname
        prefix = self._loaded_tree().getroot().prefix
        name = f"{prefix}:{local}" if prefix else local
        parts = [f"<{name}>", escape(element.text or "")]
        for child in element:
            parts.append(self._render(child))
            parts.append(escape(child.tail or ""))
        parts.append(f"</{name}>")
        return "".join(parts)

    def _dependencies_element(self, create: bool = False) -> etree._Element | None:
        root = self._loaded_tree().getroot()
        deps_el = root.find(self._q("dependencies"))
        if deps_el is not None or not create:
            return deps_el

        unit = self._indent_unit()
        children = list(root)
        deps_el = etree.SubElement(root, self._q("dependencies"))
        if children:
            last = children[-1]
            deps_el.tail = last.tail if _indent_of(last.tail) is not None else "\n"
            last.tail = "\n\n" + unit
        else:
            deps_el.tail = root.text if _indent_of(root.text) is not None else "\n"
            root.text = "\n" + unit
        deps_el.text = "\n" + unit
        self._touched.add(root)
        log.debug("pom.dependencies_created", path=str(self.path))
        return deps_el

    def _dependency_elements(self, deps_el: etree._Element) -> list[etree._Element]:
        tag = self._q("dependency")
        return [child for child in deps_el if _is_element(child) and child.tag == tag]

    def _to_entry(self, dep_el: etree._Element) -> DependencyEntry | None:
        group_id = self._child_text(dep_el, "groupId")
        artifact_id = self._child_text(dep_el, "artifactId")
        if not group_id or not artifact_id:
            return None
        return DependencyEntry(
            group=group_id,
            name=artifact_id,
            version=self._child_text(dep_el, "version"),
            scope=self._child_text(dep_el, "scope"),
        )

    def _child_text(self, element: etree._Element, name: str) -> str | None:
        child = element.find(self._q(name))
        if child is None or child.text is None:
            return None
        return child.text.strip() or None

    def _indent_before(self, element: etree._Element) -> str | None:
        prev = element.getprevious()
        whitespace = prev.tail if prev is not None else element.getparent().text
        return _indent_of(whitespace)

    def _indent_unit(self) -> str:
        """Indentation of the root's first child element, else four spaces."""
        root = self._loaded_tree().getroot()
        for child in root:
            if _is_element(child):
                return self._indent_before(child) or DEFAULT_INDENT
        return DEFAULT_INDENT


def _file_mode(path: Path) -> int:
    try:
        return path.stat().st_mode & 0o777
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _atomic_write(path: Path, data: bytes) -> None:
    """Write *data* to a temp file next to *path*, then replace *path*."""
    directory = path.parent if str(path.parent) else Path(".")
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    except OSError as exc:
        raise ManifestIOError(f"cannot write {path}: {exc}") from exc
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.chmod(tmp_name, _file_mode(path))
        os.replace(tmp_name, path)
    except OSError as exc:
        Path(tmp_name).unlink(missing_ok=True)
        raise ManifestIOError(f"cannot write {path}: {exc}") from exc
