"""
Streaming acceptance of tracked changes in one WordprocessingML part.

The part is read once through a namespace-aware SAX reader and rewritten as
it goes:

- Deletions (w:del) and move sources (w:moveFrom) are dropped with their
  whole subtree.
- Property-change bookkeeping (w:rPrChange, w:pPrChange, ...) and revision
  range markers (w:moveFromRangeStart, ...) are dropped the same way.
- Insertions (w:ins) and move destinations (w:moveTo) lose their own tags;
  their content is written as ordinary content.
- Everything else is written back unchanged: the XML declaration, tags,
  attributes, comments, processing instructions and CDATA sections.

Removing or unwrapping an element also removes the namespace declarations it
carried. Declarations of elements that were not written are kept as
"orphans" while in scope and re-declared on the next element that is written,
so every prefix in the output stays bound.

Example:
    >>> cleaned = accept_tracked_changes_xml(document_xml, warnings=True)
    >>> cleaned.xml  # bytes with all changes accepted
    >>> [str(w) for w in cleaned.warnings]
    ['w:rPrChange x2']
"""

import codecs
import io
import logging
import re
from collections import Counter
from collections.abc import Iterator
from xml.sax import SAXParseException
from xml.sax.handler import ContentHandler, LexicalHandler, property_lexical_handler
from xml.sax.saxutils import escape
from xml.sax.xmlreader import AttributesNSImpl, InputSource

from defusedxml import DefusedXmlException
from defusedxml.expatreader import DefusedExpatParser

from .constants import (
    DELETE_SUBTREE_ELEMENTS,
    PLAIN_REVISION_ELEMENTS,
    UNWRAP_ELEMENTS,
    WORD_NAMESPACES,
    is_bookkeeping_element,
    is_revision_element,
)
from .errors import InternalError, ParseError
from .results import CleanedXml, CleanWarning

logger = logging.getLogger(__name__)

# Leading XML declaration, with optional UTF-8 BOM and leading whitespace.
# "<?xml-stylesheet ...?>" and friends are processing instructions, not declarations.
_PROLOG_RE = re.compile(rb"\A(\xef\xbb\xbf)?(\s*)<\?xml[ \t\r\n].*?\?>", re.DOTALL)

_PROLOG_TEXT_RE = re.compile(r"\A(\s*)<\?xml[ \t\r\n].*?\?>", re.DOTALL)

_ENCODING_RE = re.compile(rb"""encoding\s*=\s*["']([A-Za-z][A-Za-z0-9._-]*)["']""")

_UTF16_BOMS = {
    codecs.BOM_UTF16_LE: "utf-16-le",
    codecs.BOM_UTF16_BE: "utf-16-be",
}

_TEXT_ENTITIES = {"\r": "&#13;"}

_ATTR_ENTITIES = {
    '"': "&quot;",
    "'": "&apos;",
    "\t": "&#9;",
    "\n": "&#10;",
    "\r": "&#13;",
}


def _escape_text(text: str) -> str:
    return escape(text, _TEXT_ENTITIES)


def _escape_attr(value: str) -> str:
    return escape(value, _ATTR_ENTITIES)


def _split_expat_name(name: str) -> tuple[str | None, str, str]:
    """Split an expat "uri local prefix" triple into (uri, local, qname)."""
    parts = name.split(" ")
    if len(parts) == 3:
        uri, local, prefix = parts
        return uri, local, f"{prefix}:{local}"
    if len(parts) == 2:
        # default namespace
        return parts[0], parts[1], parts[1]
    return None, name, name


class _QualifiedNameReader(DefusedExpatParser):
    """Namespace-aware expat reader that keeps element prefixes.

    The stock reader passes ``qname=None`` for elements, which makes it
    impossible to write a tag back the way it was spelled. Entity
    declarations and external references stay forbidden.

    Whitespace outside the root element has no SAX event of its own; it is
    reported through ``ignorableWhitespace``.
    """

    def __init__(self) -> None:
        super().__init__(namespaceHandling=1)

    def reset(self):
        super().reset()
        # expat hands prolog and epilog whitespace to the default handler
        self._parser.DefaultHandlerExpand = self.default_data

    def default_data(self, data):
        if data.isspace():
            self._cont_handler.ignorableWhitespace(data)

    def start_element_ns(self, name, attrs):
        uri, local, qname = _split_expat_name(name)
        values = {}
        qnames = {}
        for attr_name, value in attrs.items():
            attr_uri, attr_local, attr_qname = _split_expat_name(attr_name)
            values[(attr_uri, attr_local)] = value
            qnames[(attr_uri, attr_local)] = attr_qname
        self._cont_handler.startElementNS((uri, local), qname, AttributesNSImpl(values, qnames))

    def end_element_ns(self, name):
        uri, local, qname = _split_expat_name(name)
        self._cont_handler.endElementNS((uri, local), qname)


class _Scope:
    """One in-scope namespace declaration."""

    __slots__ = ("prefix", "uri", "orphaned", "declared_at")

    def __init__(self, prefix: str | None, uri: str | None, orphaned: bool) -> None:
        self.prefix = prefix
        self.uri = uri
        # True when the declaring element was not written to the output
        self.orphaned = orphaned
        # Depth of the written element that currently re-declares this orphan
        self.declared_at: int | None = None


class RevisionAcceptor(ContentHandler, LexicalHandler):
    """SAX handler that writes its input back with tracked changes accepted.

    One instance handles exactly one document. The handler owns all of the
    rewrite state; nothing is shared between instances.

    Attributes:
        skip_depth: Nesting depth of dropped subtrees (deletions and
            bookkeeping share this counter)
        pending_ns: Declarations reported for the next element start
        in_cdata: Whether the reader is inside a written CDATA section
    """

    def __init__(self) -> None:
        super().__init__()
        self.skip_depth = 0
        self.pending_ns: list[tuple[str | None, str | None]] = []
        self.in_cdata = False
        self._scopes: list[_Scope] = []
        self._written_depth = 0
        self._tag_open = False
        self._out: list[str] = []
        self._revision_counts: Counter[str] = Counter()
        self._revision_names: dict[str, str] = {}

    # Output

    def getvalue(self) -> str:
        """Get everything written so far (without the XML declaration)."""
        return "".join(self._out)

    def warnings(self) -> list[CleanWarning]:
        """Summarize revision markup seen while rewriting.

        Plain w:ins/w:del wrappers are left out. Sorted by descending count.
        """
        found = [
            CleanWarning(element=self._revision_names[local], count=count)
            for local, count in self._revision_counts.items()
            if local not in PLAIN_REVISION_ELEMENTS
        ]
        return sorted(found, key=lambda warning: (-warning.count, warning.element))

    @property
    def revision_count(self) -> int:
        """Total number of revision elements seen, dropped content included."""
        return sum(self._revision_counts.values())

    def _write(self, text: str) -> None:
        if self._tag_open:
            self._out.append(">")
            self._tag_open = False
        self._out.append(text)

    # Namespace scopes

    def startPrefixMapping(self, prefix, uri):
        self.pending_ns.append((prefix, uri))

    def endPrefixMapping(self, prefix):
        for index in range(len(self._scopes) - 1, -1, -1):
            if self._scopes[index].prefix == prefix:
                del self._scopes[index]
                return

    def _push_scopes(self, declarations: list[tuple[str | None, str | None]], orphaned: bool) -> None:
        for prefix, uri in declarations:
            self._scopes.append(_Scope(prefix, uri, orphaned))

    def _orphans_to_declare(self, own_prefixes: set[str | None]) -> Iterator[_Scope]:
        """Find the orphans the next written element has to re-declare.

        Only the most recent declaration of each prefix counts. It is
        re-declared when it is orphaned, not declared by the element itself,
        and not already re-declared by an open written ancestor.
        """
        seen: set[str | None] = set()
        rescued = []
        for scope in reversed(self._scopes):
            if scope.prefix in seen:
                continue
            seen.add(scope.prefix)
            if scope.orphaned and scope.declared_at is None and scope.prefix not in own_prefixes:
                rescued.append(scope)
        return reversed(rescued)

    # Elements

    def startElementNS(self, name, qname, attrs):
        uri, local = name
        declarations, self.pending_ns = self.pending_ns, []
        is_word = uri in WORD_NAMESPACES

        if is_word and is_revision_element(local):
            self._revision_counts[local] += 1
            self._revision_names.setdefault(local, qname)

        if is_word and (local in DELETE_SUBTREE_ELEMENTS or is_bookkeeping_element(local)):
            self._push_scopes(declarations, orphaned=True)
            self.skip_depth += 1
            return

        if self.skip_depth > 0 or (is_word and local in UNWRAP_ELEMENTS):
            self._push_scopes(declarations, orphaned=True)
            return

        self._start_tag(qname, attrs, declarations)

    def endElementNS(self, name, qname):
        uri, local = name
        is_word = uri in WORD_NAMESPACES

        if is_word and (local in DELETE_SUBTREE_ELEMENTS or is_bookkeeping_element(local)):
            self.skip_depth = max(self.skip_depth - 1, 0)
            return

        if self.skip_depth > 0 or (is_word and local in UNWRAP_ELEMENTS):
            return

        self._end_tag(qname)

    def _start_tag(self, qname: str, attrs, declarations: list[tuple[str | None, str | None]]) -> None:
        self._write(f"<{qname}")
        self._written_depth += 1

        own_prefixes = {prefix for prefix, _ in declarations}
        self._push_scopes(declarations, orphaned=False)
        xmlns = list(declarations)
        for scope in self._orphans_to_declare(own_prefixes):
            scope.declared_at = self._written_depth
            xmlns.append((scope.prefix, scope.uri))

        parts = []
        for prefix, uri in xmlns:
            attr_name = f"xmlns:{prefix}" if prefix else "xmlns"
            parts.append(f' {attr_name}="{_escape_attr(uri or "")}"')
        for attr_name, value in attrs.items():
            parts.append(f' {attrs.getQNameByName(attr_name)}="{_escape_attr(value)}"')

        self._out.append("".join(parts))
        self._tag_open = True

    def _end_tag(self, qname: str) -> None:
        if self._tag_open:
            self._out.append("/>")
            self._tag_open = False
        else:
            self._out.append(f"</{qname}>")

        for scope in self._scopes:
            if scope.declared_at == self._written_depth:
                scope.declared_at = None
        self._written_depth -= 1

    # Content

    def characters(self, content):
        if self.skip_depth > 0:
            return
        self._write(content if self.in_cdata else _escape_text(content))

    def ignorableWhitespace(self, whitespace):
        # only reported outside the root element, where escaping is not allowed
        if self.skip_depth > 0:
            return
        self._write(whitespace)

    def processingInstruction(self, target, data):
        if self.skip_depth > 0:
            return
        self._write(f"<?{target} {data}?>" if data else f"<?{target}?>")

    def comment(self, content):
        if self.skip_depth > 0:
            return
        self._write(f"<!--{content}-->")

    def startCDATA(self):
        if self.skip_depth > 0:
            return
        self._write("<![CDATA[")
        self.in_cdata = True

    def endCDATA(self):
        if self.skip_depth > 0:
            return
        self._write("]]>")
        self.in_cdata = False


def _split_utf16_prolog(xml: bytes, bom: bytes, codec: str) -> tuple[bytes, bytes, str]:
    """Separate the declaration of a part that starts with a UTF-16 byte order mark."""
    text = xml[len(bom) :].decode(codec)
    match = _PROLOG_TEXT_RE.match(text)
    if match is None:
        return bom, xml, codec

    prolog = bom + match.group(0).encode(codec)
    reader_input = bom + text[match.end(1) :].encode(codec)
    return prolog, reader_input, codec


def _split_prolog(xml: bytes) -> tuple[bytes, bytes, str]:
    """Separate the XML declaration from the content handed to the reader.

    The prolog keeps the byte order mark and the declaration byte-for-byte.
    The body is encoded with the declared encoding, or for UTF-16 with the
    codec matching the byte order mark (the mark itself stays in the prolog).

    Returns:
        Tuple of (verbatim prolog, reader input, output encoding)
    """
    for bom, codec in _UTF16_BOMS.items():
        if xml.startswith(bom):
            return _split_utf16_prolog(xml, bom, codec)

    match = _PROLOG_RE.match(xml)
    if match is None:
        return b"", xml, "utf-8"

    prolog = match.group(0)
    encoding_match = _ENCODING_RE.search(prolog)
    encoding = encoding_match.group(1).decode("ascii") if encoding_match else "utf-8"

    # expat rejects whitespace in front of the declaration
    reader_input = (match.group(1) or b"") + xml[match.end(2) :]
    return prolog, reader_input, encoding


def accept_tracked_changes_xml(xml: bytes, *, warnings: bool = False) -> CleanedXml:
    """Accept every tracked change in one XML part.

    Args:
        xml: Bytes of the part (e.g., the contents of word/document.xml)
        warnings: Whether to report remaining revision markup such as
            formatting changes and move ranges

    Returns:
        CleanedXml with the rewritten bytes, in the encoding declared by the
        input, and the warnings (empty unless requested)

    Raises:
        ParseError: If the XML is malformed or uses forbidden constructs
        InternalError: If rewriting fails for any other reason
    """
    try:
        prolog, reader_input, encoding = _split_prolog(xml)
    except UnicodeDecodeError as e:
        raise ParseError(f"cannot decode UTF-16 part: {e.reason}") from e

    acceptor = RevisionAcceptor()
    reader = _QualifiedNameReader()
    reader.setContentHandler(acceptor)
    reader.setProperty(property_lexical_handler, acceptor)

    source = InputSource()
    source.setByteStream(io.BytesIO(reader_input))

    try:
        reader.parse(source)
        body = acceptor.getvalue().encode(encoding, errors="xmlcharrefreplace")
    except SAXParseException as e:
        raise ParseError(e.getMessage(), e.getLineNumber(), e.getColumnNumber()) from e
    except DefusedXmlException as e:
        raise ParseError(str(e)) from e
    except Exception as e:
        raise InternalError(f"Failed to accept tracked changes: {e}") from e

    logger.debug(
        "Accepted tracked changes: %d revision element(s), %d byte(s) out",
        acceptor.revision_count,
        len(prolog) + len(body),
    )

    return CleanedXml(
        xml=prolog + body,
        warnings=acceptor.warnings() if warnings else [],
    )
