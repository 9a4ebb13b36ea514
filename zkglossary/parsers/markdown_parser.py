"""
Markdown glossary parser.

Source syntax::

    # Proof systems                      optional document title
    > Note: applies to the whole page    aside before the first term
    ## witness                           starts a term, id = heading text
    The **witness** is ...               definition paragraph(s)
    See also: statement, ext:PLONK       related ids, ext: marks external
    > Aside owned by the term

Emphasis markers (``**bold**``, ``__bold__``, ``*italic*``, ``_italic_``)
are removed from the definition and recorded as tagged spans at load time.
``\\*``, ``\\_``, ``\\\\``, ``\\#``, ``\\>`` and ``\\:`` escape literal
characters, so a paragraph may start with ``\\#`` or ``\\>`` or read
``See also\\: ...`` without being taken for structure.
"""
from pathlib import Path
from typing import List, Optional, Tuple
import logging
import re

from ..core.exceptions import DuplicateTermError, InvalidDocumentError, InvalidTermError
from ..core.interfaces import IGlossaryParser
from ..core.models import (
    Aside,
    DEFAULT_EXTERNAL_PREFIX,
    EmphasisSpan,
    EmphasisStyle,
    SourceType,
)
from ..glossary.term_store import TermStore
from ..utils.text_normalizer import normalize


logger = logging.getLogger(__name__)

_HEADING = re.compile(r'^(#{1,6})\s+(.*?)(?:\s+#+)?\s*$')
_RELATED = re.compile(r'^(?:see also|related)\s*:\s*(.*)$', re.IGNORECASE)
_ASIDE_LABEL = re.compile(r'^([A-Z][A-Za-z -]{0,30}):\s+(.*)$', re.DOTALL)

_ESCAPABLE = frozenset('\\*_#>:')
_BOLD_MARKERS = ('**', '__')


def parse_inline(text: str) -> Tuple[str, List[EmphasisSpan]]:
    """
    Strip emphasis markers from one paragraph.

    Returns:
        (plain text, spans with offsets into the plain text)

    Raises:
        ValueError: On unclosed, empty or nested emphasis
    """
    out: List[str] = []
    spans: List[EmphasisSpan] = []
    pos = 0
    open_marker: Optional[str] = None
    open_at = 0
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if ch == '\\' and i + 1 < n and text[i + 1] in _ESCAPABLE:
            out.append(text[i + 1])
            pos += 1
            i += 2
            continue

        if ch not in '*_':
            out.append(ch)
            pos += 1
            i += 1
            continue

        marker = text[i:i + 2] if text[i:i + 2] in _BOLD_MARKERS else ch
        prev = text[i - 1] if i > 0 else ''
        nxt = text[i + len(marker)] if i + len(marker) < n else ''

        can_open = bool(nxt) and not nxt.isspace()
        can_close = bool(prev) and not prev.isspace()
        if ch == '_':
            # intraword underscores are literal (snake_case, x_1)
            can_open = can_open and not prev.isalnum()
            can_close = can_close and not nxt.isalnum()

        if open_marker is None and can_open:
            open_marker = marker
            open_at = pos
            i += len(marker)
            continue

        if open_marker == marker and can_close:
            if pos == open_at:
                raise ValueError(f"Empty emphasis '{marker}{marker}'")
            style = EmphasisStyle.BOLD if marker in _BOLD_MARKERS else EmphasisStyle.ITALIC
            spans.append(EmphasisSpan(open_at, pos - open_at, style))
            open_marker = None
            i += len(marker)
            continue

        if open_marker is not None and open_marker != marker and can_open and not can_close:
            raise ValueError(f"Nested emphasis '{marker}' inside '{open_marker}'")

        out.append(marker)
        pos += len(marker)
        i += len(marker)

    if open_marker is not None:
        raise ValueError(f"Unclosed emphasis marker '{open_marker}'")

    return ''.join(out), spans


class _PendingTerm:
    """Term being accumulated while its lines are read."""

    def __init__(self, term_id: str, line: int):
        self.term_id = term_id
        self.line = line
        self.paragraphs: List[Tuple[str, List[EmphasisSpan]]] = []
        self.related: List[str] = []
        self.external: List[str] = []
        self.asides: List[Aside] = []

    def definition(self) -> Tuple[str, List[EmphasisSpan]]:
        parts: List[str] = []
        spans: List[EmphasisSpan] = []
        base = 0
        for text, para_spans in self.paragraphs:
            if parts:
                base += 2
            spans.extend(EmphasisSpan(s.offset + base, s.length, s.style) for s in para_spans)
            parts.append(text)
            base += len(text)
        return '\n\n'.join(parts), spans


class MarkdownGlossaryParser(IGlossaryParser):
    """Parser for Markdown glossary sources."""

    def __init__(
        self,
        external_prefix: str = DEFAULT_EXTERNAL_PREFIX,
        case_sensitive_find: bool = False
    ):
        self.external_prefix = external_prefix
        self.case_sensitive_find = case_sensitive_find

    @property
    def supported_source_type(self) -> SourceType:
        return SourceType.MARKDOWN

    def parse_text(self, text: str, source: str = "<string>") -> TermStore:
        store = TermStore(case_sensitive_find=self.case_sensitive_find)
        current: Optional[_PendingTerm] = None
        paragraph: List[str] = []
        paragraph_line = 0
        aside: List[str] = []
        aside_line = 0
        seen_content = False

        def fail(message: str, line: int) -> InvalidDocumentError:
            return InvalidDocumentError(message, file_path=source, line=line)

        def flush_paragraph() -> None:
            nonlocal paragraph
            if not paragraph:
                return
            if current is None:
                raise fail("Definition text before the first term heading", paragraph_line)
            try:
                current.paragraphs.append(parse_inline(' '.join(paragraph)))
            except ValueError as e:
                raise fail(str(e), paragraph_line) from e
            paragraph = []

        def flush_aside() -> None:
            nonlocal aside
            if not aside:
                return
            try:
                plain, _ = parse_inline(' '.join(aside))
            except ValueError as e:
                raise fail(str(e), aside_line) from e
            aside = []
            if not plain.strip():
                return
            match = _ASIDE_LABEL.match(plain)
            value = Aside(match.group(2), match.group(1)) if match else Aside(plain)
            if current is None:
                store.add_document_aside(value)
            else:
                current.asides.append(value)

        def flush_term() -> None:
            if current is None:
                return
            definition, spans = current.definition()
            if not definition:
                raise fail(f"Term '{current.term_id}' has no definition", current.line)
            try:
                store.define(
                    current.term_id,
                    definition,
                    related_ids=current.related,
                    asides=current.asides,
                    spans=spans,
                    external_ids=current.external,
                )
            except DuplicateTermError as e:
                e.context.setdefault('line', current.line)
                raise
            except InvalidTermError as e:
                raise fail(str(e), current.line) from e

        for lineno, raw in enumerate(text.splitlines(), start=1):
            line = raw.strip()

            if not line:
                flush_paragraph()
                flush_aside()
                continue

            if line.startswith('>'):
                flush_paragraph()
                if not aside:
                    aside_line = lineno
                body = line[1:].strip()
                if body:
                    aside.append(body)
                seen_content = True
                continue

            flush_aside()

            heading = _HEADING.match(line)
            if heading:
                flush_paragraph()
                level, title = len(heading.group(1)), normalize(heading.group(2))
                if not title:
                    raise fail("Empty heading", lineno)
                if level == 1:
                    if seen_content or store.title is not None:
                        raise fail("Document title must be the first line", lineno)
                    store.title = title
                elif level == 2:
                    flush_term()
                    current = _PendingTerm(title, lineno)
                else:
                    raise fail(f"Unsupported heading level {level}", lineno)
                seen_content = True
                continue

            related = _RELATED.match(line)
            if related:
                flush_paragraph()
                if current is None:
                    raise fail("Related-term line before the first term heading", lineno)
                self._add_references(current, related.group(1))
                continue

            if not paragraph:
                paragraph_line = lineno
            paragraph.append(line)
            seen_content = True

        flush_paragraph()
        flush_aside()
        flush_term()

        store.freeze()
        logger.info(f"Loaded {len(store)} terms from {source}")
        return store

    def _add_references(self, term: _PendingTerm, value: str) -> None:
        for item in value.split(','):
            ref = normalize(item)
            if not ref:
                continue
            if self.external_prefix and ref.startswith(self.external_prefix):
                ext = ref[len(self.external_prefix):].strip()
                if ext:
                    term.external.append(ext)
            else:
                term.related.append(ref)


def parse_markdown(text: str, source: str = "<string>", **kwargs) -> TermStore:
    """Parse Markdown glossary text with a default parser."""
    return MarkdownGlossaryParser(**kwargs).parse_text(text, source)


def parse_markdown_file(path: Path, **kwargs) -> TermStore:
    return MarkdownGlossaryParser(**kwargs).parse(path)
