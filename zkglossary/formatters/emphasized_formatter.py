"""
Emphasized glossary formatter.

Writes the Markdown glossary syntax read by MarkdownGlossaryParser, with
emphasis markers put back at the exact span offsets given at define time.
Parsing the output again yields the same terms, spans and asides.
"""
from typing import Dict, List, Optional
import logging
import re

from ..core.interfaces import IGlossaryFormatter
from ..core.models import (
    Aside,
    DEFAULT_EXTERNAL_PREFIX,
    EmphasisStyle,
    RenderFormat,
    Term,
)
from ..glossary.term_store import TermStore
from .plain_formatter import related_in_order, term_positions


logger = logging.getLogger(__name__)

_ESCAPE = {'\\': '\\\\', '*': '\\*', '_': '\\_'}
_RELATED_PREFIX = re.compile(r'^((?:see also|related)\s*):', re.IGNORECASE)
_CLOSING_HASHES = re.compile(r'\s#+$')


def escape_markup(text: str) -> str:
    """Escape characters the Markdown parser treats as markup."""
    return ''.join(_ESCAPE.get(ch, ch) for ch in text)


def protect_paragraph(line: str) -> str:
    """Escape a paragraph start that would read back as a heading, aside or reference line."""
    if line[:1] in ('#', '>'):
        return '\\' + line
    return _RELATED_PREFIX.sub(r'\1\\:', line, count=1)


def heading(level: int, text: str) -> str:
    """ATX heading whose text survives a trailing run of ``#``."""
    line = f"{'#' * level} {text}"
    return line + " #" if _CLOSING_HASHES.search(text) else line


def apply_spans(
    text: str,
    spans,
    bold_marker: str = "**",
    italic_marker: str = "*"
) -> str:
    """
    Insert emphasis markers around each span and escape everything else.

    Underscore markers are swapped for asterisks where a neighbouring letter
    or digit would make them intraword, and every paragraph start is
    protected, so the parser reads back the same text and spans.
    """
    markers = {EmphasisStyle.BOLD: bold_marker, EmphasisStyle.ITALIC: italic_marker}
    out: List[str] = []
    cursor = 0

    for span in sorted(spans, key=lambda s: s.offset):
        marker = markers[span.style]
        before = text[span.offset - 1:span.offset]
        after = text[span.end:span.end + 1]
        if marker.startswith('_') and (before.isalnum() or after.isalnum()):
            marker = '*' * len(marker)
        out.append(escape_markup(text[cursor:span.offset]))
        out.append(marker)
        out.append(escape_markup(text[span.offset:span.end]))
        out.append(marker)
        cursor = span.end

    out.append(escape_markup(text[cursor:]))
    return '\n\n'.join(protect_paragraph(p) for p in ''.join(out).split('\n\n'))


class EmphasizedFormatter(IGlossaryFormatter):
    """Markdown output that keeps first-use emphasis."""

    def __init__(
        self,
        bold_marker: str = "**",
        italic_marker: str = "*",
        show_related: bool = True,
        show_asides: bool = True,
        external_prefix: str = DEFAULT_EXTERNAL_PREFIX
    ):
        self.bold_marker = bold_marker
        self.italic_marker = italic_marker
        self.show_related = show_related
        self.show_asides = show_asides
        self.external_prefix = external_prefix

    @property
    def render_format(self) -> RenderFormat:
        return RenderFormat.EMPHASIZED

    def format(self, store: TermStore) -> str:
        blocks: List[str] = []

        if store.title:
            blocks.append(heading(1, store.title))

        if self.show_asides:
            blocks.extend(self._aside(a) for a in store.document_asides)

        positions = term_positions(store)
        for term in store.all():
            blocks.append(self.format_term(term, positions))

        return '\n\n'.join(blocks) + '\n'

    def format_term(self, term: Term, positions: Optional[Dict[str, int]] = None) -> str:
        blocks = [heading(2, term.id), self.format_definition(term)]

        if self.show_related and (term.related or term.external):
            refs = related_in_order(term, positions)
            refs += [f"{self.external_prefix}{ref}" for ref in sorted(term.external)]
            blocks.append("See also: " + ', '.join(refs))

        if self.show_asides:
            blocks.extend(self._aside(a) for a in term.asides)

        return '\n\n'.join(blocks)

    def format_definition(self, term: Term) -> str:
        return apply_spans(term.definition, term.spans, self.bold_marker, self.italic_marker)

    @staticmethod
    def _aside(aside: Aside) -> str:
        text = escape_markup(aside.text)
        return f"> {aside.label}: {text}" if aside.label else f"> {text}"
