"""
Plain-text glossary formatter.

Prints definitions without any emphasis markers, in insertion order.
"""
from typing import Dict, List, Optional
import logging

from ..core.interfaces import IGlossaryFormatter
from ..core.models import Aside, RenderFormat, Term
from ..glossary.term_store import TermStore


logger = logging.getLogger(__name__)

DEFAULT_ASIDE_LABEL = "Aside"


def related_in_order(term: Term, positions: Optional[Dict[str, int]] = None) -> List[str]:
    """Related ids ordered by definition position, unknown ids last by name."""
    positions = positions or {}
    missing = len(positions)
    return sorted(term.related, key=lambda ref: (positions.get(ref, missing), ref))


def term_positions(store: TermStore) -> Dict[str, int]:
    return {term.id: term.position for term in store.all()}


class PlainFormatter(IGlossaryFormatter):
    """Readable text without markup."""

    def __init__(self, show_related: bool = True, show_asides: bool = True):
        self.show_related = show_related
        self.show_asides = show_asides

    @property
    def render_format(self) -> RenderFormat:
        return RenderFormat.PLAIN

    def format(self, store: TermStore) -> str:
        blocks: List[str] = []

        if store.title:
            blocks.append(self._underline(store.title, '='))

        if self.show_asides and store.document_asides:
            blocks.append('\n'.join(self._aside(a) for a in store.document_asides))

        positions = term_positions(store)
        for term in store.all():
            blocks.append(self.format_term(term, positions))

        return '\n\n'.join(blocks) + '\n'

    def format_term(self, term: Term, positions: Optional[Dict[str, int]] = None) -> str:
        lines = [self._underline(term.id, '-'), term.definition]

        extra: List[str] = []
        if self.show_related and term.related:
            extra.append("Related: " + ', '.join(related_in_order(term, positions)))
        if self.show_related and term.external:
            extra.append("External: " + ', '.join(sorted(term.external)))
        if self.show_asides:
            extra.extend(self._aside(a) for a in term.asides)

        if extra:
            lines.append('')
            lines.extend(extra)

        return '\n'.join(lines)

    @staticmethod
    def _underline(text: str, char: str) -> str:
        return f"{text}\n{char * max(len(text), 3)}"

    @staticmethod
    def _aside(aside: Aside) -> str:
        return f"{aside.label or DEFAULT_ASIDE_LABEL}: {aside.text}"
