"""
Term store: the ordered, build-once collection of glossary terms.

Lifecycle:
- populated by a parser (or by hand) through ``define``
- frozen once loading completes
- read-only afterwards; there is no update and no deletion
"""
import difflib
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from ..core.exceptions import (
    DuplicateTermError,
    GlossaryFrozenError,
    InvalidTermError,
    UnknownTermError,
)
from ..core.models import (
    Aside,
    EmphasisSpan,
    GlossaryStats,
    MAX_DEFINITION_LENGTH,
    Term,
    validate_definition,
    validate_spans,
    validate_term_id,
)
from ..utils.text_normalizer import norm_key


logger = logging.getLogger(__name__)

AsideLike = Union[Aside, str]
SpanLike = Union[EmphasisSpan, Tuple[int, int, str], Dict[str, Any]]


class TermSequence:
    """Lazy view over terms in insertion order. Iterating it again restarts."""

    def __init__(self, terms: Dict[str, Term]):
        self._terms = terms

    def __iter__(self) -> Iterator[Term]:
        return iter(self._terms.values())

    def __len__(self) -> int:
        return len(self._terms)

    def __repr__(self) -> str:
        return f"TermSequence({len(self._terms)} terms)"


class TermStore:
    """In-memory term store keyed by term identifier."""

    def __init__(
        self,
        title: Optional[str] = None,
        case_sensitive_find: bool = False
    ):
        self.title = title
        self.case_sensitive_find = case_sensitive_find
        self._terms: Dict[str, Term] = {}
        self._index: Dict[str, str] = {}
        self._document_asides: List[Aside] = []
        self._frozen = False

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def define(
        self,
        term_id: str,
        definition: str,
        related_ids: Iterable[str] = (),
        asides: Iterable[AsideLike] = (),
        spans: Iterable[SpanLike] = (),
        external_ids: Iterable[str] = ()
    ) -> Term:
        """
        Insert a new term.

        All validation happens before the store is touched, so a failed
        call leaves the store exactly as it was.

        Args:
            term_id: Unique identifier
            definition: Definition text without emphasis markers; paragraphs
                are separated by a blank line
            related_ids: Identifiers of related terms in this store
            asides: Clarifying remarks owned by this term
            spans: Emphasis spans over the definition text
            external_ids: Related identifiers explicitly marked external

        Returns:
            The stored Term

        Raises:
            GlossaryFrozenError: If the store has been frozen
            DuplicateTermError: If term_id is already defined
            InvalidTermError: If any field fails validation
        """
        if self._frozen:
            raise GlossaryFrozenError(
                f"Cannot define '{term_id}': glossary is frozen", term=term_id
            )

        try:
            validate_term_id(term_id)
        except (TypeError, ValueError) as e:
            raise InvalidTermError(str(e), term=term_id) from e

        if term_id in self._terms:
            logger.warning(f"Rejected duplicate term: {term_id}")
            raise DuplicateTermError(f"Term already defined: {term_id}", term=term_id)

        if not isinstance(definition, str) or not definition.strip():
            raise InvalidTermError("Definition cannot be empty", term=term_id)
        if len(definition) > MAX_DEFINITION_LENGTH:
            raise InvalidTermError(
                f"Definition too long: {len(definition)} (max: {MAX_DEFINITION_LENGTH})",
                term=term_id
            )
        try:
            validate_definition(definition)
        except ValueError as e:
            raise InvalidTermError(str(e), term=term_id) from e

        related = self._coerce_ids(term_id, related_ids, "related")
        external = self._coerce_ids(term_id, external_ids, "external")
        overlap = related & external
        if overlap:
            raise InvalidTermError(
                f"References marked both related and external: {sorted(overlap)}",
                term=term_id
            )

        try:
            span_tuple = validate_spans(definition, (self._coerce_span(s) for s in spans))
            aside_tuple = tuple(self._coerce_aside(a) for a in asides)
        except (TypeError, ValueError, KeyError) as e:
            raise InvalidTermError(str(e), term=term_id) from e

        term = Term(
            id=term_id,
            definition=definition,
            related=related,
            spans=span_tuple,
            asides=aside_tuple,
            external=external,
            position=len(self._terms),
        )

        self._terms[term_id] = term
        self._index.setdefault(norm_key(term_id, self.case_sensitive_find), term_id)
        logger.debug(f"Defined term #{term.position}: {term_id}")

        return term

    def add_document_aside(self, aside: AsideLike) -> Aside:
        """Attach an aside to the document itself."""
        if self._frozen:
            raise GlossaryFrozenError("Cannot add aside: glossary is frozen")
        try:
            value = self._coerce_aside(aside)
        except (TypeError, ValueError) as e:
            raise InvalidTermError(f"Invalid document aside: {e}") from e
        self._document_asides.append(value)
        return value

    def freeze(self) -> 'TermStore':
        """Make the store read-only. Idempotent."""
        if not self._frozen:
            self._frozen = True
            logger.info(f"Glossary frozen with {len(self._terms)} terms")
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def lookup(self, term_id: str) -> Term:
        """
        Get a term by exact identifier.

        Raises:
            UnknownTermError: If no such term exists
        """
        term = self._terms.get(term_id)
        if term is None:
            suggestions = difflib.get_close_matches(term_id, list(self._terms), n=3)
            raise UnknownTermError(
                f"Unknown term: {term_id}", term=term_id, suggestions=suggestions
            )
        return term

    def find(self, name: str) -> Optional[Term]:
        """Lookup ignoring case, spacing and hyphenation differences."""
        if not isinstance(name, str) or not name.strip():
            return None
        term_id = self._index.get(norm_key(name, self.case_sensitive_find))
        return self._terms.get(term_id) if term_id is not None else None

    def all(self) -> TermSequence:
        """All terms in insertion order."""
        return TermSequence(self._terms)

    def ids(self) -> List[str]:
        return list(self._terms)

    @property
    def document_asides(self) -> Tuple[Aside, ...]:
        return tuple(self._document_asides)

    def get_stats(self) -> Dict[str, Any]:
        stats = GlossaryStats(
            terms=len(self._terms),
            document_asides=len(self._document_asides),
        )
        for term in self._terms.values():
            stats.references += len(term.related)
            stats.external_references += len(term.external)
            stats.asides += len(term.asides)
            stats.spans += len(term.spans)
        return {**stats.to_dict(), 'frozen': self._frozen}

    def __contains__(self, term_id: object) -> bool:
        return term_id in self._terms

    def __len__(self) -> int:
        return len(self._terms)

    def __iter__(self) -> Iterator[Term]:
        return iter(self.all())

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"TermStore(title={self.title!r}, terms={len(self._terms)}, {state})"

    # ------------------------------------------------------------------
    # Coercion helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _coerce_ids(term_id: str, ids: Iterable[str], kind: str) -> frozenset:
        if isinstance(ids, str):
            raise InvalidTermError(
                f"{kind} ids must be an iterable of str, not a single str", term=term_id
            )
        result = set()
        for ref in ids:
            if not isinstance(ref, str) or not ref.strip():
                raise InvalidTermError(f"Invalid {kind} id: {ref!r}", term=term_id)
            result.add(ref)
        return frozenset(result)

    @staticmethod
    def _coerce_span(span: SpanLike) -> EmphasisSpan:
        if isinstance(span, EmphasisSpan):
            return span
        if isinstance(span, dict):
            return EmphasisSpan(int(span['offset']), int(span['length']), span['style'])
        if isinstance(span, (tuple, list)) and len(span) == 3:
            offset, length, style = span
            return EmphasisSpan(int(offset), int(length), style)
        raise TypeError(f"Cannot interpret emphasis span: {span!r}")

    @staticmethod
    def _coerce_aside(aside: AsideLike) -> Aside:
        if isinstance(aside, Aside):
            return aside
        if isinstance(aside, str):
            return Aside(aside)
        raise TypeError(f"Cannot interpret aside: {aside!r}")
