"""
Core data models for the glossary.

Terms, asides and emphasis spans are frozen value objects: the store is
built once at load time and never mutated afterwards.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple
import re


# ============================================================================
# CONSTANTS
# ============================================================================

SCHEMA_VERSION = "1.0.0"

MAX_TERM_ID_LENGTH = 200
MAX_DEFINITION_LENGTH = 50000
DEFAULT_EXTERNAL_PREFIX = "ext:"

_TERM_ID_PATTERN = re.compile(r'^\S(?:.*\S)?$')


# ============================================================================
# ENUMS
# ============================================================================

class EmphasisStyle(Enum):
    BOLD = "bold"
    ITALIC = "italic"


class RenderFormat(Enum):
    PLAIN = "plain"
    EMPHASIZED = "emphasized"

    @classmethod
    def values(cls) -> List[str]:
        return [f.value for f in cls]


class SourceType(Enum):
    MARKDOWN = "md"
    YAML = "yaml"
    JSON = "json"

    @classmethod
    def from_extension(cls, extension: str) -> 'SourceType':
        if not extension:
            raise ValueError("Extension cannot be empty")
        ext = extension.lower().lstrip('.')
        if not ext:
            raise ValueError("Invalid extension")
        if ext in ('markdown', 'txt'):
            return cls.MARKDOWN
        if ext == 'yml':
            return cls.YAML
        try:
            return cls(ext)
        except ValueError:
            raise ValueError(f"Unsupported: '.{ext}'")


# ============================================================================
# TERM CLASSES
# ============================================================================

@dataclass(frozen=True)
class EmphasisSpan:
    """Tagged emphasis over ``definition[offset:offset + length]``."""
    offset: int
    length: int
    style: EmphasisStyle

    def __post_init__(self):
        if isinstance(self.style, str):
            object.__setattr__(self, 'style', EmphasisStyle(self.style))
        if self.offset < 0:
            raise ValueError(f"Span offset must be >= 0, got {self.offset}")
        if self.length <= 0:
            raise ValueError(f"Span length must be > 0, got {self.length}")

    @property
    def end(self) -> int:
        return self.offset + self.length

    def overlaps(self, other: 'EmphasisSpan') -> bool:
        return self.offset < other.end and other.offset < self.end

    def to_dict(self) -> Dict[str, Any]:
        return {'offset': self.offset, 'length': self.length, 'style': self.style.value}


@dataclass(frozen=True)
class Aside:
    """A clarifying remark owned by one term or by the document."""
    text: str
    label: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise TypeError(f"Aside text must be str, got {type(self.text).__name__}")
        if self.label is not None and not isinstance(self.label, str):
            raise TypeError(f"Aside label must be str, got {type(self.label).__name__}")
        if not self.text.strip():
            raise ValueError("Aside text cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        data = {'text': self.text}
        if self.label:
            data['label'] = self.label
        return data


@dataclass(frozen=True)
class Term:
    id: str
    definition: str
    related: FrozenSet[str] = frozenset()
    spans: Tuple[EmphasisSpan, ...] = ()
    asides: Tuple[Aside, ...] = ()
    external: FrozenSet[str] = frozenset()
    position: int = 0

    @property
    def references(self) -> FrozenSet[str]:
        """All referenced identifiers, internal and external."""
        return self.related | self.external

    def emphasized_text(self, style: Optional[EmphasisStyle] = None) -> List[str]:
        """Substrings covered by emphasis spans, in offset order."""
        return [
            self.definition[s.offset:s.end]
            for s in sorted(self.spans, key=lambda s: s.offset)
            if style is None or s.style == style
        ]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'id': self.id, 'definition': self.definition}
        if self.related:
            data['related'] = sorted(self.related)
        if self.external:
            data['external'] = sorted(self.external)
        if self.spans:
            data['spans'] = [s.to_dict() for s in self.spans]
        if self.asides:
            data['asides'] = [a.to_dict() for a in self.asides]
        return data


# ============================================================================
# VALIDATION
# ============================================================================

def validate_term_id(term_id: str) -> str:
    """Return the identifier unchanged or raise ValueError."""
    if not isinstance(term_id, str):
        raise TypeError(f"Term id must be str, got {type(term_id).__name__}")
    if not term_id or not term_id.strip():
        raise ValueError("Term id cannot be empty")
    if len(term_id) > MAX_TERM_ID_LENGTH:
        raise ValueError(f"Term id too long: {len(term_id)} (max: {MAX_TERM_ID_LENGTH})")
    if not _TERM_ID_PATTERN.match(term_id):
        raise ValueError(f"Term id has surrounding whitespace: {term_id!r}")
    return term_id


def validate_definition(definition: str) -> str:
    """
    Return the definition unchanged or raise ValueError.

    A definition is one or more paragraphs joined by a blank line
    (``"\\n\\n"``). Paragraphs hold no other line breaks and no surrounding
    whitespace, which is exactly what the Markdown parser produces.
    """
    for number, paragraph in enumerate(definition.split('\n\n'), start=1):
        if not paragraph.strip():
            raise ValueError(f"Definition paragraph {number} is empty")
        if paragraph != paragraph.strip():
            raise ValueError(f"Definition paragraph {number} has surrounding whitespace")
        if paragraph.splitlines() != [paragraph]:
            raise ValueError(f"Definition paragraph {number} contains a line break")
    return definition


def validate_spans(definition: str, spans: Iterable[EmphasisSpan]) -> Tuple[EmphasisSpan, ...]:
    """
    Check spans against the definition text.

    Returns the spans in the order supplied. Raises ValueError when a span
    runs past the end of the definition, starts or ends on whitespace,
    crosses a paragraph break, or overlaps or touches another span.
    """
    supplied = tuple(spans)
    ordered = sorted(supplied, key=lambda s: (s.offset, s.length))
    for span in ordered:
        if span.end > len(definition):
            raise ValueError(
                f"Span {span.offset}+{span.length} exceeds definition length {len(definition)}"
            )
        covered = definition[span.offset:span.end]
        if covered != covered.strip():
            raise ValueError(
                f"Span {span.offset}+{span.length} starts or ends with whitespace"
            )
        if '\n' in covered:
            raise ValueError(f"Span {span.offset}+{span.length} crosses a paragraph break")
    for prev, cur in zip(ordered, ordered[1:]):
        if prev.overlaps(cur):
            raise ValueError(
                f"Spans overlap: {prev.offset}+{prev.length} and {cur.offset}+{cur.length}"
            )
        if prev.end == cur.offset:
            raise ValueError(
                f"Spans touch: {prev.offset}+{prev.length} and {cur.offset}+{cur.length}"
            )
    return supplied


@dataclass
class GlossaryStats:
    terms: int = 0
    references: int = 0
    external_references: int = 0
    asides: int = 0
    document_asides: int = 0
    spans: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'terms': self.terms,
            'references': self.references,
            'external_references': self.external_references,
            'asides': self.asides,
            'document_asides': self.document_asides,
            'spans': self.spans,
        }
