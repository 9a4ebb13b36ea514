"""Term store and cross-reference resolution."""
from .term_store import TermStore, TermSequence
from .resolver import CrossReferenceResolver, ResolutionResult, resolve

__all__ = [
    "TermStore", "TermSequence",
    "CrossReferenceResolver", "ResolutionResult", "resolve",
]
