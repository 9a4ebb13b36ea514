"""ZK Glossary - proof-systems terminology with first-use emphasis."""
__version__ = "1.0.0"
__author__ = "ZK Glossary Team"

from zkglossary.core.models import EmphasisSpan, EmphasisStyle, RenderFormat, Term
from zkglossary.core.pipeline import GlossaryPipeline
from zkglossary.glossary.term_store import TermStore
from zkglossary.glossary.resolver import resolve
from zkglossary.formatters.renderer import render

__all__ = [
    "GlossaryPipeline",
    "TermStore",
    "Term",
    "EmphasisSpan",
    "EmphasisStyle",
    "RenderFormat",
    "resolve",
    "render",
]
