"""Glossary source parsers."""
from .markdown_parser import MarkdownGlossaryParser, parse_inline, parse_markdown, parse_markdown_file
from .structured_parser import StructuredGlossaryParser

__all__ = [
    "MarkdownGlossaryParser", "StructuredGlossaryParser",
    "parse_inline", "parse_markdown", "parse_markdown_file",
]
