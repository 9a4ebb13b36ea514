"""
Core interfaces for glossary parsers and formatters.
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Union
import logging

from .models import RenderFormat, SourceType, Term
from .exceptions import GlossaryReadError, error_context

if TYPE_CHECKING:
    from ..glossary.term_store import TermStore


logger = logging.getLogger(__name__)


# ============================================================================
# GLOSSARY PARSER INTERFACE
# ============================================================================

class IGlossaryParser(ABC):
    """Interface for glossary source parsers."""

    @property
    @abstractmethod
    def supported_source_type(self) -> SourceType:
        """Source type this parser supports."""
        pass

    @abstractmethod
    def parse_text(self, text: str, source: str = "<string>") -> 'TermStore':
        """
        Parse glossary source text into a frozen term store.

        Args:
            text: Full source text
            source: Name used in error messages

        Raises:
            InvalidDocumentError: If the text does not follow the syntax
            DuplicateTermError: If a term is defined twice
        """
        pass

    def can_parse(self, file_path: Path) -> bool:
        """Check if file can be parsed."""
        try:
            return SourceType.from_extension(Path(file_path).suffix) == self.supported_source_type
        except ValueError:
            return False

    def parse(self, file_path: Union[str, Path]) -> 'TermStore':
        """Read ``file_path`` in full and parse it."""
        file_path = Path(file_path)
        with error_context(f"reading {file_path}", GlossaryReadError, logger):
            text = file_path.read_text(encoding="utf-8")
        logger.info(f"Parsing glossary: {file_path}")
        return self.parse_text(text, source=str(file_path))

    def get_parser_info(self) -> Dict[str, Any]:
        return {
            'parser_class': self.__class__.__name__,
            'supported_source_type': self.supported_source_type.value
        }


# ============================================================================
# GLOSSARY FORMATTER INTERFACE
# ============================================================================

class IGlossaryFormatter(ABC):
    """Interface for glossary renderers. Implementations must be pure."""

    @property
    @abstractmethod
    def render_format(self) -> RenderFormat:
        """Format this formatter produces."""
        pass

    @abstractmethod
    def format_term(self, term: Term) -> str:
        """Render a single term."""
        pass

    @abstractmethod
    def format(self, store: 'TermStore') -> str:
        """Render the whole store, preserving term order."""
        pass

    def get_formatter_info(self) -> Dict[str, Any]:
        return {
            'formatter_class': self.__class__.__name__,
            'render_format': self.render_format.value
        }
