"""
Component registries for glossary parsers and formatters.

Parsers are keyed by SourceType, formatters by RenderFormat. Both
registries are process-wide singletons created on first use.
"""
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from .exceptions import ConfigurationError, UnsupportedFileTypeError, UnsupportedFormatError
from .interfaces import IGlossaryFormatter, IGlossaryParser
from .models import RenderFormat, SourceType


logger = logging.getLogger(__name__)


# ============================================================================
# BASE REGISTRY
# ============================================================================

class ThreadSafeRegistry:
    """Thread-safe base class for component registries."""

    def __init__(self):
        self._registry: Dict[Any, Callable[..., Any]] = {}
        self._lock = threading.RLock()

    def register(self, key: Any, value: Callable[..., Any]) -> None:
        """Thread-safe registration."""
        with self._lock:
            self._registry[key] = value

    def get(self, key: Any) -> Optional[Callable[..., Any]]:
        """Thread-safe retrieval."""
        with self._lock:
            return self._registry.get(key)

    def has(self, key: Any) -> bool:
        with self._lock:
            return key in self._registry

    def list_keys(self) -> List[Any]:
        with self._lock:
            return list(self._registry.keys())

    def clear(self) -> None:
        with self._lock:
            self._registry.clear()


# ============================================================================
# PARSER FACTORY
# ============================================================================

class ParserFactory(ThreadSafeRegistry):
    """Creates glossary parsers by source type."""

    def register(self, source_type: SourceType, builder: Callable[..., IGlossaryParser]) -> None:
        """
        Register a parser builder for a source type.

        Args:
            source_type: Source type to handle
            builder: Callable returning an IGlossaryParser; receives the
                source type and any options passed to ``get_parser``
        """
        super().register(source_type, builder)
        logger.debug(f"Registered parser: {source_type.value}")

    def get_parser(self, source_type: SourceType, **options: Any) -> IGlossaryParser:
        """
        Get parser instance for a source type.

        Raises:
            UnsupportedFileTypeError: If no parser is registered
            ConfigurationError: If the builder rejects the options
        """
        builder = self.get(source_type)
        if builder is None:
            available = ', '.join(st.value for st in self.get_supported_types())
            raise UnsupportedFileTypeError(
                f"No parser available for {source_type.value}. "
                f"Available: {available or 'none'}",
                file_type=source_type.value
            )
        try:
            return builder(source_type, **options)
        except TypeError as e:
            raise ConfigurationError(
                f"Invalid options for {source_type.value} parser: {e}",
                component=source_type.value
            ) from e

    def get_parser_for_file(self, file_path: Union[str, Path], **options: Any) -> IGlossaryParser:
        """
        Get parser for a file by its extension.

        Raises:
            UnsupportedFileTypeError: If the extension is not supported
        """
        suffix = Path(file_path).suffix
        try:
            source_type = SourceType.from_extension(suffix)
        except ValueError as e:
            raise UnsupportedFileTypeError(
                f"Unsupported glossary source: {file_path}", file_type=suffix or None
            ) from e

        return self.get_parser(source_type, **options)

    def get_supported_types(self) -> List[SourceType]:
        return self.list_keys()


# ============================================================================
# FORMATTER FACTORY
# ============================================================================

class FormatterFactory(ThreadSafeRegistry):
    """Creates glossary formatters by render format."""

    def register(self, render_format: RenderFormat, builder: Callable[..., IGlossaryFormatter]) -> None:
        """
        Register a formatter builder for a render format.

        Args:
            render_format: Format to handle
            builder: Callable returning an IGlossaryFormatter; receives the
                options passed to ``get_formatter``
        """
        super().register(render_format, builder)
        logger.debug(f"Registered formatter: {render_format.value}")

    def get_formatter(
        self,
        render_format: Union[RenderFormat, str],
        **options: Any
    ) -> IGlossaryFormatter:
        """
        Get formatter instance for a format.

        Raises:
            UnsupportedFormatError: If the format is unknown or unregistered
            ConfigurationError: If the builder rejects the options
        """
        fmt = coerce_format(render_format, self.get_supported_formats())
        builder = self.get(fmt)
        if builder is None:
            raise UnsupportedFormatError(
                f"No formatter registered for {fmt.value}",
                render_format=fmt.value,
                supported=self.get_supported_formats()
            )
        try:
            return builder(**options)
        except TypeError as e:
            raise ConfigurationError(
                f"Invalid options for {fmt.value} formatter: {e}",
                component=fmt.value
            ) from e

    def get_supported_formats(self) -> List[str]:
        return [fmt.value for fmt in self.list_keys()]


def coerce_format(value: Union[RenderFormat, str], supported: Optional[List[str]] = None) -> RenderFormat:
    """
    Convert a format name to RenderFormat.

    Raises:
        UnsupportedFormatError: For anything outside the RenderFormat set
    """
    if isinstance(value, RenderFormat):
        return value
    if isinstance(value, str):
        try:
            return RenderFormat(value.strip().lower())
        except ValueError:
            pass
    raise UnsupportedFormatError(
        f"Unsupported render format: {value!r}",
        render_format=str(value),
        supported=supported if supported is not None else RenderFormat.values()
    )


# ============================================================================
# SINGLETONS
# ============================================================================

_factories_lock = threading.Lock()
_parser_factory: Optional[ParserFactory] = None
_formatter_factory: Optional[FormatterFactory] = None


def get_parser_factory() -> ParserFactory:
    """Global parser factory with the default parsers registered."""
    global _parser_factory

    if _parser_factory is not None:
        return _parser_factory

    with _factories_lock:
        if _parser_factory is None:
            factory = ParserFactory()
            _register_default_parsers(factory)
            _parser_factory = factory

    return _parser_factory


def get_formatter_factory() -> FormatterFactory:
    """Global formatter factory with the default formatters registered."""
    global _formatter_factory

    if _formatter_factory is not None:
        return _formatter_factory

    with _factories_lock:
        if _formatter_factory is None:
            factory = FormatterFactory()
            _register_default_formatters(factory)
            _formatter_factory = factory

    return _formatter_factory


def _register_default_parsers(factory: ParserFactory) -> None:
    from ..parsers.markdown_parser import MarkdownGlossaryParser
    from ..parsers.structured_parser import StructuredGlossaryParser

    factory.register(
        SourceType.MARKDOWN,
        lambda source_type, **options: MarkdownGlossaryParser(**options)
    )

    def structured(source_type, external_prefix=None, **options):
        # external ids are explicit in structured sources
        return StructuredGlossaryParser(source_type, **options)

    factory.register(SourceType.YAML, structured)
    factory.register(SourceType.JSON, structured)


def _register_default_formatters(factory: FormatterFactory) -> None:
    from ..formatters.plain_formatter import PlainFormatter
    from ..formatters.emphasized_formatter import EmphasizedFormatter

    def plain(show_related=True, show_asides=True, **_ignored):
        return PlainFormatter(show_related=show_related, show_asides=show_asides)

    factory.register(RenderFormat.PLAIN, plain)
    factory.register(RenderFormat.EMPHASIZED, EmphasizedFormatter)


def reset_factories() -> None:
    """Drop the global registries (used by tests)."""
    global _parser_factory, _formatter_factory
    with _factories_lock:
        _parser_factory = None
        _formatter_factory = None
