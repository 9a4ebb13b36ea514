"""
Core glossary system
====================

Models, exceptions, component registries and the load/resolve/render
pipeline. Submodules are imported on first attribute access, so importing
``zkglossary.core`` does not pull in the parsers or formatters.

Example:
    >>> from zkglossary.core import GlossaryPipeline
    >>> result = GlossaryPipeline().run(render_format="plain")
    >>> print(result.output)
"""

__version__ = "1.0.0"
__version_info__ = (1, 0, 0)

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .factory import (
        ParserFactory,
        FormatterFactory,
        get_parser_factory,
        get_formatter_factory,
        coerce_format,
    )
    from .models import (
        Term,
        Aside,
        EmphasisSpan,
        EmphasisStyle,
        RenderFormat,
        SourceType,
        GlossaryStats,
    )
    from .pipeline import GlossaryPipeline, PipelineResult, PipelineStage, write_output
    from .interfaces import IGlossaryParser, IGlossaryFormatter
    from .exceptions import (
        GlossarySystemError,
        GlossaryError,
        DuplicateTermError,
        UnknownTermError,
        DanglingReferenceError,
        ReferenceResolutionError,
        InvalidTermError,
        GlossaryFrozenError,
        ParserError,
        UnsupportedFileTypeError,
        InvalidDocumentError,
        FormatterError,
        UnsupportedFormatError,
        OutputError,
        PipelineError,
        ConfigurationError,
        ValidationError,
    )


# ============================================================================
# LAZY LOADING IMPLEMENTATION
# ============================================================================

_LAZY_ATTRS = {
    # Factories
    'ParserFactory': 'factory',
    'FormatterFactory': 'factory',
    'get_parser_factory': 'factory',
    'get_formatter_factory': 'factory',
    'coerce_format': 'factory',

    # Models
    'Term': 'models',
    'Aside': 'models',
    'EmphasisSpan': 'models',
    'EmphasisStyle': 'models',
    'RenderFormat': 'models',
    'SourceType': 'models',
    'GlossaryStats': 'models',

    # Pipeline
    'GlossaryPipeline': 'pipeline',
    'PipelineResult': 'pipeline',
    'PipelineStage': 'pipeline',
    'write_output': 'pipeline',

    # Interfaces
    'IGlossaryParser': 'interfaces',
    'IGlossaryFormatter': 'interfaces',

    # Exceptions
    'GlossarySystemError': 'exceptions',
    'GlossaryError': 'exceptions',
    'DuplicateTermError': 'exceptions',
    'UnknownTermError': 'exceptions',
    'DanglingReferenceError': 'exceptions',
    'ReferenceResolutionError': 'exceptions',
    'InvalidTermError': 'exceptions',
    'GlossaryFrozenError': 'exceptions',
    'ParserError': 'exceptions',
    'UnsupportedFileTypeError': 'exceptions',
    'InvalidDocumentError': 'exceptions',
    'FormatterError': 'exceptions',
    'UnsupportedFormatError': 'exceptions',
    'OutputError': 'exceptions',
    'PipelineError': 'exceptions',
    'ConfigurationError': 'exceptions',
    'ValidationError': 'exceptions',
}


def __getattr__(name: str):
    """
    Lazy load module attributes.

    The resolved attribute is cached in the module namespace, so each
    submodule is imported at most once.
    """
    module_name = _LAZY_ATTRS.get(name)
    if module_name is None:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

    module = importlib.import_module(f".{module_name}", __name__)
    value = getattr(module, name)
    globals()[name] = value
    return value


__all__ = ["__version__", "__version_info__", *_LAZY_ATTRS]


def __dir__():
    """Return list of available attributes."""
    return __all__