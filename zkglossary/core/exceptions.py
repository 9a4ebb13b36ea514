"""
Custom exceptions for the glossary system.
Provides a clear error hierarchy and meaningful error messages.

Propagation policy:
- load-time structural errors (duplicates, malformed sources) are fatal
- dangling references are collected and reported as one batch
- render errors are local to a single render call
"""

from contextlib import contextmanager
from typing import Optional, Dict, Any, List, Type
import logging

__all__ = [
    # Base
    'GlossarySystemError',
    # Glossary
    'GlossaryError', 'DuplicateTermError', 'UnknownTermError',
    'DanglingReferenceError', 'ReferenceResolutionError', 'InvalidTermError',
    'GlossaryReadError', 'GlossaryWriteError', 'GlossaryFrozenError',
    # Parser
    'ParserError', 'UnsupportedFileTypeError', 'InvalidDocumentError',
    # Formatter
    'FormatterError', 'UnsupportedFormatError', 'OutputError',
    # Pipeline
    'PipelineError', 'GlossaryPipelineError', 'ConfigurationError',
    # Validation
    'ValidationError', 'InvalidConfigError',
    # Utilities
    'error_context', 'wrap_error',
]


# ============================================================================
# BASE EXCEPTION
# ============================================================================

class GlossarySystemError(Exception):
    """
    Base exception for all glossary system errors.

    All custom exceptions inherit from this class for unified error handling.
    """

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize exception with message and optional context.

        Args:
            message: Error message
            **context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation with context."""
        if not self.context:
            return self.message

        context_str = ', '.join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({context_str})"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'context': self.context
        }


# ============================================================================
# GLOSSARY EXCEPTIONS
# ============================================================================

class GlossaryError(GlossarySystemError):
    """Base exception for glossary errors."""
    pass


class DuplicateTermError(GlossaryError):
    """Raised when a term identifier is defined twice. Fatal during load."""

    def __init__(self, message: str, term: Optional[str] = None, **context: Any) -> None:
        super().__init__(message, term=term, **context)
        self.term = term


class UnknownTermError(GlossaryError):
    """Raised when looking up a term that is not in the store."""

    def __init__(
        self,
        message: str,
        term: Optional[str] = None,
        suggestions: Optional[List[str]] = None,
        **context: Any
    ) -> None:
        if suggestions:
            context['suggestions'] = suggestions
        super().__init__(message, term=term, **context)
        self.term = term
        self.suggestions = list(suggestions or [])


class DanglingReferenceError(GlossaryError):
    """A related-term reference that does not resolve to a defined term."""

    def __init__(
        self,
        message: str,
        term: Optional[str] = None,
        target: Optional[str] = None,
        **context: Any
    ) -> None:
        super().__init__(message, term=term, target=target, **context)
        self.term = term
        self.target = target


class ReferenceResolutionError(GlossaryError):
    """Raised with the full batch of dangling references after a resolve pass."""

    def __init__(
        self,
        message: str,
        errors: Optional[List[GlossaryError]] = None,
        **context: Any
    ) -> None:
        errors = list(errors or [])
        super().__init__(message, count=len(errors), **context)
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['errors'] = [e.to_dict() for e in self.errors]
        return data


class InvalidTermError(GlossaryError):
    """Raised when a term doesn't meet validation requirements."""

    def __init__(self, message: str, term: Optional[str] = None, **context: Any) -> None:
        super().__init__(message, term=term, **context)
        self.term = term


class GlossaryReadError(GlossaryError):
    """Raised when a glossary source cannot be read."""
    pass


class GlossaryWriteError(GlossaryError):
    """Raised when the glossary cannot be modified."""
    pass


class GlossaryFrozenError(GlossaryWriteError):
    """Raised when defining a term after the store has been frozen."""

    def __init__(self, message: str, term: Optional[str] = None, **context: Any) -> None:
        super().__init__(message, term=term, **context)
        self.term = term


# ============================================================================
# PARSER EXCEPTIONS
# ============================================================================

class ParserError(GlossarySystemError):
    """Base exception for glossary source parsing errors."""
    pass


class UnsupportedFileTypeError(ParserError):
    """Raised when attempting to parse an unsupported source format."""

    def __init__(self, message: str, file_type: Optional[str] = None, **context: Any) -> None:
        super().__init__(message, file_type=file_type, **context)
        self.file_type = file_type


class InvalidDocumentError(ParserError):
    """Raised when a source doesn't follow the glossary syntax."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        line: Optional[int] = None,
        **context: Any
    ) -> None:
        if file_path is not None:
            context['file_path'] = file_path
        if line is not None:
            context['line'] = line
        super().__init__(message, **context)
        self.file_path = file_path
        self.line = line


# ============================================================================
# FORMATTER EXCEPTIONS
# ============================================================================

class FormatterError(GlossarySystemError):
    """Base exception for rendering errors."""
    pass


class UnsupportedFormatError(FormatterError):
    """Raised for an unrecognized render format. Fatal for that call only."""

    def __init__(
        self,
        message: str,
        render_format: Optional[str] = None,
        supported: Optional[List[str]] = None,
        **context: Any
    ) -> None:
        super().__init__(message, format=render_format, supported=supported, **context)
        self.render_format = render_format
        self.supported = list(supported or [])


class OutputError(FormatterError):
    """Raised when rendered output cannot be written."""

    def __init__(self, message: str, output_path: Optional[str] = None, **context: Any) -> None:
        super().__init__(message, output_path=output_path, **context)
        self.output_path = output_path


# ============================================================================
# PIPELINE EXCEPTIONS
# ============================================================================

class PipelineError(GlossarySystemError):
    """Base exception for pipeline errors."""
    pass


class GlossaryPipelineError(PipelineError):
    """Raised for pipeline failures, tagged with the stage that failed."""

    def __init__(self, message: str, stage: Optional[str] = None, **context: Any) -> None:
        super().__init__(message, stage=stage, **context)
        self.stage = stage


class ConfigurationError(PipelineError):
    """Raised when pipeline or component configuration is invalid."""

    def __init__(self, message: str, component: Optional[str] = None, **context: Any) -> None:
        super().__init__(message, component=component, **context)
        self.component = component


# ============================================================================
# VALIDATION EXCEPTIONS
# ============================================================================

class ValidationError(GlossarySystemError):
    """Base exception for validation errors."""

    def __init__(self, message: str, field: Optional[str] = None, **context: Any) -> None:
        super().__init__(message, field=field, **context)
        self.field = field


class InvalidConfigError(ValidationError):
    """Raised when configuration values are invalid."""
    pass


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================

def wrap_error(
    error: Exception,
    error_class: Type[GlossarySystemError],
    message: Optional[str] = None
) -> GlossarySystemError:
    """
    Wrap an exception in a custom exception type.

    Args:
        error: Original exception
        error_class: Exception class to wrap with
        message: Optional custom message

    Returns:
        Wrapped exception with ``__cause__`` set to the original

    Raises:
        TypeError: If error_class is not a GlossarySystemError subclass

    Example:
        >>> try:
        ...     open("missing.md")
        ... except OSError as e:
        ...     raise wrap_error(e, GlossaryReadError, "Cannot read glossary")
    """
    if not issubclass(error_class, GlossarySystemError):
        raise TypeError(
            f"error_class must be subclass of GlossarySystemError, "
            f"got {error_class.__name__}"
        )

    error_msg = f"{message}: {error}" if message else str(error)
    wrapped = error_class(error_msg)
    wrapped.__cause__ = error
    return wrapped


@contextmanager
def error_context(
    operation: str,
    error_class: Type[GlossarySystemError] = GlossarySystemError,
    logger: Optional[logging.Logger] = None
):
    """
    Context manager for consistent error handling and wrapping.

    Errors that are already part of the glossary hierarchy pass through
    unchanged so callers can still catch the specific type.

    Args:
        operation: Name of operation being performed
        error_class: Exception class to wrap foreign errors with
        logger: Optional logger for error logging

    Example:
        >>> with error_context("reading glossary", GlossaryReadError):
        ...     text = path.read_text(encoding="utf-8")
    """
    try:
        yield
    except GlossarySystemError:
        raise
    except KeyboardInterrupt:
        raise
    except Exception as e:
        if logger:
            logger.error(f"Error during {operation}: {e}", exc_info=True)

        raise wrap_error(e, error_class, f"Error during {operation}")
