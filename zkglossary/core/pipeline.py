"""
Glossary pipeline: load, resolve, render.

Each stage completes before the next begins and there is no way back:
a loaded store is frozen, resolution only reads it, rendering only reads it.
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union
import logging
import time

from .exceptions import GlossaryPipelineError, OutputError, error_context
from .factory import coerce_format, get_parser_factory
from .models import RenderFormat
from ..glossary.resolver import CrossReferenceResolver, ResolutionResult
from ..glossary.term_store import TermStore
from ..formatters.renderer import render
from ..utils.config_manager import AppConfig


logger = logging.getLogger(__name__)

BUILTIN_GLOSSARY = Path(__file__).resolve().parent.parent / "data" / "proof_systems.md"


class PipelineStage(Enum):
    LOADING = "loading"
    RESOLVING = "resolving"
    RENDERING = "rendering"
    COMPLETED = "completed"


@dataclass
class PipelineResult:
    store: TermStore
    resolution: ResolutionResult
    output: str
    render_format: RenderFormat
    duration: float = 0.0

    @property
    def total_terms(self) -> int:
        return len(self.store)


class GlossaryPipeline:
    """Runs a glossary source through load → resolve → render."""

    def __init__(self, config: Optional[AppConfig] = None):
        self.config = config or AppConfig()
        self.stage: Optional[PipelineStage] = None

    def load(self, source: Optional[Union[str, Path]] = None) -> TermStore:
        """
        Load and freeze a glossary.

        Args:
            source: Glossary file; defaults to the configured source, then
                the bundled proof-systems glossary

        Raises:
            UnsupportedFileTypeError, InvalidDocumentError,
            DuplicateTermError, GlossaryReadError
        """
        self.stage = PipelineStage.LOADING
        path = Path(source or self.config.glossary.source or BUILTIN_GLOSSARY)

        parser = get_parser_factory().get_parser_for_file(
            path,
            external_prefix=self.config.glossary.external_prefix,
            case_sensitive_find=self.config.glossary.case_sensitive_lookup,
        )
        return parser.parse(path)

    def resolve(self, store: TermStore) -> ResolutionResult:
        self.stage = PipelineStage.RESOLVING
        resolver = CrossReferenceResolver(
            allow_forward_references=self.config.glossary.allow_forward_references
        )
        return resolver.resolve(store)

    def render(
        self,
        store: TermStore,
        render_format: Optional[Union[RenderFormat, str]] = None
    ) -> str:
        self.stage = PipelineStage.RENDERING
        return render(
            store,
            render_format or self.config.render.default_format,
            config=self.config.render,
            external_prefix=self.config.glossary.external_prefix,
        )

    def run(
        self,
        source: Optional[Union[str, Path]] = None,
        render_format: Optional[Union[RenderFormat, str]] = None,
        strict: bool = True
    ) -> PipelineResult:
        """
        Run all three stages.

        Args:
            source: Glossary file
            render_format: Output format (config default when None)
            strict: Stop before rendering if any reference is unresolved

        Raises:
            ReferenceResolutionError: In strict mode, with every dangling reference
            GlossaryPipelineError: For failures outside the glossary error hierarchy
        """
        started = time.perf_counter()
        fmt = coerce_format(render_format or self.config.render.default_format)

        with error_context("glossary pipeline", GlossaryPipelineError, logger):
            store = self.load(source)
            resolution = self.resolve(store)

            if strict and not resolution.ok:
                for error in resolution.errors:
                    logger.error(str(error))
                resolution.raise_for_errors()

            output = self.render(store, fmt)

        self.stage = PipelineStage.COMPLETED

        return PipelineResult(
            store=store,
            resolution=resolution,
            output=output,
            render_format=fmt,
            duration=time.perf_counter() - started,
        )


def write_output(text: str, output_path: Union[str, Path]) -> Path:
    """
    Write rendered text as UTF-8.

    Raises:
        OutputError: If the file cannot be written
    """
    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise OutputError(
            f"Cannot write output: {e}", output_path=str(output_path)
        ) from e
    logger.info(f"Wrote {len(text)} chars to {output_path}")
    return output_path
