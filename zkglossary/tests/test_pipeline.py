"""
Tests for the load/resolve/render pipeline and component factories.
"""
import json

import pytest

from zkglossary.core.exceptions import (
    ConfigurationError,
    DuplicateTermError,
    GlossaryPipelineError,
    OutputError,
    ReferenceResolutionError,
    UnsupportedFileTypeError,
    UnsupportedFormatError,
)
from zkglossary.core.factory import (
    ParserFactory,
    get_parser_factory,
    get_formatter_factory,
)
from zkglossary.core.models import RenderFormat, SourceType
from zkglossary.core.pipeline import BUILTIN_GLOSSARY, GlossaryPipeline, PipelineStage, write_output
from zkglossary.parsers.markdown_parser import MarkdownGlossaryParser
from zkglossary.parsers.structured_parser import StructuredGlossaryParser
from zkglossary.utils.config_manager import AppConfig


NARK_FIRST = """## NARK

A **NARK** is a non-interactive argument.

See also: soundness

## soundness

**Soundness** rejects false statements.
"""


class TestPipeline:

    def test_end_to_end_plain(self, write_glossary):
        path = write_glossary(NARK_FIRST)
        result = GlossaryPipeline().run(path, "plain")

        assert result.resolution.errors == []
        assert result.render_format == RenderFormat.PLAIN
        assert result.total_terms == 2
        assert result.output.index("NARK") < result.output.index("soundness\n")
        assert "*" not in result.output

    def test_end_to_end_emphasized(self, write_glossary):
        path = write_glossary(NARK_FIRST)
        result = GlossaryPipeline().run(path, RenderFormat.EMPHASIZED)

        assert "A **NARK** is a non-interactive argument." in result.output
        assert "See also: soundness" in result.output

    def test_default_source_is_builtin(self):
        pipeline = GlossaryPipeline()
        result = pipeline.run()

        assert result.store.title == "Proof systems"
        assert pipeline.stage == PipelineStage.COMPLETED

    def test_configured_default_format(self, write_glossary):
        config = AppConfig()
        config.render.default_format = "emphasized"
        result = GlossaryPipeline(config).run(write_glossary(NARK_FIRST))

        assert result.render_format == RenderFormat.EMPHASIZED

    def test_strict_mode_raises_batch(self, write_glossary):
        path = write_glossary("## A\nAlpha.\nSee also: Z, Y\n")

        with pytest.raises(ReferenceResolutionError) as exc_info:
            GlossaryPipeline().run(path)

        assert sorted(e.target for e in exc_info.value.errors) == ["Y", "Z"]

    def test_lenient_mode_renders(self, write_glossary):
        path = write_glossary("## A\nAlpha.\nSee also: Z\n")
        result = GlossaryPipeline().run(path, strict=False)

        assert len(result.resolution.dangling) == 1
        assert "Alpha." in result.output

    def test_forward_references_can_be_forbidden(self, write_glossary):
        config = AppConfig()
        config.glossary.allow_forward_references = False

        with pytest.raises(ReferenceResolutionError):
            GlossaryPipeline(config).run(write_glossary(NARK_FIRST))

    def test_bad_format_fails_before_loading(self, temp_dir):
        pipeline = GlossaryPipeline()
        with pytest.raises(UnsupportedFormatError):
            pipeline.run(temp_dir / "missing.md", "html")
        assert pipeline.stage is None

    def test_duplicate_is_fatal(self, write_glossary):
        path = write_glossary("## a\nA.\n\n## a\nB.\n")
        with pytest.raises(DuplicateTermError):
            GlossaryPipeline().run(path)

    def test_structured_source(self, write_glossary):
        data = {'terms': [
            {'id': 'NARK', 'definition': 'N.', 'related': ['soundness']},
            {'id': 'soundness', 'definition': 'S.'},
        ]}
        path = write_glossary(json.dumps(data), "glossary.json")

        assert GlossaryPipeline().run(path).store.ids() == ["NARK", "soundness"]

    def test_unsupported_source(self, write_glossary):
        path = write_glossary("x", "glossary.docx")
        with pytest.raises(UnsupportedFileTypeError):
            GlossaryPipeline().load(path)

    def test_unexpected_failure_is_wrapped(self, write_glossary, monkeypatch):
        def broken(self, store):
            raise RuntimeError("boom")

        monkeypatch.setattr(GlossaryPipeline, "resolve", broken)

        with pytest.raises(GlossaryPipelineError) as exc_info:
            GlossaryPipeline().run(write_glossary(NARK_FIRST))

        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestWriteOutput:

    def test_write(self, temp_dir):
        path = write_output("héllo\n", temp_dir / "out" / "glossary.txt")
        assert path.read_text(encoding="utf-8") == "héllo\n"

    def test_write_failure(self, temp_dir):
        with pytest.raises(OutputError):
            write_output("x", temp_dir)


class TestFactories:

    def test_default_parsers(self):
        factory = get_parser_factory()

        assert set(factory.get_supported_types()) == {SourceType.MARKDOWN, SourceType.YAML, SourceType.JSON}
        assert isinstance(factory.get_parser_for_file("a.md"), MarkdownGlossaryParser)
        assert isinstance(factory.get_parser_for_file("a.yml"), StructuredGlossaryParser)
        assert factory.get_parser_for_file("a.json").supported_source_type == SourceType.JSON

    def test_parser_options(self):
        parser = get_parser_factory().get_parser(SourceType.MARKDOWN, external_prefix="x/")
        assert parser.external_prefix == "x/"

    def test_singletons(self):
        assert get_parser_factory() is get_parser_factory()
        assert get_formatter_factory() is get_formatter_factory()

    def test_empty_factory(self):
        with pytest.raises(UnsupportedFileTypeError):
            ParserFactory().get_parser(SourceType.MARKDOWN)

    def test_builtin_path(self):
        assert BUILTIN_GLOSSARY.name == "proof_systems.md"
        assert BUILTIN_GLOSSARY.exists()

    def test_bad_builder_options(self):
        with pytest.raises(ConfigurationError):
            get_parser_factory().get_parser(SourceType.MARKDOWN, colour="red")
        with pytest.raises(ConfigurationError):
            get_formatter_factory().get_formatter("emphasized", colour="red")
