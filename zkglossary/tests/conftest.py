"""
Pytest configuration and fixtures.
"""
import logging
import pytest
import tempfile
import shutil
from pathlib import Path

from zkglossary.core.factory import reset_factories
from zkglossary.core.models import EmphasisSpan, EmphasisStyle
from zkglossary.glossary.term_store import TermStore
from zkglossary.utils.text_normalizer import CachedTextNormalizer


SAMPLE_MARKDOWN = """# Sample

> Note: A short glossary used in tests.

## NARK

A **NARK** is a *non-interactive* argument.

See also: soundness, ext:Fiat-Shamir

## soundness

**Soundness** means false statements are rejected.

> Caveat: Only against bounded provers.
"""


@pytest.fixture
def temp_dir():
    """Create temporary directory."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def sample_markdown():
    """Small Markdown glossary with a title, asides and an external reference."""
    return SAMPLE_MARKDOWN


@pytest.fixture
def sample_markdown_file(temp_dir, sample_markdown):
    path = temp_dir / "sample.md"
    path.write_text(sample_markdown, encoding="utf-8")
    return path


@pytest.fixture
def write_glossary(temp_dir):
    """Write glossary text to a file in the temp dir and return its path."""
    def _write(text: str, name: str = "glossary.md") -> Path:
        path = temp_dir / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def sample_store():
    """Unfrozen store: NARK references soundness, which is defined after it."""
    store = TermStore(title="Proof systems")
    store.define(
        "NARK",
        "A NARK is a non-interactive argument.",
        related_ids=["soundness"],
        spans=[EmphasisSpan(2, 4, EmphasisStyle.BOLD)],
    )
    store.define(
        "soundness",
        "Soundness means false statements are rejected.",
        spans=[EmphasisSpan(0, 9, EmphasisStyle.BOLD)],
    )
    return store


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch, tmp_path):
    """Setup test environment variables."""
    monkeypatch.setenv("TESTING", "true")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    for var in (
        "ZKGLOSSARY_FORMAT",
        "ZKGLOSSARY_SOURCE",
        "ZKGLOSSARY_LOG_DIR",
        "ZKGLOSSARY_EXTERNAL_PREFIX",
        "ZKGLOSSARY_ALLOW_FORWARD_REFERENCES",
    ):
        monkeypatch.delenv(var, raising=False)

    # keep a developer's zkglossary.yaml out of the tests
    monkeypatch.chdir(tmp_path)

    yield

    reset_factories()
    CachedTextNormalizer.clear_cache()
    package_logger = logging.getLogger("zkglossary")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
