"""
Checks on the bundled proof-systems glossary.
"""
import pytest

from zkglossary.core.pipeline import BUILTIN_GLOSSARY
from zkglossary.formatters.renderer import render
from zkglossary.glossary.resolver import resolve
from zkglossary.parsers.markdown_parser import parse_markdown, parse_markdown_file


@pytest.fixture(scope="module")
def store():
    return parse_markdown_file(BUILTIN_GLOSSARY)


def test_core_terms_present(store):
    for term_id in ("statement", "witness", "relation", "circuit", "NARK", "SNARK",
                    "soundness", "knowledge soundness", "zero knowledge"):
        assert term_id in store


def test_all_references_resolve(store):
    result = resolve(store, allow_forward_references=True)
    assert result.errors == []


def test_every_term_emphasizes_something(store):
    for term in store.all():
        assert term.spans, term.id


def test_nark_before_soundness(store):
    output = render(store, "plain")
    assert output.index("\nNARK\n") < output.index("\nsoundness\n")


def test_emphasized_render_reparses(store):
    again = parse_markdown(render(store, "emphasized"))

    assert again.ids() == store.ids()
    for term_id in store.ids():
        assert again.lookup(term_id) == store.lookup(term_id)


def test_malleability_caveat(store):
    asides = store.lookup("simulation soundness").asides
    assert any("malleable" in aside.text for aside in asides)
