"""
Tests for cross-reference resolution.
"""
import pytest

from zkglossary.core.exceptions import DanglingReferenceError, ReferenceResolutionError
from zkglossary.glossary.resolver import CrossReferenceResolver, resolve
from zkglossary.glossary.term_store import TermStore


def build(*entries):
    store = TermStore()
    for entry in entries:
        term_id, related = entry[0], entry[1]
        external = entry[2] if len(entry) > 2 else ()
        store.define(term_id, f"Definition of {term_id}.", related_ids=related, external_ids=external)
    return store


class TestResolve:

    def test_clean_store_has_no_errors(self):
        store = build(
            ("relation", []),
            ("statement", ["relation"]),
            ("witness", ["statement", "relation"]),
        )
        result = resolve(store)

        assert result.errors == []
        assert result.ok

    def test_single_dangling_reference(self):
        store = build(("A", ["Z"]))
        result = resolve(store)

        assert len(result.errors) == 1
        error = result.errors[0]
        assert isinstance(error, DanglingReferenceError)
        assert error.term == "A"
        assert error.target == "Z"
        assert "A" in str(error) and "Z" in str(error)

    def test_all_dangling_references_reported(self):
        store = build(
            ("A", ["Z", "B"]),
            ("B", ["Y"]),
            ("C", ["X", "A"]),
        )
        result = resolve(store)

        pairs = [(e.term, e.target) for e in result.dangling]
        assert sorted(pairs) == [("A", "Z"), ("B", "Y"), ("C", "X")]

    def test_external_references_never_dangle(self):
        store = build(("NARK", [], ["Fiat-Shamir transform"]))
        result = resolve(store)

        assert result.ok
        assert result.external == {"NARK": ("Fiat-Shamir transform",)}

    def test_forward_references_allowed_by_default(self):
        store = build(("NARK", ["soundness"]), ("soundness", []))
        result = resolve(store)

        assert result.ok
        assert result.forward_references == [("NARK", "soundness")]

    def test_forward_references_rejected(self):
        store = build(("NARK", ["soundness"]), ("soundness", []))
        result = CrossReferenceResolver(allow_forward_references=False).resolve(store)

        assert len(result.errors) == 1
        assert result.errors[0].context['forward'] is True
        # still navigable
        assert result.neighbors("NARK") == ("soundness",)

    def test_self_reference_is_not_dangling(self):
        store = build(("loop", ["loop"]))
        assert resolve(store).ok

    def test_resolve_does_not_mutate_store(self, sample_store):
        before = [sample_store.lookup(i) for i in sample_store.ids()]
        resolve(sample_store)
        assert [sample_store.lookup(i) for i in sample_store.ids()] == before


class TestGraph:

    @pytest.fixture
    def result(self):
        store = build(
            ("relation", ["statement"]),
            ("statement", ["relation"]),
            ("witness", ["statement", "relation", "missing"]),
            ("circuit", ["relation"]),
        )
        return resolve(store)

    def test_neighbors_in_definition_order(self, result):
        assert result.neighbors("witness") == ("relation", "statement")
        assert result.neighbors("unknown") == ()

    def test_backlinks(self, result):
        assert result.backlinks("relation") == ("statement", "witness", "circuit")
        assert result.backlinks("circuit") == ()

    def test_orphans(self, result):
        assert result.orphans() == ["witness", "circuit"]

    def test_raise_for_errors(self, result):
        with pytest.raises(ReferenceResolutionError) as exc_info:
            result.raise_for_errors()

        error = exc_info.value
        assert error.context['count'] == 1
        assert error.errors[0].target == "missing"
        assert error.to_dict()['errors'][0]['error_type'] == "DanglingReferenceError"

    def test_raise_for_errors_on_clean_result(self):
        resolve(build(("a", []))).raise_for_errors()
