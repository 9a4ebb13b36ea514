"""
Tests for YAML and JSON glossary sources.
"""
import json

import pytest
import yaml

from zkglossary.core.exceptions import DuplicateTermError, InvalidDocumentError
from zkglossary.core.models import Aside, EmphasisSpan, EmphasisStyle, SourceType
from zkglossary.parsers.structured_parser import StructuredGlossaryParser


GLOSSARY = {
    'title': 'Proof systems',
    'asides': [{'label': 'Note', 'text': 'Structured source.'}],
    'terms': [
        {
            'id': 'NARK',
            'definition': 'A NARK is a non-interactive argument.',
            'related': ['soundness'],
            'external': ['Fiat-Shamir'],
            'spans': [{'offset': 2, 'length': 4, 'style': 'bold'}],
        },
        {
            'id': 'soundness',
            'definition': 'Soundness rejects false statements.',
            'asides': ['Plain aside.', {'label': 'Caveat', 'text': 'Bounded provers.'}],
        },
    ],
}


@pytest.fixture(params=[SourceType.YAML, SourceType.JSON])
def source(request):
    if request.param == SourceType.JSON:
        return request.param, json.dumps(GLOSSARY)
    return request.param, yaml.safe_dump(GLOSSARY, sort_keys=False)


def test_parse_structured(source):
    source_type, text = source
    store = StructuredGlossaryParser(source_type).parse_text(text)

    assert store.title == "Proof systems"
    assert store.document_asides == (Aside("Structured source.", "Note"),)
    assert store.ids() == ["NARK", "soundness"]
    assert store.frozen

    nark = store.lookup("NARK")
    assert nark.spans == (EmphasisSpan(2, 4, EmphasisStyle.BOLD),)
    assert nark.related == frozenset({"soundness"})
    assert nark.external == frozenset({"Fiat-Shamir"})

    assert store.lookup("soundness").asides == (
        Aside("Plain aside."),
        Aside("Bounded provers.", "Caveat"),
    )


def test_duplicate_id_carries_index():
    data = {'terms': [
        {'id': 'a', 'definition': 'A.'},
        {'id': 'a', 'definition': 'Again.'},
    ]}

    with pytest.raises(DuplicateTermError) as exc_info:
        StructuredGlossaryParser(SourceType.JSON).parse_text(json.dumps(data))

    assert exc_info.value.context['index'] == 1


@pytest.mark.parametrize("data", [
    [],
    {'title': 'No terms'},
    {'terms': {'id': 'a'}},
    {'terms': ['just a string']},
    {'terms': [{'id': 'a', 'definition': 'A.', 'colour': 'red'}]},
    {'terms': [{'id': 'a'}]},
    {'terms': [{'definition': 'No id.'}]},
    {'terms': [{'id': 'a', 'definition': 'A.', 'related': 'b'}]},
    {'terms': [{'id': 'a', 'definition': 'A.', 'spans': [{'offset': 0, 'length': 9, 'style': 'bold'}]}]},
    {'terms': [{'id': 'a', 'definition': 'A.', 'asides': [3]}]},
    {'asides': [{'text': ''}], 'terms': []},
    {'asides': [{'text': 5}], 'terms': []},
    {'asides': [{'text': True}], 'terms': []},
    {'asides': [{'text': 'Remark.', 'label': 3}], 'terms': []},
    {'asides': 'Note', 'terms': []},
    {'asides': {'text': 'Remark.'}, 'terms': []},
    {'terms': [{'id': 'a', 'definition': 'A.', 'asides': [{'text': 5}]}]},
    {'terms': [{'id': 'a', 'definition': 'line one\nline two'}]},
    {'terms': [{'id': 'a', 'definition': 'ab', 'spans': [[0, 1, 'italic'], [1, 1, 'bold']]}]},
])
def test_invalid_structure(data):
    with pytest.raises(InvalidDocumentError):
        StructuredGlossaryParser(SourceType.YAML).parse_text(yaml.safe_dump(data), source="bad.yaml")


def test_document_aside_errors_name_the_source():
    text = "asides: [{text: yes}]\nterms: []\n"

    with pytest.raises(InvalidDocumentError) as exc_info:
        StructuredGlossaryParser(SourceType.YAML).parse_text(text, source="bad.yaml")

    assert exc_info.value.file_path == "bad.yaml"
    assert isinstance(exc_info.value.__cause__, TypeError)


def test_yaml_syntax_error_has_line():
    text = "terms:\n  - id: a\n    definition: [unclosed\n"

    with pytest.raises(InvalidDocumentError) as exc_info:
        StructuredGlossaryParser(SourceType.YAML).parse_text(text)

    assert exc_info.value.line is not None


def test_json_syntax_error_has_line():
    with pytest.raises(InvalidDocumentError) as exc_info:
        StructuredGlossaryParser(SourceType.JSON).parse_text('{\n"terms": [,]\n}')

    assert exc_info.value.line == 2


def test_markdown_source_type_rejected():
    with pytest.raises(ValueError):
        StructuredGlossaryParser(SourceType.MARKDOWN)
