"""
Structured glossary parser for YAML and JSON sources.

Emphasis is given as explicit span tables, so no markup is inferred::

    title: Proof systems
    asides:
      - {label: Note, text: "..."}
    terms:
      - id: NARK
        definition: "A NARK is a non-interactive argument."
        related: [soundness]
        external: [Fiat-Shamir]
        spans: [{offset: 2, length: 4, style: bold}]
        asides: ["..."]
"""
import json
import logging
from typing import Any, Dict, List

import yaml

from ..core.exceptions import DuplicateTermError, InvalidDocumentError, InvalidTermError
from ..core.interfaces import IGlossaryParser
from ..core.models import Aside, SourceType
from ..glossary.term_store import TermStore


logger = logging.getLogger(__name__)

_TERM_KEYS = frozenset({'id', 'definition', 'related', 'external', 'spans', 'asides'})


class StructuredGlossaryParser(IGlossaryParser):
    """Parser for ``.yaml``/``.yml`` and ``.json`` glossary sources."""

    def __init__(
        self,
        source_type: SourceType = SourceType.YAML,
        case_sensitive_find: bool = False
    ):
        if source_type not in (SourceType.YAML, SourceType.JSON):
            raise ValueError(f"Structured parser cannot read {source_type.value}")
        self.source_type = source_type
        self.case_sensitive_find = case_sensitive_find

    @property
    def supported_source_type(self) -> SourceType:
        return self.source_type

    def parse_text(self, text: str, source: str = "<string>") -> TermStore:
        data = self._load(text, source)

        if not isinstance(data, dict):
            raise InvalidDocumentError("Top level must be a mapping", file_path=source)
        terms = data.get('terms')
        if not isinstance(terms, list):
            raise InvalidDocumentError("'terms' must be a list", file_path=source)

        title = data.get('title')
        store = TermStore(
            title=str(title) if title is not None else None,
            case_sensitive_find=self.case_sensitive_find
        )

        try:
            for raw in self._list(data, 'asides'):
                store.add_document_aside(self._aside(raw))
        except (TypeError, ValueError, InvalidTermError) as e:
            raise InvalidDocumentError(f"Invalid document aside: {e}", file_path=source) from e

        for index, entry in enumerate(terms):
            self._define(store, entry, index, source)

        store.freeze()
        logger.info(f"Loaded {len(store)} terms from {source}")
        return store

    def _load(self, text: str, source: str) -> Any:
        try:
            if self.source_type == SourceType.JSON:
                return json.loads(text)
            return yaml.safe_load(text)
        except json.JSONDecodeError as e:
            raise InvalidDocumentError(
                f"Invalid JSON: {e.msg}", file_path=source, line=e.lineno
            ) from e
        except yaml.YAMLError as e:
            mark = getattr(e, 'problem_mark', None)
            raise InvalidDocumentError(
                f"Invalid YAML: {e}",
                file_path=source,
                line=mark.line + 1 if mark is not None else None
            ) from e

    def _define(self, store: TermStore, entry: Any, index: int, source: str) -> None:
        if not isinstance(entry, dict):
            raise InvalidDocumentError(
                f"Term #{index} must be a mapping", file_path=source, index=index
            )
        unknown = set(entry) - _TERM_KEYS
        if unknown:
            raise InvalidDocumentError(
                f"Term #{index} has unknown keys: {sorted(unknown)}",
                file_path=source, index=index
            )

        term_id = entry.get('id')
        try:
            store.define(
                term_id,
                entry.get('definition'),
                related_ids=self._list(entry, 'related'),
                asides=[self._aside(a) for a in self._list(entry, 'asides')],
                spans=self._list(entry, 'spans'),
                external_ids=self._list(entry, 'external'),
            )
        except DuplicateTermError as e:
            e.context.setdefault('index', index)
            raise
        except (InvalidTermError, TypeError, ValueError) as e:
            raise InvalidDocumentError(
                f"Invalid term #{index}: {e}", file_path=source, index=index
            ) from e

    @staticmethod
    def _list(entry: Dict[str, Any], key: str) -> List[Any]:
        value = entry.get(key) or []
        if not isinstance(value, list):
            raise TypeError(f"'{key}' must be a list")
        return value

    @staticmethod
    def _aside(raw: Any) -> Aside:
        if isinstance(raw, str):
            return Aside(raw)
        if isinstance(raw, dict):
            return Aside(raw.get('text', ''), raw.get('label'))
        raise TypeError(f"Cannot interpret aside: {raw!r}")
