"""
Cross-reference resolver.

Walks every term's related identifiers and checks them against the store.
A broken link never stops the pass: each one is collected as a
DanglingReferenceError so the caller sees all of them at once.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ..core.exceptions import (
    DanglingReferenceError,
    GlossaryError,
    ReferenceResolutionError,
)
from .term_store import TermStore


logger = logging.getLogger(__name__)


@dataclass
class ResolutionResult:
    """Outcome of one resolve pass."""
    graph: Dict[str, Tuple[str, ...]]
    errors: List[GlossaryError] = field(default_factory=list)
    external: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    forward_references: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def dangling(self) -> List[DanglingReferenceError]:
        return [e for e in self.errors if isinstance(e, DanglingReferenceError)]

    def neighbors(self, term_id: str) -> Tuple[str, ...]:
        """Resolved related terms of ``term_id``."""
        return self.graph.get(term_id, ())

    def backlinks(self, term_id: str) -> Tuple[str, ...]:
        """Terms whose related set resolves to ``term_id``, in definition order."""
        return tuple(src for src, targets in self.graph.items() if term_id in targets)

    def orphans(self) -> List[str]:
        """Terms that no other term references."""
        referenced = {
            target
            for src, targets in self.graph.items()
            for target in targets
            if target != src
        }
        return [term_id for term_id in self.graph if term_id not in referenced]

    def raise_for_errors(self) -> None:
        """Raise the whole batch as one ReferenceResolutionError."""
        if self.errors:
            raise ReferenceResolutionError(
                f"{len(self.errors)} unresolved reference(s)", errors=self.errors
            )


class CrossReferenceResolver:
    """Checks related-term references and builds the navigation graph."""

    def __init__(self, allow_forward_references: bool = True):
        self.allow_forward_references = allow_forward_references

    def resolve(self, store: TermStore) -> ResolutionResult:
        """
        Resolve every reference in ``store``.

        Args:
            store: Populated term store

        Returns:
            ResolutionResult with the adjacency graph and every error found
        """
        positions = {term.id: term.position for term in store.all()}
        graph: Dict[str, Tuple[str, ...]] = {}
        external: Dict[str, Tuple[str, ...]] = {}
        errors: List[GlossaryError] = []
        forward: List[Tuple[str, str]] = []

        for term in store.all():
            resolved = []
            # related is a set; report in a stable order
            for target in sorted(term.related, key=lambda t: (positions.get(t, len(positions)), t)):
                if target not in positions:
                    errors.append(DanglingReferenceError(
                        f"'{term.id}' references undefined term '{target}'",
                        term=term.id,
                        target=target,
                    ))
                    continue

                resolved.append(target)
                if positions[target] > term.position:
                    forward.append((term.id, target))
                    if not self.allow_forward_references:
                        errors.append(DanglingReferenceError(
                            f"'{term.id}' references '{target}' before it is defined",
                            term=term.id,
                            target=target,
                            forward=True,
                        ))

            graph[term.id] = tuple(resolved)
            if term.external:
                external[term.id] = tuple(sorted(term.external))

        if errors:
            logger.warning(f"Resolution found {len(errors)} unresolved reference(s)")
        else:
            logger.info(f"Resolved references for {len(graph)} terms")

        return ResolutionResult(
            graph=graph,
            errors=errors,
            external=external,
            forward_references=forward,
        )


def resolve(store: TermStore, allow_forward_references: bool = True) -> ResolutionResult:
    """Resolve ``store`` with a default resolver."""
    return CrossReferenceResolver(allow_forward_references).resolve(store)
