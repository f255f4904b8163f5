"""
Concept expansion.

A small hand-curated table maps broad concepts ("fruit") to the terms that
usually express them ("apple", "bananas", ...). Expanding both documents
and queries through the table lets a search for "fruit" reach a document
that only mentions apples, without a learned embedding model.

The expander is an interface so the static table can be replaced by
another strategy without touching the encoder or the scorer.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)


DEFAULT_CONCEPTS: Dict[str, List[str]] = {
    'fruit': ['apple', 'apples', 'banana', 'bananas', 'orange', 'oranges',
              'grape', 'grapes', 'berry', 'berries'],
    'food': ['apple', 'apples', 'banana', 'bananas', 'bread', 'meat',
             'vegetable', 'vegetables'],
    'color': ['red', 'blue', 'green', 'yellow', 'orange', 'purple', 'black', 'white'],
    'animal': ['dog', 'cat', 'bird', 'fish', 'lion', 'tiger', 'elephant', 'horse'],
    'technology': ['computer', 'software', 'app', 'website', 'digital', 'tech', 'internet'],
    'business': ['company', 'corporation', 'startup', 'enterprise', 'organization', 'firm'],
}


class ConceptExpander:
    """Interface for token expansion strategies."""

    def expand(self, tokens: Sequence[str]) -> List[str]:
        """Return a multiset (list) that contains every input token."""
        raise NotImplementedError

    def is_concept(self, term: str) -> bool:
        """True if the term names a concept."""
        raise NotImplementedError

    def explain(self, tokens: Sequence[str]) -> Dict[str, List[str]]:
        """Map each triggered concept to the tokens that triggered it."""
        raise NotImplementedError

    @staticmethod
    def unique(terms: Iterable[str]) -> List[str]:
        """Deduplicate keeping first-seen order."""
        return list(dict.fromkeys(terms))


class StaticConceptExpander(ConceptExpander):
    """
    Expansion through a fixed concept -> related terms table.

    For every original token: a concept key adds all of its related terms,
    and a related term adds every concept listing it. Added terms are never
    expanded again, so the output size is bounded by the table.
    """

    def __init__(self, concepts: Optional[Mapping[str, Sequence[str]]] = None):
        table = DEFAULT_CONCEPTS if concepts is None else concepts
        self.concepts: Dict[str, List[str]] = {
            concept.lower(): [t.lower() for t in terms]
            for concept, terms in table.items()
        }

        # term -> concepts listing it, in table order
        self._reverse: Dict[str, List[str]] = {}
        for concept, terms in self.concepts.items():
            for term in terms:
                owners = self._reverse.setdefault(term, [])
                if concept not in owners:
                    owners.append(concept)

    def is_concept(self, term: str) -> bool:
        return term in self.concepts

    def expand(self, tokens: Sequence[str]) -> List[str]:
        expanded = list(tokens)

        for token in tokens:
            related = self.concepts.get(token)
            if related:
                expanded.extend(related)
            expanded.extend(self._reverse.get(token, ()))

        if logger.isEnabledFor(logging.DEBUG):
            added = len(self.unique(expanded)) - len(self.unique(tokens))
            if added > 0:
                logger.debug(
                    f"Concept expansion: {len(tokens)} tokens -> "
                    f"{len(expanded)} terms ({added} new distinct)"
                )

        return expanded

    def explain(self, tokens: Sequence[str]) -> Dict[str, List[str]]:
        triggered: Dict[str, List[str]] = {}

        for token in self.unique(tokens):
            if token in self.concepts:
                matched = triggered.setdefault(token, [])
                for term in self.concepts[token]:
                    if term not in matched:
                        matched.append(term)
            for concept in self._reverse.get(token, ()):
                matched = triggered.setdefault(concept, [])
                if token not in matched:
                    matched.append(token)

        return triggered
