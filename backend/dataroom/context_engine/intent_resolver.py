"""
Intent Resolver - map free-text queries to checklist slugs

Purely lexical. Each (label, slug) pair of the corpus is tested against an
ordered list of named rules; the first rule that fires accepts the slug.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, FrozenSet, Iterable, List, Sequence, Tuple

MIN_TOKEN_LENGTH = 3
MIN_TOKEN_HITS = 2

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")

IntentRule = Tuple[str, Callable[[str, str, str], bool]]


def label_tokens(label: str) -> List[str]:
    return [tok for tok in _TOKEN_SPLIT.split(label.lower()) if len(tok) >= MIN_TOKEN_LENGTH]


def _label_in_query(query: str, label: str, slug: str) -> bool:
    return label in query


def _enough_token_hits(query: str, label: str, slug: str) -> bool:
    tokens = label_tokens(label)
    if not tokens:
        return False
    hits = sum(1 for tok in tokens if tok in query)
    # Short labels need every token, longer labels need at least two
    return hits >= min(MIN_TOKEN_HITS, len(tokens))


def _spaced_slug_in_query(query: str, label: str, slug: str) -> bool:
    return slug.replace("-", " ") in query


DEFAULT_RULES: Tuple[IntentRule, ...] = (
    ("label_substring", _label_in_query),
    ("token_hits", _enough_token_hits),
    ("spaced_slug", _spaced_slug_in_query),
)


class IntentResolver:
    """Resolve candidate checklist slugs from the literal wording of a query."""

    def __init__(
        self,
        corpus: Iterable[Tuple[str, str]],
        rules: Sequence[IntentRule] = DEFAULT_RULES,
    ) -> None:
        self.corpus = tuple((label.lower(), slug) for label, slug in corpus)
        self.rules = tuple(rules)

    def explain(self, query: str) -> Dict[str, str]:
        """Return slug -> name of the first rule that accepted it."""
        normalized = (query or "").strip().lower()
        if not normalized:
            return {}

        matches: Dict[str, str] = {}
        for label, slug in self.corpus:
            if slug in matches:
                continue
            for rule_name, predicate in self.rules:
                if predicate(normalized, label, slug):
                    matches[slug] = rule_name
                    break
        return matches

    def resolve(self, query: str) -> FrozenSet[str]:
        return frozenset(self.explain(query))
