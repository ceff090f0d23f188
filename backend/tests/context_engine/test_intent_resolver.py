"""
Tests for lexical intent resolution.
"""

import pytest

from dataroom.context_engine.intent_resolver import IntentResolver, label_tokens

CAP_TABLE = "cap-table-history-share-issuances-safes"


@pytest.fixture
def resolver(catalog):
    return IntentResolver(catalog.checklist.intent_corpus())


def test_cap_table_question(resolver):
    assert resolver.resolve("what's our cap table situation") == frozenset({CAP_TABLE})


def test_greeting_resolves_nothing(resolver):
    assert resolver.resolve("hello") == frozenset()


@pytest.mark.parametrize("query", ["", "   ", None])
def test_empty_query(resolver, query):
    assert resolver.resolve(query) == frozenset()


def test_case_insensitive_label_match(resolver):
    assert "pitch-deck" in resolver.resolve("Can you review the PITCH DECK?")


def test_alias_resolves_colloquial_phrasing(resolver):
    assert resolver.resolve("how's our fundraising story?") == frozenset({"pitch-deck"})
    assert "product-roadmap" in resolver.resolve("is the PRD up to date")


def test_explain_reports_first_matching_rule(catalog):
    resolver = IntentResolver(catalog.checklist.labels())
    explained = resolver.explain("please share the tax returns and the board minutes")
    assert explained["tax-returns"] == "label_substring"
    assert explained["board-minutes-archive"] == "token_hits"


def test_spaced_slug_rule():
    resolver = IntentResolver([("NDAs (employees)", "ndas-employees")], rules=[
        ("spaced_slug", lambda q, label, slug: slug.replace("-", " ") in q),
    ])
    assert resolver.explain("any ndas employees signed?") == {"ndas-employees": "spaced_slug"}


def test_label_without_qualifying_tokens_never_matches_by_tokens():
    assert label_tokens("IP / HR") == []
    resolver = IntentResolver([("IP / HR", "ip-hr")])
    assert resolver.resolve("anything at all") == frozenset()


def test_single_token_label_needs_that_token():
    resolver = IntentResolver([("Runway", "runway")])
    assert resolver.resolve("how long is our runway") == frozenset({"runway"})
    assert resolver.resolve("how long do we last") == frozenset()
