"""
Tests for perspective rubrics.
"""

import pytest

from dataroom.context_engine.rubrics import Perspective, RubricCatalog


def test_catalog_has_all_perspectives():
    catalog = RubricCatalog()
    assert set(catalog.perspectives()) == set(Perspective)


def test_get_accepts_raw_values():
    catalog = RubricCatalog()
    assert catalog.get("investor_diligence").perspective == Perspective.INVESTOR_DILIGENCE
    with pytest.raises(ValueError):
        catalog.get("board_member")


def test_required_doc_slugs_deduplicated_in_order():
    rubric = RubricCatalog().get(Perspective.INVESTOR_DILIGENCE)
    slugs = rubric.required_doc_slugs()
    assert slugs[0] == "audited-financial-statements"
    assert len(slugs) == len(set(slugs))
    assert "esop-options-outstanding" in slugs


def test_acquirer_metrics_extend_core_metrics():
    rubric = RubricCatalog().get(Perspective.ACQUIRER_MNA)
    keys = [metric.key for metric in rubric.required_metrics]
    assert keys[0] == "mrr"
    assert "nps" in keys and "support_sla" in keys
    runway = next(m for m in rubric.required_metrics if m.key == "runway")
    assert runway.formula == "Cash / Burn"
    assert runway.required
