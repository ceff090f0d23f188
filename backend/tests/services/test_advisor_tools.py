"""
Tests for the advisor toolbox.
"""

import pytest

from conftest import ORG_ID, PITCH_DECK_SLUG
from dataroom.context_engine.rubrics import Perspective
from dataroom.services.advisor_tools import TEMPLATE_SECTIONS, AdvisorToolbox


@pytest.fixture
def toolbox(catalog, seeded_store):
    return AdvisorToolbox(catalog, seeded_store)


@pytest.mark.asyncio
async def test_score_coverage(toolbox, catalog):
    scores = await toolbox.score_coverage(ORG_ID, Perspective.FOUNDER)

    assert [s.slug for s in scores] == catalog.checklist.list_required_slugs(Perspective.FOUNDER)
    assert [s.slug for s in scores if s.presence] == [PITCH_DECK_SLUG]


@pytest.mark.asyncio
async def test_find_evidence_returns_associated_chunks(toolbox):
    evidence = await toolbox.find_evidence(ORG_ID, PITCH_DECK_SLUG)

    assert len(evidence) == 2
    assert {item.file_path for item in evidence} == {f"{ORG_ID}/pitch_deck.pdf"}


@pytest.mark.asyncio
async def test_find_evidence_without_association(toolbox):
    assert await toolbox.find_evidence(ORG_ID, "tax-returns") == []
    assert await toolbox.find_evidence("org-unknown", PITCH_DECK_SLUG) == []


def test_generate_template_for_known_slug(toolbox):
    template = toolbox.generate_template(PITCH_DECK_SLUG, Perspective.FOUNDER)

    assert template.title == "Pitch Deck"
    assert template.perspective == "founder"
    assert template.sections == list(TEMPLATE_SECTIONS)
    assert template.acceptance_criteria == [
        "Problem, solution, market size (bottom-up)",
        "Traction and unit economics",
        "Team and roadmap",
    ]


def test_generate_template_for_unknown_slug(toolbox):
    template = toolbox.generate_template("board-pack", "acquirer_mna")

    assert template.title == "board-pack"
    assert template.perspective == "acquirer_mna"
    assert template.acceptance_criteria == []
