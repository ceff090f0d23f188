"""
Checklist Catalog - slug-keyed checklist items derived from the data room tree.

Every item starts from a synthesized default (per-perspective requiredness,
generic acceptance criteria and expected evidence) and is then refined by
slug-keyed overrides for the documents reviewers care most about.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .rubrics import Perspective
from .slugs import DATA_ROOM_STRUCTURE, DataRoomCategory, slugify


@dataclass(frozen=True)
class ChecklistItem:
    slug: str
    title: str
    category: str
    perspective_required: Mapping[Perspective, bool]
    acceptance_criteria: Tuple[str, ...]
    expected_evidence: Tuple[str, ...]

    def is_required_for(self, perspective: Perspective) -> bool:
        return self.perspective_required.get(Perspective(perspective), False)


DEFAULT_ACCEPTANCE_CRITERIA = (
    "Document is legible and complete",
    "Matches title and purpose",
)
DEFAULT_EXPECTED_EVIDENCE = ("File uploaded with clear title", "As-of date visible")

ALL_PERSPECTIVES_REQUIRED = {
    Perspective.FOUNDER: True,
    Perspective.INVESTOR_DILIGENCE: True,
    Perspective.ACQUIRER_MNA: True,
}

OVERRIDES: Dict[str, Dict[str, object]] = {
    slugify("Audited Financial Statements"): {
        "acceptance_criteria": (
            "Contains independent auditor report letter",
            "Covers last fiscal year (or most recent)",
            "Includes balance sheet, income statement, cash flows",
        ),
        "expected_evidence": (
            "PDF with auditor letter",
            "Financial statements as-of date",
        ),
        "perspective_required": ALL_PERSPECTIVES_REQUIRED,
    },
    slugify("Cap Table History (share issuances, SAFEs)"): {
        "acceptance_criteria": (
            "Lists all issuances with dates and instruments",
            "Shows fully diluted, options outstanding, SAFEs/convertibles",
        ),
        "expected_evidence": ("Spreadsheet or PDF with transaction log",),
        "perspective_required": ALL_PERSPECTIVES_REQUIRED,
    },
    slugify("Churn/Retention Data"): {
        "acceptance_criteria": (
            "Shows logo and dollar retention",
            "Includes cohort curves (3/6/12m)",
        ),
        "expected_evidence": ("CSV or chart pack with cohorts",),
        "perspective_required": ALL_PERSPECTIVES_REQUIRED,
    },
    slugify("Pitch Deck"): {
        "acceptance_criteria": (
            "Problem, solution, market size (bottom-up)",
            "Traction and unit economics",
            "Team and roadmap",
        ),
        "expected_evidence": ("PDF or slides",),
        # Absent perspectives default to not required
        "perspective_required": {
            Perspective.FOUNDER: True,
            Perspective.INVESTOR_DILIGENCE: True,
        },
    },
}

# Colloquial phrasings that point at a checklist title. Only used to widen
# intent resolution; never creates slugs of its own.
INTENT_ALIASES: Tuple[Tuple[str, str], ...] = (
    ("fundraising", "Pitch Deck"),
    ("investor deck", "Pitch Deck"),
    ("cap table", "Cap Table History (share issuances, SAFEs)"),
    ("prd", "Product Roadmap"),
    ("product requirements", "Product Roadmap"),
    ("financials", "Audited Financial Statements"),
)


def _default_item(category: DataRoomCategory, title: str) -> ChecklistItem:
    return ChecklistItem(
        slug=slugify(title),
        title=title,
        category=category.category,
        perspective_required={
            Perspective.FOUNDER: True,
            Perspective.INVESTOR_DILIGENCE: category.category != "Product",
            Perspective.ACQUIRER_MNA: category.category != "Strategic",
        },
        acceptance_criteria=DEFAULT_ACCEPTANCE_CRITERIA,
        expected_evidence=DEFAULT_EXPECTED_EVIDENCE,
    )


def _freeze(item: ChecklistItem) -> ChecklistItem:
    return replace(item, perspective_required=MappingProxyType(dict(item.perspective_required)))


class ChecklistCatalog:
    """Read-only slug -> ChecklistItem registry in category-tree order."""

    def __init__(
        self,
        structure: Iterable[DataRoomCategory] = DATA_ROOM_STRUCTURE,
        overrides: Optional[Mapping[str, Mapping[str, object]]] = None,
        aliases: Iterable[Tuple[str, str]] = INTENT_ALIASES,
    ) -> None:
        overrides = OVERRIDES if overrides is None else overrides
        items: Dict[str, ChecklistItem] = {}

        for category in structure:
            for title in category.documents:
                item = _default_item(category, title)
                override = overrides.get(item.slug)
                if override:
                    item = replace(item, **override)
                if item.slug in items:
                    raise ValueError(f"Duplicate checklist slug: {item.slug}")
                items[item.slug] = _freeze(item)

        self._items = MappingProxyType(items)

        alias_pairs: List[Tuple[str, str]] = []
        for alias, title in aliases:
            slug = slugify(title)
            if slug not in self._items:
                raise ValueError(f"Alias {alias!r} points at unknown checklist item {title!r}")
            alias_pairs.append((alias, slug))
        self._aliases = tuple(alias_pairs)

    @property
    def items(self) -> Tuple[ChecklistItem, ...]:
        return tuple(self._items.values())

    def get(self, slug: str) -> Optional[ChecklistItem]:
        return self._items.get(slug)

    def __contains__(self, slug: object) -> bool:
        return slug in self._items

    def list_required_slugs(self, perspective: Perspective) -> List[str]:
        return [item.slug for item in self._items.values() if item.is_required_for(perspective)]

    def labels(self) -> List[Tuple[str, str]]:
        """(label, slug) pairs in category-tree order."""
        return [(item.title, item.slug) for item in self._items.values()]

    def intent_corpus(self) -> List[Tuple[str, str]]:
        return self.labels() + list(self._aliases)

    def label_for(self, slug: str) -> str:
        item = self._items.get(slug)
        if item is not None:
            return item.title
        return slug.replace("-", " ")
