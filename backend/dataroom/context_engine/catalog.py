from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from .checklist import ChecklistCatalog
from .rubrics import RubricCatalog


@dataclass(frozen=True)
class AdvisorCatalog:
    """Immutable rubric + checklist configuration, built once per process."""

    rubrics: RubricCatalog
    checklist: ChecklistCatalog


@lru_cache(maxsize=1)
def get_default_catalog() -> AdvisorCatalog:
    return AdvisorCatalog(rubrics=RubricCatalog(), checklist=ChecklistCatalog())
