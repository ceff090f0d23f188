"""
Coverage Scorer - presence, adequacy and freshness per required checklist item

Presence is a plain membership test against the org's association snapshot.
Adequacy of a present document stays "unknown": content grading is left to a
later LLM-graded pass and is not approximated here.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import AbstractSet, List, Mapping, Optional

from .checklist import ChecklistCatalog
from .rubrics import Perspective

FRESHNESS_WINDOW_DAYS = 90
TOP_GAPS_LIMIT = 20
SECONDS_PER_DAY = 86400


class Adequacy(str, Enum):
    UNKNOWN = "unknown"
    INSUFFICIENT = "insufficient"
    SUFFICIENT = "sufficient"


class Freshness(str, Enum):
    UNKNOWN = "unknown"
    STALE = "stale"
    FRESH = "fresh"


@dataclass(frozen=True)
class SlugMetadata:
    as_of_date: Optional[datetime] = None


@dataclass
class CoverageScore:
    slug: str
    presence: bool
    adequacy: Adequacy
    freshness: Freshness
    reasons: List[str] = field(default_factory=list)
    next_steps: List[str] = field(default_factory=list)

    @property
    def is_gap(self) -> bool:
        return (
            not self.presence
            or self.freshness == Freshness.STALE
            or self.adequacy != Adequacy.SUFFICIENT
        )


@dataclass
class CoverageReport:
    perspective: Perspective
    coverage_pct: int
    coverage: List[CoverageScore]
    top_gaps: List[CoverageScore]


def percent(part: int, whole: int) -> int:
    """Integer percentage rounded half-up; an empty whole counts as one."""
    return int(math.floor(100 * part / max(1, whole) + 0.5))


def as_utc(value: datetime) -> datetime:
    if not isinstance(value, datetime):
        # plain date
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def age_in_days(as_of: datetime, now: datetime) -> int:
    delta = as_utc(now) - as_utc(as_of)
    return math.floor(delta.total_seconds() / SECONDS_PER_DAY)


class CoverageScorer:
    """Scores a perspective's required checklist items against a snapshot."""

    def __init__(self, checklist: ChecklistCatalog) -> None:
        self.checklist = checklist

    def score(
        self,
        perspective: Perspective,
        present_slugs: AbstractSet[str],
        metadata_by_slug: Optional[Mapping[str, SlugMetadata]] = None,
        now: Optional[datetime] = None,
    ) -> List[CoverageScore]:
        """
        Score every slug required by ``perspective``.

        Args:
            perspective: Perspective selecting the required items.
            present_slugs: Slugs with an associated file in the org snapshot.
            metadata_by_slug: Optional per-slug metadata carrying an as-of date.
            now: Reference time (defaults to the current UTC time).

        Returns:
            One CoverageScore per required slug, in category-tree order.
        """
        metadata_by_slug = metadata_by_slug or {}
        now = now or datetime.now(timezone.utc)
        results: List[CoverageScore] = []

        for slug in self.checklist.list_required_slugs(perspective):
            presence = slug in present_slugs
            reasons: List[str] = []
            next_steps: List[str] = []

            adequacy = Adequacy.UNKNOWN
            if not presence:
                adequacy = Adequacy.INSUFFICIENT
                reasons.append("No associated file uploaded")
                next_steps.append(f"Upload evidence for {self.checklist.label_for(slug)}")

            freshness = Freshness.UNKNOWN
            meta = metadata_by_slug.get(slug)
            if meta is not None and meta.as_of_date is not None:
                age_days = age_in_days(meta.as_of_date, now)
                freshness = Freshness.FRESH if age_days <= FRESHNESS_WINDOW_DAYS else Freshness.STALE
                if freshness == Freshness.STALE:
                    reasons.append(f"Evidence older than {FRESHNESS_WINDOW_DAYS} days ({age_days}d)")
                    next_steps.append("Upload updated version")

            results.append(CoverageScore(
                slug=slug,
                presence=presence,
                adequacy=adequacy,
                freshness=freshness,
                reasons=reasons,
                next_steps=next_steps,
            ))

        return results

    def report(
        self,
        perspective: Perspective,
        present_slugs: AbstractSet[str],
        metadata_by_slug: Optional[Mapping[str, SlugMetadata]] = None,
        now: Optional[datetime] = None,
    ) -> CoverageReport:
        coverage = self.score(perspective, present_slugs, metadata_by_slug, now=now)
        present = sum(1 for item in coverage if item.presence)
        gaps = [item for item in coverage if item.is_gap][:TOP_GAPS_LIMIT]
        return CoverageReport(
            perspective=Perspective(perspective),
            coverage_pct=percent(present, len(coverage)),
            coverage=coverage,
            top_gaps=gaps,
        )
