"""
Coverage endpoints: required-document completeness for the active organization.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ...context_engine.coverage_scorer import Adequacy, CoverageScore, Freshness
from ...context_engine.context_assembler import AuthSession
from ...context_engine.rubrics import Perspective
from ...core.config import settings
from ...services.coverage_service import CoverageService
from ..deps import get_coverage_service, get_current_org_id, get_current_session

router = APIRouter()


class CoverageScoreResponse(BaseModel):
    slug: str
    presence: bool
    adequacy: Adequacy
    freshness: Freshness
    reasons: List[str]
    next_steps: List[str]

    @classmethod
    def from_score(cls, score: CoverageScore) -> "CoverageScoreResponse":
        return cls(
            slug=score.slug,
            presence=score.presence,
            adequacy=score.adequacy,
            freshness=score.freshness,
            reasons=list(score.reasons),
            next_steps=list(score.next_steps),
        )


class CoverageResponse(BaseModel):
    perspective: Perspective
    coverage_pct: int
    coverage: List[CoverageScoreResponse]
    top_gaps: List[CoverageScoreResponse]


@router.get("", response_model=CoverageResponse)
async def get_coverage(
    perspective: Optional[Perspective] = Query(default=None),
    session: AuthSession = Depends(get_current_session),
    org_id: str = Depends(get_current_org_id),
    coverage_service: CoverageService = Depends(get_coverage_service),
):
    """Presence, adequacy and freshness for every item the perspective requires"""
    report = await coverage_service.get_coverage(org_id, perspective or settings.DEFAULT_PERSPECTIVE)
    return CoverageResponse(
        perspective=report.perspective,
        coverage_pct=report.coverage_pct,
        coverage=[CoverageScoreResponse.from_score(item) for item in report.coverage],
        top_gaps=[CoverageScoreResponse.from_score(item) for item in report.top_gaps],
    )
