"""
Advisor endpoints: per-turn context assembly, system prompt and advisor tools.

The model is invoked by the caller; these endpoints only prepare what it sees.
"""

from typing import AbstractSet, Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ...context_engine.catalog import AdvisorCatalog
from ...context_engine.context_assembler import AuthSession, ChatMessage, ContextAssembler
from ...context_engine.prompt_builder import PromptBuilder
from ...context_engine.rubrics import Perspective
from ...core.config import settings
from ...core.exceptions import NotFoundException
from ...core.responses import StandardResponse, success_response
from ...services.advisor_tools import AdvisorToolbox
from ...services.coverage_service import CoverageService
from ..deps import (
    get_advisor_toolbox,
    get_catalog,
    get_context_assembler,
    get_coverage_service,
    get_current_org_id,
    get_current_session,
    get_optional_session,
    get_prompt_builder,
)

router = APIRouter()


class AdvisorContextRequest(BaseModel):
    messages: List[ChatMessage]
    provider_metadata: Optional[Dict[str, Any]] = None
    perspective: Optional[Perspective] = None


class AdvisorPromptResponse(BaseModel):
    perspective: Perspective
    prompt: str
    coverage_pct: int
    missing_slugs: List[str] = Field(default_factory=list)


class AdvisorContextResponse(BaseModel):
    messages: List[ChatMessage]
    system: AdvisorPromptResponse


class EvidenceItem(BaseModel):
    file_path: str
    content: str


class TemplatePayload(BaseModel):
    slug: str
    title: str
    perspective: Perspective
    sections: List[str]
    acceptance_criteria: List[str]


def require_checklist_slug(slug: str, catalog: AdvisorCatalog = Depends(get_catalog)) -> str:
    if slug not in catalog.checklist:
        raise NotFoundException(f"Unknown checklist item: {slug}", resource_type="checklist_item", resource_id=slug)
    return slug


def _prompt_response(
    perspective: Perspective,
    present_slugs: AbstractSet[str],
    prompt_builder: PromptBuilder,
) -> AdvisorPromptResponse:
    built = prompt_builder.build(perspective, present_slugs)
    return AdvisorPromptResponse(
        perspective=perspective,
        prompt=built.prompt,
        coverage_pct=built.coverage_pct,
        missing_slugs=built.missing_slugs,
    )


@router.post("/context", response_model=AdvisorContextResponse)
async def assemble_context(
    request: AdvisorContextRequest,
    session: Optional[AuthSession] = Depends(get_optional_session),
    assembler: ContextAssembler = Depends(get_context_assembler),
    prompt_builder: PromptBuilder = Depends(get_prompt_builder),
):
    """
    Augment the latest user turn with data room evidence and return the
    advisor system prompt for the same turn.

    Without a session or a valid org selection the messages come back
    unchanged and the prompt assumes an empty data room. Lookup failures
    never fail the turn; retrieval failures surface as 502 RETRIEVAL_ERROR.
    """
    turn = await assembler.assemble(request.messages, session, request.provider_metadata)

    present_slugs = turn.present_slugs
    if present_slugs is None:
        present_slugs = await assembler.present_slugs_for(turn.org_id) if turn.org_id else frozenset()

    perspective = request.perspective or settings.DEFAULT_PERSPECTIVE
    return AdvisorContextResponse(
        messages=turn.messages,
        system=_prompt_response(perspective, present_slugs, prompt_builder),
    )


@router.get("/prompt", response_model=AdvisorPromptResponse)
async def get_advisor_prompt(
    perspective: Optional[Perspective] = Query(default=None),
    session: AuthSession = Depends(get_current_session),
    org_id: str = Depends(get_current_org_id),
    coverage_service: CoverageService = Depends(get_coverage_service),
    prompt_builder: PromptBuilder = Depends(get_prompt_builder),
):
    present_slugs, _ = await coverage_service.snapshot(org_id)
    return _prompt_response(perspective or settings.DEFAULT_PERSPECTIVE, present_slugs, prompt_builder)


@router.get("/evidence/{slug}", response_model=StandardResponse[List[EvidenceItem]])
async def find_evidence(
    session: AuthSession = Depends(get_current_session),
    slug: str = Depends(require_checklist_slug),
    org_id: str = Depends(get_current_org_id),
    toolbox: AdvisorToolbox = Depends(get_advisor_toolbox),
):
    """Chunks of the files associated with a checklist slug"""
    evidence = await toolbox.find_evidence(org_id, slug)
    return success_response(
        data=[EvidenceItem(file_path=item.file_path, content=item.content) for item in evidence],
        meta={"count": len(evidence)},
    )


@router.get("/templates/{slug}", response_model=StandardResponse[TemplatePayload])
async def generate_template(
    perspective: Optional[Perspective] = Query(default=None),
    session: AuthSession = Depends(get_current_session),
    slug: str = Depends(require_checklist_slug),
    toolbox: AdvisorToolbox = Depends(get_advisor_toolbox),
):
    """Skeleton outline for producing a missing checklist document"""
    template = toolbox.generate_template(slug, perspective or settings.DEFAULT_PERSPECTIVE)
    return success_response(data=TemplatePayload(
        slug=template.slug,
        title=template.title,
        perspective=template.perspective,
        sections=template.sections,
        acceptance_criteria=template.acceptance_criteria,
    ))
