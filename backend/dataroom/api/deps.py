"""
Shared FastAPI dependencies.

Authentication happens upstream; the gateway forwards the verified user as
``X-User-Email`` and the active organization as ``X-Org-Id``.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from ..context_engine.catalog import AdvisorCatalog, get_default_catalog
from ..context_engine.context_assembler import AuthSession, ContextAssembler
from ..context_engine.hybrid_retriever import HybridRetriever
from ..context_engine.prompt_builder import PromptBuilder
from ..core.config import Settings, settings
from ..core.database import AsyncSessionLocal
from ..core.exceptions import ValidationException, raise_unauthorized
from ..services.advisor_tools import AdvisorToolbox
from ..services.coverage_service import CoverageService
from ..services.data_room_store import DataRoomStore
from ..services.embedding_service import EmbeddingService, OpenAIEmbeddingService
from ..services.sql_data_room_store import SqlDataRoomStore


def get_settings() -> Settings:
    return settings


def get_catalog() -> AdvisorCatalog:
    return get_default_catalog()


@lru_cache(maxsize=1)
def get_store() -> DataRoomStore:
    return SqlDataRoomStore(AsyncSessionLocal)


@lru_cache(maxsize=1)
def get_embedding_service() -> EmbeddingService:
    return OpenAIEmbeddingService(
        api_key=settings.OPENAI_API_KEY,
        model_name=settings.EMBEDDING_MODEL,
        cache_size=settings.EMBEDDING_CACHE_SIZE,
    )


async def get_optional_session(
    x_user_email: Optional[str] = Header(default=None),
) -> Optional[AuthSession]:
    if not x_user_email:
        return None
    return AuthSession(user_email=x_user_email)


async def get_current_session(
    session: Optional[AuthSession] = Depends(get_optional_session),
) -> AuthSession:
    if session is None:
        raise_unauthorized("Missing authenticated user")
    return session


async def get_current_org_id(x_org_id: Optional[str] = Header(default=None)) -> str:
    if not x_org_id:
        raise ValidationException("No active organization", field_errors=["X-Org-Id header is required"])
    return x_org_id


def get_coverage_service(
    catalog: AdvisorCatalog = Depends(get_catalog),
    store: DataRoomStore = Depends(get_store),
) -> CoverageService:
    return CoverageService(catalog, store, store)


def get_advisor_toolbox(
    catalog: AdvisorCatalog = Depends(get_catalog),
    store: DataRoomStore = Depends(get_store),
) -> AdvisorToolbox:
    return AdvisorToolbox(catalog, store)


def get_prompt_builder(catalog: AdvisorCatalog = Depends(get_catalog)) -> PromptBuilder:
    return PromptBuilder(catalog)


def get_context_assembler(
    catalog: AdvisorCatalog = Depends(get_catalog),
    store: DataRoomStore = Depends(get_store),
    embedding_service: EmbeddingService = Depends(get_embedding_service),
    app_settings: Settings = Depends(get_settings),
) -> ContextAssembler:
    retriever = HybridRetriever(
        embedding_service,
        store,
        timeout_seconds=app_settings.RETRIEVAL_TIMEOUT_SECONDS,
    )
    return ContextAssembler(
        catalog,
        retriever,
        association_store=store,
        metadata_store=store,
        top_k=app_settings.RETRIEVAL_TOP_K,
    )
