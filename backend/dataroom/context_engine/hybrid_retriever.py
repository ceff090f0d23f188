"""
Hybrid Retriever - Dense + Lexical Retrieval over an org-scoped file set

Combines cosine similarity between the query embedding and stored chunk
embeddings (dense) with two small lexical boosts:
- keyword boost when the whole query appears verbatim in the chunk
- synonym boost when query and chunk both talk about a product roadmap/PRD

Retrieval is always scoped to an explicit file list. With no scope the
retriever returns nothing and touches neither the embedding service nor the
chunk store, so one org can never see another org's chunks.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, List, Optional, Sequence, Tuple

import numpy as np

from ..core.exceptions import RetrievalError
from ..services.data_room_store import ChunkRecord, ChunkStore, org_file_path
from ..services.embedding_service import EmbeddingService
from .coverage_scorer import as_utc

logger = logging.getLogger(__name__)

MAX_QUERY_CHARS = 2000
DEFAULT_TOP_K = 20
PRE_CANDIDATES = 200

KEYWORD_BOOST = 0.06
SYNONYM_BOOST = 0.04
MIN_KEYWORD_QUERY_CHARS = 3

SCORE_WEIGHT = 0.9
RECENCY_WEIGHT = 0.1

ROADMAP_PATTERN = re.compile(r"roadmap|prd|product requirements", re.IGNORECASE)


@dataclass
class RetrievalFilters:
    org_id: str
    query: str
    file_paths: List[str] = field(default_factory=list)  # bare filenames
    slugs: Optional[FrozenSet[str]] = None
    section: Optional[str] = None
    since: Optional[datetime] = None


@dataclass
class RetrievedFragment:
    file_path: str
    content: str
    score: float


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine over the common prefix of both vectors; 0.0 if either is empty or zero."""
    n = min(len(a), len(b))
    if n == 0:
        return 0.0

    va = np.asarray(a[:n], dtype=float)
    vb = np.asarray(b[:n], dtype=float)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


def lexical_boost(query: str, content: str) -> float:
    q = query.lower()
    c = (content or "").lower()
    boost = 0.0
    if len(q) >= MIN_KEYWORD_QUERY_CHARS and q in c:
        boost += KEYWORD_BOOST
    if ROADMAP_PATTERN.search(q) and ROADMAP_PATTERN.search(c):
        boost += SYNONYM_BOOST
    return boost


def recency_score(chunk: ChunkRecord) -> float:
    # Placeholder until as-of dates are weighted; keeps ranking identical
    return 0.0


def passes_filters(chunk: ChunkRecord, filters: RetrievalFilters) -> bool:
    """Chunks lacking an attribute are never excluded by that attribute's filter."""
    if filters.section and chunk.section and chunk.section != filters.section:
        return False
    if filters.slugs and chunk.slug and chunk.slug not in filters.slugs:
        return False
    if filters.since and chunk.as_of_date and as_utc(chunk.as_of_date) < as_utc(filters.since):
        return False
    return True


class HybridRetriever:
    """
    Scoped dense + lexical retrieval.

    Args:
        embedding_service: Produces the query vector (one call per retrieval).
        chunk_store: Source of chunks for the scoped file paths.
        timeout_seconds: Budget for the embedding + fetch step; None disables it.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        chunk_store: ChunkStore,
        timeout_seconds: Optional[float] = None,
    ):
        self.embedding_service = embedding_service
        self.chunk_store = chunk_store
        self.timeout_seconds = timeout_seconds

    async def retrieve(self, filters: RetrievalFilters, top_k: int = DEFAULT_TOP_K) -> List[RetrievedFragment]:
        if not filters.file_paths:
            logger.debug("No file scope for org %s, skipping retrieval", filters.org_id)
            return []

        query = (filters.query or "")[:MAX_QUERY_CHARS]
        paths = [org_file_path(filters.org_id, name) for name in filters.file_paths]

        try:
            if self.timeout_seconds:
                query_embedding, chunks = await asyncio.wait_for(
                    self._fetch(query, paths), timeout=self.timeout_seconds
                )
            else:
                query_embedding, chunks = await self._fetch(query, paths)
        except asyncio.TimeoutError as exc:
            raise RetrievalError(
                f"Retrieval timed out after {self.timeout_seconds}s", service="retrieval"
            ) from exc
        except RetrievalError:
            raise
        except Exception as exc:
            raise RetrievalError(f"Retrieval failed: {exc}", service="retrieval") from exc

        candidates = [chunk for chunk in chunks if passes_filters(chunk, filters)]
        ranked = self._rank(query, query_embedding, candidates)

        logger.debug(
            "Retrieved %d of %d candidates for org %s",
            min(top_k, len(ranked)), len(candidates), filters.org_id,
            extra={"org_id": filters.org_id},
        )
        return [
            RetrievedFragment(file_path=chunk.file_path, content=chunk.content, score=score)
            for score, chunk in ranked[:top_k]
        ]

    async def _fetch(self, query: str, paths: List[str]) -> Tuple[List[float], List[ChunkRecord]]:
        query_embedding = await self.embedding_service.embed_query(query)
        chunks = await self.chunk_store.get_chunks_by_file_paths(paths)
        return query_embedding, chunks

    def _rank(
        self,
        query: str,
        query_embedding: Sequence[float],
        candidates: List[ChunkRecord],
    ) -> List[Tuple[float, ChunkRecord]]:
        scored = [
            (cosine_similarity(query_embedding, chunk.embedding) + lexical_boost(query, chunk.content), chunk)
            for chunk in candidates
        ]
        scored.sort(key=lambda pair: pair[0], reverse=True)
        shortlist = scored[:PRE_CANDIDATES]

        reranked = [
            (SCORE_WEIGHT * score + RECENCY_WEIGHT * recency_score(chunk), chunk)
            for score, chunk in shortlist
        ]
        reranked.sort(key=lambda pair: pair[0], reverse=True)
        return reranked
