"""
Advisor tools - structured operations the model can request during a turn.

Each tool is a plain async method returning JSON-friendly dataclasses; the
HTTP layer exposes them so a tool-calling client can execute them.
"""

from dataclasses import dataclass, field
from typing import List

from ..context_engine.catalog import AdvisorCatalog
from ..context_engine.coverage_scorer import CoverageScore
from ..context_engine.rubrics import Perspective
from .coverage_service import CoverageService
from .data_room_store import DataRoomStore, org_file_path

TEMPLATE_SECTIONS = ("Summary", "Key Data", "Assumptions", "Risks", "Appendix")


@dataclass
class EvidenceChunk:
    file_path: str
    content: str


@dataclass
class DocumentTemplate:
    slug: str
    title: str
    perspective: str
    sections: List[str] = field(default_factory=lambda: list(TEMPLATE_SECTIONS))
    acceptance_criteria: List[str] = field(default_factory=list)


class AdvisorToolbox:
    def __init__(self, catalog: AdvisorCatalog, store: DataRoomStore):
        self.catalog = catalog
        self.store = store
        self.coverage_service = CoverageService(catalog, store, store)

    async def score_coverage(self, org_id: str, perspective: Perspective) -> List[CoverageScore]:
        report = await self.coverage_service.get_coverage(org_id, perspective)
        return report.coverage

    async def find_evidence(self, org_id: str, slug: str) -> List[EvidenceChunk]:
        """Chunks of every file associated with ``slug``; empty if none is associated."""
        associations = await self.store.get_org_file_associations(org_id)
        paths = [
            org_file_path(org_id, row.file_name)
            for row in associations
            if row.label_slug == slug and row.file_name
        ]
        if not paths:
            return []

        chunks = await self.store.get_chunks_by_file_paths(paths)
        return [EvidenceChunk(file_path=chunk.file_path, content=chunk.content) for chunk in chunks]

    def generate_template(self, slug: str, perspective: Perspective) -> DocumentTemplate:
        item = self.catalog.checklist.get(slug)
        return DocumentTemplate(
            slug=slug,
            title=item.title if item else slug,
            perspective=Perspective(perspective).value,
            acceptance_criteria=list(item.acceptance_criteria) if item else [],
        )
