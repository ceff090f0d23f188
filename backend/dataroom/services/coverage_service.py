import asyncio
import logging
from datetime import datetime
from typing import Dict, Optional, Set, Tuple

from ..context_engine.catalog import AdvisorCatalog
from ..context_engine.coverage_scorer import CoverageReport, CoverageScorer, SlugMetadata
from ..context_engine.rubrics import Perspective
from .data_room_store import AssociationStore, FileMetadataStore

logger = logging.getLogger(__name__)


class CoverageService:
    """Builds coverage reports from an org's association and metadata snapshot"""

    def __init__(
        self,
        catalog: AdvisorCatalog,
        association_store: AssociationStore,
        metadata_store: FileMetadataStore,
    ):
        self.scorer = CoverageScorer(catalog.checklist)
        self.association_store = association_store
        self.metadata_store = metadata_store

    async def snapshot(self, org_id: str) -> Tuple[Set[str], Dict[str, SlugMetadata]]:
        """Present slugs and per-slug metadata for an org; lookup errors propagate."""
        associations, file_metadata = await asyncio.gather(
            self.association_store.get_org_file_associations(org_id),
            self.metadata_store.get_file_metadata_for_org(org_id),
        )
        present_slugs = {row.label_slug for row in associations}
        metadata_by_slug: Dict[str, SlugMetadata] = {}
        for row in file_metadata:
            if row.slug:
                metadata_by_slug[row.slug] = SlugMetadata(as_of_date=row.as_of_date)
        return present_slugs, metadata_by_slug

    async def get_coverage(
        self,
        org_id: str,
        perspective: Perspective,
        now: Optional[datetime] = None,
    ) -> CoverageReport:
        present_slugs, metadata_by_slug = await self.snapshot(org_id)
        report = self.scorer.report(perspective, present_slugs, metadata_by_slug, now=now)
        logger.info(
            f"Coverage for {perspective.value}: {report.coverage_pct}% "
            f"({len(report.top_gaps)} gaps)",
            extra={"org_id": org_id, "perspective": perspective.value},
        )
        return report
