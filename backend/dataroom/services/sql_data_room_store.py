"""
SQLAlchemy implementation of the data room store.

Works against any async engine (asyncpg in production, aiosqlite in tests).
Chunk replacement deletes and re-inserts a file's chunks inside one
transaction, so a reader never observes a file with its chunks missing.
"""

from typing import List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..models import Chunk, FileMetadata, OrgFileAssociation
from .data_room_store import (
    ChunkRecord,
    DataRoomStore,
    FileAssociationRecord,
    FileMetadataRecord,
)


class SqlDataRoomStore(DataRoomStore):
    """Data room store backed by the ``chunks``, ``file_metadata`` and
    ``org_file_associations`` tables."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def get_chunks_by_file_paths(self, file_paths: List[str]) -> List[ChunkRecord]:
        if not file_paths:
            return []

        async with self.session_factory() as session:
            result = await session.execute(
                select(Chunk).where(Chunk.file_path.in_(list(dict.fromkeys(file_paths))))
            )
            return [self._to_chunk_record(row) for row in result.scalars().all()]

    async def get_org_file_associations(self, org_id: str) -> List[FileAssociationRecord]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(OrgFileAssociation).where(OrgFileAssociation.org_id == org_id)
            )
            return [
                FileAssociationRecord(
                    org_id=row.org_id,
                    label_slug=row.label_slug,
                    file_name=row.file_name,
                    working_url=row.working_url,
                )
                for row in result.scalars().all()
            ]

    async def get_file_metadata_for_org(self, org_id: str) -> List[FileMetadataRecord]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(FileMetadata).where(FileMetadata.org_id == org_id)
            )
            return [
                FileMetadataRecord(
                    org_id=row.org_id,
                    file_path=row.file_path,
                    filename=row.filename,
                    slug=row.slug,
                    section=row.section,
                    currency=row.currency,
                    as_of_date=row.as_of_date,
                )
                for row in result.scalars().all()
            ]

    async def replace_file_chunks(self, file_path: str, chunks: List[ChunkRecord]) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                await session.execute(delete(Chunk).where(Chunk.file_path == file_path))
                session.add_all(
                    Chunk(
                        id=chunk.id,
                        file_path=file_path,
                        section=chunk.section,
                        slug=chunk.slug,
                        source_url=chunk.source_url,
                        as_of_date=chunk.as_of_date,
                        content=chunk.content,
                        embedding=list(chunk.embedding),
                    )
                    for chunk in chunks
                )

    async def upsert_association(self, record: FileAssociationRecord) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                await session.merge(OrgFileAssociation(
                    org_id=record.org_id,
                    label_slug=record.label_slug,
                    file_name=record.file_name,
                    working_url=record.working_url,
                ))

    async def upsert_file_metadata(self, record: FileMetadataRecord) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                await session.merge(FileMetadata(
                    org_id=record.org_id,
                    file_path=record.file_path,
                    filename=record.filename,
                    slug=record.slug,
                    section=record.section,
                    currency=record.currency,
                    as_of_date=record.as_of_date,
                ))

    @staticmethod
    def _to_chunk_record(row: Chunk) -> ChunkRecord:
        return ChunkRecord(
            id=row.id,
            file_path=row.file_path,
            content=row.content,
            embedding=list(row.embedding or []),
            section=row.section,
            slug=row.slug,
            source_url=row.source_url,
            as_of_date=row.as_of_date,
        )
