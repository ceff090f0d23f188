"""
Data Room Store Abstraction Layer

Read interfaces for the external collaborators the context pipeline depends
on: the chunk store, the org slug->file association store and the file
metadata store. Concrete backends: in-memory (tests, local runs) and
SQLAlchemy (see ``sql_data_room_store``).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass
class ChunkRecord:
    id: str
    file_path: str  # "<org_id>/<filename>"
    content: str
    embedding: List[float] = field(default_factory=list)
    section: Optional[str] = None
    slug: Optional[str] = None
    source_url: Optional[str] = None
    as_of_date: Optional[datetime] = None


@dataclass
class FileAssociationRecord:
    org_id: str
    label_slug: str
    file_name: Optional[str] = None
    working_url: Optional[str] = None


@dataclass
class FileMetadataRecord:
    org_id: str
    file_path: str
    filename: str
    slug: Optional[str] = None
    section: Optional[str] = None
    currency: Optional[str] = None
    as_of_date: Optional[datetime] = None


def org_file_path(org_id: str, filename: str) -> str:
    return f"{org_id}/{filename}"


def strip_org_prefix(org_id: str, file_path: str) -> Optional[str]:
    prefix = f"{org_id}/"
    if file_path and file_path.startswith(prefix):
        return file_path[len(prefix):]
    return None


class ChunkStore(ABC):
    """Chunk lookups. The only query shape the pipeline needs is by file path."""

    @abstractmethod
    async def get_chunks_by_file_paths(self, file_paths: List[str]) -> List[ChunkRecord]:
        pass


class AssociationStore(ABC):
    @abstractmethod
    async def get_org_file_associations(self, org_id: str) -> List[FileAssociationRecord]:
        pass


class FileMetadataStore(ABC):
    @abstractmethod
    async def get_file_metadata_for_org(self, org_id: str) -> List[FileMetadataRecord]:
        pass


class DataRoomStore(ChunkStore, AssociationStore, FileMetadataStore):
    """A backend providing all three read interfaces plus chunk replacement."""

    @abstractmethod
    async def replace_file_chunks(self, file_path: str, chunks: List[ChunkRecord]) -> None:
        """Replace every chunk of ``file_path`` in one unit of work."""
        pass


class InMemoryDataRoomStore(DataRoomStore):
    """Dictionary-backed store for tests and local development."""

    def __init__(self) -> None:
        self._chunks: Dict[str, List[ChunkRecord]] = {}
        self._associations: Dict[Tuple[str, str], FileAssociationRecord] = {}
        self._metadata: Dict[Tuple[str, str], FileMetadataRecord] = {}

    async def get_chunks_by_file_paths(self, file_paths: List[str]) -> List[ChunkRecord]:
        results: List[ChunkRecord] = []
        for path in dict.fromkeys(file_paths):
            results.extend(self._chunks.get(path, []))
        return results

    async def get_org_file_associations(self, org_id: str) -> List[FileAssociationRecord]:
        return [row for (org, _), row in self._associations.items() if org == org_id]

    async def get_file_metadata_for_org(self, org_id: str) -> List[FileMetadataRecord]:
        return [row for (org, _), row in self._metadata.items() if org == org_id]

    async def replace_file_chunks(self, file_path: str, chunks: List[ChunkRecord]) -> None:
        # Single assignment: readers see either the old or the new set, never none
        self._chunks[file_path] = list(chunks)

    def add_chunks(self, chunks: Iterable[ChunkRecord]) -> None:
        for chunk in chunks:
            self._chunks.setdefault(chunk.file_path, []).append(chunk)

    def upsert_association(self, record: FileAssociationRecord) -> None:
        self._associations[(record.org_id, record.label_slug)] = record

    def upsert_file_metadata(self, record: FileMetadataRecord) -> None:
        self._metadata[(record.org_id, record.file_path)] = record
