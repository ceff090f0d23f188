from .chunk import Chunk
from .file_metadata import FileMetadata
from .file_association import OrgFileAssociation

__all__ = [
    "Chunk",
    "FileMetadata",
    "OrgFileAssociation",
]
