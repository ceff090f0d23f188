from sqlalchemy import Column, String, DateTime
from ..core.database import Base


class FileMetadata(Base):
    __tablename__ = "file_metadata"

    org_id = Column(String, primary_key=True)
    file_path = Column(String, primary_key=True)
    filename = Column(String, nullable=False)
    slug = Column(String, nullable=True, index=True)
    section = Column(String, nullable=True)
    currency = Column(String(8), nullable=True)
    as_of_date = Column(DateTime(timezone=True), nullable=True)
