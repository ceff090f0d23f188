from sqlalchemy import Column, String, DateTime, Text, JSON
from ..core.database import Base


class Chunk(Base):
    __tablename__ = "chunks"

    id = Column(String, primary_key=True)
    file_path = Column(String, nullable=False, index=True)  # "<org_id>/<filename>"
    section = Column(String, nullable=True)
    slug = Column(String, nullable=True, index=True)
    source_url = Column(String, nullable=True)
    as_of_date = Column(DateTime(timezone=True), nullable=True)
    content = Column(Text, nullable=False)

    # Float list; JSON keeps the column portable between Postgres and SQLite
    embedding = Column(JSON, nullable=False, default=list)
