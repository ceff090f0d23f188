"""
Organization-scoped association between a checklist slug and an uploaded file.
"""

from sqlalchemy import Column, String
from ..core.database import Base


class OrgFileAssociation(Base):
    __tablename__ = "org_file_associations"

    org_id = Column(String, primary_key=True)
    label_slug = Column(String, primary_key=True)
    file_name = Column(String, nullable=True)
    working_url = Column(String, nullable=True)
