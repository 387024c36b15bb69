from sqlalchemy import Column, Integer, Text
from portal.database import Base


class DocumentRow(Base):
    __tablename__ = "documents"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Text, nullable=False, unique=True)
    title = Column(Text, nullable=False)
    description = Column(Text)
    file_name = Column(Text, nullable=False)
    file_type = Column(Text, nullable=False)
    file_size = Column(Integer, nullable=False)
    file_location = Column(Text, nullable=False)
    subject = Column(Text, nullable=False)
    document_type = Column(Text, nullable=False)
    year = Column(Text, nullable=False)
    branch = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="submitted")
    professor_comment = Column(Text)
    reviewed_by_id = Column(Text)
    reviewed_by_name = Column(Text)
    reviewed_at = Column(Text)
    uploader_id = Column(Text, nullable=False)
    uploader_name = Column(Text, nullable=False)
    uploader_email = Column(Text)
    uploader_roll = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
