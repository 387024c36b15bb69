from sqlalchemy import Boolean, Column, Integer, Text
from portal.database import Base


class NotificationRow(Base):
    __tablename__ = "notifications"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Text, nullable=False, unique=True)
    recipient_id = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    document_id = Column(Text)
    document_title = Column(Text)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(Text, nullable=False)
