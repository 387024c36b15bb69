from datetime import datetime
from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: str
    type: str
    message: str
    document_id: str | None
    document_title: str | None
    read: bool
    created_at: datetime


class UnreadCountResponse(BaseModel):
    count: int


class MarkAllReadResponse(BaseModel):
    updated: int
