from datetime import datetime
from pydantic import BaseModel


class UploaderResponse(BaseModel):
    id: str
    name: str
    email: str | None
    roll_number: str | None


class ReviewerResponse(BaseModel):
    id: str
    name: str


class DocumentResponse(BaseModel):
    id: str
    title: str
    description: str | None
    file_name: str
    file_type: str
    file_size: int
    subject: str
    document_type: str
    year: str
    branch: str
    status: str
    professor_comment: str | None
    reviewed_by: ReviewerResponse | None
    reviewed_at: datetime | None
    uploaded_by: UploaderResponse
    created_at: datetime
    updated_at: datetime


class ReviewRequest(BaseModel):
    comment: str | None = None


class LocationResponse(BaseModel):
    id: str
    file_location: str
    file_name: str
    file_type: str
