"""Domain records shared by every store backend and service."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from portal.models.enums import DocumentStatus, DocumentType, NotificationType, Role


@dataclass(frozen=True)
class Identity:
    """The acting user, as supplied by the caller. The core does not authenticate it."""

    id: str
    name: str
    role: Role
    email: str | None = None
    roll_number: str | None = None

    @property
    def is_reviewer(self) -> bool:
        return self.role is Role.PROFESSOR


@dataclass(frozen=True)
class Uploader:
    id: str
    name: str
    email: str | None = None
    roll_number: str | None = None

    @classmethod
    def from_identity(cls, identity: Identity) -> Uploader:
        return cls(
            id=identity.id,
            name=identity.name,
            email=identity.email,
            roll_number=identity.roll_number,
        )


@dataclass(frozen=True)
class Reviewer:
    id: str
    name: str


@dataclass
class NewDocument:
    title: str
    subject: str
    document_type: DocumentType
    year: str
    branch: str
    file_name: str
    file_type: str
    file_size: int
    file_location: str
    uploaded_by: Uploader
    description: str | None = None


@dataclass
class Document:
    id: str
    title: str
    description: str | None
    file_name: str
    file_type: str
    file_size: int
    file_location: str
    subject: str
    document_type: DocumentType
    year: str
    branch: str
    uploaded_by: Uploader
    created_at: datetime
    updated_at: datetime
    status: DocumentStatus = DocumentStatus.SUBMITTED
    professor_comment: str | None = None
    reviewed_by: Reviewer | None = None
    reviewed_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is DocumentStatus.SUBMITTED


@dataclass
class Notification:
    id: str
    recipient_id: str
    type: NotificationType
    message: str
    created_at: datetime
    read: bool = False
    document_id: str | None = None
    document_title: str | None = None


@dataclass
class DocumentFilters:
    """Listing filters. A field left as None matches any document."""

    subject: str | None = None
    year: str | None = None
    uploader_id: str | None = None
    status: DocumentStatus | None = None
    query: str | None = None
    since: datetime | None = None

    def __post_init__(self):
        if self.status is not None:
            self.status = DocumentStatus.parse(self.status)

    def matches(self, doc: Document) -> bool:
        if self.subject is not None and doc.subject != self.subject:
            return False
        if self.year is not None and doc.year != self.year:
            return False
        if self.uploader_id is not None and doc.uploaded_by.id != self.uploader_id:
            return False
        if self.status is not None and doc.status is not self.status:
            return False
        if self.since is not None and doc.created_at < self.since:
            return False
        if self.query:
            needle = self.query.lower()
            haystack = (doc.title, doc.description or "", doc.uploaded_by.name)
            if not any(needle in text.lower() for text in haystack):
                return False
        return True
