from __future__ import annotations

import logging

from portal.config import settings
from portal.entities import Document, DocumentFilters, Identity, NewDocument, Uploader
from portal.errors import ValidationError
from portal.models.enums import DocumentType
from portal.services.notification_service import NotificationDispatcher
from portal.store.base import RecordStore

logger = logging.getLogger("portal.documents")


class DocumentService:
    """Upload intake and read access for documents."""

    def __init__(
        self,
        store: RecordStore,
        dispatcher: NotificationDispatcher,
        allowed_mime_types: list[str] | None = None,
        max_upload_bytes: int | None = None,
        reviewer_ids: list[str] | None = None,
    ):
        self._store = store
        self._dispatcher = dispatcher
        self._allowed_mime_types = allowed_mime_types if allowed_mime_types is not None else settings.allowed_mime_types
        self._max_upload_bytes = max_upload_bytes if max_upload_bytes is not None else settings.max_upload_bytes
        self._reviewer_ids = reviewer_ids if reviewer_ids is not None else settings.reviewer_ids

    def check_file(self, file_name: str, file_type: str | None, file_size: int) -> None:
        """Validate file metadata. Usable before the bytes are stored anywhere."""
        if not (file_name or "").strip():
            raise ValidationError("Missing required field(s): file_name")
        if file_type not in self._allowed_mime_types:
            raise ValidationError("Invalid file type. Please upload PDF or DOC/DOCX files only.")
        if file_size <= 0:
            raise ValidationError("Empty file")
        if file_size > self._max_upload_bytes:
            raise ValidationError(f"File too large (max {self._max_upload_bytes} bytes)")

    def prepare(
        self,
        uploader: Identity,
        *,
        title: str,
        subject: str,
        document_type: str,
        year: str,
        branch: str,
        file_name: str,
        file_type: str | None,
        file_size: int,
        description: str | None = None,
    ) -> NewDocument:
        """Validate an upload before its bytes are stored.

        The returned record still needs ``file_location`` set before it is
        passed to ``submit``.
        """
        self.check_file(file_name, file_type, file_size)
        new = NewDocument(
            title=(title or "").strip(),
            description=(description or "").strip() or None,
            subject=(subject or "").strip(),
            document_type=DocumentType.parse(document_type),
            year=(year or "").strip(),
            branch=(branch or "").strip(),
            file_name=file_name,
            file_type=file_type,
            file_size=file_size,
            file_location="",
            uploaded_by=Uploader.from_identity(uploader),
        )
        missing = [name for name in ("title", "subject", "year", "branch") if not getattr(new, name)]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")
        return new

    def submit(self, new: NewDocument) -> Document:
        with self._store.atomic():
            doc = self._store.create(new)
            self._dispatcher.notify_reviewers(self._reviewer_ids, doc)
        logger.info(
            "Document %s uploaded by %s (%s, %d bytes)",
            doc.id, doc.uploaded_by.id, doc.subject, doc.file_size,
        )
        return doc

    def upload(self, uploader: Identity, *, file_location: str, **fields) -> Document:
        """Validate and record an upload whose bytes are already stored."""
        new = self.prepare(uploader, **fields)
        new.file_location = file_location
        return self.submit(new)

    def get(self, doc_id: str) -> Document:
        return self._store.get(doc_id)

    def list(self, filters: DocumentFilters | None = None) -> list[Document]:
        return self._store.list(filters)

    def get_my_documents(self, uploader_id: str) -> list[Document]:
        return self._store.list(DocumentFilters(uploader_id=uploader_id))

    def get_location(self, doc_id: str) -> str:
        return self._store.get(doc_id).file_location
