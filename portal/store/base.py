"""
Record store contract.

The store holds the two collections the core owns, Documents and
Notifications. It enforces nothing about who may do what; that is the job
of the services layered on top. What it does guarantee:

    - ``transition`` is a compare-and-swap on ``status``: the check and the
      write cannot be separated, so two concurrent reviews of one document
      never both succeed.
    - ``delete`` with ``expected_status`` is the same kind of guarded write.
    - ``snapshot`` returns every document as of one point in time.
    - ``atomic`` groups several writes; if the block raises, none of them
      is kept.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

from portal.entities import Document, DocumentFilters, NewDocument, Notification
from portal.errors import ValidationError
from portal.models.enums import DocumentStatus, DocumentType, NotificationType

# Everything else on a document is fixed at creation.
MUTABLE_FIELDS = frozenset({"status", "professor_comment", "reviewed_by", "reviewed_at"})
REVIEW_FIELDS = frozenset({"status", "reviewed_by", "reviewed_at"})

REQUIRED_FIELDS = ("title", "subject", "year", "branch", "file_name", "file_type", "file_location")


def check_required(new: NewDocument) -> None:
    missing = [name for name in REQUIRED_FIELDS if not (getattr(new, name) or "").strip()]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")
    if new.document_type is None:
        raise ValidationError("Missing required field(s): document_type")
    new.document_type = DocumentType.parse(new.document_type)
    if not new.uploaded_by or not new.uploaded_by.id:
        raise ValidationError("Missing required field(s): uploaded_by")


def check_patch(changes: dict) -> None:
    unknown = set(changes) - MUTABLE_FIELDS
    if unknown:
        raise ValidationError(f"Field(s) cannot be changed after upload: {', '.join(sorted(unknown))}")

    # status, reviewed_by and reviewed_at move together: a reviewer and a
    # review time are recorded exactly when the status is not SUBMITTED.
    review_fields = REVIEW_FIELDS & set(changes)
    if not review_fields:
        return
    if review_fields != REVIEW_FIELDS:
        missing = ", ".join(sorted(REVIEW_FIELDS - review_fields))
        raise ValidationError(f"status, reviewed_by and reviewed_at must change together (missing {missing})")
    changes["status"] = status = DocumentStatus.parse(changes["status"])
    reviewed = changes["reviewed_by"] is not None and changes["reviewed_at"] is not None
    unreviewed = changes["reviewed_by"] is None and changes["reviewed_at"] is None
    if status is DocumentStatus.SUBMITTED and not unreviewed:
        raise ValidationError("A submitted document cannot carry a reviewer or review time")
    if status is not DocumentStatus.SUBMITTED and not reviewed:
        raise ValidationError(f"A {status.value} document needs a reviewer and a review time")


class RecordStore(ABC):
    # --- documents -------------------------------------------------------

    @abstractmethod
    def create(self, new: NewDocument) -> Document:
        """Insert a document with a fresh id and status SUBMITTED."""

    @abstractmethod
    def get(self, doc_id: str) -> Document:
        """Return the document or raise NotFound."""

    @abstractmethod
    def list(self, filters: DocumentFilters | None = None) -> list[Document]:
        """Documents matching every supplied filter, most recently touched first."""

    @abstractmethod
    def update(self, doc_id: str, **changes) -> Document:
        """Apply a partial change to the review fields and bump ``updated_at``."""

    @abstractmethod
    def transition(self, doc_id: str, expected: DocumentStatus, **changes) -> Document:
        """Like ``update`` but only while the status still equals ``expected``.

        Raises NotFound if the document is gone and InvalidTransition if its
        status has moved on.
        """

    @abstractmethod
    def delete(self, doc_id: str, expected_status: DocumentStatus | None = None) -> None:
        """Remove the document, optionally only while it has ``expected_status``."""

    @abstractmethod
    def snapshot(self) -> list[Document]:
        """All documents, read at one point in time."""

    # --- notifications ---------------------------------------------------

    @abstractmethod
    def add_notification(
        self,
        recipient_id: str,
        type: NotificationType,
        message: str,
        document_id: str | None = None,
        document_title: str | None = None,
    ) -> Notification:
        ...

    @abstractmethod
    def get_notification(self, notification_id: str) -> Notification:
        ...

    @abstractmethod
    def list_notifications(self, recipient_id: str) -> list[Notification]:
        """Newest first, read and unread."""

    @abstractmethod
    def count_unread(self, recipient_id: str) -> int:
        ...

    @abstractmethod
    def mark_notification_read(self, notification_id: str) -> Notification:
        ...

    @abstractmethod
    def mark_all_notifications_read(self, recipient_id: str) -> int:
        """Returns how many entries changed from unread to read."""

    # --- unit of work ----------------------------------------------------

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        ...

    def close(self) -> None:
        pass
