from __future__ import annotations

import copy
import itertools
import threading
import uuid
from contextlib import contextmanager
from dataclasses import replace

from portal.entities import Document, DocumentFilters, NewDocument, Notification
from portal.errors import InvalidTransition, NotFound
from portal.models.enums import DocumentStatus, NotificationType
from portal.store.base import RecordStore, check_patch, check_required
from portal.utils.timestamps import utcnow


class MemoryRecordStore(RecordStore):
    """Process-local store. One re-entrant lock serialises every access.

    Records are copied on the way in and out so callers never hold a
    reference into the store's own state.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._documents: dict[str, Document] = {}
        self._notifications: dict[str, Notification] = {}
        # Creation order, used to break timestamp ties.
        self._doc_seq: dict[str, int] = {}
        self._notif_seq: dict[str, int] = {}
        self._counter = itertools.count(1)

    # --- documents -------------------------------------------------------

    def create(self, new: NewDocument) -> Document:
        check_required(new)
        now = utcnow()
        doc = Document(
            id=str(uuid.uuid4()),
            title=new.title,
            description=new.description,
            file_name=new.file_name,
            file_type=new.file_type,
            file_size=new.file_size,
            file_location=new.file_location,
            subject=new.subject,
            document_type=new.document_type,
            year=new.year,
            branch=new.branch,
            uploaded_by=new.uploaded_by,
            created_at=now,
            updated_at=now,
            status=DocumentStatus.SUBMITTED,
        )
        with self._lock:
            self._documents[doc.id] = doc
            self._doc_seq[doc.id] = next(self._counter)
        return replace(doc)

    def _require(self, doc_id: str) -> Document:
        doc = self._documents.get(doc_id)
        if doc is None:
            raise NotFound(f"Document {doc_id} not found")
        return doc

    def get(self, doc_id: str) -> Document:
        with self._lock:
            return replace(self._require(doc_id))

    def _ordered(self, docs):
        return sorted(
            docs,
            key=lambda d: (d.updated_at, self._doc_seq[d.id]),
            reverse=True,
        )

    def list(self, filters: DocumentFilters | None = None) -> list[Document]:
        filters = filters or DocumentFilters()
        with self._lock:
            return [replace(d) for d in self._ordered(self._documents.values()) if filters.matches(d)]

    def _apply(self, doc: Document, changes: dict) -> Document:
        updated = replace(doc, **changes, updated_at=utcnow())
        self._documents[doc.id] = updated
        return replace(updated)

    def update(self, doc_id: str, **changes) -> Document:
        check_patch(changes)
        with self._lock:
            return self._apply(self._require(doc_id), changes)

    def transition(self, doc_id: str, expected: DocumentStatus, **changes) -> Document:
        check_patch(changes)
        with self._lock:
            doc = self._require(doc_id)
            if doc.status is not expected:
                raise InvalidTransition(
                    f"Document {doc_id} is {doc.status.value}, expected {expected.value}"
                )
            return self._apply(doc, changes)

    def delete(self, doc_id: str, expected_status: DocumentStatus | None = None) -> None:
        with self._lock:
            doc = self._require(doc_id)
            if expected_status is not None and doc.status is not expected_status:
                raise InvalidTransition(
                    f"Document {doc_id} is {doc.status.value}, expected {expected_status.value}"
                )
            del self._documents[doc_id]
            del self._doc_seq[doc_id]

    def snapshot(self) -> list[Document]:
        with self._lock:
            return [replace(d) for d in self._ordered(self._documents.values())]

    # --- notifications ---------------------------------------------------

    def add_notification(
        self,
        recipient_id: str,
        type: NotificationType,
        message: str,
        document_id: str | None = None,
        document_title: str | None = None,
    ) -> Notification:
        notification = Notification(
            id=str(uuid.uuid4()),
            recipient_id=recipient_id,
            type=type,
            message=message,
            created_at=utcnow(),
            document_id=document_id,
            document_title=document_title,
        )
        with self._lock:
            self._notifications[notification.id] = notification
            self._notif_seq[notification.id] = next(self._counter)
        return replace(notification)

    def get_notification(self, notification_id: str) -> Notification:
        with self._lock:
            notification = self._notifications.get(notification_id)
            if notification is None:
                raise NotFound(f"Notification {notification_id} not found")
            return replace(notification)

    def list_notifications(self, recipient_id: str) -> list[Notification]:
        with self._lock:
            mine = [n for n in self._notifications.values() if n.recipient_id == recipient_id]
            mine.sort(key=lambda n: (n.created_at, self._notif_seq[n.id]), reverse=True)
            return [replace(n) for n in mine]

    def count_unread(self, recipient_id: str) -> int:
        with self._lock:
            return sum(
                1 for n in self._notifications.values()
                if n.recipient_id == recipient_id and not n.read
            )

    def mark_notification_read(self, notification_id: str) -> Notification:
        with self._lock:
            notification = self._notifications.get(notification_id)
            if notification is None:
                raise NotFound(f"Notification {notification_id} not found")
            notification.read = True
            return replace(notification)

    def mark_all_notifications_read(self, recipient_id: str) -> int:
        changed = 0
        with self._lock:
            for notification in self._notifications.values():
                if notification.recipient_id == recipient_id and not notification.read:
                    notification.read = True
                    changed += 1
        return changed

    # --- unit of work ----------------------------------------------------

    @contextmanager
    def atomic(self):
        with self._lock:
            # Documents are replaced on write, notifications are mutated in place.
            saved = (
                copy.copy(self._documents),
                copy.copy(self._doc_seq),
                {k: replace(v) for k, v in self._notifications.items()},
                copy.copy(self._notif_seq),
            )
            try:
                yield
            except BaseException:
                self._documents, self._doc_seq, self._notifications, self._notif_seq = saved
                raise
