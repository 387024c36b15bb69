from __future__ import annotations

import uuid
from contextlib import contextmanager

from sqlalchemy import delete as sql_delete
from sqlalchemy import func, or_, select
from sqlalchemy import update as sql_update
from sqlalchemy.orm import Session

from portal.entities import (
    Document,
    DocumentFilters,
    NewDocument,
    Notification,
    Reviewer,
    Uploader,
)
from portal.errors import InvalidTransition, NotFound
from portal.models.document import DocumentRow
from portal.models.enums import DocumentStatus, DocumentType, NotificationType
from portal.models.notification import NotificationRow
from portal.store.base import RecordStore, check_patch, check_required
from portal.utils.timestamps import from_iso, to_iso, utcnow


def _row_to_document(row: DocumentRow) -> Document:
    reviewed_by = None
    if row.reviewed_by_id is not None:
        reviewed_by = Reviewer(id=row.reviewed_by_id, name=row.reviewed_by_name or "")
    return Document(
        id=row.id,
        title=row.title,
        description=row.description,
        file_name=row.file_name,
        file_type=row.file_type,
        file_size=row.file_size,
        file_location=row.file_location,
        subject=row.subject,
        document_type=DocumentType(row.document_type),
        year=row.year,
        branch=row.branch,
        uploaded_by=Uploader(
            id=row.uploader_id,
            name=row.uploader_name,
            email=row.uploader_email,
            roll_number=row.uploader_roll,
        ),
        created_at=from_iso(row.created_at),
        updated_at=from_iso(row.updated_at),
        status=DocumentStatus(row.status),
        professor_comment=row.professor_comment,
        reviewed_by=reviewed_by,
        reviewed_at=from_iso(row.reviewed_at) if row.reviewed_at else None,
    )


def _row_to_notification(row: NotificationRow) -> Notification:
    return Notification(
        id=row.id,
        recipient_id=row.recipient_id,
        type=NotificationType(row.type),
        message=row.message,
        created_at=from_iso(row.created_at),
        read=bool(row.read),
        document_id=row.document_id,
        document_title=row.document_title,
    )


def _column_values(changes: dict) -> dict:
    """Translate entity-level review fields into column values."""
    values = {}
    if "status" in changes:
        values["status"] = DocumentStatus.parse(changes["status"]).value
    if "professor_comment" in changes:
        values["professor_comment"] = changes["professor_comment"]
    if "reviewed_by" in changes:
        reviewer = changes["reviewed_by"]
        values["reviewed_by_id"] = reviewer.id if reviewer else None
        values["reviewed_by_name"] = reviewer.name if reviewer else None
    if "reviewed_at" in changes:
        reviewed_at = changes["reviewed_at"]
        values["reviewed_at"] = to_iso(reviewed_at) if reviewed_at else None
    values["updated_at"] = to_iso(utcnow())
    return values


class SqlRecordStore(RecordStore):
    """Record store on top of one SQLAlchemy session.

    Each write commits on its own unless it runs inside ``atomic()``, in which
    case the outermost block commits once or rolls everything back.
    """

    def __init__(self, db: Session):
        self._db = db
        self._depth = 0

    def _commit(self):
        if self._depth == 0:
            self._db.commit()

    def _abort(self):
        if self._depth == 0:
            self._db.rollback()

    def _find(self, doc_id: str) -> DocumentRow | None:
        return self._db.execute(select(DocumentRow).where(DocumentRow.id == doc_id)).scalar_one_or_none()

    def _status_conflict(self, doc_id: str, expected: DocumentStatus):
        """Explain why a guarded write matched no row."""
        self._abort()
        row = self._find(doc_id)
        if row is None:
            return NotFound(f"Document {doc_id} not found")
        return InvalidTransition(f"Document {doc_id} is {row.status}, expected {expected.value}")

    # --- documents -------------------------------------------------------

    def create(self, new: NewDocument) -> Document:
        check_required(new)
        now = to_iso(utcnow())
        row = DocumentRow(
            id=str(uuid.uuid4()),
            title=new.title,
            description=new.description,
            file_name=new.file_name,
            file_type=new.file_type,
            file_size=new.file_size,
            file_location=new.file_location,
            subject=new.subject,
            document_type=DocumentType.parse(new.document_type).value,
            year=new.year,
            branch=new.branch,
            status=DocumentStatus.SUBMITTED.value,
            uploader_id=new.uploaded_by.id,
            uploader_name=new.uploaded_by.name,
            uploader_email=new.uploaded_by.email,
            uploader_roll=new.uploaded_by.roll_number,
            created_at=now,
            updated_at=now,
        )
        self._db.add(row)
        self._db.flush()
        doc = _row_to_document(row)
        self._commit()
        return doc

    def get(self, doc_id: str) -> Document:
        row = self._find(doc_id)
        if row is None:
            raise NotFound(f"Document {doc_id} not found")
        return _row_to_document(row)

    def list(self, filters: DocumentFilters | None = None) -> list[Document]:
        filters = filters or DocumentFilters()
        stmt = select(DocumentRow)
        if filters.subject is not None:
            stmt = stmt.where(DocumentRow.subject == filters.subject)
        if filters.year is not None:
            stmt = stmt.where(DocumentRow.year == filters.year)
        if filters.uploader_id is not None:
            stmt = stmt.where(DocumentRow.uploader_id == filters.uploader_id)
        if filters.status is not None:
            stmt = stmt.where(DocumentRow.status == DocumentStatus.parse(filters.status).value)
        if filters.since is not None:
            stmt = stmt.where(DocumentRow.created_at >= to_iso(filters.since))
        if filters.query:
            pattern = f"%{filters.query}%"
            stmt = stmt.where(
                or_(
                    DocumentRow.title.ilike(pattern),
                    DocumentRow.description.ilike(pattern),
                    DocumentRow.uploader_name.ilike(pattern),
                )
            )
        stmt = stmt.order_by(DocumentRow.updated_at.desc(), DocumentRow.seq.desc())
        return [_row_to_document(r) for r in self._db.execute(stmt).scalars().all()]

    def update(self, doc_id: str, **changes) -> Document:
        check_patch(changes)
        result = self._db.execute(
            sql_update(DocumentRow)
            .where(DocumentRow.id == doc_id)
            .values(**_column_values(changes))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self._abort()
            raise NotFound(f"Document {doc_id} not found")
        self._db.expire_all()
        doc = self.get(doc_id)
        self._commit()
        return doc

    def transition(self, doc_id: str, expected: DocumentStatus, **changes) -> Document:
        check_patch(changes)
        # The status check lives in the WHERE clause so check and write are one statement.
        result = self._db.execute(
            sql_update(DocumentRow)
            .where(DocumentRow.id == doc_id, DocumentRow.status == expected.value)
            .values(**_column_values(changes))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise self._status_conflict(doc_id, expected)
        self._db.expire_all()
        doc = self.get(doc_id)
        self._commit()
        return doc

    def delete(self, doc_id: str, expected_status: DocumentStatus | None = None) -> None:
        stmt = sql_delete(DocumentRow).where(DocumentRow.id == doc_id)
        if expected_status is not None:
            stmt = stmt.where(DocumentRow.status == expected_status.value)
        result = self._db.execute(stmt.execution_options(synchronize_session=False))
        if result.rowcount == 0:
            if expected_status is None:
                self._abort()
                raise NotFound(f"Document {doc_id} not found")
            raise self._status_conflict(doc_id, expected_status)
        self._commit()

    def snapshot(self) -> list[Document]:
        # A single SELECT reads one consistent version of the table.
        return self.list()

    # --- notifications ---------------------------------------------------

    def add_notification(
        self,
        recipient_id: str,
        type: NotificationType,
        message: str,
        document_id: str | None = None,
        document_title: str | None = None,
    ) -> Notification:
        row = NotificationRow(
            id=str(uuid.uuid4()),
            recipient_id=recipient_id,
            type=NotificationType.parse(type).value,
            message=message,
            document_id=document_id,
            document_title=document_title,
            read=False,
            created_at=to_iso(utcnow()),
        )
        self._db.add(row)
        self._db.flush()
        notification = _row_to_notification(row)
        self._commit()
        return notification

    def _find_notification(self, notification_id: str) -> NotificationRow:
        row = self._db.execute(
            select(NotificationRow).where(NotificationRow.id == notification_id)
        ).scalar_one_or_none()
        if row is None:
            raise NotFound(f"Notification {notification_id} not found")
        return row

    def get_notification(self, notification_id: str) -> Notification:
        return _row_to_notification(self._find_notification(notification_id))

    def list_notifications(self, recipient_id: str) -> list[Notification]:
        rows = self._db.execute(
            select(NotificationRow)
            .where(NotificationRow.recipient_id == recipient_id)
            .order_by(NotificationRow.created_at.desc(), NotificationRow.seq.desc())
        ).scalars().all()
        return [_row_to_notification(r) for r in rows]

    def count_unread(self, recipient_id: str) -> int:
        return self._db.execute(
            select(func.count(NotificationRow.seq)).where(
                NotificationRow.recipient_id == recipient_id,
                NotificationRow.read.is_(False),
            )
        ).scalar_one()

    def mark_notification_read(self, notification_id: str) -> Notification:
        row = self._find_notification(notification_id)
        if not row.read:
            row.read = True
            self._db.flush()
        notification = _row_to_notification(row)
        self._commit()
        return notification

    def mark_all_notifications_read(self, recipient_id: str) -> int:
        result = self._db.execute(
            sql_update(NotificationRow)
            .where(
                NotificationRow.recipient_id == recipient_id,
                NotificationRow.read.is_(False),
            )
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        self._db.expire_all()
        self._commit()
        return result.rowcount

    # --- unit of work ----------------------------------------------------

    @contextmanager
    def atomic(self):
        self._depth += 1
        try:
            yield
        except BaseException:
            self._depth -= 1
            if self._depth == 0:
                self._db.rollback()
            raise
        self._depth -= 1
        if self._depth == 0:
            self._db.commit()

    def close(self) -> None:
        self._db.close()
