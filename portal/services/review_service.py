"""
Review workflow: the only writer of a document's review fields.

    submitted --approve--> approved
    submitted --reject---> rejected
    submitted --withdraw-> (deleted)

``approved`` and ``rejected`` are terminal. Each successful approve or reject
records exactly one notification for the uploader, in the same atomic block
as the status change.
"""
import logging

from portal.entities import Document, Identity, Reviewer
from portal.errors import InvalidTransition, Unauthorized, ValidationError
from portal.models.enums import DocumentStatus, NotificationType
from portal.services.notification_service import (
    NotificationDispatcher,
    approval_message,
    rejection_message,
)
from portal.store.base import RecordStore
from portal.utils.timestamps import utcnow

logger = logging.getLogger("portal.review")


def _require_reviewer(identity: Identity, action: str) -> Reviewer:
    if not identity.is_reviewer:
        logger.warning("%s refused: %s is not a professor", action, identity.id)
        raise Unauthorized(f"Only professors may {action} documents")
    return Reviewer(id=identity.id, name=identity.name)


class ReviewWorkflow:
    def __init__(self, store: RecordStore, dispatcher: NotificationDispatcher):
        self._store = store
        self._dispatcher = dispatcher

    def approve(self, doc_id: str, reviewer: Identity, comment: str | None = None) -> Document:
        by = _require_reviewer(reviewer, "approve")
        comment = (comment or "").strip() or None
        return self._decide(doc_id, DocumentStatus.APPROVED, by, comment)

    def reject(self, doc_id: str, reviewer: Identity, comment: str | None) -> Document:
        by = _require_reviewer(reviewer, "reject")
        comment = (comment or "").strip()
        if not comment:
            raise ValidationError("A comment is required to reject a document")
        return self._decide(doc_id, DocumentStatus.REJECTED, by, comment)

    def _decide(
        self,
        doc_id: str,
        outcome: DocumentStatus,
        by: Reviewer,
        comment: str | None,
    ) -> Document:
        try:
            with self._store.atomic():
                doc = self._store.transition(
                    doc_id,
                    DocumentStatus.SUBMITTED,
                    status=outcome,
                    reviewed_by=by,
                    reviewed_at=utcnow(),
                    professor_comment=comment,
                )
                if outcome is DocumentStatus.APPROVED:
                    self._dispatcher.notify(
                        doc.uploaded_by.id,
                        NotificationType.APPROVAL,
                        approval_message(doc, by, comment),
                        doc,
                    )
                else:
                    self._dispatcher.notify(
                        doc.uploaded_by.id,
                        NotificationType.REJECTION,
                        rejection_message(doc, by, comment),
                        doc,
                    )
        except InvalidTransition:
            logger.warning("Refused to mark %s %s: already decided", doc_id, outcome.value)
            raise
        logger.info("Document %s %s by %s", doc_id, outcome.value, by.id)
        return doc

    def withdraw(self, doc_id: str, owner: Identity) -> None:
        """Delete a pending document on behalf of its uploader."""
        doc = self._store.get(doc_id)
        if doc.uploaded_by.id != owner.id:
            logger.warning("Withdraw of %s refused: %s is not the uploader", doc_id, owner.id)
            raise Unauthorized("Only the uploader may delete this document")
        if not doc.is_pending:
            raise InvalidTransition(f"Document {doc_id} is {doc.status.value} and can no longer be deleted")
        # Guarded again at write time in case a review landed in between.
        self._store.delete(doc_id, expected_status=DocumentStatus.SUBMITTED)
        logger.info("Document %s withdrawn by %s", doc_id, owner.id)
