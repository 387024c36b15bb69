from __future__ import annotations

import logging

from portal.entities import Document, Notification, Reviewer
from portal.models.enums import NotificationType
from portal.store.base import RecordStore

logger = logging.getLogger("portal.notifications")


def approval_message(doc: Document, reviewer: Reviewer, comment: str | None) -> str:
    message = f'Your document "{doc.title}" has been approved by {reviewer.name}.'
    if comment:
        message += f" Comment: {comment}"
    return message


def rejection_message(doc: Document, reviewer: Reviewer, comment: str) -> str:
    return f'Your document "{doc.title}" was rejected by {reviewer.name}. Reason: {comment}'


def new_document_message(doc: Document) -> str:
    return f'{doc.uploaded_by.name} submitted "{doc.title}" ({doc.subject}) for review.'


class NotificationDispatcher:
    """Records notifications and tracks their read state.

    Delivery is pull-based: recipients poll ``list`` / ``unread_count``.
    """

    def __init__(self, store: RecordStore):
        self._store = store

    def notify(
        self,
        recipient_id: str,
        type: NotificationType,
        message: str,
        document: Document | None = None,
    ) -> Notification:
        notification = self._store.add_notification(
            recipient_id=recipient_id,
            type=NotificationType.parse(type),
            message=message,
            document_id=document.id if document else None,
            document_title=document.title if document else None,
        )
        logger.debug("Notification %s (%s) for %s", notification.id, notification.type.value, recipient_id)
        return notification

    def notify_reviewers(self, reviewer_ids: list[str], doc: Document) -> list[Notification]:
        message = new_document_message(doc)
        return [
            self.notify(reviewer_id, NotificationType.NEW_DOCUMENT, message, doc)
            for reviewer_id in reviewer_ids
        ]

    def list(self, recipient_id: str) -> list[Notification]:
        return self._store.list_notifications(recipient_id)

    def unread_count(self, recipient_id: str) -> int:
        return self._store.count_unread(recipient_id)

    def mark_read(self, notification_id: str) -> Notification:
        return self._store.mark_notification_read(notification_id)

    def mark_all_read(self, recipient_id: str) -> int:
        changed = self._store.mark_all_notifications_read(recipient_id)
        if changed:
            logger.info("Marked %d notification(s) read for %s", changed, recipient_id)
        return changed
