from portal.models.enums import DocumentStatus, DocumentType, NotificationType, Role
from portal.models.document import DocumentRow
from portal.models.notification import NotificationRow

__all__ = [
    "DocumentStatus",
    "DocumentType",
    "NotificationType",
    "Role",
    "DocumentRow",
    "NotificationRow",
]
