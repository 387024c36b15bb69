from fastapi import APIRouter, Depends

from portal.dependencies import get_dispatcher, get_identity
from portal.entities import Identity, Notification
from portal.schemas.notification import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from portal.services.notification_service import NotificationDispatcher

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=n.id,
        type=n.type.value,
        message=n.message,
        document_id=n.document_id,
        document_title=n.document_title,
        read=n.read,
        created_at=n.created_at,
    )


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    identity: Identity = Depends(get_identity),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return [_notification_to_response(n) for n in dispatcher.list(identity.id)]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    identity: Identity = Depends(get_identity),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return UnreadCountResponse(count=dispatcher.unread_count(identity.id))


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    identity: Identity = Depends(get_identity),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return MarkAllReadResponse(updated=dispatcher.mark_all_read(identity.id))


@router.post(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    dependencies=[Depends(get_identity)],
)
async def mark_read(
    notification_id: str,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return _notification_to_response(dispatcher.mark_read(notification_id))
