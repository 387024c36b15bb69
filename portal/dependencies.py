from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.entities import Identity
from portal.errors import ValidationError
from portal.models.enums import Role
from portal.services.analytics_service import AnalyticsAggregator
from portal.services.document_service import DocumentService
from portal.services.notification_service import NotificationDispatcher
from portal.services.review_service import ReviewWorkflow
from portal.store.sql import SqlRecordStore


async def get_identity(
    x_user_id: str | None = Header(None),
    x_user_name: str | None = Header(None),
    x_user_role: str | None = Header(None),
    x_user_email: str | None = Header(None),
    x_user_roll_number: str | None = Header(None),
) -> Identity:
    # Token verification happens upstream; this layer trusts the forwarded identity.
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Missing acting identity")
    try:
        role = Role.parse(x_user_role.lower())
    except ValidationError as exc:
        raise HTTPException(status_code=401, detail=exc.message)
    return Identity(
        id=x_user_id,
        name=x_user_name or x_user_id,
        role=role,
        email=x_user_email,
        roll_number=x_user_roll_number,
    )


def get_store(db: Session = Depends(get_db)) -> SqlRecordStore:
    return SqlRecordStore(db)


def get_dispatcher(store: SqlRecordStore = Depends(get_store)) -> NotificationDispatcher:
    return NotificationDispatcher(store)


def get_document_service(
    store: SqlRecordStore = Depends(get_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> DocumentService:
    return DocumentService(store, dispatcher)


def get_review_workflow(
    store: SqlRecordStore = Depends(get_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> ReviewWorkflow:
    return ReviewWorkflow(store, dispatcher)


def get_analytics(store: SqlRecordStore = Depends(get_store)) -> AnalyticsAggregator:
    return AnalyticsAggregator(store)
