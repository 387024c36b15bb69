from datetime import datetime

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse

from portal.config import settings
from portal.dependencies import get_document_service, get_identity, get_review_workflow
from portal.entities import Document, DocumentFilters, Identity
from portal.models.enums import DocumentStatus
from portal.schemas.document import (
    DocumentResponse,
    LocationResponse,
    ReviewerResponse,
    ReviewRequest,
    UploaderResponse,
)
from portal.services.document_service import DocumentService
from portal.services.review_service import ReviewWorkflow
from portal.services.storage_service import resolve_location, staged_file

router = APIRouter(
    prefix="/documents",
    tags=["documents"],
    dependencies=[Depends(get_identity)],
)


def _doc_to_response(doc: Document) -> DocumentResponse:
    return DocumentResponse(
        id=doc.id,
        title=doc.title,
        description=doc.description,
        file_name=doc.file_name,
        file_type=doc.file_type,
        file_size=doc.file_size,
        subject=doc.subject,
        document_type=doc.document_type.value,
        year=doc.year,
        branch=doc.branch,
        status=doc.status.value,
        professor_comment=doc.professor_comment,
        reviewed_by=(
            ReviewerResponse(id=doc.reviewed_by.id, name=doc.reviewed_by.name)
            if doc.reviewed_by else None
        ),
        reviewed_at=doc.reviewed_at,
        uploaded_by=UploaderResponse(
            id=doc.uploaded_by.id,
            name=doc.uploaded_by.name,
            email=doc.uploaded_by.email,
            roll_number=doc.uploaded_by.roll_number,
        ),
        created_at=doc.created_at,
        updated_at=doc.updated_at,
    )


@router.get("", response_model=list[DocumentResponse])
async def list_documents(
    subject: str | None = None,
    year: str | None = None,
    uploader_id: str | None = None,
    status: str | None = None,
    q: str | None = None,
    since: datetime | None = None,
    service: DocumentService = Depends(get_document_service),
):
    filters = DocumentFilters(
        subject=subject or None,
        year=year or None,
        uploader_id=uploader_id or None,
        status=DocumentStatus.parse(status) if status else None,
        query=q or None,
        since=since,
    )
    return [_doc_to_response(d) for d in service.list(filters)]


@router.get("/mine", response_model=list[DocumentResponse])
async def my_documents(
    identity: Identity = Depends(get_identity),
    service: DocumentService = Depends(get_document_service),
):
    return [_doc_to_response(d) for d in service.get_my_documents(identity.id)]


@router.post("", response_model=DocumentResponse, status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    title: str = Form(...),
    subject: str = Form(...),
    document_type: str = Form(...),
    year: str = Form(...),
    branch: str = Form(...),
    description: str | None = Form(None),
    identity: Identity = Depends(get_identity),
    service: DocumentService = Depends(get_document_service),
):
    # Enforce the size limit while streaming, before anything is kept.
    max_bytes = settings.max_upload_bytes
    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise HTTPException(status_code=413, detail=f"File too large (max {max_bytes} bytes)")
        chunks.append(chunk)

    new = service.prepare(
        identity,
        title=title,
        subject=subject,
        document_type=document_type,
        year=year,
        branch=branch,
        description=description,
        file_name=file.filename or "",
        file_type=file.content_type,
        file_size=size,
    )
    with staged_file(identity.id, new.file_name, b"".join(chunks)) as location:
        new.file_location = location
        doc = service.submit(new)
    return _doc_to_response(doc)


@router.get("/{doc_id}", response_model=DocumentResponse)
async def get_document(doc_id: str, service: DocumentService = Depends(get_document_service)):
    return _doc_to_response(service.get(doc_id))


@router.post("/{doc_id}/approve", response_model=DocumentResponse)
async def approve_document(
    doc_id: str,
    req: ReviewRequest | None = None,
    identity: Identity = Depends(get_identity),
    workflow: ReviewWorkflow = Depends(get_review_workflow),
):
    comment = req.comment if req else None
    return _doc_to_response(workflow.approve(doc_id, identity, comment))


@router.post("/{doc_id}/reject", response_model=DocumentResponse)
async def reject_document(
    doc_id: str,
    req: ReviewRequest,
    identity: Identity = Depends(get_identity),
    workflow: ReviewWorkflow = Depends(get_review_workflow),
):
    return _doc_to_response(workflow.reject(doc_id, identity, req.comment))


@router.delete("/{doc_id}")
async def delete_document(
    doc_id: str,
    identity: Identity = Depends(get_identity),
    workflow: ReviewWorkflow = Depends(get_review_workflow),
):
    workflow.withdraw(doc_id, identity)
    return {"message": "Document deleted"}


@router.get("/{doc_id}/location", response_model=LocationResponse)
async def document_location(doc_id: str, service: DocumentService = Depends(get_document_service)):
    doc = service.get(doc_id)
    return LocationResponse(
        id=doc.id,
        file_location=doc.file_location,
        file_name=doc.file_name,
        file_type=doc.file_type,
    )


@router.get("/{doc_id}/download")
async def download_document(doc_id: str, service: DocumentService = Depends(get_document_service)):
    doc = service.get(doc_id)
    full_path = resolve_location(doc.file_location)
    return FileResponse(
        path=str(full_path),
        filename=doc.file_name,
        media_type=doc.file_type or "application/octet-stream",
    )
