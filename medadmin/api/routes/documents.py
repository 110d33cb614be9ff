"""Document registry endpoints: upload for embedding, edit, delete, re-embed."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from medadmin.api.deps import (
    get_ai_service,
    get_audit_recorder,
    get_current_user,
    get_settings_dep,
    require_admin,
)
from medadmin.core.config import Settings
from medadmin.core.database import get_db
from medadmin.core.errors import UpstreamError
from medadmin.schemas.auth import CurrentUser
from medadmin.schemas.documents import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    DeleteResponse,
    DocumentOut,
    DocumentsResponse,
    DocumentUpdate,
    ReEmbedResponse,
)
from medadmin.services import documents as document_service
from medadmin.services.ai_service import AIServiceClient, AIServiceError, UploadedFile
from medadmin.services.audit import AuditRecorder

router = APIRouter()


def _documents_response(documents: list) -> DocumentsResponse:
    return DocumentsResponse(
        documents=[DocumentOut.model_validate(d) for d in documents],
        count=len(documents),
    )


@router.get("", response_model=DocumentsResponse)
def list_documents(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> DocumentsResponse:
    """All registered documents, newest upload first."""
    return _documents_response(document_service.list_documents(db))


@router.post("", response_model=DocumentsResponse, status_code=201)
async def upload_documents(
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
    ai: Annotated[AIServiceClient, Depends(get_ai_service)],
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
    files: Annotated[list[UploadFile], File(description="PDF, Word or Excel files")],
    description: Annotated[str | None, Form(max_length=10_000)] = None,
    category: Annotated[str | None, Form(max_length=255)] = None,
) -> DocumentsResponse:
    """
    Upload one or more documents (multipart field `files`).

    Each file is registered and sent to the AI service for embedding; the
    returned rows carry the resulting embedding_status. An embedding failure
    marks the rows FAILED but does not fail the request.
    """
    uploads = [
        UploadedFile(
            filename=f.filename or "upload",
            content=await f.read(),
            content_type=f.content_type or "",
        )
        for f in files
    ]
    documents = await document_service.upload_documents(
        db,
        uploads,
        admin,
        ai=ai,
        recorder=recorder,
        max_bytes=settings.MAX_UPLOAD_FILE_BYTES,
        description=description,
        category=category,
    )
    return _documents_response(documents)


@router.delete("", response_model=BulkDeleteResponse)
async def delete_documents(
    body: BulkDeleteRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    ai: Annotated[AIServiceClient, Depends(get_ai_service)],
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
) -> BulkDeleteResponse:
    """Delete documents by file name; names the AI service refuses are reported in `failed`."""
    deleted_count, failed = await document_service.delete_documents_by_name(
        db, body.names, admin, ai=ai, recorder=recorder
    )
    return BulkDeleteResponse(
        success=True,
        deleted_count=deleted_count,
        failed_count=len(failed),
        failed=failed,
    )


@router.post("/re-embed", response_model=ReEmbedResponse)
async def re_embed_documents(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    ai: Annotated[AIServiceClient, Depends(get_ai_service)],
):
    """Ask the AI service to rebuild all embeddings; its status is passed through on failure."""
    try:
        result = await ai.re_embed()
    except AIServiceError as e:
        raise UpstreamError(e.message, status_code=503) from e
    if result.status_code == 200:
        return ReEmbedResponse(
            success=True, message="Re-embedding completed successfully", data=result.data
        )
    return JSONResponse(
        status_code=result.status_code,
        content={"error": "Re-embedding failed", "status": result.status_code},
    )


@router.get("/{document_id}", response_model=DocumentOut)
def get_document(
    document_id: int,
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> DocumentOut:
    return DocumentOut.model_validate(document_service.get_document(db, document_id))


@router.put("/{document_id}", response_model=DocumentOut)
def update_document(
    document_id: int,
    body: DocumentUpdate,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
) -> DocumentOut:
    """Edit document metadata (description, category)."""
    document = document_service.update_document(
        db, document_id, body, admin, recorder=recorder
    )
    return DocumentOut.model_validate(document)


@router.delete("/{document_id}", response_model=DeleteResponse)
async def delete_document(
    document_id: int,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    ai: Annotated[AIServiceClient, Depends(get_ai_service)],
    recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
) -> DeleteResponse:
    """
    Delete a document. The AI service copy is removed first; if that fails
    the document is kept and 502 is returned.
    """
    await document_service.delete_document(db, document_id, admin, ai=ai, recorder=recorder)
    return DeleteResponse(success=True)
