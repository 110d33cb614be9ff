"""
Document registry: upload for embedding, metadata edits and deletion.

Deletion follows confirm-then-delete: the AI service deletes first and the
local row goes only once the upstream copy is confirmed gone (2xx or 404).
Without an AI service configured the registry is local only.
"""

import logging
import os
import re
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from medadmin.core.errors import NotFoundError, UpstreamError, ValidationError
from medadmin.models import AuditAction, Document, EmbeddingStatus
from medadmin.schemas.auth import CurrentUser
from medadmin.schemas.documents import DocumentUpdate
from medadmin.services.ai_service import AIServiceClient, AIServiceError, UploadedFile
from medadmin.services.audit import AuditRecorder, diff_values, snapshot

logger = logging.getLogger(__name__)

DOCUMENTS_TABLE = Document.__tablename__

ALLOWED_CONTENT_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }
)
ALLOWED_EXTENSIONS = frozenset({".pdf", ".doc", ".docx", ".xls", ".xlsx"})
INVALID_TYPE_MESSAGE = (
    "Invalid file types. Only Word documents (.doc, .docx), PDF (.pdf), "
    "and Excel files (.xls, .xlsx) are allowed."
)
DEFAULT_CATEGORY = "General"
AUDITED_FIELDS = ("name", "description", "category", "file_type", "embedding_status")

# "Cardiology- Discharge notes.docx" -> "Cardiology"
_CATEGORY_PREFIX = re.compile(r"^([^-]+)-")


def category_from_filename(filename: str) -> str:
    match = _CATEGORY_PREFIX.match(filename)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return DEFAULT_CATEGORY


def is_allowed_file(filename: str, content_type: str) -> bool:
    """Accept a file when either its content type or its extension is on the allow list."""
    extension = os.path.splitext(filename)[1].lower()
    return (content_type or "").lower() in ALLOWED_CONTENT_TYPES or extension in ALLOWED_EXTENSIONS


def validate_uploads(files: list[UploadedFile], max_bytes: int) -> None:
    if not files:
        raise ValidationError("No files provided")
    invalid = [f.filename for f in files if not is_allowed_file(f.filename, f.content_type)]
    if invalid:
        raise ValidationError(f"{INVALID_TYPE_MESSAGE} Invalid files: {', '.join(invalid)}")
    too_large = [f.filename for f in files if len(f.content) > max_bytes]
    if too_large:
        raise ValidationError(
            f"File size must not exceed {max_bytes} bytes. Too large: {', '.join(too_large)}"
        )
    names = [f.filename for f in files]
    repeated = sorted({n for n in names if names.count(n) > 1})
    if repeated:
        raise ValidationError(f"Duplicate file names in request: {', '.join(repeated)}")


def list_documents(db: Session) -> list[Document]:
    return db.query(Document).order_by(Document.upload_date.desc(), Document.id.desc()).all()


def get_document(db: Session, document_id: int) -> Document:
    document = db.query(Document).filter(Document.id == document_id).first()
    if document is None:
        raise NotFoundError("Document not found")
    return document


def _set_status(db: Session, documents: list[Document], status: EmbeddingStatus) -> None:
    for document in documents:
        document.embedding_status = status.value
    db.commit()


async def upload_documents(
    db: Session,
    files: list[UploadedFile],
    actor: CurrentUser,
    *,
    ai: AIServiceClient,
    recorder: AuditRecorder,
    max_bytes: int,
    description: str | None = None,
    category: str | None = None,
) -> list[Document]:
    """
    Register files and send them to the AI service for embedding.

    Rows start PENDING and move to PROCESSING, then COMPLETED on a 200 from
    the service or FAILED otherwise. An embedding failure never fails the
    upload itself.
    """
    validate_uploads(files, max_bytes)
    # The AI service keys documents by file name; one row per name.
    registered = [
        name
        for (name,) in db.query(Document.name)
        .filter(Document.name.in_([f.filename for f in files]))
        .all()
    ]
    if registered:
        raise ValidationError(
            f"Documents already registered: {', '.join(sorted(registered))}. "
            "Delete them before uploading again."
        )

    documents = [
        Document(
            name=f.filename,
            description=description if description else f.filename,
            category=category if category else category_from_filename(f.filename),
            file_url=ai.document_url(f.filename),
            file_type=f.content_type or "",
            size_bytes=len(f.content),
            embedding_status=EmbeddingStatus.PENDING.value,
            created_by=actor.id,
        )
        for f in files
    ]
    db.add_all(documents)
    db.commit()
    for document in documents:
        recorder.record(
            DOCUMENTS_TABLE,
            document.id,
            AuditAction.CREATE,
            actor_id=actor.id,
            new_values=snapshot(document, AUDITED_FIELDS),
        )

    if not ai.is_configured:
        logger.warning(
            "AI service not configured; documents left pending",
            extra={"document_count": len(documents)},
        )
        return documents

    _set_status(db, documents, EmbeddingStatus.PROCESSING)
    try:
        response = await ai.embed_documents(files)
        final = EmbeddingStatus.COMPLETED if response.status_code == 200 else EmbeddingStatus.FAILED
        if final is EmbeddingStatus.FAILED:
            logger.warning(
                "Embedding rejected by AI service",
                extra={"ai_status": response.status_code, "document_count": len(documents)},
            )
    except AIServiceError as e:
        logger.error(
            "Embedding request failed",
            extra={"reason": e.message[:500], "document_count": len(documents)},
        )
        final = EmbeddingStatus.FAILED
    _set_status(db, documents, final)
    for document in documents:
        db.refresh(document)
    return documents


def update_document(
    db: Session,
    document_id: int,
    body: DocumentUpdate,
    actor: CurrentUser,
    *,
    recorder: AuditRecorder,
) -> Document:
    document = get_document(db, document_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationError("No valid fields to update")
    before = snapshot(document, AUDITED_FIELDS)
    for field, value in changes.items():
        setattr(document, field, value.strip() if isinstance(value, str) else value)
    document.last_edited = datetime.now(UTC)
    db.commit()
    db.refresh(document)
    old_values, new_values = diff_values(before, snapshot(document, changes.keys()))
    recorder.record(
        DOCUMENTS_TABLE,
        document.id,
        AuditAction.UPDATE,
        actor_id=actor.id,
        old_values=old_values,
        new_values=new_values,
    )
    return document


async def _delete_upstream(ai: AIServiceClient, name: str) -> bool:
    """True when the AI service no longer holds the document."""
    try:
        response = await ai.delete_document(name)
    except AIServiceError as e:
        logger.error(
            "Upstream document deletion failed",
            extra={"document_name": name, "reason": e.message[:500]},
        )
        return False
    if response.ok or response.status_code == 404:
        return True
    logger.error(
        "Upstream document deletion rejected",
        extra={"document_name": name, "ai_status": response.status_code},
    )
    return False


def _delete_rows(
    db: Session, documents: list[Document], actor: CurrentUser, recorder: AuditRecorder
) -> None:
    snapshots = [(d.id, snapshot(d, AUDITED_FIELDS)) for d in documents]
    for document in documents:
        db.delete(document)
    db.commit()
    for document_id, before in snapshots:
        recorder.record(
            DOCUMENTS_TABLE,
            document_id,
            AuditAction.DELETE,
            actor_id=actor.id,
            old_values=before,
        )


async def delete_document(
    db: Session,
    document_id: int,
    actor: CurrentUser,
    *,
    ai: AIServiceClient,
    recorder: AuditRecorder,
) -> None:
    """Delete upstream first; keep the local row if the AI service still has the file."""
    document = get_document(db, document_id)
    if ai.is_configured and not await _delete_upstream(ai, document.name):
        raise UpstreamError("Failed to delete document from AI service")
    _delete_rows(db, [document], actor, recorder)


async def delete_documents_by_name(
    db: Session,
    names: list[str],
    actor: CurrentUser,
    *,
    ai: AIServiceClient,
    recorder: AuditRecorder,
) -> tuple[int, list[str]]:
    """
    Bulk delete by file name with the same per-name policy as delete_document.

    Returns (deleted_count, failed_names). deleted_count counts names confirmed
    gone, whether or not a local row existed for them.
    """
    unique_names = list(dict.fromkeys(n for n in names if n))
    if not unique_names:
        raise ValidationError("No document names provided")

    if not ai.is_configured:
        documents = db.query(Document).filter(Document.name.in_(unique_names)).all()
        if not documents:
            raise NotFoundError("No documents found")
        _delete_rows(db, documents, actor, recorder)
        return len(documents), []

    deleted: list[str] = []
    failed: list[str] = []
    for name in unique_names:
        if await _delete_upstream(ai, name):
            deleted.append(name)
        else:
            failed.append(name)
    if not deleted:
        raise UpstreamError("Failed to delete any documents from AI service")

    documents = db.query(Document).filter(Document.name.in_(deleted)).all()
    if documents:
        _delete_rows(db, documents, actor, recorder)
    return len(deleted), failed
