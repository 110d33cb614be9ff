"""ORM model for documents registered with the upstream AI service."""

import enum

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String, Text, func

from medadmin.models.base import Base


class EmbeddingStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Document(Base):
    """
    Metadata for an uploaded document. The bytes live with the AI service,
    which identifies documents by file name.
    """

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(512), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    category = Column(String(255), nullable=False, default="General")
    file_url = Column(String(2048), nullable=True)
    file_type = Column(String(255), nullable=False, default="")
    size_bytes = Column(BigInteger, nullable=False, default=0)
    embedding_status = Column(
        String(16), nullable=False, default=EmbeddingStatus.PENDING.value
    )
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    upload_date = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    last_edited = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
