"""Response envelopes shared by several endpoints."""

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    message: str = Field(..., description="Human-readable outcome")


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response."""

    error: str
