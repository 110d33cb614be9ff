"""HTTP client for the upstream AI service (document embedding, deletion, missing conditions)."""

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

if TYPE_CHECKING:
    from medadmin.core.config import Settings

logger = logging.getLogger(__name__)


class AIServiceError(Exception):
    """Raised when the AI service cannot be reached or times out."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class AIServiceNotConfiguredError(AIServiceError):
    """Raised when an AI service call is made but AI_SERVICE_URL is not set."""


@dataclass
class UpstreamResponse:
    """Status and decoded body of an AI service response; non-JSON bodies decode to None."""

    status_code: int
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def error_message(self, default: str) -> str:
        if isinstance(self.data, dict):
            for key in ("error", "detail", "message"):
                value = self.data.get(key)
                if isinstance(value, str) and value:
                    return value
        return default


@dataclass
class UploadedFile:
    filename: str
    content: bytes
    content_type: str


class AIServiceClient:
    """
    Thin async wrapper over the AI service REST API.

    Each call opens its own httpx.AsyncClient. Upstream status codes are
    returned to the caller untouched; only transport failures raise.
    """

    def __init__(
        self,
        base_url: str | None,
        timeout_sec: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout_sec = timeout_sec
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: "Settings") -> "AIServiceClient":
        return cls(settings.AI_SERVICE_URL, settings.AI_SERVICE_TIMEOUT_SEC)

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)

    def document_url(self, name: str) -> str | None:
        """Public URL the AI service serves a document under, when configured."""
        if not self.base_url:
            return None
        return f"{self.base_url}/documents/{quote(name, safe='')}"

    async def _request(self, method: str, path: str, **kwargs: Any) -> UpstreamResponse:
        if not self.base_url:
            raise AIServiceNotConfiguredError(
                "AI service is not configured. Set AI_SERVICE_URL."
            )
        url = f"{self.base_url}{path}"
        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_sec), transport=self._transport
            ) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.ConnectError as e:
            self._log_failure(method, path, start)
            raise AIServiceError(
                "AI service is unreachable. Check AI_SERVICE_URL.", cause=e
            ) from e
        except httpx.TimeoutException as e:
            self._log_failure(method, path, start)
            raise AIServiceError(
                "AI service request timed out. Try increasing AI_SERVICE_TIMEOUT_SEC.", cause=e
            ) from e
        except httpx.HTTPError as e:
            self._log_failure(method, path, start)
            raise AIServiceError("AI service request failed.", cause=e) from e

        try:
            data = response.json()
        except ValueError:
            data = None
        logger.info(
            "AI service request completed",
            extra={
                "ai_method": method,
                "ai_path": path,
                "ai_status": response.status_code,
                "ai_latency_seconds": time.perf_counter() - start,
            },
        )
        return UpstreamResponse(status_code=response.status_code, data=data)

    @staticmethod
    def _log_failure(method: str, path: str, start: float) -> None:
        logger.info(
            "AI service request failed",
            extra={
                "ai_method": method,
                "ai_path": path,
                "ai_latency_seconds": time.perf_counter() - start,
                "status": "error",
            },
        )

    async def embed_documents(self, files: list[UploadedFile]) -> UpstreamResponse:
        """Send files for embedding in one multipart request."""
        multipart = [
            ("files", (f.filename, f.content, f.content_type or "application/octet-stream"))
            for f in files
        ]
        return await self._request("POST", "/embed", files=multipart)

    async def re_embed(self) -> UpstreamResponse:
        """Ask the service to rebuild embeddings for everything it holds."""
        return await self._request("POST", "/embed")

    async def delete_document(self, name: str) -> UpstreamResponse:
        return await self._request("DELETE", f"/documents/{quote(name, safe='')}")

    async def list_missing_conditions(self, params: dict[str, str]) -> UpstreamResponse:
        return await self._request("GET", "/missing-conditions", params=params)

    async def update_missing_condition(
        self, condition_id: str, body: dict[str, Any]
    ) -> UpstreamResponse:
        return await self._request(
            "PATCH", f"/missing-conditions/{quote(condition_id, safe='')}", json=body
        )
