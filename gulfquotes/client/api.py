"""Async HTTP client for the comment and reply endpoints.

Successful responses are unwrapped from the ``{"data": ...}`` envelope.
Error envelopes and transport failures raise ``ApiError``.
"""

from typing import Any
from uuid import UUID

import httpx

from gulfquotes.core.errors import INTERNAL_ERROR
from gulfquotes.core.logging import get_logger


logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


class ApiError(Exception):
    """Request to the Gulfquotes API failed."""

    def __init__(self, code: str, message: str, status_code: int | None = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(f"{code}: {message}")


class GulfquotesClient:
    """Thin ``httpx.AsyncClient`` wrapper.

    Usage:
        async with GulfquotesClient("https://gulfquotes.com", token=jwt) as client:
            page = await client.list_comments("be-kind-abc123")
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @property
    def is_authenticated(self) -> bool:
        return "Authorization" in self._client.headers

    async def __aenter__(self) -> "GulfquotesClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("api_request_timeout", method=method, path=path)
            raise ApiError(INTERNAL_ERROR, "Request timed out") from e
        except httpx.RequestError as e:
            logger.warning("api_request_error", method=method, path=path, error=str(e))
            raise ApiError(INTERNAL_ERROR, f"Request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            error = body.get("error") if isinstance(body, dict) else None
            if isinstance(error, dict):
                raise ApiError(
                    error.get("code", INTERNAL_ERROR),
                    error.get("message", "Request failed"),
                    response.status_code,
                )
            raise ApiError(
                INTERNAL_ERROR,
                f"Unexpected response: {response.status_code}",
                response.status_code,
            )

        if not isinstance(body, dict) or "data" not in body:
            raise ApiError(INTERNAL_ERROR, "Malformed response", response.status_code)
        return body["data"]

    # ==========================================================================
    # Comments
    # ==========================================================================

    async def list_comments(
        self, slug: str, page: int = 1, limit: int = 10, sort_by: str = "recent"
    ) -> dict[str, Any]:
        return await self._request(
            "GET",
            f"/api/quotes/{slug}/comments",
            params={"page": page, "limit": limit, "sortBy": sort_by},
        )

    async def create_comment(self, slug: str, content: str) -> dict[str, Any]:
        return await self._request(
            "POST", f"/api/quotes/{slug}/comments", json={"content": content}
        )

    async def update_comment(self, comment_id: str | UUID, content: str) -> dict[str, Any]:
        return await self._request(
            "PATCH", f"/api/comments/{comment_id}", json={"content": content}
        )

    async def delete_comment(self, comment_id: str | UUID) -> dict[str, Any]:
        return await self._request("DELETE", f"/api/comments/{comment_id}")

    async def toggle_comment_like(self, comment_id: str | UUID) -> dict[str, Any]:
        return await self._request("POST", f"/api/comments/{comment_id}/like")

    # ==========================================================================
    # Replies
    # ==========================================================================

    async def list_replies(
        self, slug: str, comment_id: str | UUID, page: int = 1, limit: int = 50
    ) -> dict[str, Any]:
        return await self._request(
            "GET",
            f"/api/quotes/{slug}/comments/{comment_id}/replies",
            params={"page": page, "limit": limit},
        )

    async def create_reply(
        self, slug: str, comment_id: str | UUID, content: str
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/api/quotes/{slug}/comments/{comment_id}/replies",
            json={"content": content},
        )

    async def update_reply(self, reply_id: str | UUID, content: str) -> dict[str, Any]:
        return await self._request(
            "PATCH", f"/api/replies/{reply_id}", json={"content": content}
        )

    async def delete_reply(self, reply_id: str | UUID) -> dict[str, Any]:
        return await self._request("DELETE", f"/api/replies/{reply_id}")

    async def toggle_reply_like(self, reply_id: str | UUID) -> dict[str, Any]:
        return await self._request("POST", f"/api/replies/{reply_id}/like")
