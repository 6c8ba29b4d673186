"""Tests for the async API client."""

import httpx
import pytest

from gulfquotes.client import ApiError, GulfquotesClient


def client_for(handler, token: str | None = "tok") -> GulfquotesClient:
    return GulfquotesClient(
        "https://api.example.com", token=token, transport=httpx.MockTransport(handler)
    )


class TestRequests:
    @pytest.mark.asyncio
    async def test_unwraps_envelope(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"data": {"items": [], "hasMore": False}})

        async with client_for(handler) as client:
            data = await client.list_comments("be-kind", page=2, sort_by="popular")

        assert data == {"items": [], "hasMore": False}
        assert seen["url"] == (
            "https://api.example.com/api/quotes/be-kind/comments?page=2&limit=10&sortBy=popular"
        )
        assert seen["auth"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_sends_json_body(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = request.content
            return httpx.Response(201, json={"data": {"id": "r1"}})

        async with client_for(handler) as client:
            data = await client.create_reply("be-kind", "c1", "Agreed")

        assert data == {"id": "r1"}
        assert seen["method"] == "POST"
        assert seen["path"] == "/api/quotes/be-kind/comments/c1/replies"
        assert b'"content"' in seen["body"]

    def test_is_authenticated(self) -> None:
        assert client_for(lambda r: httpx.Response(200), token="tok").is_authenticated
        assert not client_for(lambda r: httpx.Response(200), token=None).is_authenticated


class TestErrors:
    @pytest.mark.asyncio
    async def test_error_envelope(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                403,
                json={"error": {"code": "FORBIDDEN", "message": "Not yours"}},
            )

        async with client_for(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.delete_comment("c1")

        assert exc_info.value.code == "FORBIDDEN"
        assert exc_info.value.message == "Not yours"
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_error_without_envelope(self) -> None:
        async with client_for(lambda r: httpx.Response(502, text="Bad gateway")) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.delete_reply("r1")

        assert exc_info.value.code == "INTERNAL_ERROR"
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_malformed_success(self) -> None:
        async with client_for(lambda r: httpx.Response(200, json={"items": []})) as client:
            with pytest.raises(ApiError, match="Malformed response"):
                await client.list_replies("be-kind", "c1")

    @pytest.mark.asyncio
    async def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with client_for(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.toggle_comment_like("c1")

        assert exc_info.value.code == "INTERNAL_ERROR"
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with client_for(handler) as client:
            with pytest.raises(ApiError, match="timed out"):
                await client.update_comment("c1", "edit")
