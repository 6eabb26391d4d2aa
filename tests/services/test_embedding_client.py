"""Tests for the embedding service client."""
import httpx
import pytest

from sentinela.services.embedding_client import EmbeddingClient

BASE_URL = "http://embeddings.test"


def make_client(handler, expected_dim: int = 4) -> EmbeddingClient:
    return EmbeddingClient(
        base_url=BASE_URL,
        expected_dim=expected_dim,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestExtractFromBuffer:
    async def test_returns_embedding(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = request.read()
            return httpx.Response(200, json={"embedding": [0.1, 0.2, 0.3, 1]})

        async with make_client(handler) as client:
            embedding = await client.extract_from_buffer(b"jpeg-bytes", "image/png")

        assert embedding == [0.1, 0.2, 0.3, 1.0]
        assert seen["url"] == f"{BASE_URL}/api/v1/embeddings/extract"
        assert b'name="file"; filename="image.jpg"' in seen["body"]
        assert b"Content-Type: image/png" in seen["body"]
        assert b"jpeg-bytes" in seen["body"]

    async def test_timeout_returns_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(handler) as client:
            assert await client.extract_from_buffer(b"img") is None

    async def test_connection_error_returns_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            assert await client.extract_from_buffer(b"img") is None

    @pytest.mark.parametrize("status_code", [400, 404, 500, 503])
    async def test_error_status_returns_none(self, status_code):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, json={"detail": "no face"})

        async with make_client(handler) as client:
            assert await client.extract_from_buffer(b"img") is None

    async def test_malformed_json_returns_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"{not json", headers={"content-type": "application/json"})

        async with make_client(handler) as client:
            assert await client.extract_from_buffer(b"img") is None

    @pytest.mark.parametrize("payload", [
        {},
        {"embedding": None},
        {"embedding": []},
        {"embedding": "0.1,0.2"},
        {"embedding": [0.1, "x", 0.3, 0.4]},
        {"embedding": [True, False, True, False]},
        [0.1, 0.2, 0.3, 0.4],
    ])
    async def test_invalid_payload_returns_none(self, payload):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=payload)

        async with make_client(handler) as client:
            assert await client.extract_from_buffer(b"img") is None

    async def test_unexpected_dimension_still_returned(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"embedding": [0.5, 0.5]})

        async with make_client(handler, expected_dim=128) as client:
            assert await client.extract_from_buffer(b"img") == [0.5, 0.5]


class TestExtractFromUrl:
    async def test_downloads_then_extracts(self):
        image_url = "https://cdn.example/faces/1.png"
        posted = {}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                assert str(request.url) == image_url
                return httpx.Response(
                    200, content=b"png-bytes", headers={"content-type": "image/png; charset=binary"}
                )
            posted["body"] = request.read()
            return httpx.Response(200, json={"embedding": [1, 0, 0, 0]})

        async with make_client(handler) as client:
            embedding = await client.extract_from_url(image_url)

        assert embedding == [1.0, 0.0, 0.0, 0.0]
        assert b"png-bytes" in posted["body"]
        assert b"Content-Type: image/png" in posted["body"]

    async def test_download_failure_returns_none(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.method)
            return httpx.Response(404)

        async with make_client(handler) as client:
            assert await client.extract_from_url("https://cdn.example/missing.jpg") is None

        assert calls == ["GET"]


class TestIsAvailable:
    async def test_healthy(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/health"
            return httpx.Response(200, json={"status": "ok"})

        async with make_client(handler) as client:
            assert await client.is_available() is True

    async def test_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            assert await client.is_available() is False

    async def test_unhealthy_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        async with make_client(handler) as client:
            assert await client.is_available() is False
