"""Tests for the Gemini generation client."""
import httpx
import pytest

from asklky.errors import GenerationError, ResponseParseError, TransportError
from asklky.llm_client import NO_RESPONSE_TEXT
from tests.conftest import MODEL, gemini_reply, request_json


class TestRequest:
    @pytest.mark.asyncio
    async def test_posts_prompt_with_fixed_temperature(self, make_client, ok_handler, recorded_requests):
        client = make_client(ok_handler)
        await client.generate("the prompt")

        assert len(recorded_requests) == 1
        request = recorded_requests[0]
        assert request.method == "POST"
        assert request.url.host == "gemini.test"
        assert request.url.path == f"/v1beta/models/{MODEL}:generateContent"
        assert "key" not in request.url.params
        assert request_json(request) == {
            "contents": [{"role": "user", "parts": [{"text": "the prompt"}]}],
            "generationConfig": {"temperature": 0.7},
        }

    @pytest.mark.asyncio
    async def test_api_key_sent_as_query_param(self, make_client, ok_handler, recorded_requests):
        await make_client(ok_handler, api_key="secret").generate("p")
        assert recorded_requests[0].url.params["key"] == "secret"


class TestResponse:
    @pytest.mark.asyncio
    async def test_returns_candidate_text(self, make_client, ok_handler):
        assert await make_client(ok_handler).generate("p") == "We owe ourselves our own survival."

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {},
        {"candidates": []},
        {"candidates": [{}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
        {"candidates": [{"content": {"parts": [{"text": 42}]}}]},
        {"candidates": None},
        [],
        "just a string",
    ])
    async def test_malformed_body_degrades_to_fallback(self, make_client, body):
        client = make_client(lambda request: httpx.Response(200, json=body))
        assert await client.generate("p") == NO_RESPONSE_TEXT

    @pytest.mark.asyncio
    async def test_server_error_raises_transport_error(self, make_client):
        client = make_client(lambda request: httpx.Response(500, json={"error": "boom"}))
        with pytest.raises(TransportError) as exc_info:
            await client.generate("p")
        assert exc_info.value.status_code == 500
        assert "500" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_client_error_raises_transport_error(self, make_client):
        client = make_client(lambda request: httpx.Response(403))
        with pytest.raises(TransportError):
            await client.generate("p")

    @pytest.mark.asyncio
    async def test_network_failure_raises_transport_error(self, make_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as exc_info:
            await make_client(handler).generate("p")
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self, make_client):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TransportError):
            await make_client(handler).generate("p")

    @pytest.mark.asyncio
    async def test_non_json_body_raises_parse_error(self, make_client):
        client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(ResponseParseError) as exc_info:
            await client.generate("p")
        assert isinstance(exc_info.value, GenerationError)

    @pytest.mark.asyncio
    async def test_no_retry(self, make_client, recorded_requests):
        def handler(request):
            recorded_requests.append(request)
            return httpx.Response(503)

        with pytest.raises(TransportError):
            await make_client(handler).generate("p")
        assert len(recorded_requests) == 1


class TestListModels:
    @pytest.mark.asyncio
    async def test_returns_names(self, make_client):
        body = {"models": [{"name": f"models/{MODEL}"}, {"name": "models/other"}]}
        client = make_client(lambda request: httpx.Response(200, json=body))
        assert await client.list_models() == [f"models/{MODEL}", "models/other"]

    @pytest.mark.asyncio
    async def test_follows_page_tokens(self, make_client, recorded_requests):
        pages = {
            None: {"models": [{"name": "models/a"}], "nextPageToken": "p2"},
            "p2": {"models": [{"name": "models/b"}], "nextPageToken": "p3"},
            "p3": {"models": [{"name": f"models/{MODEL}"}]},
        }

        def handler(request):
            recorded_requests.append(request)
            return httpx.Response(200, json=pages[request.url.params.get("pageToken")])

        names = await make_client(handler).list_models()

        assert names == ["models/a", "models/b", f"models/{MODEL}"]
        assert len(recorded_requests) == 3
        assert all(r.url.params["pageSize"] == "1000" for r in recorded_requests)

    @pytest.mark.asyncio
    async def test_failure_raises_transport_error(self, make_client):
        client = make_client(lambda request: httpx.Response(401))
        with pytest.raises(TransportError):
            await client.list_models()


def test_reply_helper_shape():
    assert gemini_reply("x")["candidates"][0]["content"]["parts"][0]["text"] == "x"
