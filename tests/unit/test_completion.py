"""Unit tests for prompt assembly and the streaming completion client."""

import gzip

import httpx
import pytest
import pytest_check as check

from chat_playground.completion.client import CompletionClient, forward_stream
from chat_playground.completion.prompting import (
    CHUNK_SEPARATOR,
    CONTEXT_PREAMBLE,
    build_context_message,
    inject_context,
)
from chat_playground.errors import UpstreamServiceError, ValidationError
from tests.conftest import SSE_BODY, FakeUpstream, TrackedStream


class TestInjectContext:
    """Tests for placing retrieved context in the conversation."""

    def test_context_message_format(self) -> None:
        message = build_context_message(["first chunk", "second chunk"])

        check.equal(message["role"], "system")
        check.is_true(message["content"].startswith(CONTEXT_PREAMBLE))
        check.is_in(f"Context:\nfirst chunk{CHUNK_SEPARATOR}second chunk", message["content"])

    def test_inserted_before_last_user_message(self) -> None:
        messages = [
            {"role": "system", "content": "be nice"},
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
            {"role": "user", "content": "what is in the doc?"},
        ]

        result = inject_context(messages, ["chunk"])

        check.equal(len(result), 5)
        check.equal(result[3]["role"], "system")
        check.is_in("chunk", result[3]["content"])
        check.equal(result[4], messages[3])
        check.equal(len(messages), 4)

    def test_trailing_assistant_message(self) -> None:
        messages = [
            {"role": "user", "content": "question"},
            {"role": "assistant", "content": "partial"},
        ]

        result = inject_context(messages, ["chunk"])

        check.equal([m["role"] for m in result], ["system", "user", "assistant"])

    def test_no_chunks_or_no_user_message(self) -> None:
        messages = [{"role": "assistant", "content": "hello"}]

        check.equal(inject_context(messages, ["chunk"]), messages)
        check.equal(inject_context([{"role": "user", "content": "q"}], []), [{"role": "user", "content": "q"}])


class TestCompletionClient:
    """Tests for opening and forwarding streamed completions."""

    @staticmethod
    def _client(upstream: FakeUpstream, api_key: str = "sk-test") -> CompletionClient:
        return CompletionClient(
            api_key=api_key,
            base_url="https://llm.test/v1",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
        )

    async def test_rejects_missing_key(self) -> None:
        upstream = FakeUpstream()
        client = self._client(upstream, api_key="")

        with pytest.raises(ValidationError, match="API key not configured"):
            await client.open_stream("m", [{"role": "user", "content": "hi"}], 0.7, 100)

        assert upstream.requests == []
        await client.aclose()

    async def test_streams_upstream_bytes(self) -> None:
        upstream = FakeUpstream()
        client = self._client(upstream)

        response = await client.open_stream("llama", [{"role": "user", "content": "hi"}], 0.2, 64)
        body = b"".join([chunk async for chunk in forward_stream(response)])

        payload = upstream.chat_payloads()[0]
        check.equal(body, SSE_BODY)
        check.equal(payload["model"], "llama")
        check.equal(payload["temperature"], 0.2)
        check.equal(payload["max_tokens"], 64)
        check.is_true(payload["stream"])
        check.equal(payload["messages"], [{"role": "user", "content": "hi"}])
        check.equal(
            upstream.requests_to("/chat/completions")[0].headers["authorization"],
            "Bearer sk-test",
        )
        check.is_true(response.is_closed)
        await client.aclose()

    async def test_upstream_error_status_passes_through(self) -> None:
        upstream = FakeUpstream()
        upstream.chat_status = 429
        client = self._client(upstream)

        with pytest.raises(UpstreamServiceError) as exc_info:
            await client.open_stream("m", [{"role": "user", "content": "hi"}], 0.7, 100)

        check.equal(exc_info.value.status_code, 429)
        check.equal(exc_info.value.error, "API request failed: 429")
        check.equal(exc_info.value.details, "model overloaded")
        await client.aclose()

    async def test_network_failure_is_bad_gateway(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        client = CompletionClient(
            api_key="sk-test",
            base_url="https://llm.test/v1",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        with pytest.raises(UpstreamServiceError) as exc_info:
            await client.open_stream("m", [{"role": "user", "content": "hi"}], 0.7, 100)

        check.equal(exc_info.value.status_code, 502)
        await client.aclose()

    def test_endpoint(self) -> None:
        client = CompletionClient(api_key="k", base_url="https://llm.test/v1/")

        assert client.endpoint == "https://llm.test/v1/chat/completions"



class TestForwardStream:
    """Tests for relaying an open upstream response."""

    @staticmethod
    async def _open(upstream: FakeUpstream) -> tuple[CompletionClient, httpx.Response]:
        client = CompletionClient(
            api_key="sk-test",
            base_url="https://llm.test/v1",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
        )
        response = await client.open_stream("m", [{"role": "user", "content": "hi"}], 0.7, 100)
        return client, response

    async def test_decodes_compressed_stream(self) -> None:
        """Compressed upstream bodies are forwarded as plain event-stream text."""
        upstream = FakeUpstream()
        upstream.chat_stream = TrackedStream([gzip.compress(SSE_BODY)])
        upstream.chat_headers = {
            "content-type": "text/event-stream",
            "content-encoding": "gzip",
        }
        client, response = await self._open(upstream)

        body = b"".join([chunk async for chunk in forward_stream(response)])

        check.equal(body, SSE_BODY)
        check.is_true(upstream.chat_stream.closed)
        await client.aclose()

    async def test_forwards_chunks_as_they_arrive(self) -> None:
        upstream = FakeUpstream()
        upstream.chat_stream = TrackedStream([b"data: a\n\n", b"data: b\n\n"])
        client, response = await self._open(upstream)

        chunks = [chunk async for chunk in forward_stream(response)]

        check.equal(chunks, [b"data: a\n\n", b"data: b\n\n"])
        await client.aclose()

    async def test_read_error_mid_stream_is_raised(self) -> None:
        """A broken upstream stream must not look like a finished answer."""
        upstream = FakeUpstream()
        upstream.chat_stream = TrackedStream([b"data: a\n\n", b"data: b\n\n"], fail_after=1)
        client, response = await self._open(upstream)
        received: list[bytes] = []

        with pytest.raises(httpx.ReadError):
            async for chunk in forward_stream(response):
                received.append(chunk)

        check.equal(received, [b"data: a\n\n"])
        check.is_true(upstream.chat_stream.closed)
        await client.aclose()

    async def test_closing_early_releases_upstream(self) -> None:
        upstream = FakeUpstream()
        upstream.chat_stream = TrackedStream([b"data: a\n\n", b"data: b\n\n"])
        client, response = await self._open(upstream)

        stream = forward_stream(response)
        check.equal(await stream.__anext__(), b"data: a\n\n")
        await stream.aclose()

        check.is_true(upstream.chat_stream.closed)
        await client.aclose()
