"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - settings / settings_with_key: isolated settings with a temporary uploads dir
    - upstream: fake inference provider recording every request
    - app / app_with_key: application wired to the fake provider
    - async_client / keyed_client: HTTPX clients for API testing
    - sample_pdf: bytes of a small single-page PDF

PDFs are generated in-process so no binary fixtures are needed.
"""

import json
from collections.abc import AsyncGenerator, AsyncIterator, Callable
from pathlib import Path

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from chat_playground.api.app import close_services, create_app
from chat_playground.config import Settings

SAMPLE_TEXT = "Hello world, this is a test document with enough content."

SSE_BODY = (
    b'data: {"choices":[{"delta":{"content":"Hello"}}]}\n\n'
    b'data: {"choices":[{"delta":{"content":" there"}}]}\n\n'
    b"data: [DONE]\n\n"
)


def make_pdf(*lines: str) -> bytes:
    """Build a minimal single-page PDF showing ``lines`` in Helvetica."""
    operations = ["BT", "/F1 12 Tf", "72 720 Td", "14 TL"]
    for line in lines:
        escaped = line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        operations.append(f"({escaped}) Tj T*")
    operations.append("ET")
    stream = "\n".join(operations).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        (
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>"
        ),
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets: list[int] = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % xref_offset
    return bytes(out)


def keyword_vector(text: str) -> list[float]:
    """Tiny deterministic embedding: one dimension per keyword."""
    lowered = text.lower()
    return [
        1.0 if "hello" in lowered else 0.0,
        1.0 if "invoice" in lowered else 0.0,
        0.1,
    ]


class TrackedStream(httpx.AsyncByteStream):
    """Response body that yields ``chunks`` and records whether it was closed.

    With ``fail_after`` set, a read error is raised after that many chunks.
    """

    def __init__(self, chunks: list[bytes], fail_after: int | None = None) -> None:
        self.chunks = chunks
        self.fail_after = fail_after
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for index, chunk in enumerate(self.chunks):
            if index == self.fail_after:
                raise httpx.ReadError("connection reset by peer")
            yield chunk

    async def aclose(self) -> None:
        self.closed = True


class FakeUpstream:
    """Stand-in for the inference provider behind ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.embedding_status = 200
        self.chat_status = 200
        self.chat_body = SSE_BODY
        self.chat_stream: TrackedStream | None = None
        self.chat_headers = {"content-type": "text/event-stream"}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        payload = json.loads(request.content)

        if request.url.path.endswith("/embeddings"):
            if self.embedding_status != 200:
                return httpx.Response(self.embedding_status, json={"error": "unavailable"})
            return httpx.Response(
                200, json={"data": [{"embedding": keyword_vector(payload["input"])}]}
            )

        if request.url.path.endswith("/chat/completions"):
            if self.chat_status != 200:
                return httpx.Response(self.chat_status, text="model overloaded")
            if self.chat_stream is not None:
                return httpx.Response(
                    200,
                    stream=self.chat_stream,
                    headers=self.chat_headers,
                )
            return httpx.Response(
                200,
                content=self.chat_body,
                headers=self.chat_headers,
            )

        return httpx.Response(404)

    def requests_to(self, suffix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(suffix)]

    def chat_payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests_to("/chat/completions")]


def _settings(tmp_path: Path, api_key: str) -> Settings:
    return Settings(
        api_key=api_key,
        base_url="https://llm.test/v1",
        uploads_dir=tmp_path / "uploads",
        internal_base_url=None,
        embedding_item_delay=0.0,
        embedding_batch_delay=0.0,
        cors_origins=["*"],
    )


@pytest.fixture
def sample_pdf() -> bytes:
    """Bytes of a one-page PDF containing SAMPLE_TEXT."""
    return make_pdf(SAMPLE_TEXT)


@pytest.fixture
def pdf_factory() -> Callable[..., bytes]:
    return make_pdf


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings without an API key: fallback embeddings, chat disabled."""
    return _settings(tmp_path, api_key="")


@pytest.fixture
def settings_with_key(tmp_path: Path) -> Settings:
    """Settings with an API key pointing at the fake provider."""
    return _settings(tmp_path, api_key="sk-test-key")


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


def _build_app(settings: Settings, upstream: FakeUpstream) -> FastAPI:
    return create_app(
        settings,
        upstream_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
    )


@pytest.fixture
async def app(settings: Settings, upstream: FakeUpstream) -> AsyncGenerator[FastAPI]:
    application = _build_app(settings, upstream)
    yield application
    await close_services(application)


@pytest.fixture
async def app_with_key(
    settings_with_key: Settings, upstream: FakeUpstream
) -> AsyncGenerator[FastAPI]:
    application = _build_app(settings_with_key, upstream)
    yield application
    await close_services(application)


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing (no API key configured).

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def keyed_client(app_with_key: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for an app with an API key configured."""
    transport = ASGITransport(app=app_with_key)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
