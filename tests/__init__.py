"""Test package for the Chat Playground.

Unit tests cover isolated pipeline logic and integration tests drive the
HTTP API end to end.

Structure:
    - unit/: Individual function and class tests
    - integration/: Endpoint workflows through the ASGI app
    - conftest.py: Shared fixtures, generated PDFs and a fake inference provider

No network access is needed: the inference provider is replaced with an
``httpx.MockTransport``. Leverages pytest with pytest-check for soft assertions.
"""
