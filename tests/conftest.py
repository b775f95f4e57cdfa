import asyncio
import json
import logging
import os

import httpx
import pytest
import pytest_asyncio

from ollama_rest import Client
from ollama_rest.config import get_settings
from ollama_rest.log import LOGGER_NAME

BASE_URL = "http://localhost:11434"

TAGS_BODY = {
    "models": [
        {
            "name": "llama3:8b",
            "size": 4000000000,
            "digest": "abc123",
            "modified_at": "2024-01-01T00:00:00Z",
            "details": {"format": "gguf", "family": "llama"},
        }
    ]
}


class TrackingStream(httpx.SyncByteStream, httpx.AsyncByteStream):
    """Response body that records whether it was closed.

    With ``stall`` set, the async body hangs after its last chunk, like a
    server still generating.
    """

    def __init__(self, chunks, stall=False):
        self.chunks = chunks
        self.stall = stall
        self.closed = False
        self.consumed = 0

    def __iter__(self):
        for chunk in self.chunks:
            self.consumed += 1
            yield chunk

    async def __aiter__(self):
        for chunk in self.chunks:
            self.consumed += 1
            yield chunk
        if self.stall:
            await asyncio.Event().wait()

    def close(self):
        self.closed = True

    async def aclose(self):
        self.closed = True


def ndjson(*objects):
    return [(json.dumps(obj) + "\n").encode() for obj in objects]


class FakeServer:
    """Route table served through ``httpx.MockTransport``."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, status=200, json_body=None, content=None):
        self.routes[(method, path)] = (status, json_body, content, None)

    def add_stream(self, method, path, objects, status=200, stall=False):
        stream = TrackingStream(ndjson(*objects), stall=stall)
        self.routes[(method, path)] = (status, None, None, stream)
        return stream

    def payload(self, index=-1):
        return json.loads(self.requests[index].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, text="404 page not found")
        status, json_body, content, stream = self.routes[key]
        if stream is not None:
            return httpx.Response(status, stream=stream)
        if json_body is not None:
            return httpx.Response(status, json=json_body)
        return httpx.Response(status, content=content or b"")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    for key in list(os.environ):
        if key.upper().startswith("OLLAMA_") or key.upper().endswith("_PROXY"):
            monkeypatch.delenv(key)
    # Keep stray .env files out of the settings
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    package_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def client(server):
    c = Client(BASE_URL, http_transport=server.transport)
    yield c
    c.close()


@pytest_asyncio.fixture
async def async_client(server):
    c = Client(BASE_URL, execution_mode="suspending", http_transport=server.transport)
    yield c
    await c.aclose()
