"""
Streamed responses.

Ollama streams newline-delimited JSON. A stream here is a single-pass
iterator of decoded chunks that owns the underlying HTTP response: leaving
a ``with`` block, calling ``close()`` or running to the end releases it,
whether or not the server has finished sending.
"""
from typing import TYPE_CHECKING, AsyncGenerator, Generator, Generic, TypeVar

import httpx

from .errors import TransportError

if TYPE_CHECKING:
    from .operations import Operation


T = TypeVar("T")


def _read_failed(operation: "Operation", error: httpx.HTTPError) -> TransportError:
    return TransportError(f"{operation.name} stream interrupted: {error}", cause=error)


# The chunk generators must not reference their stream: a stream dropped
# mid-iteration then takes its generator with it and the response is closed
# right away instead of whenever the garbage collector finds the cycle.

def _iter_chunks(operation: "Operation", response: httpx.Response) -> Generator:
    try:
        for line in response.iter_lines():
            if line.strip():
                yield operation.decode_chunk(line)
    except httpx.HTTPError as e:
        raise _read_failed(operation, e) from e
    finally:
        response.close()


async def _aiter_chunks(operation: "Operation", response: httpx.Response) -> AsyncGenerator:
    try:
        async for line in response.aiter_lines():
            if line.strip():
                yield operation.decode_chunk(line)
    except httpx.HTTPError as e:
        raise _read_failed(operation, e) from e
    finally:
        await response.aclose()


class ChunkStream(Generic[T]):
    """Blocking stream of decoded chunks."""

    def __init__(self, operation: "Operation", response: httpx.Response):
        self._operation = operation
        self._response = response
        self._chunks: Generator[T, None, None] = _iter_chunks(operation, response)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> "ChunkStream[T]":
        return self

    def __next__(self) -> T:
        if self._closed:
            raise StopIteration
        try:
            return next(self._chunks)
        except BaseException:
            self.close()
            raise

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._chunks.close()
        # The generator body never ran if nothing was consumed
        self._response.close()

    def __enter__(self) -> "ChunkStream[T]":
        return self

    def __exit__(self, *exc_info):
        self.close()


class AsyncChunkStream(Generic[T]):
    """Suspending stream of decoded chunks."""

    def __init__(self, operation: "Operation", response: httpx.Response):
        self._operation = operation
        self._response = response
        self._chunks: AsyncGenerator[T, None] = _aiter_chunks(operation, response)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "AsyncChunkStream[T]":
        return self

    async def __anext__(self) -> T:
        if self._closed:
            raise StopAsyncIteration
        try:
            return await self._chunks.__anext__()
        except BaseException:
            await self.aclose()
            raise

    async def aclose(self):
        if self._closed:
            return
        self._closed = True
        await self._chunks.aclose()
        await self._response.aclose()

    async def __aenter__(self) -> "AsyncChunkStream[T]":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
