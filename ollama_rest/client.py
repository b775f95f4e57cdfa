"""
Ollama client.

One class serves both execution modes. Every endpoint method builds an
``Operation`` and hands it to the runner chosen at construction:

- blocking: the method returns the decoded value;
- suspending: the method returns a coroutine that resolves to the same
  value.

Streamed calls (``stream=True``) return a ``ChunkStream`` or, once
awaited, an ``AsyncChunkStream``.
"""
import logging
from typing import Any, Optional, Sequence, Union

import httpx

from . import operations
from .config import ClientSettings, ExecutionMode, get_settings
from .log import ensure_logging
from .models import Message, ModelEntry, Options
from .operations import Operation, vendor_error
from .streams import AsyncChunkStream, ChunkStream
from .transport import AsyncTransport, SyncTransport

logger = logging.getLogger(__name__)

# Distinguishes "not given" from timeout=None, which disables the timeout
_UNSET: Any = object()


class _BlockingRunner:
    """Runs operations on the calling thread."""

    def __init__(self, transport: SyncTransport):
        self.transport = transport

    def run(self, operation: Operation):
        if operation.stream:
            response = self.transport.open_stream(operation.method, operation.path, operation.payload)
            if response.is_error:
                raise vendor_error(self.transport.read_error(response))
            return ChunkStream(operation, response)

        raw = self.transport.execute(operation.method, operation.path, operation.payload)
        return operation.decode(raw)

    def close(self):
        self.transport.close()


class _SuspendingRunner:
    """Runs operations as coroutines; one await around the network call."""

    def __init__(self, transport: AsyncTransport):
        self.transport = transport

    async def run(self, operation: Operation):
        if operation.stream:
            response = await self.transport.open_stream(operation.method, operation.path, operation.payload)
            if response.is_error:
                raise vendor_error(await self.transport.read_error(response))
            return AsyncChunkStream(operation, response)

        raw = await self.transport.execute(operation.method, operation.path, operation.payload)
        return operation.decode(raw)

    async def close(self):
        await self.transport.aclose()


class Client:
    """
    Client for the Ollama REST API.

    Arguments left as ``None`` come from ``ClientSettings`` (``OLLAMA_*``
    environment variables, then defaults). ``timeout`` is the exception:
    leave it out to use the configured value, pass ``None`` to wait forever.
    The configuration cannot be changed after construction; build a new
    client instead.

    Example:
        ```python
        client = Client("http://localhost:11434")
        for entry in client.list():
            print(entry.name, entry.size)

        aclient = Client(execution_mode="suspending")
        reply = await aclient.chat("llama3", [{"role": "user", "content": "hi"}])
        ```
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = _UNSET,
        execution_mode: Union[ExecutionMode, str, None] = None,
        enable_logging: Optional[bool] = None,
        settings: Optional[ClientSettings] = None,
        http_transport: Union[httpx.BaseTransport, httpx.AsyncBaseTransport, None] = None,
    ):
        overrides = {
            "host": base_url,
            "execution_mode": execution_mode,
            "enable_logging": enable_logging,
        }
        overrides = {key: value for key, value in overrides.items() if value is not None}
        if timeout is not _UNSET:
            overrides["timeout"] = timeout

        if settings is None:
            settings = ClientSettings(**overrides) if overrides else get_settings()
        elif overrides:
            settings = ClientSettings(**{**settings.model_dump(), **overrides})

        self._settings = settings

        if settings.enable_logging:
            ensure_logging(settings.log_level, settings.log_path)
            logger.info("Creating new API client with base URL: %s", settings.base_url)

        if settings.execution_mode == ExecutionMode.SUSPENDING:
            self._runner = _SuspendingRunner(
                AsyncTransport(settings.base_url, settings.timeout, settings.enable_logging, http_transport)
            )
        else:
            self._runner = _BlockingRunner(
                SyncTransport(settings.base_url, settings.timeout, settings.enable_logging, http_transport)
            )

    # ------------------------------------------------------------------
    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def base_url(self) -> str:
        return self._settings.base_url

    @property
    def execution_mode(self) -> ExecutionMode:
        return self._settings.execution_mode

    @property
    def is_async(self) -> bool:
        return self._settings.execution_mode == ExecutionMode.SUSPENDING

    def close(self):
        """Release pooled connections (a coroutine in suspending mode)."""
        return self._runner.close()

    async def aclose(self):
        if not self.is_async:
            raise TypeError("aclose() is only available in suspending mode; use close()")
        await self._runner.close()

    def __enter__(self) -> "Client":
        if self.is_async:
            raise TypeError("use 'async with' for a client in suspending mode")
        return self

    def __exit__(self, *exc_info):
        self._runner.close()

    async def __aenter__(self) -> "Client":
        if not self.is_async:
            raise TypeError("use 'with' for a client in blocking mode")
        return self

    async def __aexit__(self, *exc_info):
        await self._runner.close()

    def _run(self, operation: Operation):
        return self._runner.run(operation)

    # ------------------------------------------------------------------
    def list(self):
        """List models available on the server as ``ModelEntry`` values."""
        return self._run(operations.list_models())

    def ps(self):
        """List models currently loaded in memory as ``RunningModel`` values."""
        return self._run(operations.list_running())

    def version(self):
        return self._run(operations.version())

    # ------------------------------------------------------------------
    def generate(
        self,
        model: str,
        prompt: Optional[str] = None,
        *,
        stream: bool = False,
        options: Union[Options, dict[str, Any], None] = None,
        **kwargs,
    ):
        """
        Complete a prompt.

        Args:
            model: Model name, e.g. "llama3:8b"
            prompt: Prompt text
            stream: Return a stream of partial ``GenerateResponse`` chunks
            options: Parameter overrides such as temperature
            **kwargs: suffix, system, template, context, raw, format,
                images, keep_alive

        Returns:
            ``GenerateResponse``, or a chunk stream when ``stream`` is set
        """
        return self._run(operations.generate(model, prompt, stream=stream, options=options, **kwargs))

    def chat(
        self,
        model: str,
        messages: Sequence[Union[Message, dict[str, Any]]] = (),
        *,
        stream: bool = False,
        options: Union[Options, dict[str, Any], None] = None,
        **kwargs,
    ):
        """
        Answer the next turn of a conversation.

        Args:
            model: Model name
            messages: Conversation so far, oldest first
            stream: Return a stream of partial ``ChatResponse`` chunks
            options: Parameter overrides such as temperature
            **kwargs: format, tools, keep_alive

        Returns:
            ``ChatResponse``, or a chunk stream when ``stream`` is set
        """
        return self._run(operations.chat(model, messages, stream=stream, options=options, **kwargs))

    def embed(self, model: str, input: Union[str, Sequence[str]], **kwargs):
        """Embedding vectors for one or more inputs (``EmbedResponse``)."""
        return self._run(operations.embed(model, input, **kwargs))

    # ------------------------------------------------------------------
    def create(self, model: str, *, stream: bool = False, **kwargs):
        """Create a model; ``from_``, ``modelfile``, ``system`` and friends go in kwargs."""
        return self._run(operations.create_model(model, stream=stream, **kwargs))

    def show(self, model: Union[str, ModelEntry], verbose: Optional[bool] = None):
        """
        Show details of a model.

        Accepts a model name or an entry returned by ``list()``.
        """
        name = (model.model or model.name) if isinstance(model, ModelEntry) else model
        return self._run(operations.show_model(name, verbose))

    def copy(self, source: str, destination: str):
        return self._run(operations.copy_model(source, destination))

    def delete(self, model: str):
        return self._run(operations.delete_model(model))

    def pull(self, model: str, *, insecure: Optional[bool] = None, stream: bool = False):
        """Download a model; progress chunks when ``stream`` is set."""
        return self._run(operations.pull_model(model, insecure=insecure, stream=stream))

    def push(self, model: str, *, insecure: Optional[bool] = None, stream: bool = False):
        """Upload a model; progress chunks when ``stream`` is set."""
        return self._run(operations.push_model(model, insecure=insecure, stream=stream))
