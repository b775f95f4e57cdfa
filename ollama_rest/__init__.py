"""
ollama-rest - typed client for the Ollama REST API.

This package provides:
- Client facade with blocking and suspending (asyncio) execution modes
- Pydantic models for every request and response body
- A single error hierarchy for transport, decode and server errors
- Settings read from OLLAMA_* environment variables

Example:
    ```python
    from ollama_rest import Client

    client = Client("http://localhost:11434")
    models = client.list()
    ```
"""

from .client import Client
from .config import ClientSettings, ExecutionMode, get_settings
from .errors import (
    DecodeError,
    ErrorKind,
    OllamaError,
    RequestCancelledError,
    TransportError,
    VendorError,
)
from .log import setup_logging
from .models import (
    ChatResponse,
    EmbedResponse,
    GenerateResponse,
    Message,
    ModelDetails,
    ModelEntry,
    Options,
    ProgressResponse,
    ReplyMessage,
    RunningModel,
    ShowResponse,
    StatusResponse,
    VersionResponse,
)
from .streams import AsyncChunkStream, ChunkStream

__version__ = "0.1.0"

__all__ = [
    # Facade
    "Client",
    # Configuration
    "ClientSettings",
    "ExecutionMode",
    "get_settings",
    "setup_logging",
    # Errors
    "OllamaError",
    "ErrorKind",
    "TransportError",
    "RequestCancelledError",
    "DecodeError",
    "VendorError",
    # Models
    "ModelEntry",
    "ModelDetails",
    "RunningModel",
    "Message",
    "ReplyMessage",
    "Options",
    "GenerateResponse",
    "ChatResponse",
    "EmbedResponse",
    "ShowResponse",
    "ProgressResponse",
    "StatusResponse",
    "VersionResponse",
    # Streams
    "ChunkStream",
    "AsyncChunkStream",
]
