"""
Pydantic models for the Ollama REST API.

Response models ignore fields they do not know so that newer servers keep
working; all models are frozen once built.
"""
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Schema(BaseModel):
    """Base for every request and response body."""
    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        populate_by_name=True,
        protected_namespaces=(),
    )

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict in the vendor's field names, unset fields dropped."""
        return self.model_dump(mode="json", exclude_none=True, by_alias=True)


# =============================================================================
# Shared pieces
# =============================================================================

class ModelDetails(Schema):
    """Descriptive metadata of a model."""
    parent_model: Optional[str] = None
    format: Optional[str] = None  # e.g. "gguf"
    family: Optional[str] = None
    families: Optional[list[str]] = None
    parameter_size: Optional[str] = None  # e.g. "8.0B"
    quantization_level: Optional[str] = None  # e.g. "Q4_0"


class Options(Schema):
    """
    Runtime parameter overrides.

    Only the common parameters are named; anything else the server accepts
    can be passed as an extra keyword and is forwarded unchanged.
    """
    model_config = ConfigDict(extra="allow", frozen=True)

    # Load time
    num_ctx: Optional[int] = None
    num_batch: Optional[int] = None
    num_gpu: Optional[int] = None
    num_thread: Optional[int] = None

    # Sampling
    seed: Optional[int] = None
    num_predict: Optional[int] = None
    temperature: Optional[float] = None
    top_k: Optional[int] = None
    top_p: Optional[float] = None
    min_p: Optional[float] = None
    repeat_last_n: Optional[int] = None
    repeat_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None
    stop: Optional[list[str]] = None


class Message(Schema):
    """A single message in a conversation."""
    role: Literal["system", "user", "assistant", "tool"]
    content: str = ""
    thinking: Optional[str] = None
    images: Optional[list[str]] = None  # base64 encoded


class ReplyMessage(Message):
    """A message written by the server; any role it reports is accepted."""
    role: str = "assistant"


class Statistics(Schema):
    """Timing and token counters reported with a completed response (nanoseconds)."""
    total_duration: Optional[int] = None
    load_duration: Optional[int] = None
    prompt_eval_count: Optional[int] = None
    prompt_eval_duration: Optional[int] = None
    eval_count: Optional[int] = None
    eval_duration: Optional[int] = None


# =============================================================================
# Model listing (/api/tags, /api/ps)
# =============================================================================

class ModelEntry(Schema):
    """One model available on the server."""
    name: str
    model: Optional[str] = None
    modified_at: Optional[str] = None  # RFC 3339, nanosecond precision
    size: int = 0  # bytes
    digest: str = ""
    details: ModelDetails = Field(default_factory=ModelDetails)


class ListResponse(Schema):
    """Response body for GET /api/tags."""
    models: list[ModelEntry] = Field(default_factory=list)


class RunningModel(ModelEntry):
    """One model currently loaded in memory."""
    expires_at: Optional[str] = None
    size_vram: Optional[int] = None
    context_length: Optional[int] = None


class ProcessResponse(Schema):
    """Response body for GET /api/ps."""
    models: list[RunningModel] = Field(default_factory=list)


# =============================================================================
# Generation (/api/generate, /api/chat)
# =============================================================================

Format = Union[Literal["", "json"], dict[str, Any]]
KeepAlive = Union[float, str]


class GenerateRequest(Schema):
    """Request body for POST /api/generate."""
    model: str = Field(min_length=1)
    prompt: Optional[str] = None
    suffix: Optional[str] = None
    system: Optional[str] = None
    template: Optional[str] = None
    context: Optional[list[int]] = None
    stream: bool = False
    raw: Optional[bool] = None
    format: Optional[Format] = None
    images: Optional[list[str]] = None
    options: Optional[Options] = None
    keep_alive: Optional[KeepAlive] = None


class GenerateResponse(Statistics):
    """Response body (or one streamed chunk) of POST /api/generate."""
    model: str = ""
    created_at: Optional[str] = None
    response: str = ""
    thinking: Optional[str] = None
    done: bool = False
    done_reason: Optional[str] = None
    context: Optional[list[int]] = None


class ChatRequest(Schema):
    """Request body for POST /api/chat."""
    model: str = Field(min_length=1)
    messages: list[Message] = Field(default_factory=list)
    stream: bool = False
    format: Optional[Format] = None
    tools: Optional[list[dict[str, Any]]] = None
    options: Optional[Options] = None
    keep_alive: Optional[KeepAlive] = None


class ChatResponse(Statistics):
    """Response body (or one streamed chunk) of POST /api/chat."""
    model: str = ""
    created_at: Optional[str] = None
    message: ReplyMessage = Field(default_factory=ReplyMessage)
    done: bool = False
    done_reason: Optional[str] = None


# =============================================================================
# Model management
# =============================================================================

class CreateRequest(Schema):
    """Request body for POST /api/create."""
    model: str = Field(min_length=1)
    from_: Optional[str] = Field(default=None, alias="from")
    modelfile: Optional[str] = None  # accepted by older servers
    template: Optional[str] = None
    system: Optional[str] = None
    license: Optional[Union[str, list[str]]] = None
    parameters: Optional[dict[str, Any]] = None
    messages: Optional[list[Message]] = None
    quantize: Optional[str] = None
    stream: bool = False


class ShowRequest(Schema):
    """Request body for POST /api/show."""
    model: str = Field(min_length=1)
    verbose: Optional[bool] = None


class ShowResponse(Schema):
    """Response body for POST /api/show."""
    modelfile: Optional[str] = None
    parameters: Optional[str] = None
    template: Optional[str] = None
    system: Optional[str] = None
    license: Optional[str] = None
    details: ModelDetails = Field(default_factory=ModelDetails)
    model_info: Optional[dict[str, Any]] = None
    capabilities: Optional[list[str]] = None
    modified_at: Optional[str] = None


class CopyRequest(Schema):
    """Request body for POST /api/copy."""
    source: str = Field(min_length=1)
    destination: str = Field(min_length=1)


class DeleteRequest(Schema):
    """Request body for DELETE /api/delete."""
    model: str = Field(min_length=1)


class PullRequest(Schema):
    """Request body for POST /api/pull."""
    model: str = Field(min_length=1)
    insecure: Optional[bool] = None
    stream: bool = False


class PushRequest(PullRequest):
    """Request body for POST /api/push."""


class ProgressResponse(Schema):
    """Status line of create, pull and push; streamed or final."""
    status: Optional[str] = None
    digest: Optional[str] = None
    total: Optional[int] = None
    completed: Optional[int] = None


class StatusResponse(Schema):
    """Result of endpoints that answer with an empty body."""
    status: str = "success"


# =============================================================================
# Embeddings
# =============================================================================

class EmbedRequest(Schema):
    """Request body for POST /api/embed."""
    model: str = Field(min_length=1)
    input: Union[str, list[str]]
    truncate: Optional[bool] = None
    dimensions: Optional[int] = None
    options: Optional[Options] = None
    keep_alive: Optional[KeepAlive] = None


class EmbedResponse(Schema):
    """Response body for POST /api/embed."""
    model: str = ""
    embeddings: list[list[float]] = Field(default_factory=list)
    total_duration: Optional[int] = None
    load_duration: Optional[int] = None
    prompt_eval_count: Optional[int] = None


# =============================================================================
# Server
# =============================================================================

class VersionResponse(Schema):
    """Response body for GET /api/version."""
    version: str
