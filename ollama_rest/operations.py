"""
One builder per Ollama endpoint.

A builder validates its arguments through the request model and returns an
``Operation``: what to send and how to decode what comes back. Operations
do no I/O themselves, so the blocking and the suspending client share them.
"""
import json
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Union

from pydantic import BaseModel, ValidationError

from .errors import DecodeError, VendorError
from .models import (
    ChatRequest,
    ChatResponse,
    CopyRequest,
    CreateRequest,
    DeleteRequest,
    EmbedRequest,
    EmbedResponse,
    GenerateRequest,
    GenerateResponse,
    ListResponse,
    Message,
    Options,
    ProcessResponse,
    ProgressResponse,
    PullRequest,
    PushRequest,
    ShowRequest,
    ShowResponse,
    StatusResponse,
    VersionResponse,
)
from .transport import RawResponse

# Vendor endpoints
TAGS_ENDPOINT = "/api/tags"
GENERATE_ENDPOINT = "/api/generate"
CHAT_ENDPOINT = "/api/chat"
CREATE_ENDPOINT = "/api/create"
SHOW_ENDPOINT = "/api/show"
COPY_ENDPOINT = "/api/copy"
DELETE_ENDPOINT = "/api/delete"
PULL_ENDPOINT = "/api/pull"
PUSH_ENDPOINT = "/api/push"
EMBED_ENDPOINT = "/api/embed"
PS_ENDPOINT = "/api/ps"
VERSION_ENDPOINT = "/api/version"


def vendor_error(raw: RawResponse) -> VendorError:
    """Build the error for a failed status, keeping the server's message verbatim."""
    message = None
    try:
        data = json.loads(raw.body)
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error") is not None:
        message = str(data["error"])
    if message is None:
        message = raw.text.strip() or f"HTTP {raw.status_code}"
    return VendorError(message, status_code=raw.status_code)


def _raise_for_error(data: Any, status_code: Optional[int]):
    if isinstance(data, dict) and data.get("error") is not None:
        raise VendorError(str(data["error"]), status_code=status_code)


@dataclass(frozen=True)
class Operation:
    """A request to one endpoint, plus how to decode its answer."""
    name: str
    method: str
    path: str
    response_model: Optional[type[BaseModel]]
    payload: Optional[dict[str, Any]] = None
    stream: bool = False
    unwrap: Optional[Callable[[Any], Any]] = None

    def decode(self, raw: RawResponse) -> Any:
        """Decode a complete response body."""
        if raw.is_error:
            raise vendor_error(raw)
        if self.response_model is None:
            self._check_status_body(raw)
            return StatusResponse(status="success")
        value = self._decode_body(raw.body, raw.status_code)
        return self.unwrap(value) if self.unwrap else value

    def decode_chunk(self, line: Union[str, bytes]) -> Any:
        """Decode one line of a newline-delimited JSON stream."""
        return self._decode_body(line, None)

    def _check_status_body(self, raw: RawResponse):
        # Copy and delete answer with an empty body; anything else may still
        # carry an error message.
        if not raw.body.strip():
            return
        try:
            data = json.loads(raw.body)
        except ValueError:
            return
        _raise_for_error(data, raw.status_code)

    def _decode_body(self, body: Union[str, bytes], status_code: Optional[int]) -> Any:
        try:
            data = json.loads(body)
        except ValueError as e:
            raise DecodeError(self.name, f"invalid JSON: {e}") from e

        _raise_for_error(data, status_code)

        try:
            return self.response_model.model_validate(data)
        except ValidationError as e:
            raise DecodeError(self.name, str(e)) from e


def _options(options: Union[Options, dict[str, Any], None]) -> Optional[Options]:
    if options is None or isinstance(options, Options):
        return options
    return Options(**options)


def _messages(messages: Sequence[Union[Message, dict[str, Any]]]) -> list[Message]:
    return [m if isinstance(m, Message) else Message.model_validate(m) for m in messages]


# =============================================================================
# Listing
# =============================================================================

def list_models() -> Operation:
    """GET /api/tags: models available locally."""
    return Operation(
        name="list",
        method="GET",
        path=TAGS_ENDPOINT,
        response_model=ListResponse,
        unwrap=lambda response: response.models,
    )


def list_running() -> Operation:
    """GET /api/ps: models currently loaded in memory."""
    return Operation(
        name="ps",
        method="GET",
        path=PS_ENDPOINT,
        response_model=ProcessResponse,
        unwrap=lambda response: response.models,
    )


def version() -> Operation:
    """GET /api/version: server version."""
    return Operation(
        name="version",
        method="GET",
        path=VERSION_ENDPOINT,
        response_model=VersionResponse,
    )


# =============================================================================
# Generation
# =============================================================================

def generate(
    model: str,
    prompt: Optional[str] = None,
    *,
    suffix: Optional[str] = None,
    system: Optional[str] = None,
    template: Optional[str] = None,
    context: Optional[Sequence[int]] = None,
    stream: bool = False,
    raw: Optional[bool] = None,
    format: Optional[Union[str, dict[str, Any]]] = None,
    images: Optional[Sequence[str]] = None,
    options: Union[Options, dict[str, Any], None] = None,
    keep_alive: Optional[Union[float, str]] = None,
) -> Operation:
    """POST /api/generate: complete a prompt."""
    request = GenerateRequest(
        model=model,
        prompt=prompt,
        suffix=suffix,
        system=system,
        template=template,
        context=list(context) if context is not None else None,
        stream=stream,
        raw=raw,
        format=format,
        images=list(images) if images is not None else None,
        options=_options(options),
        keep_alive=keep_alive,
    )
    return Operation(
        name="generate",
        method="POST",
        path=GENERATE_ENDPOINT,
        response_model=GenerateResponse,
        payload=request.to_payload(),
        stream=stream,
    )


def chat(
    model: str,
    messages: Sequence[Union[Message, dict[str, Any]]] = (),
    *,
    stream: bool = False,
    format: Optional[Union[str, dict[str, Any]]] = None,
    tools: Optional[Sequence[dict[str, Any]]] = None,
    options: Union[Options, dict[str, Any], None] = None,
    keep_alive: Optional[Union[float, str]] = None,
) -> Operation:
    """POST /api/chat: answer the next turn of a conversation.

    The whole conversation is sent on every call; nothing is kept between
    calls.
    """
    request = ChatRequest(
        model=model,
        messages=_messages(messages),
        stream=stream,
        format=format,
        tools=list(tools) if tools is not None else None,
        options=_options(options),
        keep_alive=keep_alive,
    )
    return Operation(
        name="chat",
        method="POST",
        path=CHAT_ENDPOINT,
        response_model=ChatResponse,
        payload=request.to_payload(),
        stream=stream,
    )


def embed(
    model: str,
    input: Union[str, Sequence[str]],
    *,
    truncate: Optional[bool] = None,
    dimensions: Optional[int] = None,
    options: Union[Options, dict[str, Any], None] = None,
    keep_alive: Optional[Union[float, str]] = None,
) -> Operation:
    """POST /api/embed: embedding vectors for one or more inputs."""
    request = EmbedRequest(
        model=model,
        input=input if isinstance(input, str) else list(input),
        truncate=truncate,
        dimensions=dimensions,
        options=_options(options),
        keep_alive=keep_alive,
    )
    return Operation(
        name="embed",
        method="POST",
        path=EMBED_ENDPOINT,
        response_model=EmbedResponse,
        payload=request.to_payload(),
    )


# =============================================================================
# Model management
# =============================================================================

def create_model(
    model: str,
    *,
    from_: Optional[str] = None,
    modelfile: Optional[str] = None,
    template: Optional[str] = None,
    system: Optional[str] = None,
    license: Optional[Union[str, Sequence[str]]] = None,
    parameters: Optional[dict[str, Any]] = None,
    messages: Optional[Sequence[Union[Message, dict[str, Any]]]] = None,
    quantize: Optional[str] = None,
    stream: bool = False,
) -> Operation:
    """POST /api/create: build a new model from a base model or a Modelfile."""
    request = CreateRequest(
        model=model,
        from_=from_,
        modelfile=modelfile,
        template=template,
        system=system,
        license=license if license is None or isinstance(license, str) else list(license),
        parameters=parameters,
        messages=_messages(messages) if messages is not None else None,
        quantize=quantize,
        stream=stream,
    )
    return Operation(
        name="create",
        method="POST",
        path=CREATE_ENDPOINT,
        response_model=ProgressResponse,
        payload=request.to_payload(),
        stream=stream,
    )


def show_model(model: str, verbose: Optional[bool] = None) -> Operation:
    """POST /api/show: Modelfile, parameters, template and details of a model."""
    request = ShowRequest(model=model, verbose=verbose)
    return Operation(
        name="show",
        method="POST",
        path=SHOW_ENDPOINT,
        response_model=ShowResponse,
        payload=request.to_payload(),
    )


def copy_model(source: str, destination: str) -> Operation:
    """POST /api/copy: duplicate a model under a new name."""
    request = CopyRequest(source=source, destination=destination)
    return Operation(
        name="copy",
        method="POST",
        path=COPY_ENDPOINT,
        response_model=None,
        payload=request.to_payload(),
    )


def delete_model(model: str) -> Operation:
    """DELETE /api/delete: remove a model and its unused data."""
    request = DeleteRequest(model=model)
    return Operation(
        name="delete",
        method="DELETE",
        path=DELETE_ENDPOINT,
        response_model=None,
        payload=request.to_payload(),
    )


def pull_model(model: str, *, insecure: Optional[bool] = None, stream: bool = False) -> Operation:
    """POST /api/pull: download a model from the registry."""
    request = PullRequest(model=model, insecure=insecure, stream=stream)
    return Operation(
        name="pull",
        method="POST",
        path=PULL_ENDPOINT,
        response_model=ProgressResponse,
        payload=request.to_payload(),
        stream=stream,
    )


def push_model(model: str, *, insecure: Optional[bool] = None, stream: bool = False) -> Operation:
    """POST /api/push: upload a model to the registry."""
    request = PushRequest(model=model, insecure=insecure, stream=stream)
    return Operation(
        name="push",
        method="POST",
        path=PUSH_ENDPOINT,
        response_model=ProgressResponse,
        payload=request.to_payload(),
        stream=stream,
    )
