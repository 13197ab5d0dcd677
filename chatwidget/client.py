"""ChatWidgetClient -- service layer wrapping the chat and attachment endpoints.

Every public method is a coroutine that builds one request, awaits the
round trip, and returns a :class:`~chatwidget.models.ChatResponse` envelope.
HTTP calls use the ``requests`` library; blocking I/O is offloaded via
:func:`asyncio.to_thread` (see :func:`make_request`) so the event loop is
never blocked.

Errors never escape a public method.  Transport failures, non-2xx statuses
and unparseable bodies are all turned into ``ChatResponse(success=False,
error=...)`` after being logged and reported to the observability hook.
"""

from __future__ import annotations

import asyncio
import base64
import mimetypes
import os
from typing import Any, BinaryIO, Dict, Optional, Sequence, Tuple, Union
from urllib.parse import quote

import requests

from chatwidget.config import ATTACHMENTS_URL, REQUEST_TIMEOUT
from chatwidget.core.events import EventEmitter, EventHook
from chatwidget.core.logger import ChatWidgetLogger
from chatwidget.exceptions import APIException, ResponseParseError
from chatwidget.models import (
    DEFAULT_MIME_TYPE,
    Attachment,
    ChatRequest,
    ChatResponse,
    ClientConfig,
    StoredAttachment,
)

logger = ChatWidgetLogger.get_logger()

FileSource = Union[BinaryIO, str, "os.PathLike[str]"]

_DEFAULT_UPLOAD_NAME = "upload.bin"


async def make_request(method: str, url: str, **kwargs: object) -> requests.Response:
    """Run a :mod:`requests` call inside a thread to keep the event loop free.

    *method* is the HTTP verb (``"get"``, ``"post"``, ``"delete"``, …).
    """
    func = getattr(requests, method.lower())
    return await asyncio.to_thread(func, url, **kwargs)


def _error_body(response: requests.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _read_upload(file: FileSource) -> Tuple[str, bytes]:
    """Return ``(filename, content)`` for a path or an open binary file."""
    if isinstance(file, (str, os.PathLike)):
        with open(file, "rb") as fh:
            return os.path.basename(os.fspath(file)), fh.read()

    content = file.read()
    if not isinstance(content, bytes):
        raise TypeError("upload_file expects a file opened in binary mode")
    name = getattr(file, "name", None)
    filename = os.path.basename(name) if isinstance(name, str) else ""
    return filename or _DEFAULT_UPLOAD_NAME, content


def _segment(value: str) -> str:
    """Percent-encode a single URL path segment."""
    return quote(value, safe="")


class ChatWidgetClient:
    """Client facade for one chatbot session.

    Holds the immutable :class:`~chatwidget.models.ClientConfig` and exposes
    the chat, upload, list, and delete operations plus the attachment
    metadata and download lookups.

    Args:
        api_base_url: Base address of the chat API (``/anonymous/chat`` and
            ``/attachments/...`` are resolved against it).
        chatbot_id: Identifier of the bot this session talks to.
        session_id: Correlation token; generated when omitted.
        attachments_url: Base address of the attachment service used for
            upload, metadata, and download.  Defaults to
            :data:`chatwidget.config.ATTACHMENTS_URL`.
        timeout: Per-request timeout in seconds handed to ``requests``.
        on_event: Optional observability hook receiving
            :class:`~chatwidget.core.events.ClientEvent` objects.
    """

    def __init__(
        self,
        api_base_url: str,
        chatbot_id: str,
        session_id: Optional[str] = None,
        *,
        attachments_url: Optional[str] = None,
        timeout: Optional[float] = None,
        on_event: Optional[EventHook] = None,
    ) -> None:
        self._config = ClientConfig(
            api_base_url=api_base_url,
            chatbot_id=chatbot_id,
            session_id=session_id,
        )
        self._attachments_url = (attachments_url or ATTACHMENTS_URL).rstrip("/")
        self._timeout = REQUEST_TIMEOUT if timeout is None else timeout
        self._events = EventEmitter(on_event)

        logger.info(
            "Chat widget client initialised",
            extra={
                "chatbot_id": self._config.chatbot_id,
                "session_id": self._config.session_id,
                "api_base_url": self._config.api_base_url,
            },
        )
        self._events.emit(
            "client.initialized",
            chatbot_id=self._config.chatbot_id,
            session_id=self._config.session_id,
            api_base_url=self._config.api_base_url,
        )

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> "ChatWidgetClient":
        """Build a client from an existing :class:`ClientConfig`."""
        return cls(config.api_base_url, config.chatbot_id, config.session_id, **kwargs)

    # ------------------------------------------------------------------
    #  Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        return self._config

    def get_session_id(self) -> str:
        return self._config.session_id

    def get_chatbot_id(self) -> str:
        return self._config.chatbot_id

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    async def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Perform one HTTP call and return the response if it is 2xx.

        Raises:
            APIException: If the response status code is not 2xx.
            requests.RequestException: On transport-level failures.
        """
        response = await make_request(method, url, timeout=self._timeout, **kwargs)
        if not response.ok:
            raise APIException(response.status_code, _error_body(response), response.reason)
        return response

    @staticmethod
    def _json(response: requests.Response) -> Any:
        """Decode a response body, raising :class:`ResponseParseError` if it is not JSON."""
        try:
            return response.json()
        except ValueError as exc:
            raise ResponseParseError(f"Response body is not valid JSON: {exc}") from exc

    def _started(self, operation: str, **fields: Any) -> None:
        logger.debug(f"{operation} started", extra={"operation": operation, "chatbot_id": self._config.chatbot_id, **fields})
        self._events.emit(f"{operation}.started", operation, **fields)

    def _succeeded(self, operation: str, envelope: ChatResponse, **fields: Any) -> ChatResponse:
        logger.info(f"{operation} succeeded", extra={"operation": operation, "chatbot_id": self._config.chatbot_id, **fields})
        self._events.emit(f"{operation}.succeeded", operation, **fields)
        return envelope

    def _failed(self, operation: str, exc: BaseException) -> ChatResponse:
        extra: Dict[str, Any] = {
            "operation": operation,
            "chatbot_id": self._config.chatbot_id,
            "error_type": type(exc).__name__,
            "error": str(exc),
        }
        if isinstance(exc, APIException):
            extra["status_code"] = exc.status_code
        logger.error(f"{operation} failed", extra=extra)
        self._events.emit(f"{operation}.failed", operation, error=str(exc), error_type=type(exc).__name__)
        return ChatResponse.failure(exc)

    # ------------------------------------------------------------------
    #  Chat
    # ------------------------------------------------------------------

    async def send_message(
        self,
        message: str,
        attachments: Optional[Sequence[Union[Attachment, Dict[str, Any]]]] = None,
    ) -> ChatResponse:
        """Post *message* with inline *attachments* to ``/anonymous/chat``.

        The chat service already answers with the envelope shape, so a 2xx
        body is returned as-is (unknown keys included).
        """
        operation = "send_message"
        self._started(operation)
        try:
            body = ChatRequest(
                message=message,
                chatbot_id=self._config.chatbot_id,
                session_id=self._config.session_id,
                attachments=list(attachments or []),
            )
            logger.debug(
                "Sending chat message",
                extra={
                    "operation": operation,
                    "message_length": len(body.message),
                    "attachment_count": len(body.attachments),
                },
            )
            response = await self._request(
                "post",
                f"{self._config.api_base_url}/anonymous/chat",
                json=body.model_dump(by_alias=True),
            )
            data = self._json(response)
            if not isinstance(data, dict):
                raise ResponseParseError(f"Expected a JSON object from chat endpoint, got {type(data).__name__}")
            envelope = ChatResponse.model_validate(data)
        except Exception as exc:
            return self._failed(operation, exc)

        if not envelope.success:
            logger.warning("Chat service reported failure", extra={"operation": operation, "error": envelope.error})
        return self._succeeded(operation, envelope, remote_success=envelope.success)

    # ------------------------------------------------------------------
    #  Attachments
    # ------------------------------------------------------------------

    async def upload_file(self, file: FileSource) -> ChatResponse:
        """Upload *file* as multipart form data to the attachment service.

        *file* may be a path or a file object opened in binary mode; paths
        are opened and closed within this call.  The raw bytes go on the
        wire (no base64).  On success ``result`` holds the server-assigned
        ``fileId`` and ``vector_attachments`` the raw upload response.
        """
        operation = "upload_file"
        self._started(operation)
        try:
            filename, content = await asyncio.to_thread(_read_upload, file)
            mime_type = mimetypes.guess_type(filename)[0] or DEFAULT_MIME_TYPE
            logger.debug(
                "Uploading file",
                extra={"operation": operation, "file_name": filename, "file_size": len(content), "mime_type": mime_type},
            )
            response = await self._request(
                "post",
                f"{self._attachments_url}/upload",
                files={"file": (filename, content, mime_type)},
                data={"chatbotId": self._config.chatbot_id, "sessionId": self._config.session_id},
            )
            data = self._json(response)
            stored = StoredAttachment.model_validate(data)
        except Exception as exc:
            return self._failed(operation, exc)

        envelope = ChatResponse.ok(result=stored.file_id, vector_attachments=[data])
        return self._succeeded(operation, envelope, file_id=stored.file_id, file_name=filename)

    async def list_attachments(self) -> ChatResponse:
        """List the attachments stored for this chatbot."""
        operation = "list_attachments"
        self._started(operation)
        try:
            response = await self._request(
                "get",
                f"{self._config.api_base_url}/attachments/{_segment(self._config.chatbot_id)}",
            )
            data = self._json(response)
            if not isinstance(data, list):
                raise ResponseParseError(f"Expected a JSON array of attachments, got {type(data).__name__}")
        except Exception as exc:
            return self._failed(operation, exc)

        return self._succeeded(operation, ChatResponse.ok(vector_attachments=data), count=len(data))

    async def delete_attachment(self, vector_id: str) -> ChatResponse:
        """Delete one attachment; the response body is ignored."""
        operation = "delete_attachment"
        self._started(operation, vector_id=vector_id)
        try:
            await self._request(
                "delete",
                f"{self._config.api_base_url}/attachments/{_segment(self._config.chatbot_id)}/{_segment(vector_id)}",
            )
        except Exception as exc:
            return self._failed(operation, exc)

        return self._succeeded(operation, ChatResponse.ok(), vector_id=vector_id)

    async def get_attachment_metadata(self, file_id: str) -> ChatResponse:
        """Fetch the stored metadata of an uploaded file."""
        operation = "get_attachment_metadata"
        self._started(operation, file_id=file_id)
        try:
            response = await self._request(
                "get",
                f"{self._attachments_url}/metadata/{_segment(file_id)}",
                params={"chatbotId": self._config.chatbot_id},
            )
            data = self._json(response)
            stored = StoredAttachment.model_validate(data)
        except Exception as exc:
            return self._failed(operation, exc)

        envelope = ChatResponse.ok(result=stored.file_id, vector_attachments=[data])
        return self._succeeded(operation, envelope, file_id=stored.file_id)

    async def download_attachment(self, file_id: str) -> ChatResponse:
        """Download an uploaded file; ``result`` carries its bytes as base64."""
        operation = "download_attachment"
        self._started(operation, file_id=file_id)
        try:
            response = await self._request(
                "get",
                f"{self._attachments_url}/download/{_segment(file_id)}",
                params={"chatbotId": self._config.chatbot_id},
            )
            content = response.content
            encoded = base64.b64encode(content).decode("ascii")
        except Exception as exc:
            return self._failed(operation, exc)

        return self._succeeded(operation, ChatResponse.ok(result=encoded), file_id=file_id, file_size=len(content))
