"""Pydantic data models for the chat widget API.

Field names are Pythonic; every model serialises with the camelCase aliases
the chat service expects on the wire (``chatbotId``, ``vectorAttachments``,
``fileId``, …).  All models accept either spelling on input.
"""

from __future__ import annotations

import base64
import mimetypes
import os
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from chatwidget.core.identity import generate_session_id

DEFAULT_MIME_TYPE = "application/octet-stream"


class ClientConfig(BaseModel):
    """Session configuration of a client; immutable once built."""

    api_base_url: str = Field(alias="apiBaseUrl", min_length=1)
    chatbot_id: str = Field(alias="chatbotId", min_length=1)
    session_id: str = Field("", alias="sessionId", validate_default=True)

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("session_id", mode="before")
    @classmethod
    def _default_session_id(cls, value: Optional[str]) -> str:
        return value or generate_session_id()


class Attachment(BaseModel):
    """A named binary payload carried inline in a chat message as base64."""

    name: str
    type: str = DEFAULT_MIME_TYPE
    size: int = Field(ge=0)
    data: str

    model_config = {"populate_by_name": True}

    @classmethod
    def from_bytes(cls, name: str, content: bytes, mime_type: Optional[str] = None) -> "Attachment":
        """Encode *content* and guess its MIME type from *name* when not given."""
        if mime_type is None:
            mime_type = mimetypes.guess_type(name)[0] or DEFAULT_MIME_TYPE
        return cls(
            name=name,
            type=mime_type,
            size=len(content),
            data=base64.b64encode(content).decode("ascii"),
        )

    @classmethod
    def from_path(cls, path: Union[str, "os.PathLike[str]"], mime_type: Optional[str] = None) -> "Attachment":
        with open(path, "rb") as fh:
            content = fh.read()
        return cls.from_bytes(os.path.basename(os.fspath(path)), content, mime_type)

    def decode(self) -> bytes:
        """Return the raw bytes behind :attr:`data`."""
        return base64.b64decode(self.data)


class ChatRequest(BaseModel):
    """JSON body posted to the anonymous chat endpoint."""

    message: str
    chatbot_id: str = Field(alias="chatbotId")
    session_id: str = Field(alias="sessionId")
    attachments: List[Attachment] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class ChatResponse(BaseModel):
    """Uniform result envelope returned by every client operation.

    ``success`` is true only when the remote call returned a 2xx status and
    its body parsed; otherwise ``error`` carries a human-readable reason and
    the data fields stay unset.

    The chat endpoint's reply is passed through as received: its ``result``
    may be any JSON value, a reply without ``success`` counts as successful
    (but ``to_dict`` does not invent the key), and unknown keys are kept.
    """

    success: bool = True
    result: Optional[Any] = None
    vector_id_map: Optional[Dict[str, Any]] = Field(None, alias="vectorIdMap")
    vector_attachments: Optional[List[Any]] = Field(None, alias="vectorAttachments")
    error: Optional[str] = None

    model_config = {"populate_by_name": True, "extra": "allow"}

    @classmethod
    def ok(
        cls,
        result: Optional[str] = None,
        vector_id_map: Optional[Dict[str, str]] = None,
        vector_attachments: Optional[List[Any]] = None,
    ) -> "ChatResponse":
        """Build a success envelope; fields left as ``None`` stay unset."""
        fields: Dict[str, Any] = {
            "result": result,
            "vector_id_map": vector_id_map,
            "vector_attachments": vector_attachments,
        }
        return cls(success=True, **{k: v for k, v in fields.items() if v is not None})

    @classmethod
    def failure(cls, error: Union[BaseException, str]) -> "ChatResponse":
        """Build a failure envelope from an exception or message."""
        message = str(error) or type(error).__name__
        return cls(success=False, error=message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise with wire aliases, omitting fields that were never set."""
        keys = set(self.model_fields_set) | set(self.model_extra or {})
        return self.model_dump(by_alias=True, include=keys)


class StoredAttachment(BaseModel):
    """Record describing a file held by the attachment service."""

    file_id: str = Field(alias="fileId", min_length=1)
    file_name: Optional[str] = Field(None, alias="fileName")
    mime_type: Optional[str] = Field(None, alias="mimeType")
    file_size: Optional[int] = Field(None, alias="fileSize")
    download_url: Optional[str] = Field(None, alias="downloadUrl")
    uploaded_at: Optional[int] = Field(None, alias="uploadedAt")
    status: Optional[str] = None

    model_config = {"populate_by_name": True, "extra": "allow"}

    def formatted_file_size(self) -> str:
        """Human-readable size such as ``"250.0 KB"``."""
        size = self.file_size or 0
        if size <= 0:
            return "0 B"
        units = ["B", "KB", "MB", "GB"]
        value = float(size)
        group = 0
        while value >= 1024 and group < len(units) - 1:
            value /= 1024
            group += 1
        return f"{value:.1f} {units[group]}"
