"""Tests for the Pydantic data models."""

import base64
import sys
import os

import pytest
from pydantic import ValidationError

# Ensure the project root is importable.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from chatwidget.models import (
    Attachment,
    ChatRequest,
    ChatResponse,
    ClientConfig,
    StoredAttachment,
)


# ── ClientConfig ─────────────────────────────────────────────────────────────


class TestClientConfig:
    """Validate the immutable session configuration."""

    def test_aliases_and_names(self) -> None:
        by_alias = ClientConfig(apiBaseUrl="http://x/api", chatbotId="b", sessionId="s")
        by_name = ClientConfig(api_base_url="http://x/api", chatbot_id="b", session_id="s")
        assert by_alias == by_name

    def test_session_generated_when_missing(self) -> None:
        cfg = ClientConfig(api_base_url="http://x", chatbot_id="b")
        assert cfg.session_id.startswith("session_")

    def test_session_generated_when_none_or_empty(self) -> None:
        assert ClientConfig(api_base_url="http://x", chatbot_id="b", session_id=None).session_id
        assert ClientConfig(api_base_url="http://x", chatbot_id="b", session_id="").session_id

    def test_empty_chatbot_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ClientConfig(api_base_url="http://x", chatbot_id="")

    def test_frozen(self) -> None:
        cfg = ClientConfig(api_base_url="http://x", chatbot_id="b", session_id="s")
        with pytest.raises(ValidationError):
            cfg.session_id = "other"  # type: ignore[misc]


# ── Attachment ───────────────────────────────────────────────────────────────


class TestAttachment:
    """Validate inline base64 attachments."""

    def test_from_bytes(self) -> None:
        att = Attachment.from_bytes("photo.png", b"\x89PNG")
        assert att.type == "image/png"
        assert att.size == 4
        assert att.data == base64.b64encode(b"\x89PNG").decode()
        assert att.decode() == b"\x89PNG"

    def test_unknown_extension(self) -> None:
        att = Attachment.from_bytes("blob.zzzunknown", b"x")
        assert att.type == "application/octet-stream"

    def test_explicit_mime(self) -> None:
        att = Attachment.from_bytes("data", b"{}", mime_type="application/json")
        assert att.type == "application/json"

    def test_from_path(self, tmp_path) -> None:
        path = tmp_path / "notes.txt"
        path.write_bytes(b"hello")
        att = Attachment.from_path(path)
        assert att.name == "notes.txt"
        assert att.type == "text/plain"
        assert att.size == 5

    def test_negative_size_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Attachment(name="a", type="text/plain", size=-1, data="")


# ── ChatRequest ──────────────────────────────────────────────────────────────


class TestChatRequest:
    """Validate the outbound chat body."""

    def test_wire_shape(self) -> None:
        req = ChatRequest(message="hi", chatbot_id="b", session_id="s")
        assert req.model_dump(by_alias=True) == {
            "message": "hi",
            "chatbotId": "b",
            "sessionId": "s",
            "attachments": [],
        }

    def test_attachment_order_kept(self) -> None:
        first = Attachment.from_bytes("1.txt", b"1")
        second = Attachment.from_bytes("2.txt", b"2")
        req = ChatRequest(message="m", chatbot_id="b", session_id="s", attachments=[second, first])
        assert [a.name for a in req.attachments] == ["2.txt", "1.txt"]


# ── ChatResponse ─────────────────────────────────────────────────────────────


class TestChatResponse:
    """Validate the result envelope."""

    def test_bare_success(self) -> None:
        assert ChatResponse.ok().to_dict() == {"success": True}

    def test_success_fields(self) -> None:
        env = ChatResponse.ok(result="f1", vector_attachments=[{"fileId": "f1"}])
        assert env.to_dict() == {"success": True, "result": "f1", "vectorAttachments": [{"fileId": "f1"}]}
        assert env.error is None

    def test_failure(self) -> None:
        env = ChatResponse.failure(RuntimeError("boom"))
        assert env.to_dict() == {"success": False, "error": "boom"}
        assert env.result is None
        assert env.vector_attachments is None

    def test_failure_without_message(self) -> None:
        env = ChatResponse.failure(TimeoutError())
        assert env.error == "TimeoutError"

    def test_remote_reply_passthrough(self) -> None:
        env = ChatResponse.model_validate({"result": {"answer": "hi"}, "choices": []})
        assert env.success is True
        assert env.result == {"answer": "hi"}
        assert env.to_dict() == {"result": {"answer": "hi"}, "choices": []}

    def test_bad_success_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ChatResponse.model_validate({"success": {"nested": True}})


# ── StoredAttachment ─────────────────────────────────────────────────────────


class TestStoredAttachment:
    """Validate the attachment service record."""

    def test_parse(self) -> None:
        stored = StoredAttachment.model_validate(
            {
                "fileId": "file_1",
                "fileName": "report.pdf",
                "mimeType": "application/pdf",
                "fileSize": 256000,
                "downloadUrl": "http://localhost:8080/api/attachments/download/file_1?chatbotId=b",
                "uploadedAt": 1707385649000,
                "status": "stored",
            }
        )
        assert stored.file_id == "file_1"
        assert stored.status == "stored"

    def test_file_id_required(self) -> None:
        with pytest.raises(ValidationError):
            StoredAttachment.model_validate({"fileName": "a"})

    @pytest.mark.parametrize(
        "size,expected",
        [(None, "0 B"), (0, "0 B"), (512, "512.0 B"), (2048, "2.0 KB"), (256000, "250.0 KB"), (5 * 1024 ** 3, "5.0 GB")],
    )
    def test_formatted_file_size(self, size, expected) -> None:
        assert StoredAttachment(file_id="f", file_size=size).formatted_file_size() == expected
