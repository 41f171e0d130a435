from __future__ import annotations

import io

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from sendblue_client.errors import WebhookError, WebhookParseError, WebhookReadError
from sendblue_client.sms import Message
from sendblue_client.webhook import decode_webhook, decode_webhook_bytes, inbound_message


class TrackingStream(io.BytesIO):
    """BytesIO that remembers whether it was closed."""

    was_closed = False

    def close(self) -> None:
        self.was_closed = True
        super().close()


class FailingStream(TrackingStream):
    def read(self, size: int | None = -1) -> bytes:
        raise OSError("connection reset by peer")


def test_decode_webhook() -> None:
    stream = TrackingStream(b'{"number":"+15551234567","content":"hello"}')

    msg = decode_webhook(stream)

    assert msg == Message(number="+15551234567", content="hello")
    assert stream.was_closed


def test_decode_webhook_round_trip() -> None:
    original = Message(number="+15551234567", content='multi\nline "quoted" ünïcode')

    assert decode_webhook(io.BytesIO(original.model_dump_json().encode())) == original


def test_inbound_number_is_not_revalidated() -> None:
    msg = decode_webhook(io.BytesIO(b'{"number":"not a number","content":"x","extra":1}'))

    assert msg.number == "not a number"


@pytest.mark.parametrize("payload", [b"", b"not json", b"[1, 2]", b'{"number": 5551234567}'])
def test_undecodable_payload_raises_parse_error(payload: bytes) -> None:
    stream = TrackingStream(payload)

    with pytest.raises(WebhookParseError, match="failed to unmarshal into message"):
        decode_webhook(stream)

    assert stream.was_closed


def test_read_failure_raises_read_error_and_closes() -> None:
    stream = FailingStream()

    with pytest.raises(WebhookReadError, match="failed to read request body"):
        decode_webhook(stream)

    assert stream.was_closed


def test_text_stream_raises_read_error() -> None:
    with pytest.raises(WebhookReadError):
        decode_webhook(io.StringIO('{"number":"+1","content":"x"}'))  # type: ignore[arg-type]


def test_webhook_errors_share_base_class() -> None:
    with pytest.raises(WebhookError):
        decode_webhook_bytes(b"{")


# --- FastAPI dependency ---


@pytest.fixture
def api() -> TestClient:
    app = FastAPI()

    @app.post("/sendblue/inbound")
    def sendblue_inbound(message: Message = Depends(inbound_message)) -> dict[str, str]:
        return {"number": message.number, "content": message.content}

    return TestClient(app)


def test_inbound_route_decodes_message(api: TestClient) -> None:
    resp = api.post("/sendblue/inbound", json={"number": "+15551234567", "content": "hello"})

    assert resp.status_code == 200
    assert resp.json() == {"number": "+15551234567", "content": "hello"}


def test_inbound_route_rejects_malformed_payload(api: TestClient) -> None:
    resp = api.post("/sendblue/inbound", content=b"not json")

    assert resp.status_code == 422
    assert resp.json()["detail"] == "failed to unmarshal into message"
