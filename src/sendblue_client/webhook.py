from __future__ import annotations

import io
import logging
from typing import BinaryIO

from fastapi import HTTPException, Request
from pydantic import ValidationError
from starlette.requests import ClientDisconnect

from .errors import WebhookParseError, WebhookReadError
from .sms import Message

logger = logging.getLogger(__name__)


def decode_webhook_bytes(data: bytes) -> Message:
    """Decode an already-read webhook body into a Message."""
    try:
        return Message.model_validate_json(data)
    except ValidationError as exc:
        raise WebhookParseError(f"failed to unmarshal into message: {exc}") from exc


def decode_webhook(stream: BinaryIO) -> Message:
    """
    Decode the body of an inbound Sendblue webhook request.

    The stream is read to the end and closed whether or not decoding
    succeeds; it is single use, so neither failure is worth retrying.
    The number is passed through exactly as Sendblue sent it.
    """
    with stream:
        try:
            data = stream.read()
        except OSError as exc:
            raise WebhookReadError(f"failed to read request body: {exc}") from exc

    if not isinstance(data, bytes | bytearray):
        raise WebhookReadError(
            f"failed to read request body: expected bytes, got {type(data).__name__}"
        )

    return decode_webhook_bytes(bytes(data))


async def inbound_message(request: Request) -> Message:
    """
    FastAPI dependency that turns a Sendblue callback into a Message.

    Usage:

      @app.post("/sendblue/inbound")
      def sendblue_inbound(message: Message = Depends(inbound_message)) -> dict[str, str]:
          ...

    Read failures map to 400, undecodable payloads to 422.
    """
    try:
        body = await request.body()
    except (ClientDisconnect, OSError) as exc:
        logger.warning("Could not read Sendblue webhook body: %s", exc)
        raise HTTPException(status_code=400, detail="failed to read request body") from exc

    try:
        return decode_webhook(io.BytesIO(body))
    except WebhookReadError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except WebhookParseError as exc:
        logger.warning("Rejected malformed Sendblue webhook (%d bytes)", len(body))
        raise HTTPException(status_code=422, detail="failed to unmarshal into message") from exc
