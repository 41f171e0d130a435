from __future__ import annotations

import pytest
from pydantic import ValidationError

from sendblue_client.sms import Message, MessageResponse


def test_message_is_immutable() -> None:
    msg = Message(number="+15551234567", content="hello")
    with pytest.raises(ValidationError):
        msg.content = "changed"  # type: ignore[misc]


def test_message_response_missing_fields_default_to_empty() -> None:
    mresp = MessageResponse.model_validate_json('{"status": "ERROR", "error_code": "E1"}')

    assert mresp.is_error
    assert mresp.error_code == "E1"
    assert mresp.from_number == ""
    assert mresp.message_handle == ""


def test_message_response_nulls_and_unknown_fields() -> None:
    mresp = MessageResponse.model_validate_json(
        '{"status": "QUEUED", "error_code": null, "from_number": "+15557654321",'
        ' "message_handle": "abc", "date_created": "2024-01-01"}'
    )

    assert not mresp.is_error
    assert mresp.error_code == ""
    assert mresp.from_number == "+15557654321"
