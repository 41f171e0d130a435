from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, field_validator

ERROR_STATUS: Final[str] = "ERROR"


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True)

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        # Sendblue sends explicit nulls for fields that do not apply
        return "" if value is None else value


class Message(_Payload):
    """
    A message sent to, or received from, Sendblue.

    Outbound messages carry an E.164 number; inbound (webhook) numbers are
    whatever Sendblue sent and are not re-validated.
    """

    number: str = ""
    content: str = ""


class MessageResponse(_Payload):
    """Sendblue's reply to a send-message request."""

    status: str = ""
    error_code: str = ""
    from_number: str = ""
    message_handle: str = ""

    @property
    def is_error(self) -> bool:
        return self.status == ERROR_STATUS
