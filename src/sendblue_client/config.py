from __future__ import annotations

import os
from functools import lru_cache
from typing import Final

from pydantic import BaseModel, Field

# The current endpoint, subject to change on Sendblue's side.
DEFAULT_ENDPOINT: Final[str] = "https://bluetexts-272923.uc.r.appspot.com/api/send-message"
DEFAULT_REGION: Final[str] = "US"
DEFAULT_TIMEOUT: Final[float] = 30.0


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number of seconds, got {value!r}") from exc


class Settings(BaseModel):
    # --- Sendblue credentials (sb-api-key-id / sb-api-secret-key headers) ---
    sendblue_api_key: str | None = Field(default_factory=lambda: os.getenv("SENDBLUE_API_KEY"))
    sendblue_api_secret: str | None = Field(
        default_factory=lambda: os.getenv("SENDBLUE_API_SECRET")
    )

    # Override to point at a local stub server
    sendblue_endpoint: str = Field(
        default_factory=lambda: os.getenv("SENDBLUE_ENDPOINT", DEFAULT_ENDPOINT)
    )

    # Region assumed for numbers given without a country code
    default_region: str = Field(
        default_factory=lambda: os.getenv("SENDBLUE_DEFAULT_REGION", DEFAULT_REGION)
    )

    # Seconds; only applies when the client builds its own httpx transport
    timeout: float = Field(default_factory=lambda: _env_float("SENDBLUE_TIMEOUT", DEFAULT_TIMEOUT))

    def require_credentials(self) -> tuple[str, str]:
        if not self.sendblue_api_key or not self.sendblue_api_secret:
            raise RuntimeError(
                "Sendblue credentials are not configured (SENDBLUE_API_KEY / SENDBLUE_API_SECRET)"
            )
        return self.sendblue_api_key, self.sendblue_api_secret


@lru_cache
def get_settings() -> Settings:
    return Settings()
