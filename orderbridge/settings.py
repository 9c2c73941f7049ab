import os
from functools import lru_cache
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, field_validator

DEFAULT_PROVIDER_BASE_URL = "https://api.mollie.com/v2"
DEFAULT_EMAIL_TO = "info@crystalpurche.com"
DEFAULT_REDIRECT_URL = "https://crystalpurche.com/bedankt"


class Settings(BaseModel):
    provider_api_key: Optional[str] = None
    webhook_url: Optional[str] = None
    email_to: str = DEFAULT_EMAIL_TO
    provider_base_url: str = DEFAULT_PROVIDER_BASE_URL
    provider_timeout_seconds: float = 10.0
    redirect_url: str = DEFAULT_REDIRECT_URL
    order_source: str = "Crystal Purche Website"
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def _normalise_case(cls, v, info):
        if isinstance(v, str):
            v = v.strip()
            return v.upper() if info.field_name == "log_level" else v.lower()
        return v


def load_settings(environ: Mapping[str, str] = os.environ) -> Settings:
    """Build settings from environment variables; empty values count as unset."""
    values = {
        "provider_api_key": environ.get("MOLLIE_API_KEY"),
        "webhook_url": environ.get("WEBHOOK_URL"),
        "email_to": environ.get("EMAIL_TO"),
        "provider_base_url": environ.get("PROVIDER_BASE_URL"),
        "provider_timeout_seconds": environ.get("PROVIDER_TIMEOUT_SECONDS"),
        "redirect_url": environ.get("REDIRECT_URL"),
        "order_source": environ.get("ORDER_SOURCE"),
        "log_level": environ.get("LOG_LEVEL"),
        "log_format": environ.get("LOG_FORMAT"),
    }
    return Settings(**{k: v for k, v in values.items() if v})


@lru_cache()
def get_settings() -> Settings:
    return load_settings()
