from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env lives at the project root: storefront/core/config.py -> storefront/core -> storefront -> root
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"

ALIPAY_GATEWAY_URL = "https://mapi.alipay.com/gateway.do"


class Settings(BaseSettings):
    database_url: str = "sqlite:///./storefront.db"
    # Comma-separated origin list; "*" allows everything
    cors_origins: str = "*"
    # Max requests per minute per client IP on the payment endpoints
    rate_limit_per_minute: int = 60
    # Key the limiter on X-Forwarded-For (only safe behind a proxy that sets it)
    trust_forwarded_for: bool = True
    # Alipay (legacy MD5 interface): partner id + key from the merchant console
    alipay_partner: str = ""
    alipay_key: str = ""
    alipay_sign_type: str = "MD5"
    alipay_input_charset: str = "utf-8"
    alipay_gateway_url: str = ALIPAY_GATEWAY_URL
    # Ask the gateway whether notify_id is genuine (needs outbound HTTPS)
    alipay_verify_notify_id: bool = False
    alipay_timeout: int = 20
    # Shared secret used to checksum the "body" passthrough field
    safecode: str = ""
    # Site root used to build the member centre redirect, e.g. https://shop.example.com/
    webpath: str = "/"
    # Named configuration used by Multibyte when no name is passed
    multibyte_adapter: str = "codepoint"
    timezone: str = "Asia/Shanghai"
    log_level: str = "INFO"

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator("alipay_partner", "alipay_key", "safecode", mode="before")
    @classmethod
    def strip_secret(cls, v: str | None) -> str:
        """Trailing whitespace from copy/paste breaks every signature."""
        return (v or "").strip()

    @field_validator("webpath", mode="before")
    @classmethod
    def ensure_trailing_slash(cls, v: str | None) -> str:
        v = (v or "").strip() or "/"
        return v if v.endswith("/") else v + "/"

    @field_validator("alipay_sign_type", mode="before")
    @classmethod
    def upper_sign_type(cls, v: str | None) -> str:
        return (v or "MD5").strip().upper()


settings = Settings()


def is_alipay_configured() -> bool:
    return bool(settings.alipay_partner and settings.alipay_key and settings.safecode)
