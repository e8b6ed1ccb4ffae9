"""Alipay legacy (MD5) return/notify signature verification."""
import hashlib
import hmac
import logging
from urllib.error import URLError
from urllib.parse import urlencode
from urllib.request import urlopen

from storefront.core.config import settings

log = logging.getLogger("storefront")

UNSIGNED_KEYS = ("sign", "sign_type")


def filter_params(params: dict[str, str]) -> dict[str, str]:
    """Drop sign fields and empty values; only the rest is signed."""
    return {k: v for k, v in params.items() if k not in UNSIGNED_KEYS and v not in (None, "")}


def link_string(params: dict[str, str]) -> str:
    """k=v pairs sorted by key, joined with & and not URL-encoded."""
    return "&".join(f"{k}={params[k]}" for k in sorted(params))


def md5_sign(params: dict[str, str], key: str, charset: str = "utf-8") -> str:
    prestr = link_string(filter_params(params))
    return hashlib.md5((prestr + key).encode(charset)).hexdigest()


class AlipayNotify:
    """Verifies what Alipay sends back to return_url (GET) and notify_url (POST)."""

    def __init__(
        self,
        partner: str,
        key: str,
        sign_type: str = "MD5",
        charset: str = "utf-8",
        gateway_url: str = "",
        verify_notify_id: bool = False,
        timeout: int = 20,
    ):
        self.partner = partner
        self.key = key
        self.sign_type = sign_type.upper()
        self.charset = charset
        self.gateway_url = gateway_url
        self.verify_notify_id = verify_notify_id
        self.timeout = timeout

    def is_sign(self, params: dict[str, str]) -> bool:
        sign = params.get("sign") or ""
        if not sign or not self.key:
            return False
        if self.sign_type != "MD5":
            log.warning("Unsupported Alipay sign_type=%s", self.sign_type)
            return False
        expected = md5_sign(params, self.key, self.charset)
        return hmac.compare_digest(expected, sign.lower())

    def notify_id_response(self, notify_id: str) -> str:
        """Ask the gateway whether notify_id was issued by it; body is "true" or "false"."""
        query = urlencode({"service": "notify_verify", "partner": self.partner, "notify_id": notify_id})
        url = f"{self.gateway_url}?{query}"
        try:
            with urlopen(url, timeout=self.timeout) as resp:
                return resp.read().decode(self.charset, errors="replace").strip()
        except (URLError, TimeoutError, OSError) as e:
            log.warning("Alipay notify_verify request failed: notify_id=%s error=%s", notify_id, e)
            return ""

    def _verify(self, params: dict[str, str]) -> bool:
        if not params:
            return False
        if not self.is_sign(params):
            return False
        notify_id = params.get("notify_id") or ""
        if self.verify_notify_id and notify_id:
            return self.notify_id_response(notify_id).lower().endswith("true")
        return True

    def verify_return(self, params: dict[str, str]) -> bool:
        return self._verify(params)

    def verify_notify(self, params: dict[str, str]) -> bool:
        return self._verify(params)


def get_alipay_notify() -> AlipayNotify:
    """FastAPI dependency; tests override it to swap the verifier."""
    return AlipayNotify(
        partner=settings.alipay_partner,
        key=settings.alipay_key,
        sign_type=settings.alipay_sign_type,
        charset=settings.alipay_input_charset,
        gateway_url=settings.alipay_gateway_url,
        verify_notify_id=settings.alipay_verify_notify_id,
        timeout=settings.alipay_timeout,
    )
