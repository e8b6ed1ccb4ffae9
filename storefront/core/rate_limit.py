"""Rate limiting for the Alipay endpoints (SlowAPI), keyed by caller address."""
from fastapi import Request

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings


def client_address(request: Request) -> str:
    """Left-most X-Forwarded-For hop when the app sits behind a trusted proxy, else the socket peer."""
    if settings.trust_forwarded_for:
        first_hop = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
        if first_hop:
            return first_hop
    return get_remote_address(request)


limiter = Limiter(key_func=client_address)
