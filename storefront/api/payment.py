"""Alipay return page (browser redirect, GET) and asynchronous notify (server to server, POST)."""
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
from sqlmodel import Session

from storefront.core.config import settings
from storefront.core.database import get_db
from storefront.core.rate_limit import limiter
from storefront.schemas.payment import CallbackOutcome
from storefront.services.alipay import AlipayNotify, get_alipay_notify
from storefront.services.fulfillment import FulfillmentError, PayloadError, handle_callback

log = logging.getLogger("storefront")

router = APIRouter(prefix="/api/alipay", tags=["payment"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

RATE_LIMIT_STR = f"{settings.rate_limit_per_minute}/minute"

MEMBER_CENTRE = "client/user/"
SHOPPING_PAGE = "client/user/?cn-usershopping-op.html"
RECHARGE_PAGE = "client/user/?cn-userpay-op.html"

MSG_UNVERIFIED = "Verification failed."
MSG_BAD_CHECKSUM = "Payment verification error, please contact the site administrator."
MSG_GOODS_OK = "Payment successful, returning to the member centre in 3 seconds."
MSG_RECHARGE_OK = "Recharge successful, returning to the member centre in 3 seconds."
MSG_FAILED = "The payment was received but could not be processed, please contact the site administrator."


def _page(request: Request, message: str = "", redirect: str | None = None, delay: int = 0) -> HTMLResponse:
    redirect_url = f"{settings.webpath}{redirect}" if redirect is not None else None
    return templates.TemplateResponse(
        request,
        "payment_return.html",
        {"message": message, "redirect_url": redirect_url, "delay": delay},
    )


def _return_page(request: Request, outcome: CallbackOutcome) -> HTMLResponse:
    if outcome.kind == "unverified":
        return _page(request, MSG_UNVERIFIED)
    if outcome.kind == "status":
        return _page(request, f"trade_status={outcome.trade_status}")
    if outcome.kind == "bad_checksum":
        return _page(request, MSG_BAD_CHECKSUM)
    if outcome.kind == "duplicate":
        # Already handled here or by notify_url
        return _page(request, redirect=MEMBER_CENTRE, delay=0)
    if outcome.kind == "goods":
        return _page(request, MSG_GOODS_OK, redirect=SHOPPING_PAGE, delay=2)
    return _page(request, MSG_RECHARGE_OK, redirect=RECHARGE_PAGE, delay=2)


@router.get("/return", response_class=HTMLResponse)
@limiter.limit(RATE_LIMIT_STR)
def alipay_return(
    request: Request,
    db: Session = Depends(get_db),
    notify: AlipayNotify = Depends(get_alipay_notify),
):
    """Synchronous return page the buyer's browser lands on after paying."""
    params = dict(request.query_params)
    try:
        outcome = handle_callback(db, params, notify.verify_return(params))
    except (PayloadError, FulfillmentError) as e:
        log.exception("Alipay return failed: out_trade_no=%s error=%s", params.get("out_trade_no", ""), e)
        return _page(request, MSG_FAILED)
    return _return_page(request, outcome)


def _notify_outcome(db: Session, params: dict[str, str], notify: AlipayNotify) -> CallbackOutcome:
    return handle_callback(db, params, notify.verify_notify(params))


@router.post("/notify")
@limiter.limit(RATE_LIMIT_STR)
async def alipay_notify(
    request: Request,
    db: Session = Depends(get_db),
    notify: AlipayNotify = Depends(get_alipay_notify),
):
    """Gateway notification; anything but "success" makes Alipay retry later."""
    form = await request.form()
    params = {k: (form.get(k) or "") for k in form}
    try:
        # Gateway round trip and SQL both block
        outcome = await run_in_threadpool(_notify_outcome, db, params, notify)
    except (PayloadError, FulfillmentError) as e:
        log.exception("Alipay notify failed: out_trade_no=%s error=%s", params.get("out_trade_no", ""), e)
        return PlainTextResponse("fail")
    if outcome.kind in ("unverified", "bad_checksum"):
        return PlainTextResponse("fail")
    return PlainTextResponse("success")
