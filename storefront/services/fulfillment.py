"""
Alipay callback processing: payload checksum, idempotency on the voucher pair,
and goods payment / account recharge fulfilment in a single transaction.
"""
import hashlib
import hmac
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation, Overflow
from zoneinfo import ZoneInfo

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from storefront.core.config import settings
from storefront.g11n import Multibyte
from storefront.models import (
    PAY_STATUS_PAID,
    AuditLog,
    IntegralEntry,
    Order,
    OrderList,
    Product,
    ShippingAddress,
    User,
    UserPay,
)
from storefront.schemas.payment import AlipayTrade, CallbackOutcome, ReturnPayload
from storefront.services.inventory import decrement_stock

log = logging.getLogger("storefront")

SUCCESS_STATUSES = ("TRADE_FINISHED", "TRADE_SUCCESS")
PAYLOAD_SEP = "|"
PAYLOAD_FIELDS = tuple(ReturnPayload.model_fields)

LABEL_GOODS = "Goods payment"
LABEL_RECHARGE = "Online recharge"


class PayloadError(ValueError):
    """The body passthrough or an amount could not be parsed."""


class FulfillmentError(Exception):
    """A verified payment could not be applied (missing user, ...)."""


def parse_payload(body: str) -> ReturnPayload:
    fields = (body or "").split(PAYLOAD_SEP)
    return ReturnPayload(**{name: value.strip() for name, value in zip(PAYLOAD_FIELDS, fields)})


def payload_checksum(user_id: str, safecode: str) -> str:
    return hashlib.md5(f"{user_id}{safecode}".encode("utf-8")).hexdigest()


def verify_checksum(payload: ReturnPayload, safecode: str) -> bool:
    if not safecode:
        log.error("SAFECODE is not configured; rejecting payload checksum")
        return False
    return hmac.compare_digest(payload_checksum(payload.user_id, safecode), payload.checksum.lower())


def parse_cents(value: str, field: str = "amount") -> int:
    """'12.5' -> 1250. Empty means zero."""
    raw = (value or "").strip()
    if not raw:
        return 0
    try:
        amount = Decimal(raw)
        if not amount.is_finite() or amount < 0:
            raise InvalidOperation(raw)
        return int((amount * 100).quantize(Decimal("1")))
    except (InvalidOperation, Overflow):
        raise PayloadError(f"Invalid {field}: {raw!r}") from None


def _parse_int(value: str, field: str, default: int | None = None) -> int:
    raw = (value or "").strip()
    if not raw and default is not None:
        return default
    if not raw.isdecimal():
        raise PayloadError(f"Invalid {field}: {raw!r}")
    return int(raw)


def parse_order_ids(value: str) -> list[int]:
    ids = [part.strip() for part in (value or "").split(",") if part.strip()]
    if not ids:
        raise PayloadError("No order ids in payload.")
    return [_parse_int(part, "order id") for part in ids]


def local_now() -> datetime:
    """Naive wall-clock time in the shop's timezone, as stored in the payment tables."""
    return datetime.now(ZoneInfo(settings.timezone)).replace(tzinfo=None)


def _fit(value: str | None, width: int) -> str:
    return Multibyte.substr(value or "", 0, width)


def audit(db: Session, event: str, user_id: int | None, detail: str | None = None) -> None:
    db.add(AuditLog(event=event, user_id=user_id, detail=_fit(detail, 255) if detail else None))


def find_payment(db: Session, out_trade_no: str, trade_no: str) -> UserPay | None:
    stmt = select(UserPay).where(UserPay.voucher_one == out_trade_no, UserPay.voucher_two == trade_no)
    return db.exec(stmt).first()


def _payment_content(trade: AlipayTrade, note: str) -> str:
    lines = (
        f"Order no: {trade.out_trade_no}",
        f"Trade no: {trade.trade_no}",
        f"Trade status: {trade.trade_status}",
        f"Note: {note}",
    )
    return _fit("\n".join(lines), 500)


def _load_user(db: Session, payload: ReturnPayload) -> User:
    user_id = _parse_int(payload.user_id, "user id")
    user = db.exec(select(User).where(User.id == user_id).with_for_update()).first()
    if not user:
        raise FulfillmentError(f"User {user_id} not found.")
    return user


def _fulfill_goods(db: Session, trade: AlipayTrade, payload: ReturnPayload, paid_cents: int) -> CallbackOutcome:
    user = _load_user(db, payload)
    order_ids = parse_order_ids(payload.order_ids)
    coupon_id = _parse_int(payload.coupon_id, "coupon id", default=0)
    coupon_cents = parse_cents(payload.coupon_money, "coupon money")
    now = local_now()

    stmt = select(Order).where(
        Order.id.in_(order_ids),
        Order.email == user.email,
        Order.pay_status != PAY_STATUS_PAID,
    )
    orders = list(db.exec(stmt).all())
    if len(orders) != len(order_ids):
        log.warning(
            "Alipay goods payment out_trade_no=%s: %s of %s orders payable for user_id=%s",
            trade.out_trade_no,
            len(orders),
            len(order_ids),
            user.id,
        )

    total_cents = 0
    for order in orders:
        total_cents += order.quantity * order.unit_price_cents + order.freight_cents
        product = db.exec(select(Product).where(Product.id == order.product_id).with_for_update()).first()
        if not product:
            log.warning("Order %s references missing product %s", order.id, order.product_id)
            continue
        product.specifications = decrement_stock(product.specifications, order.product_att, order.quantity)
        db.add(product)
        if product.integral > 0:
            db.add(
                IntegralEntry(
                    product_id=product.id,
                    product_name=product.title,
                    market_cents=product.market_cents,
                    web_market_cents=product.web_market_cents,
                    integral=product.integral,
                    confirmed=False,
                    user_email=user.email,
                    created_at=now,
                )
            )

    address = None
    if payload.address_id:
        address_id = _parse_int(payload.address_id, "address id")
        stmt = select(ShippingAddress).where(
            ShippingAddress.id == address_id,
            ShippingAddress.user_email == user.email,
            ShippingAddress.is_default == True,  # noqa: E712
        )
        address = db.exec(stmt).first()

    order_list = OrderList(
        order_num=trade.out_trade_no,
        order_ids=",".join(str(i) for i in order_ids),
        coupon_id=coupon_id,
        coupon_cents=coupon_cents,
        consignee_name=_fit(address.name if address else "", 64),
        consignee_tel=_fit(address.tel if address else "", 32),
        consignee_address=_fit(address.address if address else "", 255),
        user_email=user.email,
        created_at=now,
    )
    db.add(order_list)
    db.flush()

    for order in orders:
        order.pay_status = PAY_STATUS_PAID
        order.order_list_id = order_list.id
        db.add(order)

    db.add(
        UserPay(
            user_email=user.email,
            money_cents=paid_cents,
            content=_payment_content(trade, f"order ids {payload.order_ids}"),
            admin_label=LABEL_GOODS,
            voucher_one=trade.out_trade_no,
            voucher_two=trade.trade_no,
            created_at=now,
        )
    )
    expected_cents = max(total_cents - coupon_cents, 0)
    if expected_cents != paid_cents:
        log.warning(
            "Alipay amount mismatch out_trade_no=%s: orders=%s coupon=%s paid=%s",
            trade.out_trade_no,
            total_cents,
            coupon_cents,
            paid_cents,
        )
    audit(db, "payment_goods", user.id, trade.out_trade_no)
    return CallbackOutcome(kind="goods", trade_status=trade.trade_status, user_id=user.id, order_list_id=order_list.id)


def _fulfill_recharge(db: Session, trade: AlipayTrade, payload: ReturnPayload, paid_cents: int) -> CallbackOutcome:
    user = _load_user(db, payload)
    db.add(
        UserPay(
            user_email=user.email,
            money_cents=paid_cents,
            content=_payment_content(trade, payload.pay_type),
            admin_label=LABEL_RECHARGE,
            voucher_one=trade.out_trade_no,
            voucher_two=trade.trade_no,
            created_at=local_now(),
        )
    )
    user.money_cents = (user.money_cents or 0) + paid_cents
    db.add(user)
    audit(db, "payment_recharge", user.id, trade.out_trade_no)
    return CallbackOutcome(kind="recharge", trade_status=trade.trade_status, user_id=user.id)


def fulfill(db: Session, trade: AlipayTrade, payload: ReturnPayload) -> CallbackOutcome:
    """
    Apply a verified, checksummed payment exactly once.

    The voucher pair is looked up first; a concurrent request that slips past
    the lookup hits the unique constraint at commit and is reported as a
    duplicate. Any other failure rolls the whole fulfilment back.
    """
    if find_payment(db, trade.out_trade_no, trade.trade_no):
        return CallbackOutcome(kind="duplicate", trade_status=trade.trade_status)

    paid_cents = parse_cents(trade.total_fee, "total_fee")
    try:
        if payload.is_goods_payment:
            outcome = _fulfill_goods(db, trade, payload, paid_cents)
        else:
            outcome = _fulfill_recharge(db, trade, payload, paid_cents)
        db.commit()
    except IntegrityError:
        db.rollback()
        log.info(
            "Alipay payment already recorded concurrently: out_trade_no=%s trade_no=%s",
            trade.out_trade_no,
            trade.trade_no,
        )
        return CallbackOutcome(kind="duplicate", trade_status=trade.trade_status)
    except Exception:
        db.rollback()
        raise
    log.info(
        "Alipay payment applied: kind=%s out_trade_no=%s trade_no=%s user_id=%s cents=%s",
        outcome.kind,
        trade.out_trade_no,
        trade.trade_no,
        outcome.user_id,
        paid_cents,
    )
    return outcome


def handle_callback(db: Session, params: dict[str, str], verified: bool) -> CallbackOutcome:
    """Shared by return_url and notify_url once the signature check has run."""
    if not verified:
        log.warning("Alipay signature verification failed: out_trade_no=%s", params.get("out_trade_no", ""))
        return CallbackOutcome(kind="unverified")

    trade = AlipayTrade(**{k: params.get(k, "") for k in AlipayTrade.model_fields})
    if trade.trade_status not in SUCCESS_STATUSES:
        log.info("Alipay trade_status=%s for out_trade_no=%s, nothing to do", trade.trade_status, trade.out_trade_no)
        return CallbackOutcome(kind="status", trade_status=trade.trade_status)

    payload = parse_payload(trade.body)
    if not verify_checksum(payload, settings.safecode):
        log.warning("Alipay body checksum mismatch: out_trade_no=%s user_id=%s", trade.out_trade_no, payload.user_id)
        audit(db, "payment_checksum_failed", None, trade.out_trade_no)
        db.commit()
        return CallbackOutcome(kind="bad_checksum", trade_status=trade.trade_status)

    return fulfill(db, trade, payload)
