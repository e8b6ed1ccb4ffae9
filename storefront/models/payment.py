from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class UserPay(SQLModel, table=True):
    """Append-only payment log. The voucher pair (out_trade_no, trade_no) is the idempotency key."""

    __table_args__ = (UniqueConstraint("voucher_one", "voucher_two", name="uq_userpay_vouchers"),)

    id: int | None = Field(default=None, primary_key=True)
    user_email: str = Field(index=True)
    money_cents: int = 0
    content: str = Field(default="", max_length=500)
    admin_label: str = Field(default="", max_length=32)  # "Goods payment" | "Online recharge"
    voucher_one: str = Field(max_length=64)  # Merchant order number
    voucher_two: str = Field(max_length=64)  # Gateway transaction number
    created_at: datetime | None = Field(default_factory=datetime.utcnow)
