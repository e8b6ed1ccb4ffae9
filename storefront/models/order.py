from datetime import datetime

from sqlmodel import Field, SQLModel

PAY_STATUS_UNPAID = 0
PAY_STATUS_PAID = 2


class Order(SQLModel, table=True):
    """Cart line: one product variant ordered by a user, settled through an OrderList."""

    __tablename__ = "orders"
    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(index=True)  # Owner
    product_id: int = Field(index=True)
    product_att: str = ""  # Variant reference into Product.specifications
    quantity: int = 1
    unit_price_cents: int = 0
    freight_cents: int = 0
    pay_status: int = PAY_STATUS_UNPAID  # 0 unpaid | 2 paid
    order_list_id: int | None = Field(default=None, index=True)
    created_at: datetime | None = Field(default_factory=datetime.utcnow)


class OrderList(SQLModel, table=True):
    """Unified order entry created once a goods payment clears."""

    id: int | None = Field(default=None, primary_key=True)
    order_num: str = Field(index=True, max_length=64)  # Merchant order number (out_trade_no)
    order_ids: str = ""  # "3,4,9"
    coupon_id: int = 0
    coupon_cents: int = 0
    consignee_name: str = Field(default="", max_length=64)
    consignee_tel: str = Field(default="", max_length=32)
    consignee_address: str = Field(default="", max_length=255)
    user_email: str = Field(default="", index=True)
    created_at: datetime | None = Field(default_factory=datetime.utcnow)
