from typing import Literal

from pydantic import BaseModel

GOODS_PAY_TYPE = "fk"


class AlipayTrade(BaseModel):
    """Trade fields Alipay passes back to return_url / notify_url."""
    out_trade_no: str = ""
    trade_no: str = ""
    trade_status: str = ""
    total_fee: str = ""
    body: str = ""


class ReturnPayload(BaseModel):
    """Positional fields of the "body" passthrough: type|order_ids|user_id|checksum|coupon_id|coupon_money|address_id."""
    pay_type: str = ""
    order_ids: str = ""
    user_id: str = ""
    checksum: str = ""
    coupon_id: str = ""
    coupon_money: str = ""
    address_id: str = ""

    @property
    def is_goods_payment(self) -> bool:
        return self.pay_type == GOODS_PAY_TYPE


class CallbackOutcome(BaseModel):
    kind: Literal["unverified", "status", "bad_checksum", "duplicate", "goods", "recharge"]
    trade_status: str = ""
    user_id: int | None = None
    order_list_id: int | None = None
