"""Pytest fixtures: test client, in-memory SQLite, a seeded shop."""
import os

import pytest
from fastapi.testclient import TestClient

# Must be set before the app (and its settings) are imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ALIPAY_PARTNER", "2088000000000000")
os.environ.setdefault("ALIPAY_KEY", "test-alipay-key")
os.environ.setdefault("SAFECODE", "test-safecode")
os.environ.setdefault("WEBPATH", "https://shop.example.com/")
# High enough that the whole suite never trips the limiter
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "10000")

from sqlmodel import Session, SQLModel

from storefront.core.config import settings
from storefront.core.database import engine
from storefront.g11n import Multibyte
from storefront.main import app
from storefront.models import Order, Product, ShippingAddress, User
from storefront.services.alipay import md5_sign
from storefront.services.fulfillment import payload_checksum

BUYER_EMAIL = "buyer@example.com"


@pytest.fixture(autouse=True)
def _fresh_tables():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture(autouse=True)
def _reset_multibyte():
    Multibyte.reset()
    yield
    Multibyte.reset()


@pytest.fixture(scope="function")
def client():
    """TestClient; the lifespan runs init_db on the in-memory database."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def shop() -> dict:
    """
    One buyer with 10.00 balance, two products, two unpaid orders
    (2 x 10.00 + 5.00 freight, 1 x 5.00) and a default address, plus a
    stranger's order that must never be touched.
    """
    with Session(engine) as db:
        buyer = User(email=BUYER_EMAIL, full_name="Buyer", money_cents=1000)
        stranger = User(email="stranger@example.com", money_cents=0)
        shirt = Product(
            title="Shirt",
            specifications="A1,red,10.00,8.00,15|A2,blue,10.00,8.00,3",
            market_cents=1000,
            web_market_cents=800,
            integral=5,
        )
        mug = Product(title="Mug", specifications="B1,std,5.00,5.00,10", market_cents=500, web_market_cents=500)
        db.add_all([buyer, stranger, shirt, mug])
        db.commit()
        for obj in (buyer, stranger, shirt, mug):
            db.refresh(obj)
        first = Order(email=BUYER_EMAIL, product_id=shirt.id, product_att="red", quantity=2, unit_price_cents=1000, freight_cents=500)
        second = Order(email=BUYER_EMAIL, product_id=mug.id, product_att="std", quantity=1, unit_price_cents=500)
        foreign = Order(email="stranger@example.com", product_id=mug.id, product_att="std", quantity=4, unit_price_cents=500)
        address = ShippingAddress(user_email=BUYER_EMAIL, name="Li Lei", tel="13800000000", address="1 Nanjing Rd, Shanghai", is_default=True)
        db.add_all([first, second, foreign, address])
        db.commit()
        for obj in (first, second, foreign, address):
            db.refresh(obj)
        return {
            "user_id": buyer.id,
            "stranger_id": stranger.id,
            "shirt_id": shirt.id,
            "mug_id": mug.id,
            "order_ids": [first.id, second.id],
            "foreign_order_id": foreign.id,
            "address_id": address.id,
        }


def make_body(pay_type: str, order_ids: str, user_id, coupon_id="0", coupon_money="0", address_id="", checksum=None) -> str:
    if checksum is None:
        checksum = payload_checksum(str(user_id), settings.safecode)
    return "|".join([pay_type, order_ids, str(user_id), checksum, coupon_id, coupon_money, str(address_id)])


def signed_params(**fields) -> dict:
    params = {
        "out_trade_no": "SO20240101001",
        "trade_no": "2024010122001400000001",
        "trade_status": "TRADE_SUCCESS",
        "total_fee": "30.00",
        "notify_id": "RqPnCoPT3K9",
        "sign_type": "MD5",
    }
    params.update(fields)
    params["sign"] = md5_sign(params, settings.alipay_key)
    return params
