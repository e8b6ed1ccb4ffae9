"""initial schema

Shop tables touched by the Alipay callbacks plus the audit/error logs.
The voucher pair on userpay is unique: it is the payment idempotency key.

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False, server_default=""),
        sa.Column("money_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "product",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False, server_default=""),
        sa.Column("specifications", sa.String(), nullable=False, server_default=""),
        sa.Column("market_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("web_market_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("integral", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("product_att", sa.String(), nullable=False, server_default=""),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("unit_price_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("freight_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pay_status", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("order_list_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_orders_email", "orders", ["email"])
    op.create_index("ix_orders_product_id", "orders", ["product_id"])
    op.create_index("ix_orders_order_list_id", "orders", ["order_list_id"])

    op.create_table(
        "orderlist",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_num", sa.String(length=64), nullable=False),
        sa.Column("order_ids", sa.String(), nullable=False, server_default=""),
        sa.Column("coupon_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("coupon_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("consignee_name", sa.String(length=64), nullable=False, server_default=""),
        sa.Column("consignee_tel", sa.String(length=32), nullable=False, server_default=""),
        sa.Column("consignee_address", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("user_email", sa.String(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_orderlist_order_num", "orderlist", ["order_num"])
    op.create_index("ix_orderlist_user_email", "orderlist", ["user_email"])

    op.create_table(
        "shippingaddress",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False, server_default=""),
        sa.Column("tel", sa.String(), nullable=False, server_default=""),
        sa.Column("address", sa.String(), nullable=False, server_default=""),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_shippingaddress_user_email", "shippingaddress", ["user_email"])

    op.create_table(
        "userpay",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_email", sa.String(), nullable=False),
        sa.Column("money_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("content", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("admin_label", sa.String(length=32), nullable=False, server_default=""),
        sa.Column("voucher_one", sa.String(length=64), nullable=False),
        sa.Column("voucher_two", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("voucher_one", "voucher_two", name="uq_userpay_vouchers"),
    )
    op.create_index("ix_userpay_user_email", "userpay", ["user_email"])

    op.create_table(
        "integralentry",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("product_name", sa.String(), nullable=False, server_default=""),
        sa.Column("market_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("web_market_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("integral", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("user_email", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_integralentry_product_id", "integralentry", ["product_id"])
    op.create_index("ix_integralentry_user_email", "integralentry", ["user_email"])

    op.create_table(
        "auditlog",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event", sa.String(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("detail", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_auditlog_event", "auditlog", ["event"])
    op.create_index("ix_auditlog_user_id", "auditlog", ["user_id"])

    op.create_table(
        "error_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("endpoint", sa.String(), nullable=True),
        sa.Column("method", sa.String(), nullable=True),
        sa.Column("error_message", sa.String(), nullable=True),
        sa.Column("stack_trace", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    for table in (
        "error_logs",
        "auditlog",
        "integralentry",
        "userpay",
        "shippingaddress",
        "orderlist",
        "orders",
        "product",
        "user",
    ):
        op.drop_table(table)
