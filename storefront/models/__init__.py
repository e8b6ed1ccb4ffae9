from .address import ShippingAddress
from .audit import AuditLog
from .error_log import ErrorLog
from .integral import IntegralEntry
from .order import PAY_STATUS_PAID, PAY_STATUS_UNPAID, Order, OrderList
from .payment import UserPay
from .product import Product
from .user import User

__all__ = [
    "AuditLog",
    "ErrorLog",
    "IntegralEntry",
    "Order",
    "OrderList",
    "PAY_STATUS_PAID",
    "PAY_STATUS_UNPAID",
    "Product",
    "ShippingAddress",
    "User",
    "UserPay",
]
