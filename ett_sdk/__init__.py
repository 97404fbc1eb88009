"""EasyToTravel SDK: identity provider authentication and supplier order placement."""

from ett_sdk.context import SDKContext
from ett_sdk.handlers.authentication import get_user_by_access_token
from ett_sdk.handlers.orders import create_order
from ett_sdk.suppliers.base import CreateOrderRequest
from ett_sdk.suppliers.highpass import create_highpass
from ett_sdk.suppliers.order_book import HighPassOrderBook

__all__ = [
    "CreateOrderRequest",
    "HighPassOrderBook",
    "SDKContext",
    "create_highpass",
    "create_order",
    "get_user_by_access_token",
]
