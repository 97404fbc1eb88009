from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from ett_sdk.context import SDKContext
from ett_sdk.models.errors import PersistenceError, SupplierOrderError
from ett_sdk.models.supplier import (
    AdditionalData,
    LoginResult,
    OrderData,
    PaxInfo,
    ProductData,
    SupplierData,
    SupplierType,
)
from ett_sdk.services.object_store import persist_token
from ett_sdk.suppliers.order_book import HighPassOrderBook
from ett_sdk.utils.logging import get_logger
from ett_sdk.utils.timeutil import token_refresh_required

logger = get_logger(__name__)

SUPPLIERS_TABLE = "suppliers"


@dataclass
class CreateOrderRequest:
    """
    One order line to place with a supplier.

    `create_order_item_request` and `order_book` are shared with the caller and
    written to in place (HighPass key, All Airports flight info, aggregated orders).
    Every line of one batch must carry the same `order_book`.
    """

    supplier: SupplierData
    order: OrderData
    product: ProductData
    additional: AdditionalData
    order_book: HighPassOrderBook
    create_order_item_request: list[dict[str, Any]] = field(default_factory=list)
    index: int = 0
    order_item_data: dict[str, Any] = field(default_factory=dict)
    hp_code_pax_info: dict[str, PaxInfo] = field(default_factory=dict)

    @property
    def order_item(self) -> dict[str, Any]:
        """The caller's outgoing record for this line."""
        return self.create_order_item_request[self.index]


def vendor_error(message: str, detail: str = "", status_code: int = 422) -> SupplierOrderError:
    """
    A failed vendor call. `message` doubles as the operator notification;
    `detail` (request or response body) only goes into the internal message.
    """
    error_message = f"{message} {detail}" if detail else message
    return SupplierOrderError(error_message, status_code, notification=message)


class BaseSupplier(ABC):
    """
    Abstract Base Class for supplier order adapters.

    Token-based suppliers set `token_refresh_margin` and implement `login`;
    `ensure_token` then keeps `request.supplier.token` fresh before each order.
    """

    token_refresh_margin: timedelta = timedelta(hours=1)
    # Status used when the cached expiry or the token write-back fails
    token_error_status: int = 422
    # Production alerts for those failures; empty means no alert
    expiry_parse_alert: str = ""
    token_persist_alert: str = ""

    @property
    @abstractmethod
    def type(self) -> SupplierType:
        raise NotImplementedError

    @abstractmethod
    async def create_order(self, request: CreateOrderRequest, context: SDKContext) -> str:
        """
        Place the order line and return its coupon code.

        Raises:
            ResponseError: if the vendor rejects the order or cannot be reached.
        """
        raise NotImplementedError

    async def login(self, supplier: SupplierData, context: SDKContext) -> LoginResult:
        raise NotImplementedError(f"{self.type.value} does not use bearer tokens")

    async def ensure_token(self, request: CreateOrderRequest, context: SDKContext) -> None:
        """Log in again once the cached token is within the refresh margin of expiry."""
        supplier = request.supplier
        try:
            refresh = token_refresh_required(supplier.token_expire_at, self.token_refresh_margin)
        except ValueError as e:
            logger.error("supplier_token_expiry_invalid", supplier=self.type.value, error=str(e))
            self.alert_in_production(request, context, self.expiry_parse_alert)
            raise SupplierOrderError(
                f"Failed to parse token expiry {supplier.token_expire_at!r}: {e}", self.token_error_status
            ) from e

        if not refresh:
            return

        login = await self.login(supplier, context)
        try:
            await persist_token(
                context.object_store,
                SUPPLIERS_TABLE,
                supplier.guid,
                login.token,
                login.expires,
                status_code=self.token_error_status,
            )
        except PersistenceError:
            self.alert_in_production(request, context, self.token_persist_alert)
            raise

        supplier.token = login.token
        supplier.token_expire_at = login.expires
        logger.info("supplier_token_refreshed", supplier=self.type.value, guid=supplier.guid)

    @staticmethod
    def alert_in_production(request: CreateOrderRequest, context: SDKContext, text: str) -> None:
        if text and request.additional.is_production:
            context.alert(text)
