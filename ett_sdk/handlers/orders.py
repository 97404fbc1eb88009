"""CreateOrder: place one order line with its supplier."""

from ett_sdk.context import SDKContext
from ett_sdk.models.errors import ConfigurationError, ErrorCode, ResponseError
from ett_sdk.models.supplier import SupplierType
from ett_sdk.suppliers.all_airports import AllAirportsSupplier
from ett_sdk.suppliers.base import BaseSupplier, CreateOrderRequest
from ett_sdk.suppliers.dreamfolks import DreamfolksSupplier
from ett_sdk.suppliers.highpass import HighPassSupplier
from ett_sdk.suppliers.isg import ISGSupplier
from ett_sdk.suppliers.ppg import PPGSupplier
from ett_sdk.utils.logging import get_logger

logger = get_logger(__name__)

SUPPLIERS: dict[SupplierType, BaseSupplier] = {
    supplier.type: supplier
    for supplier in (
        PPGSupplier(),
        DreamfolksSupplier(),
        AllAirportsSupplier(),
        HighPassSupplier(),
        ISGSupplier(),
    )
}


async def create_order(request: CreateOrderRequest, context: SDKContext) -> str:
    """
    Dispatch the order line to the adapter of `request.supplier.type`.

    Returns:
        The coupon or voucher code. HighPass lines return an empty code: they are
        only registered in `request.order_book` for later submission.

    Raises:
        ConfigurationError: if the supplier type is unknown.
        ResponseError: if the supplier rejects the line or cannot be reached.
    """
    try:
        supplier = SUPPLIERS[SupplierType(request.supplier.type)]
    except ValueError:
        logger.warning("unknown_supplier_type", supplier_type=request.supplier.type)
        raise ConfigurationError("Supplier not found", ErrorCode.SUPPLIER_NOT_FOUND) from None

    log = logger.bind(
        supplier=supplier.type.value,
        supplier_guid=request.supplier.guid,
        agent_order_item_id=request.order.agent_order_item_id,
    )
    try:
        coupon_code = await supplier.create_order(request, context)
    except ResponseError as e:
        log.error("supplier_order_failed", status_code=e.status_code, error=e.error_message)
        raise

    log.info("supplier_order_created", coupon_code=coupon_code)
    return coupon_code
