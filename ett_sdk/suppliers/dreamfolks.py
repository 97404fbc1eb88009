"""Dreamfolks lounge vouchers."""

from pydantic import ValidationError

from ett_sdk.context import SDKContext
from ett_sdk.models.errors import SupplierOrderError
from ett_sdk.models.supplier import DreamfolksVoucherResponse, SupplierType
from ett_sdk.suppliers.base import BaseSupplier, CreateOrderRequest, vendor_error
from ett_sdk.utils.http import HTTPRequestError, compact_json
from ett_sdk.utils.timeutil import is_current_date, ten_minutes_from_now

DREAMFOLKS_TIMEOUT = 100.0
LOUNGE_SERVICE_ID = "21"


class DreamfolksSupplier(BaseSupplier):
    @property
    def type(self) -> SupplierType:
        return SupplierType.DREAMFOLKS

    async def create_order(self, request: CreateOrderRequest, context: SDKContext) -> str:
        supplier, order, product = request.supplier, request.order, request.product

        try:
            program_id = int(supplier.ai_short_code)
        except ValueError as e:
            raise SupplierOrderError(f"Invalid dreamfolks program id {supplier.ai_short_code!r}: {e}") from e

        valid_from = order.product_date
        if is_current_date(valid_from, product.timezone_offset):
            try:
                valid_from = ten_minutes_from_now(product.timezone_offset)
            except ValueError as e:
                raise SupplierOrderError(f"Invalid timezone offset {product.timezone_offset!r}: {e}") from e

        body = compact_json(
            {
                "program_id": program_id,
                "service_id": LOUNGE_SERVICE_ID,
                "first_name": order.first_name + order.last_name,
                "request_identifier": order.agent_transaction_id,
                "outlet_id": product.df_code,
                "email": "",
                "valid_from": valid_from,
                "booking_reference_no": order.agent_order_item_id,
                "total_visit": order.total_pax,
            }
        )
        try:
            response = await context.http.send(
                "POST",
                supplier.api_url + "/api/get-voucher-outlet",
                content=body.encode(),
                headers={
                    "key": supplier.username,
                    "secret": supplier.password,
                    "Content-Type": "application/json",
                },
                timeout=DREAMFOLKS_TIMEOUT,
            )
        except HTTPRequestError as e:
            raise vendor_error(
                f"Supplier API request failed. Failed to send request: {e}", f"Request body: {body}"
            ) from e

        if response.status_code != 200:
            raise vendor_error(
                f"Supplier API request failed. Invalid status code: {response.status_code}",
                f"Response body: {response.text}",
            )

        try:
            voucher = DreamfolksVoucherResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise vendor_error(
                f"Supplier API request failed. Error decoding JSON response: {e}",
                f"Response body: {response.text}",
            ) from e

        if not voucher.status:
            raise vendor_error(
                "Supplier API request failed. Received false coupon status.",
                f"Response body: {response.text}",
            )

        return str(voucher.data.voucher_code)
