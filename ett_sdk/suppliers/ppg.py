"""PPG lounge coupons."""

from datetime import datetime, timedelta

from pydantic import ValidationError

from ett_sdk.context import SDKContext
from ett_sdk.models.errors import SupplierOrderError
from ett_sdk.models.supplier import LoginResult, PPGCouponResponse, PPGLoginResponse, SupplierData, SupplierType
from ett_sdk.suppliers.base import BaseSupplier, CreateOrderRequest, vendor_error
from ett_sdk.utils.http import HTTPRequestError, compact_json, json_number
from ett_sdk.utils.logging import get_logger
from ett_sdk.utils.timeutil import DATE_FORMAT

logger = get_logger(__name__)

PPG_TIMEOUT = 60.0
OFFER_NOT_FOUND = "Could not find the offer in AI"
VISIT_DATE_ALERT = "[Agent API Create Order: Parse Visit Date] [🔴 Down] Request failed with status code 500"


def offer_code(product_value: float) -> str:
    """`PPGETT{hours}HR`, with whole hours rendered without a decimal point."""
    return f"PPGETT{json_number(product_value)}HR"


class PPGSupplier(BaseSupplier):
    @property
    def type(self) -> SupplierType:
        return SupplierType.PPG

    async def login(self, supplier: SupplierData, context: SDKContext) -> LoginResult:
        body = compact_json({"loginName": supplier.username, "password": supplier.password})
        try:
            response = await context.http.send(
                "POST",
                supplier.api_url + "/api/fe/v1/user/login",
                content=body.encode(),
                headers={"Content-Type": "application/json"},
                timeout=PPG_TIMEOUT,
            )
        except HTTPRequestError as e:
            raise vendor_error(f"Supplier API request failed. Failed to send login request: {e}") from e

        if response.status_code != 200:
            raise vendor_error(
                f"Supplier API request failed. Invalid status code in login: {response.status_code}",
                f"Response body: {response.text}",
            )

        try:
            login = PPGLoginResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise vendor_error(
                f"Supplier login API request failed. Error decoding JSON response: {e}",
                f"Response body: {response.text}",
            ) from e

        return LoginResult(token=login.token, expires=login.expires)

    async def create_order(self, request: CreateOrderRequest, context: SDKContext) -> str:
        await self.ensure_token(request, context)

        try:
            visit_date = datetime.strptime(request.order.product_date, DATE_FORMAT)
        except ValueError as e:
            logger.error("ppg_visit_date_invalid", product_date=request.order.product_date)
            self.alert_in_production(request, context, VISIT_DATE_ALERT)
            raise SupplierOrderError(f"Failed to parse visit date: {e}", 500) from e

        supplier, order, product = request.supplier, request.order, request.product
        body = compact_json(
            {
                "aiShortCode": supplier.ai_short_code,
                "startDate": (visit_date - timedelta(days=1)).strftime(DATE_FORMAT),
                "endDate": (visit_date + timedelta(days=1)).strftime(DATE_FORMAT),
                "firstName": order.first_name,
                "lastName": order.last_name,
                "locationShortCode": [json_number(product.location_short_code)],
                "offer": offer_code(product.product_value),
                "prefix": "ETT",
            }
        )
        try:
            response = await context.http.send(
                "POST",
                supplier.api_url + "/api/master/v1/coupon/generate",
                content=body.encode(),
                headers={"Authorization": "Bearer " + supplier.token, "Content-Type": "application/json"},
                timeout=PPG_TIMEOUT,
            )
        except HTTPRequestError as e:
            raise vendor_error(
                f"Supplier API request failed. Failed to send coupon generation request: {e}",
                f"Request body: {body}",
            ) from e

        if response.status_code != 200:
            raise vendor_error(
                f"Supplier API request failed. Invalid status code in coupon generation: {response.status_code}",
                f"Response body: {response.text}",
            )

        try:
            coupon = PPGCouponResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise vendor_error(
                f"Supplier API request failed. Error decoding JSON response: {e}",
                f"Response body: {response.text}",
            ) from e

        if coupon.description == OFFER_NOT_FOUND:
            raise vendor_error("Supplier API request failed. Product value is not found", f"Request body: {body}")

        if coupon.status != 1:
            raise vendor_error(
                f"Supplier API request failed. Invalid Coupon status: {coupon.status}",
                f"Response body: {response.text}",
            )

        return coupon.result.coupon.replace("@ppg", "")
