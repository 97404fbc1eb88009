"""All Airports (Every Lounge): create an order, pay it offline, then look up its organization."""

from datetime import timedelta
from typing import Any

from pydantic import ValidationError

from ett_sdk.context import SDKContext
from ett_sdk.models.errors import SupplierOrderError
from ett_sdk.models.supplier import LoginResult, SupplierData, SupplierType, TokenResponse
from ett_sdk.suppliers.base import BaseSupplier, CreateOrderRequest, vendor_error
from ett_sdk.utils.http import HTTPRequestError, compact_json
from ett_sdk.utils.logging import get_logger
from ett_sdk.utils.timeutil import expiry_from_now, years_ago

logger = get_logger(__name__)

LOGIN_TIMEOUT = 10.0
ORDER_TIMEOUT = 60.0
PASSENGER_AGE_YEARS = 20
PAX_TYPE_ALERT = "[Create Order - Every Lounge Pax Type] [🔴 Down] Request failed with status code 500"

FLIGHT_INFO_TEMPLATE = (
    '{"orderId": %d, "organizationId": "%s",  "city": {"id": "%s"}, '
    '"type": "Departure", "date": "%s", "number": "-"}'
)


class AllAirportsSupplier(BaseSupplier):
    token_refresh_margin = timedelta(minutes=10)
    token_error_status = 500
    expiry_parse_alert = (
        "[Create Order - Every Lounge Token Expire Time Parsing] [🔴 Down] Request failed with status code 500"
    )
    token_persist_alert = "[Create Order - Every Lounge Token Update] [🔴 Down] Request failed with status code 500"

    @property
    def type(self) -> SupplierType:
        return SupplierType.ALL_AIRPORTS

    async def login(self, supplier: SupplierData, context: SDKContext) -> LoginResult:
        form = (
            "grant_type=client_credentials"
            f"&client_id={supplier.username}"
            f"&client_secret={supplier.password}"
            "&scope=ResourceServerApi"
        )
        try:
            response = await context.http.send(
                "POST",
                supplier.auth_url + "/connect/token",
                content=form.encode(),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=LOGIN_TIMEOUT,
            )
        except HTTPRequestError as e:
            raise vendor_error(f"Supplier API request failed. Failed to send login request: {e}") from e

        if response.status_code != 200:
            raise vendor_error(f"Supplier API request failed. Invalid status code in login: {response.status_code}")

        try:
            token = TokenResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise vendor_error(f"Supplier API request failed. Failed to decode login response: {e}") from e

        return LoginResult(token=token.access_token, expires=expiry_from_now(token.expires_in))

    async def create_order(self, request: CreateOrderRequest, context: SDKContext) -> str:
        await self.ensure_token(request, context)

        if not request.order.pax_type:
            logger.error("all_airports_pax_type_missing", agent_order_item_id=request.order.agent_order_item_id)
            self.alert_in_production(request, context, PAX_TYPE_ALERT)
            raise SupplierOrderError("Pax type is required", 500)

        supplier, order, product = request.supplier, request.order, request.product

        created = await self._call(
            context,
            "POST",
            supplier.api_url + "/api/v0/orders",
            supplier.token,
            "Create Order",
            {
                "contract": {"id": supplier.ai_short_code},
                "type": "Standard",
                "passengers": [
                    {
                        "givenName": order.first_name,
                        "familyName": order.last_name,
                        "middleName": "",
                        "dateOfBirth": years_ago(PASSENGER_AGE_YEARS).strftime("%Y-%m-%dT%H:%M:%S"),
                    }
                ],
                "resources": [
                    {
                        "resource": {"id": product.aa_code},
                        "flights": [
                            {
                                "city": {"id": product.destination_city},
                                "type": "Departure",
                                "date": order.product_date,
                                "number": "-",
                            }
                        ],
                    }
                ],
                "contactName": supplier.contact_person,
                "contactEmail": supplier.email,
                "contactPhone": supplier.phone,
            },
        )

        order_id = _as_int(created.get("id"))
        if order_id == 0:
            raise vendor_error("Supplier API request failed, ResourceID and OrderID are required")

        paid = await self._call(
            context,
            "PATCH",
            f"{supplier.api_url}/api/v0/orders/{order_id}/pay",
            supplier.token,
            "Pay Order",
            {"mode": "Offline", "type": "Card"},
        )
        coupon_code = "" if paid.get("pnr") is None else str(paid["pnr"])

        if not product.aa_code:
            raise vendor_error("Supplier API request failed, ResourceID and AA Code are required")

        resource = await self._call(
            context,
            "GET",
            f"{supplier.api_url}/api/v0/resources/{product.aa_code}",
            supplier.token,
            "Get ResourceID",
        )
        organization = resource.get("organization") or {}
        if not isinstance(organization, dict):
            raise vendor_error(
                "Supplier API request failed, unexpected organization in Get ResourceID response",
                f"Response body: {compact_json(resource)}",
            )

        request.order_item["flight_info"] = FLIGHT_INFO_TEMPLATE % (
            order_id,
            organization.get("id") or "",
            product.destination_city,
            order.product_date,
        )
        return coupon_code

    async def _call(
        self,
        context: SDKContext,
        method: str,
        url: str,
        token: str,
        operation: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        body = compact_json(payload) if payload is not None else ""
        try:
            response = await context.http.send(
                method,
                url,
                content=body.encode() if payload is not None else None,
                headers={"Authorization": "Bearer " + token, "Content-Type": "application/json"},
                timeout=ORDER_TIMEOUT,
            )
        except HTTPRequestError as e:
            raise vendor_error(
                f"Supplier API request failed, failed to do {operation} request: {e}", f"Request body: {body}"
            ) from e

        if response.status_code >= 400:
            raise vendor_error(
                f"Supplier API request failed with status code: {response.status_code} "
                f"response body: {response.text}",
                f"Request body: {body}",
            )

        try:
            data = response.json()
        except ValueError as e:
            raise vendor_error(
                f"Supplier API request failed. Failed to Unmarshal response body, error: {e}",
                f"Request body: {body}",
            ) from e
        if not isinstance(data, dict):
            raise vendor_error(f"Supplier API request failed. Unexpected {operation} response: {response.text}")
        return data


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
