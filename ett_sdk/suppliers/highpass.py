"""
HighPass fast-track orders.

Passengers booked on the same service and date are merged into one HighPass order.
`HighPassSupplier.create_order` only registers the line in the batch's
`HighPassOrderBook`; the aggregated orders are submitted afterwards with
`create_highpass`, one call per key.
"""

import base64
import hashlib

from pydantic import ValidationError

from ett_sdk.context import SDKContext
from ett_sdk.models.errors import SupplierOrderError
from ett_sdk.models.supplier import (
    FlightInfo,
    HighPassCouponData,
    HighPassCreateOrderRequest,
    HighPassOrder,
    HighPassOrderItem,
    HighPassOrderResponse,
    LoginResult,
    PaxInfo,
    SupplierData,
    SupplierType,
    TokenResponse,
)
from ett_sdk.suppliers.base import BaseSupplier, CreateOrderRequest, vendor_error
from ett_sdk.utils.http import HttpExecutor, HTTPRequestError, compact_json
from ett_sdk.utils.logging import get_logger
from ett_sdk.utils.timeutil import expiry_from_now, is_current_date, ten_minutes_from_now

logger = get_logger(__name__)

HIGHPASS_TIMEOUT = 60.0
DEFAULT_FLIGHT_NUMBER = "BA396"
CONTACT_PHONE = "+998945553322"
CULTURE = "en-US"
ARRIVING_TERMINALS = ("arrival", "transit")


def order_key(hp_code: str, product_date: str) -> str:
    return hp_code + "|" + product_date


def sign_payload(private_key: str, data: str) -> str:
    """base64(sha1(private_key + data + private_key))."""
    digest = hashlib.sha1((private_key + data + private_key).encode()).digest()
    return base64.b64encode(digest).decode()


def build_comment(counts: PaxInfo) -> str:
    comment = counts.comment
    if counts.baggage_count > 0:
        comment += f"Passenger has {counts.baggage_count} baggage(s); "
    if counts.companions_count > 0:
        comment += f"Passenger has {counts.companions_count} companion(s); "
    return comment


async def create_highpass(request: HighPassCreateOrderRequest, http: HttpExecutor) -> HighPassCouponData:
    """
    Submit one aggregated order.

    The order JSON is sent base64-encoded together with a SHA-1 signature keyed
    by the supplier's private key. Returns the booking code, the HighPass order id
    and the first QR datum of the first order in the response.
    """
    data = base64.b64encode(compact_json(request.order.to_payload()).encode()).decode()
    body = compact_json({"data": data, "signature": sign_payload(request.private_key, data)})

    try:
        response = await http.send(
            "POST",
            request.url + "/api/v1/orders",
            content=body.encode(),
            headers={"Authorization": "Bearer " + request.token, "Content-Type": "application/json"},
            timeout=HIGHPASS_TIMEOUT,
        )
    except HTTPRequestError as e:
        raise vendor_error(f"Supplier API request failed, failed to do HighPass Create Order request: {e}") from e

    if response.status_code != 200:
        raise vendor_error(
            f"Supplier API request failed, HighPass Create Order request failed with status code: {response.status_code}",
            f"Response body: {response.text}",
        )

    try:
        result = HighPassOrderResponse.model_validate_json(response.content)
    except ValidationError as e:
        raise vendor_error(
            f"Supplier API request failed, failed to unmarshal HighPass Create Order response: {e}",
            f"Response body: {response.text}",
        ) from e

    if not result.orders:
        raise vendor_error(
            "Supplier API request failed, no orders found in response body", f"Response body: {response.text}"
        )

    first = result.orders[0]
    if first.error_message:
        raise vendor_error(
            "Supplier API request failed, HighPass Create Order request failed with error message: "
            + first.error_message,
            f"Response body: {response.text}",
        )

    logger.info("highpass_order_created", booking_code=first.booking_code, order_id=first.high_pass_order_id)
    return HighPassCouponData(
        coupon_code=first.booking_code,
        order_id=first.high_pass_order_id,
        qr_data=first.qr_data[0] if first.qr_data else "",
    )


class HighPassSupplier(BaseSupplier):
    @property
    def type(self) -> SupplierType:
        return SupplierType.HIGHPASS

    async def login(self, supplier: SupplierData, context: SDKContext) -> LoginResult:
        form = f"grant_type=client_credentials&client_type=ThirdParty&api_key={supplier.ai_short_code}"
        try:
            response = await context.http.send(
                "POST",
                supplier.api_url + "/api/v1/token",
                content=form.encode(),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=HIGHPASS_TIMEOUT,
            )
        except HTTPRequestError as e:
            raise vendor_error(f"Supplier API request failed. Failed to send Login request: {e}") from e

        if response.status_code != 200:
            raise vendor_error(
                f"Supplier API request failed. Login request failed with status code: {response.status_code}"
            )

        try:
            token = TokenResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise vendor_error(f"Supplier API request failed. Failed to decode Login response: {e}") from e

        return LoginResult(token=token.access_token, expires=expiry_from_now(token.expires_in))

    async def create_order(self, request: CreateOrderRequest, context: SDKContext) -> str:
        await self.ensure_token(request, context)

        supplier, order, product = request.supplier, request.order, request.product
        key = order_key(product.hp_code, order.product_date)
        counts = request.hp_code_pax_info.get(key) or PaxInfo()
        request.order_item["highPassKey"] = key

        flight_info = FlightInfo()
        raw_flight_info = request.order_item_data.get("flight_info")
        if isinstance(raw_flight_info, str) and raw_flight_info:
            try:
                flight_info = FlightInfo.model_validate_json(raw_flight_info)
            except ValidationError as e:
                raise SupplierOrderError(f"Failed to parse flight info: {e}") from e

        service_date = order.product_date
        if flight_info.flight_number:
            if counts.terminal_type in ARRIVING_TERMINALS:
                service_date = flight_info.arrival_time
            else:
                service_date = flight_info.departure_time
        elif is_current_date(service_date, counts.offset):
            service_date = ten_minutes_from_now(counts.offset)

        def build() -> HighPassCreateOrderRequest:
            return HighPassCreateOrderRequest(
                url=supplier.api_url,
                token=supplier.token,
                private_key=supplier.password,
                order=HighPassOrder(
                    public_api_key=supplier.ai_short_code,
                    orders=[
                        HighPassOrderItem(
                            service_id=product.hp_code,
                            service_date=service_date,
                            first_name=order.first_name,
                            last_name=order.last_name,
                            adult_count=counts.adults,
                            child_count=counts.children,
                            flight_number=counts.flight_number or DEFAULT_FLIGHT_NUMBER,
                            email=supplier.email,
                            phone=CONTACT_PHONE,
                            culture=CULTURE,
                            is_date_time_of_passengers_arrival_to_airport=True,
                            other_passengers_contact_details=", ".join(counts.names),
                            flight_route_data=counts.flight_route_data,
                            car_plate_number=counts.vehicle_license_plate,
                            comment=build_comment(counts),
                        )
                    ],
                ),
            )

        _, inserted = request.order_book.get_or_insert(key, build)
        logger.info("highpass_order_registered", key=key, inserted=inserted)
        return ""
