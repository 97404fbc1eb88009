import asyncio
import base64
import hashlib
import json

import httpx
import pytest

from ett_sdk.handlers.orders import create_order
from ett_sdk.models.errors import SupplierOrderError
from ett_sdk.models.supplier import OrderData, PaxInfo, ProductData, SupplierData
from ett_sdk.suppliers.base import CreateOrderRequest
from ett_sdk.suppliers.highpass import build_comment, create_highpass, order_key, sign_payload
from ett_sdk.suppliers.order_book import HighPassOrderBook
from tests.conftest import STAGING

KEY = "HP-SVC-1|2024-05-10"

FLIGHT_INFO = json.dumps(
    {
        "flightNumber": "HY 251",
        "departureTime": "2024-05-10T08:15:00",
        "arrivalTime": "2024-05-10T13:40:00",
        "airline": {"code": "HY", "name": "Uzbekistan Airways"},
    }
)


def highpass_request(order_book=None, pax_info=None, first_name="Jane", flight_info=None) -> CreateOrderRequest:
    return CreateOrderRequest(
        supplier=SupplierData(
            guid="sup-hp",
            type="highpass",
            api_url="https://highpass.example",
            password="private-key",
            ai_short_code="public-key",
            email="ops@example.com",
            token="cached-token",
            token_expire_at="2099-01-01T00:00:00Z",
        ),
        order=OrderData(first_name=first_name, last_name="Doe", product_date="2024-05-10"),
        product=ProductData(hp_code="HP-SVC-1"),
        additional=STAGING,
        create_order_item_request=[{}],
        order_item_data={} if flight_info is None else {"flight_info": flight_info},
        hp_code_pax_info=pax_info if pax_info is not None else {},
        order_book=order_book if order_book is not None else HighPassOrderBook(),
    )


def test_sign_payload():
    expected = base64.b64encode(hashlib.sha1(b"pkDATApk").digest()).decode()
    assert sign_payload("pk", "DATA") == expected


def test_build_comment_appends_baggage_and_companions():
    counts = PaxInfo(comment="VIP. ", baggage_count=2, companions_count=1)

    assert build_comment(counts) == "VIP. Passenger has 2 baggage(s); Passenger has 1 companion(s); "


async def test_line_is_registered_not_submitted(make_context):
    request = highpass_request(
        pax_info={KEY: PaxInfo(adults=2, children=1, names=["Jane Doe", "John Doe"], flight_number="HY251")}
    )
    context = make_context()

    coupon = await create_order(request, context)

    assert coupon == ""
    assert context.requests == []
    assert request.order_item["highPassKey"] == KEY

    aggregated = request.order_book.get(KEY)
    assert aggregated.url == "https://highpass.example"
    assert aggregated.token == "cached-token"
    assert aggregated.private_key == "private-key"
    assert aggregated.order.public_api_key == "public-key"
    [item] = aggregated.order.orders
    assert item.service_id == "HP-SVC-1"
    assert item.service_date == "2024-05-10"
    assert item.adult_count == 2
    assert item.child_count == 1
    assert item.flight_number == "HY251"
    assert item.other_passengers_contact_details == "Jane Doe, John Doe"
    assert item.phone == "+998945553322"
    assert item.culture == "en-US"


async def test_missing_pax_info_uses_defaults(make_context):
    request = highpass_request()

    await create_order(request, make_context())

    item = request.order_book.get(KEY).order.orders[0]
    assert item.adult_count == 0
    assert item.flight_number == "BA396"
    assert "otherPassengersContactDetails" not in item.to_payload()


async def test_first_line_of_a_key_wins(make_context):
    book = HighPassOrderBook()
    context = make_context()

    await create_order(highpass_request(book, first_name="Jane"), context)
    await create_order(highpass_request(book, first_name="John"), context)

    assert len(book) == 1
    assert book.get(KEY).order.orders[0].first_name == "Jane"


async def test_concurrent_lines_build_one_order(make_context):
    book = HighPassOrderBook()
    context = make_context()
    requests = [highpass_request(book, first_name=f"pax-{n}") for n in range(20)]

    await asyncio.gather(*(create_order(request, context) for request in requests))

    assert len(book) == 1
    assert all(request.order_item["highPassKey"] == KEY for request in requests)


async def test_departing_flight_uses_departure_time(make_context):
    request = highpass_request(pax_info={KEY: PaxInfo(terminal_type="departure")}, flight_info=FLIGHT_INFO)

    await create_order(request, make_context())

    assert request.order_book.get(KEY).order.orders[0].service_date == "2024-05-10T08:15:00"


async def test_arriving_flight_uses_arrival_time(make_context):
    request = highpass_request(pax_info={KEY: PaxInfo(terminal_type="arrival")}, flight_info=FLIGHT_INFO)

    await create_order(request, make_context())

    assert request.order_book.get(KEY).order.orders[0].service_date == "2024-05-10T13:40:00"


async def test_malformed_flight_info(make_context):
    request = highpass_request(flight_info="{not json")

    with pytest.raises(SupplierOrderError, match="Failed to parse flight info") as excinfo:
        await create_order(request, make_context())

    assert excinfo.value.status_code == 422
    assert len(request.order_book) == 0


async def test_refresh_posts_api_key_form(make_context, object_store):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"access_token": "fresh-token", "expires_in": 7200})

    request = highpass_request()
    request.supplier.token_expire_at = "2000-01-01T00:00:00Z"
    context = make_context(handler)

    await create_order(request, context)

    [login] = context.requests
    assert str(login.url) == "https://highpass.example/api/v1/token"
    assert login.content == b"grant_type=client_credentials&client_type=ThirdParty&api_key=public-key"
    assert object_store.updates[0][1]["token"] == "fresh-token"
    assert request.order_book.get(KEY).token == "fresh-token"


# Submission


async def test_create_highpass_submits_signed_order(make_context):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "orders": [
                    {
                        "passengerName": "Jane Doe",
                        "highPassOrderId": "HPO-77",
                        "bookingCode": "BK-1",
                        "qrData": ["QR-1", "QR-2"],
                    }
                ]
            },
        )

    context = make_context(handler)
    request = highpass_request(pax_info={KEY: PaxInfo(adults=1)})
    await create_order(request, context)

    coupon = await create_highpass(request.order_book.get(KEY), context.http)

    assert coupon.coupon_code == "BK-1"
    assert coupon.order_id == "HPO-77"
    assert coupon.qr_data == "QR-1"

    [submitted] = seen
    assert str(submitted.url) == "https://highpass.example/api/v1/orders"
    assert submitted.headers["Authorization"] == "Bearer cached-token"
    envelope = json.loads(submitted.content)
    assert envelope["signature"] == sign_payload("private-key", envelope["data"])
    order = json.loads(base64.b64decode(envelope["data"]))
    assert order["publicApiKey"] == "public-key"
    assert order["orders"][0]["serviceId"] == "HP-SVC-1"
    assert order["orders"][0]["adultCount"] == 1
    assert order["orders"][0]["isDateTimeOfPassengersArrivalToAirport"] is True


@pytest.mark.parametrize(
    "status, payload, message",
    [
        (500, {"error": "down"}, "status code: 500"),
        (200, {"orders": []}, "no orders found"),
        (200, {"orders": [{"errorMessage": "Service unavailable on date"}]}, "Service unavailable on date"),
    ],
)
async def test_create_highpass_failures(make_context, status, payload, message):
    context = make_context(lambda request: httpx.Response(status, json=payload))
    request = highpass_request()
    await create_order(request, context)

    with pytest.raises(SupplierOrderError, match=message) as excinfo:
        await create_highpass(request.order_book.get(KEY), context.http)

    assert excinfo.value.status_code == 422


def test_order_key():
    assert order_key("HP-SVC-1", "2024-05-10") == KEY
