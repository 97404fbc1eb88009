import json
import re
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from ett_sdk.handlers.orders import create_order
from ett_sdk.models.errors import SupplierOrderError
from ett_sdk.models.supplier import OrderData, ProductData, SupplierData
from ett_sdk.suppliers.base import CreateOrderRequest
from ett_sdk.suppliers.order_book import HighPassOrderBook
from tests.conftest import STAGING


def dreamfolks_request(product_date: str = "2020-01-15", program_id: str = "12") -> CreateOrderRequest:
    return CreateOrderRequest(
        supplier=SupplierData(
            type="dreamfolks",
            username="df-key",
            password="df-secret",
            api_url="https://dreamfolks.example",
            ai_short_code=program_id,
        ),
        order=OrderData(
            first_name="Jane",
            last_name="Doe",
            total_pax=2,
            product_date=product_date,
            agent_transaction_id="txn-1",
            agent_order_item_id="item-1",
        ),
        product=ProductData(df_code="OUT-7", timezone_offset="+05:00"),
        additional=STAGING,
        order_book=HighPassOrderBook(),
    )


def voucher_api(payload=None, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(200, json=payload or {"status": True, "data": {"voucher_code": 884201}})

    return handler


async def test_creates_voucher(make_context):
    seen: list[httpx.Request] = []

    coupon = await create_order(dreamfolks_request(), make_context(voucher_api(seen=seen)))

    assert coupon == "884201"
    [request] = seen
    assert str(request.url) == "https://dreamfolks.example/api/get-voucher-outlet"
    assert request.headers["key"] == "df-key"
    assert request.headers["secret"] == "df-secret"
    body = json.loads(request.content)
    assert list(body) == [
        "program_id",
        "service_id",
        "first_name",
        "request_identifier",
        "outlet_id",
        "email",
        "valid_from",
        "booking_reference_no",
        "total_visit",
    ]
    assert body == {
        "program_id": 12,
        "service_id": "21",
        "first_name": "JaneDoe",
        "request_identifier": "txn-1",
        "outlet_id": "OUT-7",
        "email": "",
        "valid_from": "2020-01-15",
        "booking_reference_no": "item-1",
        "total_visit": 2,
    }


async def test_same_day_visit_starts_ten_minutes_from_now(make_context):
    today = (datetime.now(UTC) + timedelta(hours=5)).strftime("%Y-%m-%d")
    seen: list[httpx.Request] = []

    await create_order(dreamfolks_request(product_date=today), make_context(voucher_api(seen=seen)))

    valid_from = json.loads(seen[0].content)["valid_from"]
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", valid_from)


async def test_non_numeric_program_id(make_context):
    context = make_context(voucher_api())

    with pytest.raises(SupplierOrderError) as excinfo:
        await create_order(dreamfolks_request(program_id="DF-12"), context)

    assert excinfo.value.status_code == 422
    assert context.requests == []


async def test_false_status_is_rejected(make_context):
    context = make_context(voucher_api({"status": False, "message": "outlet closed"}))

    with pytest.raises(SupplierOrderError, match="Received false coupon status") as excinfo:
        await create_order(dreamfolks_request(), context)

    assert "outlet closed" in excinfo.value.error_message
    assert excinfo.value.notification == "Supplier API request failed. Received false coupon status."


async def test_non_200_is_rejected(make_context):
    context = make_context(lambda request: httpx.Response(401, text="bad key"))

    with pytest.raises(SupplierOrderError, match="Invalid status code: 401"):
        await create_order(dreamfolks_request(), context)
