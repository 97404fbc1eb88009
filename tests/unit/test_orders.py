import pytest

from ett_sdk.handlers.orders import SUPPLIERS, create_order
from ett_sdk.models.errors import ConfigurationError, ErrorCode
from ett_sdk.models.supplier import OrderData, ProductData, SupplierData, SupplierType
from ett_sdk.suppliers.base import CreateOrderRequest
from ett_sdk.suppliers.order_book import HighPassOrderBook
from tests.conftest import STAGING


def bare_request(supplier_type: str) -> CreateOrderRequest:
    return CreateOrderRequest(
        supplier=SupplierData(type=supplier_type),
        order=OrderData(),
        product=ProductData(),
        additional=STAGING,
        order_book=HighPassOrderBook(),
    )


def test_every_supplier_type_has_an_adapter():
    assert set(SUPPLIERS) == set(SupplierType)
    for supplier_type, adapter in SUPPLIERS.items():
        assert adapter.type is supplier_type


def test_environment_data_and_order_book_are_required():
    with pytest.raises(TypeError):
        CreateOrderRequest(supplier=SupplierData(type="isg"), order=OrderData(), product=ProductData())


@pytest.mark.parametrize("supplier_type", ["", "priority_pass", "PPG"])
async def test_unknown_supplier(make_context, supplier_type):
    context = make_context()

    with pytest.raises(ConfigurationError) as excinfo:
        await create_order(bare_request(supplier_type), context)

    assert excinfo.value.status_code == 404
    assert excinfo.value.code == ErrorCode.SUPPLIER_NOT_FOUND
    assert excinfo.value.client_error_message == "Supplier not found"
    assert context.requests == []


async def test_dispatches_by_supplier_type(make_context, mocker):
    adapter = SUPPLIERS[SupplierType.ISG]
    mock_create = mocker.patch.object(adapter, "create_order", mocker.AsyncMock(return_value="ISG-9"))
    request = bare_request("isg")
    context = make_context()

    assert await create_order(request, context) == "ISG-9"
    mock_create.assert_awaited_once_with(request, context)
