"""ISG premium services."""

from urllib.parse import urlencode

from pydantic import ValidationError

from ett_sdk.context import SDKContext
from ett_sdk.models.supplier import ISGServiceRequest, ISGServiceResponse, SupplierType
from ett_sdk.suppliers.base import BaseSupplier, CreateOrderRequest, vendor_error
from ett_sdk.utils.http import HttpExecutor, HTTPRequestError

ISG_TIMEOUT = 60.0


def service_url(request: ISGServiceRequest) -> str:
    """The create URL, with the query parameters sorted by name."""
    params = {
        "authKey": request.auth_key,
        "firstname": request.first_name,
        "lastname": request.last_name,
        "productid": request.product_id,
        "isTest": "true" if request.is_test else "false",
    }
    if request.max_use_count > 0:
        params["maxusecount"] = str(request.max_use_count)
    return request.url + "/premiumservices/create?" + urlencode(sorted(params.items()))


async def create_isg_service(request: ISGServiceRequest, http: HttpExecutor) -> ISGServiceResponse:
    url = service_url(request)
    try:
        response = await http.send("POST", url, timeout=ISG_TIMEOUT)
    except HTTPRequestError as e:
        raise vendor_error(f"Supplier API request failed, failed to do ISG Service request: {e}") from e

    if response.status_code != 200:
        raise vendor_error(f"Supplier API request failed, unexpected status code: {response.status_code}")

    try:
        result = ISGServiceResponse.model_validate_json(response.content)
    except ValidationError as e:
        raise vendor_error(f"Supplier API request failed, failed to unmarshal ISG Service response: {e}") from e

    if result.error:
        raise vendor_error(
            "Supplier API request failed, ISG Service Error: " + result.error_message,
            f"body: {response.text}",
        )
    return result


class ISGSupplier(BaseSupplier):
    @property
    def type(self) -> SupplierType:
        return SupplierType.ISG

    async def create_order(self, request: CreateOrderRequest, context: SDKContext) -> str:
        result = await create_isg_service(
            ISGServiceRequest(
                url=request.supplier.api_url,
                auth_key=request.supplier.password,
                first_name=request.order.first_name,
                last_name=request.order.last_name,
                product_id=request.product.isg_code,
                is_test=not request.additional.is_production,
                max_use_count=request.order.total_pax,
            ),
            context.http,
        )
        return result.data.code
