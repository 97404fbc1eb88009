"""
ETS payment hub client.

Not an order supplier: these calls register, check and confirm card payments
for an order and are invoked directly by the payment flow.
"""

import hashlib
import hmac
from typing import Any

from pydantic import ValidationError

from ett_sdk.models.errors import UpstreamError
from ett_sdk.models.payment import CheckPayRequest, PayRegisterBody, PayRegisterResponse
from ett_sdk.utils.http import HttpExecutor, HTTPRequestError, compact_json
from ett_sdk.utils.logging import get_logger

logger = get_logger(__name__)

HUB_TIMEOUT = 5.0
HUB_TOKEN_HEADER = "payment-hub-token"
ALREADY_CONFIRMED = 203
HTML_ESCAPES = (("&", "\\u0026"), ("<", "\\u003c"), (">", "\\u003e"))

# Hub error codes and the status reported for them
HUB_ERROR_STATUS: dict[int, int] = {
    101: 401,
    102: 400,
    103: 403,
    201: 400,
    202: 404,
    301: 404,
    302: 404,
    303: 404,
}


def sign(secret_key: str, data: str) -> str:
    return hmac.new(secret_key.encode(), data.encode(), hashlib.sha256).hexdigest()


def get_signature_hash(secret_key: str, body: PayRegisterBody | CheckPayRequest) -> str:
    """
    HMAC-SHA256 (hex) of the compact JSON body, serialized the way the hub does
    before signing: `/` written as `\\/` and HTML characters as unicode escapes.
    """
    data = compact_json(body.to_payload())
    for char, escaped in HTML_ESCAPES:
        data = data.replace(char, escaped)
    data = data.replace("/", "\\/")
    return sign(secret_key, data)


class ETSHubClient:
    def __init__(self, base_url: str, token: str, http: HttpExecutor | None = None) -> None:
        self.base_url = base_url
        self.token = token
        self.http = http or HttpExecutor()

    async def pay_register(self, body: PayRegisterBody) -> PayRegisterResponse:
        return await self._call("/hub/pay/register", body.to_payload())

    async def pay_check_status(self, body: CheckPayRequest) -> PayRegisterResponse:
        return await self._call("/hub/pay/status", body.to_payload())

    async def pay_confirm(self, body: CheckPayRequest) -> PayRegisterResponse:
        """Confirm a payment. A payment that is already confirmed is not an error."""
        return await self._call("/hub/pay/confirm", body.to_payload(), tolerated=(ALREADY_CONFIRMED,))

    async def _call(
        self, path: str, payload: dict[str, Any], tolerated: tuple[int, ...] = ()
    ) -> PayRegisterResponse:
        url = self.base_url + path
        try:
            body = await self.http.do_request(
                url,
                "POST",
                payload,
                headers={HUB_TOKEN_HEADER: self.token, "Content-Type": "application/json"},
                timeout=HUB_TIMEOUT,
            )
        except HTTPRequestError as e:
            logger.error("ets_hub_request_failed", path=path, error=str(e), status_code=e.status_code)
            raise UpstreamError(f"ETS hub request {path} failed: {e}", 500) from e

        try:
            response = PayRegisterResponse.model_validate_json(body)
        except ValidationError as e:
            raise UpstreamError(f"{e}, body: {body.decode(errors='replace')}", 500) from e

        if response.error_code != 0 and response.error_code not in tolerated:
            status_code = HUB_ERROR_STATUS.get(response.error_code, 500)
            logger.warning("ets_hub_rejected", path=path, error_code=response.error_code, status_code=status_code)
            raise UpstreamError(
                f"error_code: {response.error_code}, error_message: {response.error_message}", status_code
            )

        return response
