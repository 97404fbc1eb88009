"""ETS payment hub request and response models."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class PaymentDetails(BaseModel):
    order_id: str = ""
    customer: str = ""
    email: str = ""


class PayRegisterBody(BaseModel):
    """
    Payment registration. Field order is part of the signature: the hub signs the
    compact JSON of exactly these fields, in this order, with empty optionals omitted.
    """

    psp_id: int = 0
    amount: int = 0
    lifetime: int = 0
    currency: str = ""
    success_url: str = ""
    fail_url: str = ""
    callback_url: str = ""
    details: PaymentDetails | None = None
    signature: str = ""

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(exclude={"details", "signature"})
        if self.details is not None:
            payload["details"] = self.details.model_dump(exclude_defaults=True)
        if self.signature:
            payload["signature"] = self.signature
        return payload


class CheckPayRequest(BaseModel):
    order_id: str = ""
    amount: int = 0
    currency: str = ""
    signature: str = ""

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(exclude={"signature"})
        if self.signature:
            payload["signature"] = self.signature
        return payload


class PayRegisterResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    error_code: int = 0
    error_message: str = ""
    order_id: str = ""
    status: str = ""
    amount: int = 0
    currency: str = ""
    details: dict[str, Any] | None = None
    redirect_url: str = ""
