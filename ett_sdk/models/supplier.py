"""Supplier, order-line and vendor payload models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SupplierType(str, Enum):
    """Travel-service vendors an order line can be placed with."""

    PPG = "ppg"
    DREAMFOLKS = "dreamfolks"
    ALL_AIRPORTS = "all_airports"
    HIGHPASS = "highpass"
    ISG = "isg"


class SupplierData(BaseModel):
    """One supplier's credentials and cached bearer token."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    guid: str = ""
    type: str = ""
    username: str = ""
    password: str = ""
    api_url: str = ""
    token: str = ""
    token_expire_at: str = ""
    ai_short_code: str = ""
    auth_url: str = Field("", alias="supplier_auth_url")
    contact_person: str = ""
    email: str = ""
    phone: str = ""


class OrderData(BaseModel):
    first_name: str = ""
    last_name: str = ""
    total_pax: int = 0
    pax_type: list[str] = Field(default_factory=list)
    product_date: str = ""
    agent_transaction_id: str = ""
    agent_order_item_id: str = ""


class ProductData(BaseModel):
    product_value: float = 0
    location_short_code: float = 0
    df_code: str = ""
    aa_code: str = ""
    hp_code: str = ""
    isg_code: str = ""
    timezone_offset: str = Field("", description='Local offset of the product, e.g. "+05:00"')
    destination_city: str = ""


class AdditionalData(BaseModel):
    environment_id: str = ""
    prod_env_id: str = ""

    @property
    def is_production(self) -> bool:
        # An unset production id never matches
        return bool(self.prod_env_id) and self.environment_id == self.prod_env_id


class PaxInfo(BaseModel):
    """Passenger counts and details merged per HighPass aggregation key by the caller."""

    adults: int = 0
    children: int = 0
    names: list[str] = Field(default_factory=list)
    flight_number: str = ""
    terminal_type: str = ""
    offset: str = ""
    has_animal: bool = False
    additional_phone_number: str = ""
    driver_phone_number: str = ""
    vehicle_license_plate: str = ""
    preferred_service_language: str = ""
    comment: str = ""
    flight_route_data: str = ""
    companions_count: int = 0
    baggage_count: int = 0
    need_stroller: bool = False
    needs_wheelchair: bool = False
    flight_route: str = ""
    phone: str = ""
    category: int = 0


class Airline(BaseModel):
    code: str = ""
    name: str = ""


class FlightInfo(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    flight_number: str = Field("", alias="flightNumber")
    departure_time: str = Field("", alias="departureTime")
    departure_airport_iata_code: str = Field("", alias="departureAirportIATACode")
    departure_terminal: str = Field("", alias="departureTerminal")
    arrival_airport_iata_code: str = Field("", alias="arrivalAirportIATACode")
    arrival_terminal: str = Field("", alias="arrivalTerminal")
    arrival_time: str = Field("", alias="arrivalTime")
    airline: Airline = Field(default_factory=Airline)
    departure_country: str = Field("", alias="departureCountry")
    arrival_country: str = Field("", alias="arrivalCountry")
    arrival_airport_timezone_offset: float = Field(0, alias="arrivalAirportTimezoneOffset")
    departure_airport_timezone_offset: float = Field(0, alias="departureAirportTimezoneOffset")
    departure_terminal_id: str = Field("", alias="departureTerminalId")
    is_static_departure_airport_code: bool = Field(False, alias="IsStaticDepartureAirportCode")
    visit_date: str = Field("", alias="visitDate")


class LoginResult(BaseModel):
    """Token issued by a supplier login, with its RFC3339 expiry."""

    token: str
    expires: str


# HighPass

# Serialized last and only when non-empty
HIGHPASS_OPTIONAL_FIELDS = ("otherPassengersContactDetails", "comment", "carPlateNumber", "flightRouteData")


class HighPassOrderItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    service_id: str = Field("", alias="serviceId")
    flight_number: str = Field("", alias="flightNumber")
    service_date: str = Field("", alias="serviceDate")
    adult_count: int = Field(0, alias="adultCount")
    child_count: int = Field(0, alias="childCount")
    infant_count: int = Field(0, alias="infantCount")
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    email: str = ""
    phone: str = ""
    culture: str = ""
    is_date_time_of_passengers_arrival_to_airport: bool = Field(
        False, alias="isDateTimeOfPassengersArrivalToAirport"
    )
    other_passengers_contact_details: str = Field("", alias="otherPassengersContactDetails")
    comment: str = ""
    car_plate_number: str = Field("", alias="carPlateNumber")
    flight_route_data: str = Field("", alias="flightRouteData")

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(by_alias=True)
        for name in HIGHPASS_OPTIONAL_FIELDS:
            if not payload[name]:
                del payload[name]
        return payload


class HighPassOrder(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    orders: list[HighPassOrderItem] = Field(default_factory=list)
    public_api_key: str = Field("", alias="publicApiKey")

    def to_payload(self) -> dict[str, Any]:
        return {
            "orders": [item.to_payload() for item in self.orders],
            "publicApiKey": self.public_api_key,
        }


class HighPassCreateOrderRequest(BaseModel):
    """One aggregated downstream order, shared by every passenger on the same service and date."""

    url: str
    token: str
    private_key: str
    coupon: str = ""
    order: HighPassOrder


class HighPassCouponData(BaseModel):
    coupon_code: str = ""
    qr_data: str = ""
    order_id: str = ""


class ISGServiceRequest(BaseModel):
    url: str
    auth_key: str
    first_name: str = ""
    last_name: str = ""
    product_id: str = ""
    is_test: bool = True
    max_use_count: int = 0


class HighPassOrderResult(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    passenger_name: str = Field("", alias="passengerName")
    high_pass_order_id: str = Field("", alias="highPassOrderId")
    booking_code: str = Field("", alias="bookingCode")
    order_number: int = Field(0, alias="orderNumber")
    service_id: str = Field("", alias="serviceId")
    service_date_local: str = Field("", alias="serviceDateLocal")
    qr_data: list[str] = Field(default_factory=list, alias="qrData")
    error_message: str = Field("", alias="errorMessage")


class HighPassOrderResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    orders: list[HighPassOrderResult] = Field(default_factory=list)


# Vendor responses


class TokenResponse(BaseModel):
    """OAuth2 client-credentials answer (All Airports, HighPass)."""

    model_config = ConfigDict(extra="ignore")

    access_token: str = ""
    expires_in: int = 0
    token_type: str = ""


class PPGLoginResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    session: str = ""
    token: str = ""
    expires: str = ""


class PPGCouponResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    coupon: str = ""


class PPGCouponResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: int = 0
    tag: str = ""
    description: str = ""
    result: PPGCouponResult = Field(default_factory=PPGCouponResult)


class DreamfolksVoucher(BaseModel):
    model_config = ConfigDict(extra="ignore")

    voucher_code: int = 0
    ecert_url: str = ""
    request_identifier: str = ""


class DreamfolksVoucherResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: bool = False
    message: str = ""
    code: int = 0
    data: DreamfolksVoucher = Field(default_factory=DreamfolksVoucher)


class ISGServiceData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str = Field("", alias="Code")
    pass_url: str = Field("", alias="PassUrl")


class ISGServiceResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    error: bool = Field(False, alias="Error")
    error_message: str = Field("", alias="ErrorMessage")
    error_code: int = Field(0, alias="ErrorCode")
    data: ISGServiceData = Field(default_factory=ISGServiceData, alias="Data")
