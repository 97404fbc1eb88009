"""Data models for the SDK."""

from ett_sdk.models.auth import AuthorizationServiceConfig, ProviderTag, UserAccount, Widget
from ett_sdk.models.errors import (
    AuthenticationError,
    ConfigurationError,
    ErrorCode,
    ErrorDetail,
    PersistenceError,
    ResponseError,
    SupplierOrderError,
    UpstreamError,
)
from ett_sdk.models.supplier import (
    AdditionalData,
    OrderData,
    PaxInfo,
    ProductData,
    SupplierData,
    SupplierType,
)

__all__ = [
    "AdditionalData",
    "AuthenticationError",
    "AuthorizationServiceConfig",
    "ConfigurationError",
    "ErrorCode",
    "ErrorDetail",
    "OrderData",
    "PaxInfo",
    "PersistenceError",
    "ProductData",
    "ProviderTag",
    "ResponseError",
    "SupplierData",
    "SupplierOrderError",
    "SupplierType",
    "UpstreamError",
    "UserAccount",
    "Widget",
]
