from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ProviderTag(str, Enum):
    """Identity providers a widget can authenticate against."""

    AUTH0 = "auth0"
    BEELINE = "beeline"
    ETS = "ets"
    CLICK = "click"
    SCHMETTERLING = "schmetterling"


class AuthorizationServiceConfig(BaseModel):
    """One identity provider's settings as stored on a widget."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    guid: str = ""
    provider: list[str] = Field(default_factory=list)
    domain: str = ""
    audience: str = ""
    client_id: str = ""
    client_secret_copy: str = Field("", description="Encrypted client secret")
    management_domain: str = ""
    management_client_id: str = ""
    management_client_secret_copy: str = Field("", description="Encrypted auth0 management secret")
    token: str = Field("", description="Cached management token")
    token_expire_at: str = Field("", description="RFC3339 expiry of the cached token")
    auth_redirect_url: str = ""
    auth_id: str = ""
    auth_name: str = ""
    tenant: str = ""
    stamp_identity_labels: bool = Field(
        True, description="Copy tenant and auth id onto the resulting user account"
    )


class Widget(BaseModel):
    model_config = ConfigDict(extra="ignore")

    authorization_services: list[AuthorizationServiceConfig] = Field(default_factory=list)


class UserAccount(BaseModel):
    """
    Normalized identity returned by every provider.

    Exactly one provider populates it per call; fields it does not know stay empty.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    external_user_id: str = ""
    external_agency_id: str = ""
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    email: str = ""
    phone: str = ""
    photo: str = ""
    selected_language: str = Field("", alias="selectedLanguage")
    selected_currency: str = Field("", alias="selectedCurrency")
    authorization_provider: str = Field("", alias="authorizationProvider")
    tenant: str | None = None
    auth_id: str | None = Field(None, alias="authId")


class Auth0Identity(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    user_id: str = ""
    provider: str = ""
    is_social: bool = Field(False, alias="isSocial")
    connection: str = ""


class Auth0User(BaseModel):
    """Subset of an Auth0 Management API user record."""

    model_config = ConfigDict(extra="ignore")

    user_id: str = ""
    identities: list[Auth0Identity] = Field(default_factory=list)
    email: str = ""
    username: str = ""
    nickname: str = ""
    name: str = ""
    picture: str = ""
    picture_large: str = ""
    phone_number: str = ""


class Auth0TokenResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str
    expires_in: int = 0
    scope: str = ""
    token_type: str = ""


class BeelineProfile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    phone_number: str = ""
    first_name: str = ""
    middle_name: str = ""
    last_name: str = ""


class ClickProfileResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    client_id: int = 0
    name: str = ""
    surname: str = ""
    patronym: str = ""
    phone_number: str = ""


class ClickRPCError(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: int = 0
    message: str = ""


class ClickProfileResponse(BaseModel):
    """JSON-RPC 2.0 envelope returned by click's `user.profile` method."""

    model_config = ConfigDict(extra="ignore")

    jsonrpc: str = ""
    result: ClickProfileResult | None = None
    error: ClickRPCError | None = None
