"""Auth0: RS256 JWT validation plus a user lookup through the Management API."""

import json
import time
from datetime import timedelta
from typing import Any
from urllib.parse import quote

from authlib.jose import JoseError, JsonWebKey, JsonWebToken
from pydantic import TypeAdapter, ValidationError

from ett_sdk.context import SDKContext
from ett_sdk.models.auth import (
    Auth0TokenResponse,
    Auth0User,
    AuthorizationServiceConfig,
    ProviderTag,
    UserAccount,
)
from ett_sdk.models.errors import AuthenticationError, ResponseError, UpstreamError
from ett_sdk.providers.base import BaseAuthProvider
from ett_sdk.services.object_store import persist_token
from ett_sdk.utils.http import HttpExecutor, HTTPRequestError
from ett_sdk.utils.logging import get_logger
from ett_sdk.utils.timeutil import expiry_from_now, token_refresh_required

logger = get_logger(__name__)

# Constants
MANAGEMENT_API_TIMEOUT = 5.0
JWKS_CACHE_TTL = 300  # Cache JWKS for 5 minutes
TOKEN_REFRESH_MARGIN = timedelta(hours=1)
AUTHORIZATION_SERVICES_TABLE = "authorization_services"

_jwt = JsonWebToken(["RS256"])
_users_adapter = TypeAdapter(list[Auth0User])
_jwks_cache: dict[str, tuple[float, dict[str, Any]]] = {}


def issuer_url(domain: str) -> str:
    """`example.auth0.com` -> `https://example.auth0.com/`."""
    if "https://" not in domain:
        domain = "https://" + domain + "/"
    if not domain.endswith("/"):
        domain += "/"
    return domain


def normalize_photo(identity_provider: str, picture: str, picture_large: str) -> str:
    """
    Pick the best avatar URL for an identity.

    Google encodes the avatar size hint in a `-c` suffix; replacing it with `0`
    requests the original size.
    """
    if identity_provider == "google-oauth2":
        if picture.endswith("-c"):
            return picture.removesuffix("-c") + "0"
        return picture
    return picture_large or picture


async def fetch_jwks(jwks_uri: str, http: HttpExecutor) -> dict[str, Any]:
    """Fetch the provider's JWKS, cached per URI for `JWKS_CACHE_TTL` seconds."""
    cached = _jwks_cache.get(jwks_uri)
    if cached and time.monotonic() - cached[0] < JWKS_CACHE_TTL:
        return cached[1]

    logger.info("auth0_jwks_fetching", jwks_uri=jwks_uri)
    try:
        jwks: dict[str, Any] = json.loads(
            await http.do_request(jwks_uri, "GET", timeout=MANAGEMENT_API_TIMEOUT)
        )
    except (HTTPRequestError, ValueError) as e:
        logger.error("auth0_jwks_fetch_failed", jwks_uri=jwks_uri, error=str(e))
        raise UpstreamError(f"Failed to fetch JWKS: {e}", 500) from e

    _jwks_cache[jwks_uri] = (time.monotonic(), jwks)
    logger.info("auth0_jwks_fetch_success", jwks_uri=jwks_uri, key_count=len(jwks.get("keys", [])))
    return jwks


class Auth0Provider(BaseAuthProvider):
    @property
    def tag(self) -> ProviderTag:
        return ProviderTag.AUTH0

    async def authenticate(
        self,
        service: AuthorizationServiceConfig,
        access_token: str,
        secret_key: str,
        context: SDKContext,
    ) -> UserAccount:
        claims = await self.validate_token(service.domain, service.audience, access_token, context.http)

        sub = claims.get("sub") or ""
        if not sub:
            raise AuthenticationError("Empty sub")

        management_token = service.token
        refresh = True
        if service.token_expire_at:
            try:
                refresh = token_refresh_required(service.token_expire_at, TOKEN_REFRESH_MARGIN)
            except ValueError as e:
                raise ResponseError(f"Failed to parse management token expiry: {e}", 500) from e

        if refresh:
            management_token = await self.refresh_management_token(service, secret_key, context)

        users = await self.search_users(service.domain, sub, management_token, context.http)
        if not users:
            raise AuthenticationError("User not found")

        return self.to_user_account(sub, users[0])

    async def validate_token(
        self, domain: str, audience: str, access_token: str, http: HttpExecutor
    ) -> dict[str, Any]:
        """Verify signature, issuer, audience and expiry of an Auth0 access token."""
        issuer = issuer_url(domain)
        jwks = await fetch_jwks(f"{issuer}.well-known/jwks.json", http)

        try:
            claims = _jwt.decode(
                access_token,
                JsonWebKey.import_key_set(jwks),
                claims_options={
                    "iss": {"essential": True, "value": issuer},
                    "aud": {"essential": True, "value": audience},
                    "exp": {"essential": True},
                },
            )
            claims.validate()
        except (JoseError, ValueError) as e:
            logger.warning("auth0_jwt_validation_failed", issuer=issuer, error=str(e))
            raise AuthenticationError(f"Invalid token: {e}") from e

        return dict(claims)

    async def refresh_management_token(
        self, service: AuthorizationServiceConfig, secret_key: str, context: SDKContext
    ) -> str:
        """Issue a Management API token and persist it on the authorization service."""
        client_secret = context.decrypt(
            secret_key, service.management_client_secret_copy, "auth0 management client secret"
        )

        domain = service.management_domain
        audience = domain + "/api/v2/"
        if "https://" not in domain:
            domain = "https://" + domain + "/"
            audience = "https://" + audience
        if not domain.endswith("/"):
            domain += "/"

        payload = {
            "client_id": service.management_client_id,
            "client_secret": client_secret,
            "audience": audience,
            "grant_type": "client_credentials",
        }
        try:
            body = await context.http.do_request(
                domain + "oauth/token",
                "POST",
                payload,
                headers={"Content-Type": "application/json"},
                timeout=MANAGEMENT_API_TIMEOUT,
            )
        except HTTPRequestError as e:
            logger.error("auth0_management_token_failed", domain=domain, error=str(e))
            raise AuthenticationError(f"Failed to get management token: {e}") from e

        try:
            token_response = Auth0TokenResponse.model_validate_json(body)
        except ValidationError as e:
            raise ResponseError(f"Failed to unmarshal token response: {e}", 500) from e

        token_expire_at = expiry_from_now(token_response.expires_in)
        await persist_token(
            context.object_store,
            AUTHORIZATION_SERVICES_TABLE,
            service.guid,
            token_response.access_token,
            token_expire_at,
        )
        service.token = token_response.access_token
        service.token_expire_at = token_expire_at
        logger.info("auth0_management_token_refreshed", guid=service.guid, token_expire_at=token_expire_at)
        return token_response.access_token

    async def search_users(
        self, domain: str, sub: str, management_token: str, http: HttpExecutor
    ) -> list[Auth0User]:
        url = f"{issuer_url(domain)}api/v2/users?search_engine=v3&q=user_id%3D%22{quote(sub, safe='')}%22"
        try:
            body = await http.do_request(
                url,
                "GET",
                headers={"Authorization": "Bearer " + management_token},
                timeout=MANAGEMENT_API_TIMEOUT,
            )
        except HTTPRequestError as e:
            logger.error("auth0_user_search_failed", error=str(e))
            raise AuthenticationError(f"Failed to search users: {e}") from e

        try:
            return _users_adapter.validate_json(body)
        except ValidationError as e:
            raise ResponseError(f"Failed to unmarshal users: {e}", 500) from e

    @staticmethod
    def to_user_account(sub: str, user: Auth0User) -> UserAccount:
        account = UserAccount(
            external_user_id=sub,
            first_name=user.name,
            email=user.email,
            phone=user.phone_number,
        )

        # Best effort: only "First Last" splits cleanly, anything else stays whole in first_name
        full_name = user.name.split(" ")
        if len(full_name) == 2:
            account.first_name, account.last_name = full_name

        for identity in user.identities:
            account.photo = normalize_photo(identity.provider, user.picture, user.picture_large)

        return account
