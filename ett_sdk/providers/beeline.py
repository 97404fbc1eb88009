"""Beeline: RSA-signed JWTs verified with a public key stored on the widget."""

from authlib.jose import JoseError, JsonWebToken
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from pydantic import ValidationError

from ett_sdk.context import SDKContext
from ett_sdk.models.auth import AuthorizationServiceConfig, BeelineProfile, ProviderTag, UserAccount
from ett_sdk.models.errors import UpstreamError
from ett_sdk.providers.base import BaseAuthProvider
from ett_sdk.utils.http import HttpExecutor, HTTPRequestError
from ett_sdk.utils.logging import get_logger

logger = get_logger(__name__)

PROFILE_TIMEOUT = 10.0

_jwt = JsonWebToken(["RS256", "RS384", "RS512"])


def public_key_pem(chunks: str) -> str:
    """
    Rebuild a PEM document from a key stored as space-separated base64 lines.

    Raises:
        ValueError: if the result is not an RSA public key.
    """
    pem = "-----BEGIN PUBLIC KEY-----\n" + chunks.replace(" ", "\n") + "\n-----END PUBLIC KEY-----\n"
    key = serialization.load_pem_public_key(pem.encode())
    if not isinstance(key, rsa.RSAPublicKey):
        raise ValueError("not an RSA public key")
    return pem


def validate_token(public_key: str, access_token: str) -> str:
    """
    Verify an RS-family JWT and return its `user_id` claim.

    Raises:
        ValueError, JoseError: on a bad key, bad signature, expired token or
            missing `user_id`.
    """
    pem = public_key_pem(public_key)
    claims = _jwt.decode(access_token.removeprefix("Bearer "), pem)
    claims.validate()

    user_id = claims.get("user_id")
    if user_id is None:
        raise ValueError("user_id not found in claims")
    return str(user_id)


async def get_profile(http: HttpExecutor, domain: str, access_token: str) -> BeelineProfile:
    if "https://" not in domain:
        domain = "https://" + domain

    response = await http.send(
        "GET",
        f"{domain}/api/v1/external/integration/user",
        headers={"token": access_token},
        timeout=PROFILE_TIMEOUT,
    )
    if response.status_code != 200:
        raise HTTPRequestError(
            f"failed to get user, status is not 200: {response.text}",
            response.status_code,
            response.content,
        )
    return BeelineProfile.model_validate_json(response.content)


class BeelineProvider(BaseAuthProvider):
    @property
    def tag(self) -> ProviderTag:
        return ProviderTag.BEELINE

    async def authenticate(
        self,
        service: AuthorizationServiceConfig,
        access_token: str,
        secret_key: str,
        context: SDKContext,
    ) -> UserAccount:
        public_key = context.decrypt(secret_key, service.client_secret_copy, "beeline public key")

        try:
            user_id = validate_token(public_key, access_token)
        except (JoseError, ValueError) as e:
            raise self.challenge(service, f"Invalid token: {e}") from e
        if not user_id:
            raise self.challenge(service, "User id is required")

        try:
            profile = await get_profile(context.http, service.domain, access_token)
        except (HTTPRequestError, ValidationError) as e:
            logger.error("beeline_profile_failed", domain=service.domain, error=str(e))
            raise UpstreamError(f"Failed to get user profile: {e}", 500) from e

        if not profile.phone_number:
            raise self.challenge(service, "Phone number not found")

        phone = profile.phone_number
        if not phone.startswith("+"):
            phone = "+" + phone

        return UserAccount(
            external_user_id=user_id,
            phone=phone,
            first_name=profile.first_name,
            last_name=profile.last_name,
        )
