import hashlib
import hmac

from ett_sdk.context import SDKContext
from ett_sdk.models.auth import AuthorizationServiceConfig, ProviderTag, UserAccount
from ett_sdk.providers.base import BaseAuthProvider


def sign_user_id(client_secret: str, user_id: str) -> str:
    """The token tail ETS expects for `user_id`: hex MD5 of secret + user id."""
    return hashlib.md5((client_secret + user_id).encode()).hexdigest()


class ETSProvider(BaseAuthProvider):
    """Tokens of the form `<userId>_<md5(secret + userId)>`."""

    @property
    def tag(self) -> ProviderTag:
        return ProviderTag.ETS

    async def authenticate(
        self,
        service: AuthorizationServiceConfig,
        access_token: str,
        secret_key: str,
        context: SDKContext,
    ) -> UserAccount:
        parts = access_token.split("_")
        if len(parts) != 2:
            raise self.challenge(service, "Invalid accessToken")
        user_id, signature = parts

        client_secret = context.decrypt(secret_key, service.client_secret_copy, "ets client secret")
        if not hmac.compare_digest(sign_user_id(client_secret, user_id), signature):
            raise self.challenge(service, "Invalid accessToken")

        return UserAccount(external_user_id=user_id, email=user_id)
