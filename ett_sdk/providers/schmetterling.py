from ett_sdk.context import SDKContext
from ett_sdk.models.auth import AuthorizationServiceConfig, ProviderTag, UserAccount
from ett_sdk.providers.base import BaseAuthProvider


class SchmetterlingProvider(BaseAuthProvider):
    """Opaque `<agencyId>_<userId>` tokens; only the shape is checked."""

    @property
    def tag(self) -> ProviderTag:
        return ProviderTag.SCHMETTERLING

    async def authenticate(
        self,
        service: AuthorizationServiceConfig,
        access_token: str,
        secret_key: str,
        context: SDKContext,
    ) -> UserAccount:
        parts = access_token.split("_")
        if len(parts) != 2 or not parts[0]:
            raise self.challenge(service, "Invalid accessToken")

        agency_id, user_id = parts
        return UserAccount(external_agency_id=agency_id, external_user_id=user_id, email=user_id)
