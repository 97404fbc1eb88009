"""Click: the access token is a web session resolved through a JSON-RPC profile call."""

from pydantic import ValidationError

from ett_sdk.context import SDKContext
from ett_sdk.models.auth import AuthorizationServiceConfig, ClickProfileResponse, ProviderTag, UserAccount
from ett_sdk.models.errors import UpstreamError
from ett_sdk.providers.base import BaseAuthProvider
from ett_sdk.utils.http import HTTPRequestError
from ett_sdk.utils.logging import get_logger

logger = get_logger(__name__)

PROFILE_TIMEOUT = 10.0
PROFILE_REQUEST = '{"jsonrpc":"2.0","method":"user.profile","id":126}'

# Known RPC error messages and the status reported for them; anything else is 401
CLICK_ERROR_STATUS: dict[str, int] = {
    "Сессия прервана. Войдите в приложение заново": 401,
}


class ClickProvider(BaseAuthProvider):
    @property
    def tag(self) -> ProviderTag:
        return ProviderTag.CLICK

    async def authenticate(
        self,
        service: AuthorizationServiceConfig,
        access_token: str,
        secret_key: str,
        context: SDKContext,
    ) -> UserAccount:
        client_secret = context.decrypt(secret_key, service.client_secret_copy, "click client secret")

        domain = service.domain
        if "https://" not in domain:
            domain = "https://" + domain

        try:
            response = await context.http.send(
                "POST",
                f"{domain}/integration",
                content=PROFILE_REQUEST.encode(),
                headers={
                    "Content-Type": "application/json",
                    "web_session": access_token,
                    "Authorization": "Bearer " + client_secret,
                },
                timeout=PROFILE_TIMEOUT,
            )
            if response.status_code != 200:
                raise HTTPRequestError(
                    f"failed to get user, status is not 200: {response.text}",
                    response.status_code,
                    response.content,
                )
            profile = ClickProfileResponse.model_validate_json(response.content)
        except (HTTPRequestError, ValidationError) as e:
            logger.error("click_profile_failed", domain=domain, error=str(e))
            raise UpstreamError(f"Failed to get user profile: {e}", 500) from e

        error = profile.error
        if error is not None and (error.code != 0 or error.message):
            raise self.challenge(service, error.message, CLICK_ERROR_STATUS.get(error.message, 401))

        result = profile.result
        if result is None or result.client_id == 0:
            raise self.challenge(service, "Client id is required")

        return UserAccount(
            external_user_id=str(result.client_id),
            phone=result.phone_number,
            first_name=result.name,
            last_name=result.surname,
        )
