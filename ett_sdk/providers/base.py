from abc import ABC, abstractmethod

from ett_sdk.context import SDKContext
from ett_sdk.models.auth import AuthorizationServiceConfig, ProviderTag, UserAccount
from ett_sdk.models.errors import AuthenticationError
from ett_sdk.utils.logging import get_logger

logger = get_logger(__name__)


class BaseAuthProvider(ABC):
    """
    Abstract Base Class for identity provider adapters.

    Each adapter validates an inbound access token against one external identity
    scheme and returns a normalized `UserAccount`. Failures are raised as
    `ResponseError` subclasses; the dispatcher passes them through unchanged.
    """

    @property
    @abstractmethod
    def tag(self) -> ProviderTag:
        """The provider tag this adapter handles."""
        raise NotImplementedError

    @abstractmethod
    async def authenticate(
        self,
        service: AuthorizationServiceConfig,
        access_token: str,
        secret_key: str,
        context: SDKContext,
    ) -> UserAccount:
        """
        Validate `access_token` and resolve the user behind it.

        Args:
            service: The widget's active authorization service.
            access_token: The raw, non-empty token supplied by the client.
            secret_key: Key used to decrypt the service's stored secrets.
            context: Shared collaborators (HTTP, object store, notifier, decryptor).
        """
        raise NotImplementedError

    def challenge(
        self, service: AuthorizationServiceConfig, message: str, status_code: int = 401
    ) -> AuthenticationError:
        """An authentication error that tells the client where to re-authenticate."""
        logger.warning("access_token_rejected", provider=self.tag.value, reason=message)
        return AuthenticationError(
            message,
            status_code=status_code,
            challenge=True,
            auth_redirect_url=service.auth_redirect_url,
        )
