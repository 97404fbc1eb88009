from inspect import iscoroutinefunction
from typing import Any

from ett_sdk.models.auth import ProviderTag
from ett_sdk.providers.auth0 import Auth0Provider
from ett_sdk.providers.base import BaseAuthProvider
from ett_sdk.providers.beeline import BeelineProvider
from ett_sdk.providers.click import ClickProvider
from ett_sdk.providers.ets import ETSProvider
from ett_sdk.providers.schmetterling import SchmetterlingProvider


class ProviderRegistrationError(Exception):
    """Custom exception for provider registration errors."""
    pass


class ProviderRegistry:
    """
    Maps provider tags to the adapter that authenticates them.
    """

    def __init__(self) -> None:
        self._registered_providers: dict[ProviderTag, BaseAuthProvider] = {}

    def register_provider(self, provider: BaseAuthProvider) -> None:
        """
        Registers an identity provider adapter after validating it.

        Args:
            provider: An instance of a class inheriting from BaseAuthProvider.

        Raises:
            ProviderRegistrationError: If the adapter is invalid or its tag is taken.
        """
        self._validate_provider_instance(provider)
        self._validate_provider_properties(provider)
        self._validate_duplicate_tag(provider)

        self._registered_providers[provider.tag] = provider

    def _validate_provider_instance(self, provider: Any) -> None:
        """Checks if the provided object is an instance of BaseAuthProvider."""
        if not isinstance(provider, BaseAuthProvider):
            raise ProviderRegistrationError(
                f"Provided object is not an instance of BaseAuthProvider: {type(provider)}"
            )

    def _validate_provider_properties(self, provider: BaseAuthProvider) -> None:
        if not isinstance(provider.tag, ProviderTag):
            raise ProviderRegistrationError(f"Provider tag must be a ProviderTag, got {provider.tag!r}.")
        if not iscoroutinefunction(provider.authenticate):
            raise ProviderRegistrationError(
                f"Provider '{provider.tag.value}' must have an async 'authenticate' method."
            )

    def _validate_duplicate_tag(self, provider: BaseAuthProvider) -> None:
        if provider.tag in self._registered_providers:
            raise ProviderRegistrationError(f"Provider '{provider.tag.value}' already registered.")

    def get_provider(self, tag: ProviderTag) -> BaseAuthProvider | None:
        return self._registered_providers.get(tag)

    def get_registered_tags(self) -> list[ProviderTag]:
        return list(self._registered_providers.keys())


def build_provider_registry() -> ProviderRegistry:
    """A registry with every built-in identity provider."""
    registry = ProviderRegistry()
    registry.register_provider(Auth0Provider())
    registry.register_provider(BeelineProvider())
    registry.register_provider(ETSProvider())
    registry.register_provider(ClickProvider())
    registry.register_provider(SchmetterlingProvider())
    return registry
