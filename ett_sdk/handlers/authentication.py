"""GetUserByAccessToken: resolve an end user from a widget's active identity provider."""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ett_sdk.context import SDKContext
from ett_sdk.models.auth import ProviderTag, UserAccount, Widget
from ett_sdk.models.errors import AuthenticationError, ConfigurationError, ErrorCode, ResponseError
from ett_sdk.registry.provider_registry import ProviderRegistry, build_provider_registry
from ett_sdk.utils.logging import get_logger

logger = get_logger(__name__)

_default_registry: ProviderRegistry | None = None


def get_provider_registry() -> ProviderRegistry:
    global _default_registry
    if _default_registry is None:
        _default_registry = build_provider_registry()
    return _default_registry


async def get_user_by_access_token(
    widget_object: Mapping[str, Any],
    access_token: str,
    secret_key: str,
    context: SDKContext,
    registry: ProviderRegistry | None = None,
) -> UserAccount:
    """
    Authenticate `access_token` against the first authorization service of the widget.

    Args:
        widget_object: Widget record with an `authorization_services` list.
        access_token: Token presented by the end user.
        secret_key: Key used to decrypt stored provider secrets.
        context: Shared collaborators.
        registry: Provider adapters; defaults to every built-in provider.

    Returns:
        The normalized user, stamped with the provider tag (and, when the service
        asks for it, the tenant and auth id).

    Raises:
        ResponseError: on any configuration, authentication or upstream failure.
    """
    try:
        widget = Widget.model_validate(widget_object)
    except ValidationError as e:
        logger.error("widget_parse_failed", error=str(e))
        raise ResponseError(f"Failed to parse widget object: {e}", 500) from e

    if not widget.authorization_services:
        raise ConfigurationError("Authorization service not found", ErrorCode.SERVICE_NOT_FOUND)

    service = widget.authorization_services[0]
    if not service.provider:
        raise ConfigurationError("Authorization provider not found")

    if not access_token:
        raise AuthenticationError(
            "Token is required", challenge=True, auth_redirect_url=service.auth_redirect_url
        )

    try:
        tag = ProviderTag(service.provider[0])
    except ValueError:
        logger.warning("unknown_authorization_provider", provider=service.provider[0])
        raise ConfigurationError("Authorization provider not found") from None

    provider = (registry or get_provider_registry()).get_provider(tag)
    if provider is None:
        raise ConfigurationError("Authorization provider not found")

    log = logger.bind(provider=tag.value, service_guid=service.guid)
    try:
        account = await provider.authenticate(service, access_token, secret_key, context)
    except ResponseError as e:
        log.warning("authentication_failed", status_code=e.status_code, error=e.error_message)
        raise

    account.authorization_provider = tag.value
    if service.stamp_identity_labels:
        account.tenant = service.tenant or None
        account.auth_id = service.auth_id or None

    log.info("user_authenticated", external_user_id=account.external_user_id)
    return account
