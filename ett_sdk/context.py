"""Collaborators shared by both dispatchers."""

from dataclasses import dataclass, field

import httpx

from ett_sdk.config import Config, get_config
from ett_sdk.services.crypto import AESDecryptor, Decryptor, decrypt_with_fallback
from ett_sdk.services.notifier import LogNotifier, Notifier, TelegramNotifier, notify_in_background
from ett_sdk.services.object_store import ObjectStore, ObjectStoreClient
from ett_sdk.utils.http import HttpExecutor


@dataclass
class SDKContext:
    """
    Everything an adapter needs besides its own inputs: the HTTP executor, the
    object store for persisting refreshed tokens, the operator notifier and the
    secret decryptor.
    """

    http: HttpExecutor
    object_store: ObjectStore
    notifier: Notifier = field(default_factory=LogNotifier)
    decryptor: Decryptor = field(default_factory=AESDecryptor)

    @classmethod
    def from_config(
        cls,
        config: Config | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SDKContext":
        config = config or get_config()
        http = HttpExecutor(transport)

        notifier: Notifier = LogNotifier()
        if config.telegram_bot_token is not None and config.account_ids:
            notifier = TelegramNotifier(
                config.telegram_bot_token.get_secret_value(),
                config.account_ids,
                config.function_name,
                http,
            )

        return cls(
            http=http,
            object_store=ObjectStoreClient(
                config.object_store_base_url, config.object_store_app_id.get_secret_value(), http
            ),
            notifier=notifier,
        )

    def decrypt(self, key: str, value: str, label: str) -> str:
        """Decrypt a stored secret, keeping the stored value when decryption fails."""
        return decrypt_with_fallback(self.decryptor, key, value, self.notifier, label)

    def alert(self, text: str) -> None:
        """Fire-and-forget operator notification."""
        notify_in_background(self.notifier, text)
