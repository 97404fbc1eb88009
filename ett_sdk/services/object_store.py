"""Object store client used to persist refreshed provider and supplier tokens."""

import json
from typing import Any, Protocol

from ett_sdk.models.errors import PersistenceError
from ett_sdk.utils.http import HttpExecutor, HTTPRequestError
from ett_sdk.utils.logging import get_logger

logger = get_logger(__name__)

OBJECT_STORE_TIMEOUT = 30.0


class ObjectStore(Protocol):
    async def update_object(self, table_slug: str, data: dict[str, Any]) -> dict[str, Any]: ...


class ObjectStoreClient:
    def __init__(self, base_url: str, app_id: str, http: HttpExecutor | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.app_id = app_id
        self.http = http or HttpExecutor()

    async def update_object(self, table_slug: str, data: dict[str, Any]) -> dict[str, Any]:
        """
        Update one object of `table_slug` identified by `data["guid"]`.

        Raises:
            HTTPRequestError: if the store is unreachable or rejects the update.
            ValueError: if the store answers with something other than JSON.
        """
        url = f"{self.base_url}/v1/object/{table_slug}?from-ofs=true&block_builder=true"
        body = await self.http.do_request(
            url, "PUT", {"data": data}, self.app_id, timeout=OBJECT_STORE_TIMEOUT
        )
        return json.loads(body)


async def persist_token(
    store: ObjectStore,
    table_slug: str,
    guid: str,
    token: str,
    token_expire_at: str,
    *,
    status_code: int = 500,
) -> None:
    """
    Write a refreshed token back to the store.

    A failed write aborts the caller: continuing with a token that was never saved
    would leave the cache and the store out of sync.
    """
    try:
        await store.update_object(
            table_slug, {"guid": guid, "token": token, "token_expire_at": token_expire_at}
        )
    except HTTPRequestError as e:
        logger.error("token_persist_failed", table=table_slug, guid=guid, error=str(e))
        raise PersistenceError(
            f"Failed to persist refreshed token: {e}",
            status_code,
            description=e.body.decode(errors="replace"),
        ) from e
    except ValueError as e:
        logger.error("token_persist_failed", table=table_slug, guid=guid, error=str(e))
        raise PersistenceError(f"Failed to decode object store response: {e}", status_code) from e

    logger.info("token_persisted", table=table_slug, guid=guid, token_expire_at=token_expire_at)
