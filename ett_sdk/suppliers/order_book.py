import threading
from collections.abc import Callable

from ett_sdk.models.supplier import HighPassCreateOrderRequest


class HighPassOrderBook:
    """
    Aggregated HighPass orders of one batch, keyed by `hp_code|product_date`.

    Lines of the same batch may be processed by concurrent tasks or worker threads;
    the lookup and the insert happen under one lock so a key is built once.
    """

    def __init__(self) -> None:
        self._orders: dict[str, HighPassCreateOrderRequest] = {}
        self._lock = threading.Lock()

    def get_or_insert(
        self, key: str, builder: Callable[[], HighPassCreateOrderRequest]
    ) -> tuple[HighPassCreateOrderRequest, bool]:
        """Return the order stored under `key`, building and storing it first if absent."""
        with self._lock:
            existing = self._orders.get(key)
            if existing is not None:
                return existing, False
            order = builder()
            self._orders[key] = order
            return order, True

    def get(self, key: str) -> HighPassCreateOrderRequest | None:
        with self._lock:
            return self._orders.get(key)

    def items(self) -> list[tuple[str, HighPassCreateOrderRequest]]:
        with self._lock:
            return list(self._orders.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._orders
