# storefront/services/cache.py
from collections import OrderedDict, defaultdict
from typing import Any, Callable, Hashable

from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ORDERS = "orders"

DEFAULT_MAX_ENTRIES = 1024


class InvalidationBus:
    """
    Szyna uniewaznien cache - jedna instancja na aplikacje (app.state),
    przekazywana przez referencje do serwisow ktore modyfikuja kolekcje.
    """

    def __init__(self):
        self._subscribers: dict[str, list[Callable[[str], None]]] = defaultdict(list)

    def subscribe(self, collection: str, callback: Callable[[str], None]) -> None:
        self._subscribers[collection].append(callback)

    def invalidate(self, collection: str) -> None:
        callbacks = self._subscribers.get(collection, [])
        logger.debug(f"Invalidating {collection} ({len(callbacks)} subscribers)")
        for callback in callbacks:
            callback(collection)


class QueryCache:
    """
    Cache odczytow dla jednej kolekcji, czyszczony przez InvalidationBus.
    Trzyma gotowe slowniki (nie obiekty ORM), najwyzej max_entries kluczy (LRU).
    """

    def __init__(self, bus: InvalidationBus, collection: str, max_entries: int = DEFAULT_MAX_ENTRIES):
        self.collection = collection
        self.max_entries = max_entries
        self._entries: OrderedDict[Hashable, Any] = OrderedDict()
        bus.subscribe(collection, self._on_invalidate)

    def _on_invalidate(self, _collection: str) -> None:
        self._entries.clear()

    def get_or_load(self, key: Hashable, loader: Callable[[], Any]) -> Any:
        if key in self._entries:
            self._entries.move_to_end(key)
            return self._entries[key]

        value = loader()
        # brak wiersza nie jest cachowany
        if value is not None:
            self._entries[key] = value
            # najdawniej uzywany wypada
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
        return value

    def __len__(self) -> int:
        return len(self._entries)
