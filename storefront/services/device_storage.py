# storefront/services/device_storage.py
import json
from abc import ABC, abstractmethod
from typing import Any

import redis

from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# stale nazwy slotow, nadpisywane przy kazdym checkoucie
ORDER_INTENT_SLOT = "orderDetails"
GUEST_SESSIONS_SLOT = "guestSessions"
GUEST_CART_SLOT = "guest-cart-items"


class DeviceStorage(ABC):
    """
    Odpowiednik localStorage przegladarki: nazwane sloty per urzadzenie,
    wartosci jako JSON bez wersjonowania schematu.
    """

    @abstractmethod
    def get_item(self, device_id: str, key: str) -> str | None: ...

    @abstractmethod
    def set_item(self, device_id: str, key: str, value: str) -> None: ...

    @abstractmethod
    def remove_item(self, device_id: str, key: str) -> None: ...

    def read_json(self, device_id: str, key: str, default: Any = None) -> Any:
        raw = self.get_item(device_id, key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Slot {key} for device {device_id} is not valid JSON, ignoring")
            return default

    def write_json(self, device_id: str, key: str, value: Any) -> None:
        self.set_item(device_id, key, json.dumps(value, default=str))


class RedisDeviceStorage(DeviceStorage):
    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(device_id: str, key: str) -> str:
        return f"device:{device_id}:{key}"

    @redis_retry()
    def get_item(self, device_id: str, key: str) -> str | None:
        return self.redis.get(self._key(device_id, key))

    @redis_retry()
    def set_item(self, device_id: str, key: str, value: str) -> None:
        # bez TTL - sloty nie wygasaja
        self.redis.set(self._key(device_id, key), value)

    @redis_retry()
    def remove_item(self, device_id: str, key: str) -> None:
        self.redis.delete(self._key(device_id, key))


class InMemoryDeviceStorage(DeviceStorage):
    def __init__(self):
        self._slots: dict[tuple[str, str], str] = {}

    def get_item(self, device_id: str, key: str) -> str | None:
        return self._slots.get((device_id, key))

    def set_item(self, device_id: str, key: str, value: str) -> None:
        self._slots[(device_id, key)] = value

    def remove_item(self, device_id: str, key: str) -> None:
        self._slots.pop((device_id, key), None)


def build_device_storage(url: str | None = None) -> DeviceStorage:
    url = url or REDIS_URL
    # memory:// - tryb developerski bez redisa
    if url.startswith("memory://"):
        return InMemoryDeviceStorage()
    return RedisDeviceStorage(url)
