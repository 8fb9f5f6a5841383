# storefront/services/guest_order_service.py
from typing import Dict, List

from pydantic import ValidationError
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from storefront.domain.order_status import DELIVERED_BUCKET, PENDING_BUCKET, OrderStatus, guest_bucket
from storefront.domain.schemas import GuestSession
from storefront.repos.order_repo import OrderRepo
from storefront.services.device_storage import DeviceStorage, GUEST_SESSIONS_SLOT
from storefront.utils.retry import db_read_retry
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class GuestOrderService:
    """
    Dostep do zamowien goscia na podstawie rekordow zapisanych na urzadzeniu.
    Posiadanie rekordu = dostep; rekordy nie wygasaja.
    """

    def __init__(self, db: Session, storage: DeviceStorage):
        self.repo = OrderRepo(db)
        self.storage = storage

    def _sessions(self, device_id: str) -> List[GuestSession]:
        raw = self.storage.read_json(device_id, GUEST_SESSIONS_SLOT, default=[])
        if not isinstance(raw, list):
            return []

        sessions = []
        for row in raw:
            try:
                sessions.append(GuestSession.model_validate(row))
            except ValidationError:
                logger.warning(f"Skipping unreadable guest session on device {device_id}")
        return sessions

    def _save(self, device_id: str, sessions: List[GuestSession]):
        if not sessions:
            self.storage.remove_item(device_id, GUEST_SESSIONS_SLOT)
            return
        self.storage.write_json(device_id, GUEST_SESSIONS_SLOT, [s.model_dump(mode="json") for s in sessions])

    @db_read_retry()
    def _live_statuses(self, order_ids: List[int]) -> Dict[int, str]:
        try:
            return {order_id: order.status for order_id, order in self.repo.get_orders(order_ids).items()}
        except OperationalError:
            # zerwane polaczenie - sesja wymaga rollbacku przed kolejna proba
            self.repo.rollback()
            raise

    def list_orders(self, device_id: str) -> Dict[str, List[GuestSession]]:
        sessions = self._sessions(device_id)
        statuses = self._live_statuses([s.order_id for s in sessions])

        refreshed = []
        for session in sessions:
            status = statuses.get(session.order_id)
            if status is None:
                logger.info(f"Guest order {session.order_id} no longer exists, dropping it from device {device_id}")
                continue
            session.order_data = {**session.order_data, "status": status}
            refreshed.append(session)

        self._save(device_id, refreshed)

        buckets: Dict[str, List[GuestSession]] = {PENDING_BUCKET: [], DELIVERED_BUCKET: []}
        for session in refreshed:
            buckets[guest_bucket(OrderStatus(session.order_data["status"]))].append(session)
        return buckets

    def forget(self, device_id: str, order_id: int) -> None:
        sessions = [s for s in self._sessions(device_id) if s.order_id != order_id]
        self._save(device_id, sessions)

    def forget_all(self, device_id: str) -> None:
        self.storage.remove_item(device_id, GUEST_SESSIONS_SLOT)
