# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Powiadomienia o zamowieniach.
    Celery - wysylka asynchroniczna, nie blokuje finalizacji.
    """

    @staticmethod
    def send_order_confirmation(order_id: int, order_number: str, recipient: str):
        send_order_confirmation_task.delay(order_id, order_number, recipient)


@celery_app.task(name="storefront.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(order_id: int, order_number: str, recipient: str):
    # tu bylby klient e-mail, na razie tylko log
    logger.info(f"[NOTIFICATION] {recipient}: order {order_number} (id {order_id}) placed")
    return {"order_id": order_id, "recipient": recipient, "status": "sent"}
