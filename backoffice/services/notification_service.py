# backoffice/services/notification_service.py
from backoffice.celery_worker import celery_app
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_CREATED = "created"
ORDER_CANCELLED = "cancelled"


class NotificationService:
    """
    Order notifications, processed asynchronously by Celery.
    Only ever called after the unit of work has committed.
    """

    @staticmethod
    def send_order_notification(user_id: int, order_id: int, event: str = ORDER_CREATED):
        try:
            send_order_notification_task.delay(user_id, order_id, event)
        except Exception:
            # the order is already committed; a lost notification must not fail the request
            logger.exception(f"Could not enqueue notification for order {order_id}")


@celery_app.task(name="backoffice.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_id: int, event: str = ORDER_CREATED):
    """
    Logs the event; a real deployment would hand it to an email or push gateway.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} {event}")
    return {"user_id": user_id, "order_id": order_id, "event": event, "status": "sent"}
