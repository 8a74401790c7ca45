# backoffice/celery_worker.py
from celery import Celery

from backoffice.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
    LOW_STOCK_SWEEP_SECONDS,
)
from backoffice.utils.logging import setup_logging

setup_logging()

celery_app = Celery(
    "backoffice",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# import task modules explicitly so the worker registers them
celery_app.conf.imports = (
    "backoffice.tasks.low_stock",
    "backoffice.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "low-stock-sweep": {
        "task": "backoffice.tasks.low_stock.low_stock_sweep_task",
        "schedule": LOW_STOCK_SWEEP_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"
celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
celery_app.conf.task_store_eager_result = False
