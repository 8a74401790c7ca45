# backoffice/tasks/low_stock.py
from backoffice.celery_worker import celery_app
from backoffice.data.database import SessionLocal
from backoffice.repos.product_repo import ProductRepo
from backoffice.utils.settings import LOW_STOCK_THRESHOLD
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="backoffice.tasks.low_stock.low_stock_sweep_task")
def low_stock_sweep_task(threshold: int = LOW_STOCK_THRESHOLD):
    logger.info("Low stock sweep started")

    db = SessionLocal()
    try:
        products = ProductRepo(db).low_stock(threshold)

        logger.info(f"Found {len(products)} products at or below stock {threshold}")

        for product in products:
            logger.warning(f"Low stock: product {product.id} ({product.name}) has {product.stock} left")

        return [p.id for p in products]
    finally:
        db.close()
