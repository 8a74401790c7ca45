# backoffice/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from backoffice.api import create_app
from backoffice.data.database import init_db
from backoffice.utils.logging import setup_logging, get_logger

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database ready")
    yield


app = create_app(lifespan=lifespan)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
