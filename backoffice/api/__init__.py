# backoffice/api/__init__.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backoffice.api.routers import health, users, products, cart, transactions, documents
from backoffice.domain.errors import BackofficeError


async def backoffice_error_handler(request: Request, exc: BackofficeError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message, **exc.extra},
    )


def create_app(lifespan=None) -> FastAPI:
    app = FastAPI(
        title="Back Office API",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(BackofficeError, backoffice_error_handler)

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(cart.router)
    app.include_router(transactions.router)
    app.include_router(documents.router)

    return app
