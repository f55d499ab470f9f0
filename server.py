import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from db import create_db_and_tables
from exceptions.base import ShopException
from processing.stripe_webhook import processing_router
from utils.error_handler import shop_exception_handler, validation_exception_handler, \
    unexpected_exception_handler, http_exception_handler
from web.cart_router import cart_router
from web.order_router import order_router
from web.product_router import product_router
from web.ticket_router import ticket_router
from web.user_router import user_router
from web.wishlist_router import wishlist_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    await create_db_and_tables()
    logging.info(f"[Startup] Database ready, environment {config.RUNTIME_ENVIRONMENT.value}")
    if not config.STRIPE_SECRET_KEY:
        logging.warning("[Startup] STRIPE_SECRET_KEY not set, online checkout is unavailable")
    if not config.SMTP_HOST:
        logging.warning("[Startup] SMTP_HOST not set, emails will not be delivered")

    yield

    logging.warning('Shutting down..')


app = FastAPI(title="E-commerce Inventory Backend", lifespan=lifespan)

if config.CORS_ALLOWED_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOWED_ORIGINS,
        allow_credentials=True,  # Cookies carry the session and the guest cart
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Cookie"],
        expose_headers=["Set-Cookie"],
    )
    logging.info(f"[Startup] CORS middleware enabled for origins: {config.CORS_ALLOWED_ORIGINS}")
else:
    logging.debug("[Startup] CORS middleware disabled (no allowed origins configured)")

app.add_exception_handler(ShopException, shop_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unexpected_exception_handler)

app.include_router(user_router)
app.include_router(product_router)
app.include_router(cart_router)
app.include_router(wishlist_router)
app.include_router(processing_router)
app.include_router(order_router)
app.include_router(ticket_router)


@app.get("/")
async def root():
    return {"message": "E-commerce Inventory Backend API"}


@app.get("/health")
async def health_check():
    return {"success": True, "status": "healthy", "environment": config.RUNTIME_ENVIRONMENT.value}
