"""Memorials API package."""

from memorials.api.errors import register_error_handlers
from memorials.api.payments import payment_router, webhook_router
from memorials.api.routes import condolence_router, obituary_router, tribute_router
from memorials.api.shop import cart_router, order_router, product_router

ALL_ROUTERS = [
    obituary_router,
    condolence_router,
    tribute_router,
    product_router,
    cart_router,
    order_router,
    payment_router,
    webhook_router,
]

__all__ = [
    "ALL_ROUTERS",
    "cart_router",
    "condolence_router",
    "obituary_router",
    "order_router",
    "payment_router",
    "product_router",
    "register_error_handlers",
    "tribute_router",
    "webhook_router",
]
