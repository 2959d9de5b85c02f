"""Process-wide payment gateway.

``configure_gateway`` builds the adapter named in the settings at application
startup and ``shutdown_gateway`` releases it. Tests swap in their own
``FakeGateway`` with ``set_gateway``.
"""

import structlog

from memorials.config import Settings
from memorials.gateway.fake_adapter import FakeGateway
from memorials.gateway.port import PaymentGateway

logger = structlog.get_logger(__name__)

_current_gateway: PaymentGateway | None = None


def build_gateway(settings: Settings) -> PaymentGateway:
    if settings.gateway == "stripe":
        from memorials.gateway.stripe_adapter import StripeGateway

        return StripeGateway(
            api_key=settings.stripe_secret_key,
            webhook_secret=settings.stripe_webhook_secret,
        )
    return FakeGateway()


def configure_gateway(settings: Settings) -> PaymentGateway:
    gateway = build_gateway(settings)
    set_gateway(gateway)
    logger.info("payment_gateway_configured", gateway=type(gateway).__name__)
    return gateway


def get_gateway() -> PaymentGateway:
    """Return the active gateway, falling back to a FakeGateway when none was configured."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = FakeGateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    global _current_gateway
    _current_gateway = gateway


def shutdown_gateway() -> None:
    global _current_gateway
    if _current_gateway is not None:
        _current_gateway.close()
    _current_gateway = None
