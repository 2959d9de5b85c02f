"""Memorials bounded context.

Obituaries and everything visitors leave on them (condolences, tributes),
plus the memorial gift shop: products, carts, orders and the gateway-backed
checkout that turns a purchase into a condolence on the obituary.
"""

from protean.domain import Domain

from memorials.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

memorials = Domain(name="memorials")
