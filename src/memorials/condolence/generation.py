"""Condolence generation from a paid memorial order.

When someone buys a tree, flowers or a gift in memory of a person, checkout
posts exactly one condolence on that person's obituary describing the
purchase (or carrying the buyer's dedication). Generation never raises for
domain problems: the outcome comes back as a ``GenerationResult`` so that a
failure here cannot undo a payment that has already been taken.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from memorials.condolence.condolence import Condolence, CondolenceType, ProductDetails
from memorials.obituary.obituary import Obituary
from memorials.product.product import MEMORIAL_TYPES, ProductType
from memorials.shared.money import line_total, round_half_up

logger = structlog.get_logger(__name__)

DEFAULT_CUSTOMER_NAME = "A friend"


@dataclass(frozen=True)
class PurchasedItem:
    product_id: str
    product_name: str
    product_type: str
    quantity: int
    unit_price: float
    variant_name: str | None = None
    sku: str | None = None

    @property
    def is_memorial(self) -> bool:
        return self.product_type in MEMORIAL_TYPES


@dataclass(frozen=True)
class GenerationResult:
    success: bool
    condolence: Condolence | None = None
    error: str | None = None


def describe(item: PurchasedItem) -> str:
    label = f"{item.product_name} ({item.variant_name})" if item.variant_name else item.product_name
    return f"{label} x{item.quantity}"


def compose_message(customer_name: str, items: list[PurchasedItem]) -> str:
    """E.g. "Jane Doe planted: Memorial Tree (Single Tree) x1, Oak Sapling x2"."""
    verb = "planted" if any(i.product_type == ProductType.TREE.value for i in items) else "sent"
    return f"{customer_name} {verb}: {', '.join(describe(i) for i in items)}"


def condolence_type_for(items: list[PurchasedItem]) -> str:
    types = {i.product_type for i in items}
    if len(types) == 1:
        return types.pop()
    return CondolenceType.MIXED.value


def summarize(items: list[PurchasedItem]) -> ProductDetails:
    first = items[0]
    total = round_half_up(sum(line_total(i.unit_price, i.quantity) for i in items))
    return ProductDetails(
        product_id=first.product_id,
        product_name=first.product_name,
        product_type=condolence_type_for(items),
        variant_name=first.variant_name,
        quantity=sum(i.quantity for i in items),
        total_price=float(total),
        sku=first.sku,
    )


def generate_condolence(
    obituary_id: str,
    order_id: str,
    items: list[PurchasedItem],
    customer_name: str | None = None,
    email: str | None = None,
    dedication: str | None = None,
) -> GenerationResult:
    memorial_items = [i for i in items if i.is_memorial]
    if not memorial_items:
        return GenerationResult(success=False, error="Order has no memorial items")

    name = (customer_name or "").strip() or DEFAULT_CUSTOMER_NAME
    message = (dedication or "").strip() or compose_message(name, memorial_items)

    try:
        current_domain.repository_for(Obituary).get(obituary_id)
        condolence = Condolence.from_purchase(
            obituary_id=obituary_id,
            order_id=order_id,
            name=name,
            email=email,
            message=message,
            condolence_type=condolence_type_for(memorial_items),
            product_details=summarize(memorial_items),
        )
        current_domain.repository_for(Condolence).add(condolence)
    except (ObjectNotFoundError, ValidationError) as exc:
        logger.warning(
            "condolence_generation_failed",
            order_id=order_id,
            obituary_id=obituary_id,
            error=str(exc),
        )
        return GenerationResult(success=False, error=str(exc))

    logger.info(
        "condolence_generated",
        order_id=order_id,
        obituary_id=obituary_id,
        condolence_id=str(condolence.id),
        condolence_type=condolence.condolence_type,
    )
    return GenerationResult(success=True, condolence=condolence)
