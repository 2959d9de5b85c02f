"""Shared BDD fixtures and step definitions for checkout scenarios."""

import json

import pytest
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then, when

from memorials.checkout.confirmation import ConfirmPayment
from memorials.checkout.intent import CreatePaymentIntent
from memorials.condolence.condolence import Condolence
from memorials.obituary.obituary import Obituary
from memorials.order.order import Order
from memorials.product.product import Product


@pytest.fixture()
def checkout():
    """Mutable state shared between steps: the intent response and any captured error."""
    return {"intent": None, "error": None, "result": None}


def start_checkout(buyer, quantity, product, obituary):
    command = CreatePaymentIntent(
        products=json.dumps([{"product_id": str(product.id), "quantity": quantity}]),
        obituary_id=str(obituary.id),
        billing_details=json.dumps({"name": buyer, "email": "buyer@example.com"}),
    )
    return current_domain.process(command, asynchronous=False)


def current_order(checkout) -> Order:
    return current_domain.repository_for(Order).get(checkout["intent"]["order_id"])


# ---------------------------------------------------------------------------
# Given and shared When steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('an obituary for "{full_name}"'), target_fixture="obituary")
def an_obituary(full_name):
    first_name, last_name = full_name.split(" ", 1)
    obituary = Obituary.create(first_name=first_name, last_name=last_name)
    current_domain.repository_for(Obituary).add(obituary)
    return obituary


@given(
    parsers.cfparse('a {product_type} product "{name}" priced at {price:f} with {stock:d} in stock'),
    target_fixture="products",
)
def a_product(product_type, name, price, stock):
    product = Product.create(
        sku=name.upper().replace(" ", "-"),
        name=name,
        product_type=product_type,
        stock_quantity=stock,
        variants=[{"name": "Standard", "price": price, "is_default": True}],
    )
    current_domain.repository_for(Product).add(product)
    return {name: product}


@given(parsers.cfparse('"{buyer}" has paid for {quantity:d} "{name}" for the obituary'))
def has_paid(buyer, quantity, name, products, obituary, checkout, gateway):
    checkout["intent"] = start_checkout(buyer, quantity, products[name], obituary)
    gateway.complete_intent(checkout["intent"]["payment_intent_id"])
    current_domain.process(
        ConfirmPayment(payment_intent_id=checkout["intent"]["payment_intent_id"]), asynchronous=False
    )


@when(parsers.cfparse('"{buyer}" checks out {quantity:d} "{name}" for the obituary'))
def checks_out(buyer, quantity, name, products, obituary, checkout):
    checkout["intent"] = start_checkout(buyer, quantity, products[name], obituary)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order payment status is "{status}"'))
def order_payment_status_is(checkout, status):
    assert current_order(checkout).payment_status == status


@then(parsers.cfparse('the "{name}" stock is {stock:d}'))
def stock_is(products, name, stock):
    assert current_domain.repository_for(Product).get(products[name].id).stock_quantity == stock


@then("the obituary has no condolences")
def no_condolences(obituary):
    assert current_domain.repository_for(Condolence).stats(str(obituary.id))["total"] == 0


@then(parsers.cfparse("the obituary has {count:d} condolence"))
def condolence_count(obituary, count):
    assert current_domain.repository_for(Condolence).stats(str(obituary.id))["total"] == count
