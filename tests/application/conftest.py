"""Checkout helpers shared by the application tests."""

import json

import pytest
from protean.utils.globals import current_domain

from memorials.checkout.confirmation import ConfirmPayment
from memorials.checkout.intent import CreatePaymentIntent


@pytest.fixture()
def start_checkout(memorial_tree, obituary):
    """Create a payment intent; defaults to one Single Tree bought in memory of the obituary."""

    def _start(**overrides):
        defaults = {
            "products": json.dumps([{"product_id": str(memorial_tree.id), "quantity": 1, "variant_name": "Single Tree"}]),
            "obituary_id": str(obituary.id),
            "billing_details": json.dumps({"name": "Jane Doe", "email": "Jane@Example.com"}),
        }
        defaults.update(overrides)
        return current_domain.process(CreatePaymentIntent(**defaults), asynchronous=False)

    return _start


@pytest.fixture()
def paid_checkout(start_checkout, gateway):
    """A checkout whose intent the buyer completed and the client confirmed."""

    def _pay(**overrides):
        intent = start_checkout(**overrides)
        gateway.complete_intent(intent["payment_intent_id"])
        current_domain.process(ConfirmPayment(payment_intent_id=intent["payment_intent_id"]), asynchronous=False)
        return intent

    return _pay
