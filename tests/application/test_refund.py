"""Application tests for refunding a paid order."""

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from memorials.checkout.refund import RefundOrder
from memorials.condolence.condolence import Condolence
from memorials.gateway.port import GatewayError
from memorials.order.order import Order
from memorials.product.product import Product


def _refund(**kwargs):
    return current_domain.process(RefundOrder(**kwargs), asynchronous=False)


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


def _stock(product):
    return current_domain.repository_for(Product).get(product.id).stock_quantity


class TestRefund:
    def test_full_refund_restores_everything(self, paid_checkout, gateway, memorial_tree):
        intent = paid_checkout()
        condolence_id = _order(intent["order_id"]).condolence_id
        assert _stock(memorial_tree) == 9

        result = _refund(order_id=intent["order_id"])

        assert result["payment_status"] == "refunded"
        assert result["order_status"] == "cancelled"
        assert result["amount"] == 43.15
        assert result["refund_id"].startswith("re_fake_")

        order = _order(intent["order_id"])
        assert order.amount_refunded == 43.15
        assert order.stock_committed is False
        assert order.condolence_id is None
        assert _stock(memorial_tree) == 10
        assert current_domain.repository_for(Condolence)._dao.query.filter(id=condolence_id).all().total == 0

        refund_call = next(c for c in gateway.calls if c["method"] == "create_refund")
        assert refund_call["amount"] is None
        assert refund_call["reason"] == "requested_by_customer"

    def test_partial_refund_amount_goes_to_gateway_in_cents(self, paid_checkout, gateway):
        intent = paid_checkout()

        result = _refund(order_id=intent["order_id"], amount=10.5, reason="duplicate")

        assert result["amount"] == 10.5
        refund_call = next(c for c in gateway.calls if c["method"] == "create_refund")
        assert refund_call["amount"] == 1050
        assert refund_call["reason"] == "duplicate"

    def test_second_refund_is_a_no_op(self, paid_checkout, gateway, memorial_tree):
        intent = paid_checkout()
        _refund(order_id=intent["order_id"])

        result = _refund(order_id=intent["order_id"])

        assert result["already_refunded"] is True
        assert sum(1 for c in gateway.calls if c["method"] == "create_refund") == 1
        assert _stock(memorial_tree) == 10


class TestRefundRejections:
    def test_unpaid_order(self, start_checkout):
        intent = start_checkout()
        with pytest.raises(ValidationError):
            _refund(order_id=intent["order_id"])

    def test_amount_above_total(self, paid_checkout):
        intent = paid_checkout()
        with pytest.raises(ValidationError):
            _refund(order_id=intent["order_id"], amount=100.0)

    def test_unknown_reason(self, paid_checkout):
        intent = paid_checkout()
        with pytest.raises(ValidationError):
            _refund(order_id=intent["order_id"], reason="changed_my_mind")

    def test_order_without_intent(self, start_checkout):
        intent = start_checkout()
        order = _order(intent["order_id"])
        order.payment_intent_id = None
        current_domain.repository_for(Order).add(order)

        with pytest.raises(ObjectNotFoundError):
            _refund(order_id=intent["order_id"])

    def test_gateway_refusal_changes_nothing(self, paid_checkout, gateway, memorial_tree):
        intent = paid_checkout()
        gateway.configure(should_succeed=False, failure_reason="Charge already refunded")

        with pytest.raises(GatewayError):
            _refund(order_id=intent["order_id"])

        order = _order(intent["order_id"])
        assert order.payment_status == "succeeded"
        assert order.condolence_id is not None
        assert _stock(memorial_tree) == 9
