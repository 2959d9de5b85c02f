"""Application tests for payment intent creation."""

import json

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from memorials.cart.cart import Cart
from memorials.checkout.confirmation import ConfirmPayment
from memorials.checkout.intent import CreatePaymentIntent
from memorials.gateway.port import GatewayError
from memorials.order.order import Order
from memorials.product.product import Product


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestIntentFromProductList:
    def test_single_tree_is_priced_with_tax(self, start_checkout, gateway):
        result = start_checkout()

        assert result["amount"] == 4315
        assert result["total_with_tax"] == 43.15
        assert result["tax"] == 3.2
        assert result["client_secret"]

        intent = gateway.intents[result["payment_intent_id"]]
        assert intent["amount"] == 4315
        assert intent["metadata"] == {"order_id": result["order_id"], "cart_id": result["cart_id"]}

    def test_pending_order_is_stored(self, start_checkout, obituary):
        result = start_checkout(dedication_message="Forever in our hearts")

        order = _order(result["order_id"])
        assert order.payment_status == "pending"
        assert order.order_status == "pending"
        assert order.subtotal == 39.95
        assert order.total_with_tax == 43.15
        assert order.payment_intent_id == result["payment_intent_id"]
        assert order.obituary_name == obituary.full_name
        assert order.dedication_message == "Forever in our hearts"
        assert order.billing_details.email == "Jane@Example.com"
        assert order.stock_committed is False

    def test_cart_is_built_from_catalogue_prices(self, start_checkout, memorial_tree):
        products = [{"product_id": str(memorial_tree.id), "quantity": 2, "variant_name": "Single Tree", "price": 0.5}]
        result = start_checkout(products=json.dumps(products))

        cart = current_domain.repository_for(Cart).get(result["cart_id"])
        assert cart.items[0].purchase_price == 39.95
        assert cart.items[0].quantity == 2
        assert result["amount"] == 8629  # 79.90 * 1.08 = 86.292

    def test_stock_is_untouched_until_payment(self, start_checkout, memorial_tree):
        from memorials.product.product import Product

        start_checkout()
        assert current_domain.repository_for(Product).get(memorial_tree.id).stock_quantity == 10

    def test_unknown_obituary_is_rejected(self, start_checkout):
        with pytest.raises(ObjectNotFoundError):
            start_checkout(obituary_id="missing-obituary")


class TestCartResolution:
    def test_existing_cart_by_id(self, start_checkout, memorial_tree):
        cart = Cart.create()
        cart.add_item(
            product_id=str(memorial_tree.id),
            product_name="Memorial Tree",
            product_type="tree",
            quantity=1,
            purchase_price=39.95,
        )
        current_domain.repository_for(Cart).add(cart)

        result = start_checkout(cart_id=str(cart.id), products=None)
        assert result["cart_id"] == str(cart.id)

    def test_users_latest_cart(self, start_checkout, memorial_tree):
        cart = Cart.create(user_id="user-7")
        cart.add_item(product_id=str(memorial_tree.id), product_name="Memorial Tree", quantity=3, purchase_price=39.95)
        current_domain.repository_for(Cart).add(cart)

        result = start_checkout(user_id="user-7", products=None)
        assert result["cart_id"] == str(cart.id)
        assert _order(result["order_id"]).user_id == "user-7"

    def test_nothing_to_buy(self, obituary):
        with pytest.raises(ValidationError) as exc:
            current_domain.process(CreatePaymentIntent(products=json.dumps([])), asynchronous=False)

        assert exc.value.messages == {"cart": ["Could not find or create cart"]}
        assert current_domain.repository_for(Order)._dao.query.all().total == 0

    def test_unknown_products_are_skipped(self, start_checkout):
        with pytest.raises(ValidationError):
            start_checkout(products=json.dumps([{"product_id": "no-such-product", "quantity": 1}]))


class TestReuseAndFailures:
    def test_given_pending_order_is_repriced(self, start_checkout, memorial_tree):
        first = start_checkout()
        products = [{"product_id": str(memorial_tree.id), "quantity": 1, "variant_name": "Grove of 5"}]

        second = start_checkout(order_id=first["order_id"], products=json.dumps(products))

        assert second["order_id"] == first["order_id"]
        order = _order(first["order_id"])
        assert order.subtotal == 179.0
        assert order.total_with_tax == 193.32
        assert order.cart_id == second["cart_id"]
        assert order.payment_intent_id == second["payment_intent_id"]

    def test_repriced_order_settles_the_new_cart(self, start_checkout, gateway, memorial_tree, sympathy_bouquet):
        first = start_checkout()
        bouquets = [{"product_id": str(sympathy_bouquet.id), "quantity": 2, "variant_name": "Standard"}]
        second = start_checkout(order_id=first["order_id"], products=json.dumps(bouquets))
        assert second["amount"] == 14040
        gateway.complete_intent(second["payment_intent_id"])

        current_domain.process(ConfirmPayment(payment_intent_id=second["payment_intent_id"]), asynchronous=False)

        products = current_domain.repository_for(Product)
        assert products.get(memorial_tree.id).stock_quantity == 10
        assert products.get(sympathy_bouquet.id).stock_quantity == 3

    def test_gateway_failure_leaves_nothing_behind(self, start_checkout, gateway):
        gateway.configure(should_succeed=False, failure_reason="Your card was declined.")

        with pytest.raises(GatewayError) as exc:
            start_checkout()

        assert exc.value.message == "Your card was declined."
        assert current_domain.repository_for(Order)._dao.query.all().total == 0
        assert current_domain.repository_for(Cart)._dao.query.all().total == 0
