"""Integration tests for the payment and webhook endpoints via TestClient."""

import json

import pytest
from protean.utils.globals import current_domain

from memorials.condolence.condolence import Condolence
from memorials.gateway.fake_adapter import TEST_SIGNATURE
from memorials.order.order import Order
from memorials.product.product import Product


@pytest.fixture()
def create_intent(client, memorial_tree, obituary):
    def _create(**overrides):
        body = {
            "products": [{"productId": str(memorial_tree.id), "quantity": 1, "variantName": "Single Tree"}],
            "obituaryId": str(obituary.id),
            "billingDetails": {"name": "Jane Doe", "email": "jane@example.com"},
            "dedicationMessage": "Forever in our hearts",
        }
        body.update(overrides)
        return client.post("/payment/create-intent", json=body, headers={"X-User-Id": "user-42"})

    return _create


def _post_event(client, event: dict, signature: str = TEST_SIGNATURE):
    return client.post(
        "/webhook/gateway",
        content=json.dumps(event),
        headers={"Stripe-Signature": signature, "Content-Type": "application/json"},
    )


def _intent_event(event_type: str, intent_id: str, **extra) -> dict:
    return {
        "id": "evt_api_1",
        "type": event_type,
        "data": {"object": {"id": intent_id, "object": "payment_intent", **extra}},
    }


class TestCreateIntentAPI:
    def test_memorial_tree_checkout(self, create_intent):
        response = create_intent()

        assert response.status_code == 200
        data = response.json()
        assert data["amount"] == 4315
        assert data["total_with_tax"] == 43.15
        assert data["tax"] == 3.2
        assert data["client_secret"].startswith(data["payment_intent_id"])

        order = current_domain.repository_for(Order).get(data["order_id"])
        assert order.user_id == "user-42"
        assert order.obituary_name == "Margaret Hale"
        assert order.billing_details.email == "jane@example.com"

    def test_snake_case_keys_are_accepted(self, client, memorial_tree):
        response = client.post(
            "/payment/create-intent",
            json={"products": [{"product_id": str(memorial_tree.id), "quantity": 2}]},
        )

        assert response.status_code == 200
        assert response.json()["amount"] == 8629

    def test_nothing_to_buy(self, client):
        response = client.post("/payment/create-intent", json={"products": []})

        assert response.status_code == 400
        assert current_domain.repository_for(Order)._dao.query.all().total == 0

    def test_gateway_failure(self, client, gateway, create_intent):
        gateway.configure(should_succeed=False, failure_reason="Your card was declined.")

        response = create_intent()

        assert response.status_code == 400
        assert response.json() == {"error": "Your card was declined."}


class TestConfirmAPI:
    def test_confirm_completed_payment(self, client, gateway, create_intent, memorial_tree):
        intent = create_intent().json()
        gateway.complete_intent(intent["payment_intent_id"])

        response = client.post("/payment/confirm", json={"paymentIntentId": intent["payment_intent_id"]})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["order"]["payment_status"] == "succeeded"
        assert data["order"]["condolence_created"] is True
        assert current_domain.repository_for(Product).get(memorial_tree.id).stock_quantity == 9

    def test_confirm_incomplete_payment(self, client, create_intent):
        intent = create_intent().json()

        response = client.post("/payment/confirm", json={"payment_intent_id": intent["payment_intent_id"]})

        assert response.status_code == 400
        assert response.json()["status"] == "requires_payment_method"

    def test_confirm_unknown_intent(self, client):
        response = client.post("/payment/confirm", json={"payment_intent_id": "pi_missing"})

        assert response.status_code == 400


class TestCancelAndRefundAPI:
    def test_cancel(self, client, create_intent):
        intent = create_intent().json()

        response = client.post("/payment/cancel", json={"orderId": intent["order_id"]})

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["payment_status"] == "cancelled"

    def test_cancel_needs_an_identifier(self, client):
        assert client.post("/payment/cancel", json={}).status_code == 400

    def test_refund(self, client, gateway, create_intent):
        intent = create_intent().json()
        gateway.complete_intent(intent["payment_intent_id"])
        client.post("/payment/confirm", json={"payment_intent_id": intent["payment_intent_id"]})

        response = client.post("/payment/refund", json={"order_id": intent["order_id"]})

        assert response.status_code == 200
        refund = response.json()["refund"]
        assert refund["amount"] == 43.15
        assert refund["payment_status"] == "refunded"

    def test_refund_unpaid_order(self, client, create_intent):
        intent = create_intent().json()

        assert client.post("/payment/refund", json={"order_id": intent["order_id"]}).status_code == 400


class TestStatusAndConfigureAPI:
    def test_status_in_major_units(self, client, create_intent):
        intent = create_intent().json()

        response = client.get(f"/payment/status/{intent['payment_intent_id']}")

        assert response.status_code == 200
        assert response.json() == {"status": "requires_payment_method", "amount": 43.15, "currency": "usd"}

    def test_configure_fake_gateway(self, client, gateway, create_intent):
        response = client.post(
            "/payment/gateway/configure",
            json={"shouldSucceed": False, "failureReason": "Insufficient funds"},
        )
        assert response.status_code == 200

        assert create_intent().json() == {"error": "Insufficient funds"}

        client.post("/payment/gateway/configure", json={"should_succeed": True})
        assert create_intent().status_code == 200


class TestWebhookAPI:
    def test_bad_signature(self, client):
        response = _post_event(client, _intent_event("payment_intent.succeeded", "pi_1"), signature="forged")

        assert response.status_code == 400
        assert response.json()["error"].startswith("Webhook Error:")

    def test_succeeded_event_settles_the_order(self, client, create_intent):
        intent = create_intent().json()

        response = _post_event(client, _intent_event("payment_intent.succeeded", intent["payment_intent_id"]))

        assert response.status_code == 200
        assert response.json() == {"received": True}
        order = current_domain.repository_for(Order).get(intent["order_id"])
        assert order.payment_status == "succeeded"
        assert current_domain.repository_for(Condolence)._dao.query.all().total == 1

    def test_failed_event_for_unknown_intent_is_acknowledged(self, client):
        event = _intent_event(
            "payment_intent.payment_failed",
            "pi_unknown",
            last_payment_error={"message": "Your card was declined."},
        )

        response = _post_event(client, event)

        assert response.status_code == 200
        assert response.json() == {"received": True}

    def test_failed_event_records_the_reason(self, client, create_intent):
        intent = create_intent().json()
        event = _intent_event(
            "payment_intent.payment_failed",
            intent["payment_intent_id"],
            last_payment_error={"message": "Your card has expired."},
        )

        assert _post_event(client, event).status_code == 200

        order = current_domain.repository_for(Order).get(intent["order_id"])
        assert order.payment_status == "failed"
        assert order.failure_reason == "Your card has expired."

    def test_unhandled_event_type(self, client):
        event = {"id": "evt_2", "type": "customer.created", "data": {"object": {"id": "cus_1", "object": "customer"}}}

        assert _post_event(client, event).json() == {"received": True}
