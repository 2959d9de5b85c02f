"""BDD tests for gateway webhook reconciliation."""

from protean.utils.globals import current_domain
from pytest_bdd import parsers, scenarios, then, when

from memorials.checkout.webhook import ReconcileGatewayEvent

scenarios("features/webhook.feature")


@when(parsers.cfparse('the gateway reports "{event_type}" for the intent'))
def gateway_reports(checkout, event_type):
    command = ReconcileGatewayEvent(
        event_id="evt_bdd",
        event_type=event_type,
        payment_intent_id=checkout["intent"]["payment_intent_id"],
    )
    checkout["result"] = current_domain.process(command, asynchronous=False)


@then(parsers.cfparse('the event outcome is "{outcome}"'))
def event_outcome_is(checkout, outcome):
    assert checkout["result"] == outcome
