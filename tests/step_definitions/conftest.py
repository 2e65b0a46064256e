import pytest
from pytest_bdd import given, then, parsers

from api_helpers import list_orders


@pytest.fixture
def scenario_data():
    return {}


# ---------- GIVEN ----------
@given("the Orders API is available")
def step_api_available(client):
    assert client.get("/health").status_code == 200


@given(parsers.parse("{count:d} orders were placed one after another"))
def step_orders_placed(order_factory, scenario_data, count):
    scenario_data["placed_ids"] = [order_factory(first_name=f"Customer{i}").id for i in range(count)]


@given(parsers.parse('an order exists with status "{status}"'))
def step_order_exists(client, admin_token, order_factory, db_session, scenario_data, status):
    order = order_factory()
    if status != order.status:
        from shopapi.repositories.order_repositories import OrderRepository
        OrderRepository(db_session).update_status(order, status)
    scenario_data["order_id"] = order.id
    listed = list_orders(client, admin_token).json()["orders"]
    scenario_data["before"] = next(o for o in listed if o["id"] == order.id)


# ---------- THEN ----------
@then("the response should be successful")
def step_success(scenario_data):
    resp = scenario_data["response"]
    assert resp.status_code == 200
    assert resp.json()["success"] is True


@then(parsers.parse("the response should have status code {status_code:d}"))
def step_status_code(scenario_data, status_code):
    assert scenario_data["response"].status_code == status_code


@then(parsers.parse('the message should be "{message}"'))
def step_message(scenario_data, message):
    assert scenario_data["response"].json()["message"] == message
