from pytest_bdd import scenarios, then, when

from api_helpers import list_orders

scenarios("../features/order_list.feature")


@when("the admin lists orders")
def step_admin_lists(client, admin_token, scenario_data):
    scenario_data["response"] = list_orders(client, admin_token)


@when("an anonymous caller lists orders")
def step_anonymous_lists(client, scenario_data):
    scenario_data["response"] = client.post("/api/order/list")


@then("the orders should be in reverse placement order")
def step_reverse_order(scenario_data):
    ids = [o["id"] for o in scenario_data["response"].json()["orders"]]
    assert ids == list(reversed(scenario_data["placed_ids"]))


@then("the list should be empty")
def step_list_empty(scenario_data):
    assert scenario_data["response"].json()["orders"] == []
