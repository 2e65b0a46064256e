import asyncio
import json

import httpx
import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from shopapi.console import OrdersApi, OrdersConsole, ViewState

scenarios("../features/admin_console.feature")


@pytest.fixture
def loop():
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def sent():
    """(path, json body) of every request the console issues."""
    return []


@pytest.fixture
def console(loop, sent):
    from shopapi.main import app

    async def record(request):
        body = json.loads(request.content) if request.content else None
        sent.append((request.url.path, body))

    client = httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
        event_hooks={"request": [record]},
    )
    console = OrdersConsole(OrdersApi("http://testserver", client=client), currency="KES ")
    yield console
    loop.run_until_complete(client.aclose())


# ---------- GIVEN ----------
@given("the admin console is signed in")
def step_signed_in(loop, console, admin_token, sent):
    loop.run_until_complete(console.set_token(admin_token))
    assert console.state is ViewState.LOADED
    sent.clear()


# ---------- WHEN ----------
@when(parsers.parse('the admin selects "{status}" for that order'))
def step_select_status(loop, console, scenario_data, status):
    scenario_data["changed"] = loop.run_until_complete(
        console.change_status(scenario_data["order_id"], status)
    )


@when("the admin signs out")
def step_sign_out(loop, console):
    loop.run_until_complete(console.set_token(None))


@when("the admin console signs in with an invalid credential")
def step_invalid_sign_in(loop, console, token_factory):
    loop.run_until_complete(console.set_token(token_factory(id="someone")))


# ---------- THEN ----------
@then(parsers.parse('the console sent one status request with that order and status "{status}"'))
def step_status_request(sent, scenario_data, status):
    assert sent[0] == ("/api/order/status", {"orderId": scenario_data["order_id"], "status": status})
    assert [p for p, _ in sent].count("/api/order/status") == 1


@then("the console then sent exactly one list request")
def step_one_list_request(sent):
    assert [p for p, _ in sent[1:]] == ["/api/order/list"]


@then(parsers.parse('the order row shows "{status}" as the selected status'))
def step_row_status(console, scenario_data, status):
    row = next(r for r in console.rows() if r.order_id == scenario_data["order_id"])
    assert row.status == status
    assert row.pending_status is None


@then("the console shows no orders")
def step_no_orders(console):
    assert console.orders == []
    assert console.rows() == []


@then("the console sent no requests")
def step_no_requests(sent):
    assert sent == []


@then(parsers.parse('the console shows the error "{message}"'))
def step_console_error(console, message):
    assert console.state is ViewState.ERROR
    assert console.error == message


@then("a retry is offered")
def step_retry_offered(console):
    assert console.can_retry
