import json

import httpx
import pytest

from shopapi.console.api_client import ApiError, ErrorKind, OrdersApi

pytestmark = pytest.mark.asyncio


def _api(handler):
    client = httpx.AsyncClient(base_url="http://shop.test", transport=httpx.MockTransport(handler))
    return OrdersApi("http://shop.test", client=client)


async def test_list_orders_sends_raw_token_header():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["token"] = request.headers.get("token")
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json={"success": True, "orders": [{"id": "b"}, {"id": "a"}]})

    orders = await _api(handler).list_orders("tok-123")

    assert orders == [{"id": "b"}, {"id": "a"}]
    assert seen == {"path": "/api/order/list", "token": "tok-123", "auth": None}


async def test_update_status_payload():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "message": "Status Updated"})

    message = await _api(handler).update_status("tok", "abc", "Shipped")

    assert message == "Status Updated"
    assert seen["body"] == {"orderId": "abc", "status": "Shipped"}


async def test_missing_token_short_circuits():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"success": True, "orders": []})

    with pytest.raises(ApiError) as e:
        await _api(handler).list_orders(None)
    assert e.value.kind is ErrorKind.AUTH_MISSING
    assert calls == []


async def test_envelope_failure_prefers_server_message():
    def handler(request):
        return httpx.Response(200, json={"success": False, "message": "Orders not found"})

    with pytest.raises(ApiError) as e:
        await _api(handler).list_orders("tok")
    assert e.value.kind is ErrorKind.REJECTED
    assert e.value.message == "Orders not found"


async def test_envelope_failure_without_message_uses_fallback():
    def handler(request):
        return httpx.Response(200, json={"success": False})

    api = _api(handler)
    with pytest.raises(ApiError) as e:
        await api.list_orders("tok")
    assert e.value.message == "Failed to fetch orders."

    with pytest.raises(ApiError) as e:
        await api.update_status("tok", "abc", "Packing")
    assert e.value.message == "Failed to update order status. Please try again."


async def test_unauthorized_status_code():
    def handler(request):
        return httpx.Response(401, json={"success": False, "message": "Not Authorized Login Again"})

    with pytest.raises(ApiError) as e:
        await _api(handler).list_orders("expired")
    assert e.value.kind is ErrorKind.UNAUTHORIZED
    assert e.value.message == "Not Authorized Login Again"
    assert e.value.status_code == 401


async def test_server_error_without_json_body():
    def handler(request):
        return httpx.Response(502, text="<html>bad gateway</html>")

    with pytest.raises(ApiError) as e:
        await _api(handler).list_orders("tok")
    assert e.value.kind is ErrorKind.SERVER_ERROR
    assert e.value.message == "Request failed with status code 502"


async def test_network_error():
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    with pytest.raises(ApiError) as e:
        await _api(handler).list_orders("tok")
    assert e.value.kind is ErrorKind.NETWORK_ERROR
    assert e.value.message == "Connection refused"


async def test_non_json_success_body_is_generic_error():
    def handler(request):
        return httpx.Response(200, text="API Working")

    with pytest.raises(ApiError) as e:
        await _api(handler).list_orders("tok")
    assert e.value.message == "An unexpected error occurred."
