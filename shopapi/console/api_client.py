from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx

from shopapi.core.config import settings

logger = logging.getLogger(__name__)

GENERIC_ERROR = "An unexpected error occurred."
NETWORK_ERROR = "Network Error"
AUTH_MISSING_MESSAGE = "Authentication token is missing. Please log in."


class ErrorKind(str, Enum):
    AUTH_MISSING = "auth_missing"
    UNAUTHORIZED = "unauthorized"
    REJECTED = "rejected"
    SERVER_ERROR = "server_error"
    NETWORK_ERROR = "network_error"


class ApiError(Exception):
    def __init__(self, kind: ErrorKind, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code


def _server_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return None


class OrdersApi:
    """
    Client HTTP des endpoints admin de commandes.
    Chaque échec est converti en ApiError avec un message lisible :
    message serveur, sinon texte de l'erreur réseau, sinon message générique.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.BACKEND_URL).rstrip("/")
        self._client = client or httpx.AsyncClient(base_url=self.base_url)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "OrdersApi":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _post(
        self,
        path: str,
        token: Optional[str],
        payload: Dict[str, Any],
        fallback: str,
    ) -> Dict[str, Any]:
        if not token:
            raise ApiError(ErrorKind.AUTH_MISSING, AUTH_MISSING_MESSAGE)

        try:
            response = await self._client.post(path, json=payload, headers={"token": token})
        except httpx.RequestError as e:
            logger.warning("request to %s failed: %r", path, e)
            raise ApiError(ErrorKind.NETWORK_ERROR, str(e) or NETWORK_ERROR)

        if response.is_error:
            kind = (
                ErrorKind.UNAUTHORIZED
                if response.status_code in (401, 403)
                else ErrorKind.SERVER_ERROR
            )
            message = _server_message(response) or f"Request failed with status code {response.status_code}"
            raise ApiError(kind, message, response.status_code)

        try:
            body = response.json()
        except ValueError:
            raise ApiError(ErrorKind.SERVER_ERROR, GENERIC_ERROR, response.status_code)

        if not isinstance(body, dict) or not body.get("success"):
            message = _server_message(response) or fallback
            raise ApiError(ErrorKind.REJECTED, message, response.status_code)
        return body

    async def list_orders(self, token: Optional[str]) -> List[Dict[str, Any]]:
        body = await self._post("/api/order/list", token, {}, "Failed to fetch orders.")
        return list(body.get("orders") or [])

    async def update_status(self, token: Optional[str], order_id: str, status: str) -> Optional[str]:
        body = await self._post(
            "/api/order/status",
            token,
            {"orderId": order_id, "status": status},
            "Failed to update order status. Please try again.",
        )
        return body.get("message")
