from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from shopapi.console.api_client import AUTH_MISSING_MESSAGE, ApiError, OrdersApi
from shopapi.core.config import settings
from shopapi.models.order_models import OrderStatus

logger = logging.getLogger(__name__)

STATUS_UPDATED_MESSAGE = "Order status updated successfully."

# (value, label) pairs offered by the status control
STATUS_OPTIONS: List[Tuple[str, str]] = [
    (OrderStatus.ORDER_PLACED.value, "Order Placed"),
    (OrderStatus.PACKING.value, "Packing"),
    (OrderStatus.SHIPPED.value, "Shipped"),
    (OrderStatus.OUT_FOR_DELIVERY.value, "Out for Delivery"),
    (OrderStatus.DELIVERED.value, "Delivered"),
]


class ViewState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class Notifier:
    """Collects transient notifications (toasts)."""

    def __init__(self) -> None:
        self.messages: List[Tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))
        logger.info(message)

    def error(self, message: str) -> None:
        self.messages.append(("error", message))
        logger.warning(message)


@dataclass
class OrderRow:
    order_id: str
    items_summary: str
    customer_name: str
    street: str
    locality: str
    phone: str
    item_count: int
    payment_method: str
    payment: str
    date: str
    amount: str
    status: str
    pending_status: Optional[str] = None
    options: List[Tuple[str, str]] = field(default_factory=lambda: list(STATUS_OPTIONS))


def _format_date(value: Any) -> str:
    if not value:
        return ""
    if isinstance(value, (int, float)):
        # Epoch milliseconds
        return datetime.fromtimestamp(value / 1000).strftime("%m/%d/%Y")
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).strftime("%m/%d/%Y")
    except ValueError:
        return str(value)


def render_order_row(
    order: Dict[str, Any],
    currency: str = "",
    pending_status: Optional[str] = None,
) -> OrderRow:
    items = order.get("items") or []
    address = order.get("address") or {}
    summary = ", ".join(
        f"{i.get('name', '')} x {i.get('quantity', '')} {i.get('size', '')}".rstrip()
        for i in items
    )
    return OrderRow(
        order_id=order["id"],
        items_summary=summary,
        customer_name=f"{address.get('firstName', '')} {address.get('lastName', '')}".strip(),
        street=f"{address.get('street', '')},",
        locality=", ".join(
            str(address.get(k, "")) for k in ("city", "state", "country", "zipcode")
        ),
        phone=str(address.get("phone", "")),
        item_count=len(items),
        payment_method=str(order.get("paymentMethod", "")),
        payment="Done" if order.get("payment") else "Pending",
        date=_format_date(order.get("date")),
        amount=f"{currency}{float(order.get('amount') or 0):.2f}",
        status=str(order.get("status", "")),
        pending_status=pending_status,
    )


class OrdersConsole:
    """
    Admin orders view as a state machine: IDLE -> LOADING -> {LOADED, ERROR}.

    The credential is passed in explicitly (set_token). Every list fetch gets a
    sequence number and only the latest one may write state. Status changes
    stay pending until the follow-up fetch confirms them, and are dropped on
    failure so the row shows the committed value again.
    """

    def __init__(
        self,
        api: OrdersApi,
        token: Optional[str] = None,
        notifier: Optional[Notifier] = None,
        currency: Optional[str] = None,
    ):
        self.api = api
        self.token = token
        self.notifier = notifier or Notifier()
        self.currency = settings.CURRENCY if currency is None else currency

        self.state = ViewState.IDLE
        self.orders: List[Dict[str, Any]] = []
        self.error: Optional[str] = None
        self.pending: Dict[str, str] = {}
        self._seq = 0

    @property
    def can_retry(self) -> bool:
        return self.state is ViewState.ERROR

    async def mount(self) -> None:
        if self.token:
            await self.refresh()
        else:
            self._reset()

    async def set_token(self, token: Optional[str]) -> None:
        previous, self.token = self.token, token
        if not token:
            self._reset()
        elif token != previous:
            await self.refresh()

    def _reset(self) -> None:
        # Invalidates any in-flight fetch as well
        self._seq += 1
        self.orders = []
        self.pending.clear()
        self.error = None
        self.state = ViewState.IDLE

    async def refresh(self) -> None:
        if not self.token:
            self.notifier.error(AUTH_MISSING_MESSAGE)
            return

        self._seq += 1
        seq = self._seq
        self.state = ViewState.LOADING
        self.error = None

        try:
            orders = await self.api.list_orders(self.token)
        except ApiError as e:
            if seq != self._seq:
                logger.debug("stale list failure dropped (seq=%s)", seq)
                return
            self.notifier.error(e.message)
            self.error = e.message
            self.state = ViewState.ERROR
            return

        if seq != self._seq:
            logger.debug("stale list response dropped (seq=%s)", seq)
            return
        # Server order is authoritative (newest first)
        self.orders = orders
        self.state = ViewState.LOADED

    async def retry(self) -> None:
        await self.refresh()

    async def change_status(self, order_id: str, new_status: str) -> bool:
        if not self.token:
            self.notifier.error(AUTH_MISSING_MESSAGE)
            return False

        self.pending[order_id] = new_status
        try:
            await self.api.update_status(self.token, order_id, new_status)
        except ApiError as e:
            self.pending.pop(order_id, None)
            self.notifier.error(e.message)
            return False

        self.notifier.success(STATUS_UPDATED_MESSAGE)
        await self.refresh()
        self.pending.pop(order_id, None)
        return True

    def committed_status(self, order_id: str) -> Optional[str]:
        for order in self.orders:
            if order.get("id") == order_id:
                return order.get("status")
        return None

    def rows(self) -> List[OrderRow]:
        return [
            render_order_row(o, self.currency, self.pending.get(o.get("id", "")))
            for o in self.orders
        ]
