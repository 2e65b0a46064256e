from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from shopapi.core.database import Base


class OrderStatus(str, Enum):
    """Fulfillment stages, in display order."""

    ORDER_PLACED = "Order Placed"
    PACKING = "Packing"
    SHIPPED = "Shipped"
    OUT_FOR_DELIVERY = "Out for delivery"
    DELIVERED = "Delivered"

    @classmethod
    def values(cls) -> List[str]:
        return [s.value for s in cls]

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return value in cls.values()


def _new_order_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"

    # Insertion order; never exposed on the wire
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(
        String(32), unique=True, index=True, nullable=False, default=_new_order_id
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    items: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    address: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(32), nullable=False)
    payment: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    # Plain string column: permissive mode stores values outside OrderStatus
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=OrderStatus.ORDER_PLACED.value
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "items": list(self.items or []),
            "address": dict(self.address or {}),
            "amount": self.amount,
            "paymentMethod": self.payment_method,
            "payment": self.payment,
            "date": self.date.isoformat() if self.date else None,
            "status": self.status,
        }

    def __repr__(self) -> str:
        return f"Order(id={self.id!r}, status={self.status!r})"
