from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from shopapi.models.order_models import Order, OrderStatus
from shopapi.schemas.order_schemas import OrderCreate


class OrderRepository:
    """Data Access Layer for the Order model."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, order_id: str) -> Optional[Order]:
        """Get an order by its public ID."""
        return self.db.execute(
            select(Order).where(Order.id == order_id)
        ).scalar_one_or_none()

    def list_newest_first(self, user_id: Optional[str] = None) -> List[Order]:
        """
        List every order, most recently inserted first.
        Optionally restricted to one user's orders.
        """
        query = select(Order)
        if user_id is not None:
            query = query.where(Order.user_id == user_id)
        return list(self.db.execute(query.order_by(Order.seq.desc())).scalars().all())

    # ---------- CREATE ----------
    def create(self, user_id: str, order_in: OrderCreate, payment_method: str) -> Order:
        """Persist a new order in the initial fulfillment stage."""
        db_order = Order(
            user_id=user_id,
            items=[i.model_dump(by_alias=True, exclude_none=True) for i in order_in.items],
            address=order_in.address.model_dump(by_alias=True, exclude_none=True),
            amount=order_in.amount,
            payment_method=payment_method,
            payment=False,
            status=OrderStatus.ORDER_PLACED.value,
        )
        self.db.add(db_order)
        self.db.commit()
        self.db.refresh(db_order)
        return db_order

    # ---------- UPDATE ----------
    def update_status(self, order: Order, status: str) -> Order:
        """Overwrite the status field only."""
        order.status = status
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order
