from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from shopapi.core.database import get_db
from shopapi.infra.events.rabbitmq import rabbitmq
from shopapi.schemas.order_schemas import (
    Ack,
    OrderCreate,
    OrderListResponse,
    OrderPlacedResponse,
    OrderResponse,
    OrderStatusUpdate,
)
from shopapi.security.security import AuthContext, require_admin, require_user
from shopapi.services.order_services import OrderError, OrderService, ServerError


router = APIRouter(prefix="/api/order", tags=["orders"])
logger = logging.getLogger(__name__)


# ---------- Dependency injection ----------
def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    """Construit un OrderService avec repo + publisher (RabbitMQ)."""
    from shopapi.repositories.order_repositories import OrderRepository

    repo = OrderRepository(db)
    return OrderService(repo, rabbitmq)


def _failure(exc: OrderError) -> JSONResponse:
    """Erreur métier -> enveloppe 200, panne du stockage -> 500."""
    code = (
        status.HTTP_500_INTERNAL_SERVER_ERROR
        if isinstance(exc, ServerError)
        else status.HTTP_200_OK
    )
    return JSONResponse(status_code=code, content={"success": False, "message": str(exc)})


# ---------- Admin ----------

@router.post(
    "/list",
    response_model=OrderListResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_admin)],
)
def list_orders(svc: OrderService = Depends(get_order_service)):
    """Toutes les commandes, plus récentes d'abord. Nécessite ADMIN."""
    try:
        orders = svc.list_orders()
    except OrderError as e:
        return _failure(e)
    return OrderListResponse(success=True, orders=[OrderResponse.model_validate(o) for o in orders])


@router.post(
    "/status",
    response_model=Ack,
    response_model_exclude_none=True,
    dependencies=[Depends(require_admin)],
)
async def update_order_status(
    status_update: OrderStatusUpdate,
    svc: OrderService = Depends(get_order_service),
):
    """Mettre à jour le statut d'une commande. Nécessite ADMIN."""
    try:
        await svc.update_order_status(status_update.order_id, status_update.status)
    except OrderError as e:
        logger.info("status update rejected: %s", e, extra={"order_id": status_update.order_id})
        return _failure(e)
    return Ack(success=True, message="Status Updated")


# ---------- Storefront ----------

@router.post(
    "/place",
    response_model=OrderPlacedResponse,
    response_model_exclude_none=True,
)
async def place_order(
    order_in: OrderCreate,
    auth: AuthContext = Depends(require_user),
    svc: OrderService = Depends(get_order_service),
):
    """Passer une commande (paiement à la livraison)."""
    try:
        order = await svc.place_order(auth.user, order_in)
    except OrderError as e:
        return _failure(e)
    return OrderPlacedResponse(success=True, message="Order Placed", order_id=order.id)


@router.post(
    "/userorders",
    response_model=OrderListResponse,
    response_model_exclude_none=True,
)
def user_orders(
    auth: AuthContext = Depends(require_user),
    svc: OrderService = Depends(get_order_service),
):
    """Historique des commandes du client connecté."""
    try:
        orders = svc.list_user_orders(auth.user)
    except OrderError as e:
        return _failure(e)
    return OrderListResponse(success=True, orders=[OrderResponse.model_validate(o) for o in orders])
