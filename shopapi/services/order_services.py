# shopapi/services/order_services.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from shopapi.core.config import settings
from shopapi.infra.events.contracts import MessagePublisher
from shopapi.models.order_models import Order, OrderStatus
from shopapi.repositories.order_repositories import OrderRepository
from shopapi.schemas.order_schemas import OrderCreate

logger = logging.getLogger(__name__)

COD_PAYMENT_METHOD = "COD"


class OrderError(Exception):
    """Base des erreurs métier sur les commandes."""


class NotFoundError(OrderError):
    """Exception levée si une commande n'existe pas."""


class InvalidStatusError(OrderError):
    """Statut vide, ou hors de l'énumération en mode strict."""


class EmptyOrderError(OrderError):
    """Commande sans article."""


class ServerError(OrderError):
    """Panne du stockage ; le message ne contient aucun détail interne."""


class OrderService:
    """
    Couche métier pour les commandes.
    - Liste admin (plus récentes d'abord) et mise à jour du statut.
    - Passage de commande (paiement à la livraison) et historique client.
    - Publie des événements best-effort après chaque écriture.
    """

    def __init__(
        self,
        repository: OrderRepository,
        publisher: MessagePublisher,
        strict_status: Optional[bool] = None,
    ):
        self.repository = repository
        self.publisher = publisher
        self.strict_status = (
            settings.ORDER_STATUS_STRICT if strict_status is None else strict_status
        )

    # ==========================================================
    # === Lecture ==============================================
    # ==========================================================

    def list_orders(self) -> List[Order]:
        try:
            return self.repository.list_newest_first()
        except SQLAlchemyError:
            logger.exception("[order.list] lecture impossible")
            raise ServerError("Unable to load orders")

    def list_user_orders(self, user_id: str) -> List[Order]:
        try:
            return self.repository.list_newest_first(user_id=user_id)
        except SQLAlchemyError:
            logger.exception("[order.userorders] lecture impossible", extra={"user_id": user_id})
            raise ServerError("Unable to load orders")

    def get_order(self, order_id: str) -> Order:
        try:
            order = self.repository.get(order_id) if order_id else None
        except SQLAlchemyError:
            logger.exception("[order.get] lecture impossible", extra={"order_id": order_id})
            raise ServerError("Unable to load order")
        if not order:
            logger.debug("order introuvable", extra={"order_id": order_id})
            raise NotFoundError("Order not found")
        return order

    # ==========================================================
    # === Création =============================================
    # ==========================================================

    async def place_order(self, user_id: str, order_in: OrderCreate) -> Order:
        """
        Crée une commande en statut "Order Placed", paiement à la livraison
        (payment=False jusqu'à confirmation par le flux de paiement).
        """
        if not order_in.items:
            raise EmptyOrderError("Order must contain at least one item")

        try:
            order = self.repository.create(user_id, order_in, COD_PAYMENT_METHOD)
        except SQLAlchemyError:
            self.repository.db.rollback()
            logger.exception("[order.place] écriture impossible", extra={"user_id": user_id})
            raise ServerError("Unable to place order")

        await self.publisher.publish_message("order.placed", order.to_dict())
        logger.info("order placed", extra={"order_id": order.id, "user_id": user_id})
        return order

    # ==========================================================
    # === Mise à jour du statut ================================
    # ==========================================================

    def validate_status(self, new_status: Optional[str]) -> str:
        if not new_status or not new_status.strip():
            raise InvalidStatusError("Status is required")
        if self.strict_status and not OrderStatus.is_valid(new_status):
            raise InvalidStatusError(f"Invalid status: {new_status}")
        return new_status

    async def update_order_status(self, order_id: str, new_status: Optional[str]) -> Order:
        """
        Écrase uniquement le champ `status`. Aucune contrainte d'ordre :
        retour en arrière et sauts d'étape sont acceptés.
        """
        new_status = self.validate_status(new_status)
        order = self.get_order(order_id)

        if order.status == new_status:
            logger.info("[order.status] %s déjà en %s, no-op", order.id, new_status)
            return order

        old_status = order.status
        try:
            order = self.repository.update_status(order, new_status)
        except SQLAlchemyError:
            self.repository.db.rollback()
            logger.exception("[order.status] écriture impossible", extra={"order_id": order_id})
            raise ServerError("Unable to update order status")

        await self.publisher.publish_message(
            "order.status_updated",
            {
                "orderId": order.id,
                "from": old_status,
                "to": new_status,
                "updatedAt": datetime.now(timezone.utc).isoformat(),
            },
        )
        logger.info(
            "order status updated",
            extra={"order_id": order.id, "from": old_status, "to": new_status},
        )
        return order
