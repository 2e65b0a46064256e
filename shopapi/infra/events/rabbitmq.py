from __future__ import annotations

import json
import logging
from typing import Optional

import aio_pika

from shopapi.core.config import settings

logger = logging.getLogger(__name__)


class RabbitMQ:
    """
    Publisher RabbitMQ basé sur aio-pika (implémente MessagePublisher).
    - Connexion robuste (reconnect interne d'aio-pika).
    - Désactivé tant que RABBITMQ_URL n'est pas défini : publish_message devient un no-op.
    - Les erreurs de publication sont loggées, jamais propagées au métier.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        exchange_name: Optional[str] = None,
        exchange_type: Optional[str] = None,
    ) -> None:
        self.url = url if url is not None else settings.RABBITMQ_URL
        self.exchange_name = exchange_name or settings.RABBITMQ_EXCHANGE
        self.exchange_type = exchange_type or settings.RABBITMQ_EXCHANGE_TYPE
        self.connection: Optional[aio_pika.abc.AbstractRobustConnection] = None
        self.channel: Optional[aio_pika.abc.AbstractChannel] = None
        self.exchange: Optional[aio_pika.abc.AbstractExchange] = None

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    async def connect(self) -> None:
        if not self.enabled:
            logger.info("RabbitMQ disabled (RABBITMQ_URL not set)")
            return
        self.connection = await aio_pika.connect_robust(self.url)
        self.channel = await self.connection.channel(publisher_confirms=True)
        exchange_type = getattr(
            aio_pika.ExchangeType, self.exchange_type.upper(), aio_pika.ExchangeType.TOPIC
        )
        self.exchange = await self.channel.declare_exchange(
            self.exchange_name, exchange_type, durable=True
        )
        logger.info("RabbitMQ connected, exchange=%s", self.exchange_name)

    async def disconnect(self) -> None:
        try:
            if self.channel and not self.channel.is_closed:
                await self.channel.close()
                logger.info("RabbitMQ channel closed")
        except Exception:
            logger.exception("Failed to close RabbitMQ channel")
        try:
            if self.connection and not self.connection.is_closed:
                await self.connection.close()
                logger.info("RabbitMQ connection closed")
        except Exception:
            logger.exception("Failed to close RabbitMQ connection")
        self.exchange = None

    async def publish_message(self, routing_key: str, message: dict) -> None:
        if not self.exchange:
            logger.debug("RabbitMQ exchange unavailable; publish skipped for %s", routing_key)
            return
        try:
            body = json.dumps(message, default=str).encode("utf-8")
            await self.exchange.publish(
                aio_pika.Message(
                    body=body,
                    content_type="application/json",
                    delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
                ),
                routing_key=routing_key,
            )
            logger.info("event published", extra={"routing_key": routing_key, "size": len(body)})
        except Exception:
            logger.exception("Failed to publish %s", routing_key)


rabbitmq = RabbitMQ()
