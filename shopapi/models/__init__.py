from shopapi.models.order_models import Order, OrderStatus  # noqa: F401
