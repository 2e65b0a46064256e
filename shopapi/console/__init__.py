from shopapi.console.api_client import ApiError, ErrorKind, OrdersApi  # noqa: F401
from shopapi.console.orders_view import Notifier, OrderRow, OrdersConsole, ViewState  # noqa: F401
