from .auth import User, SessionToken, USER_ROLES
from .inventory import Item
from .customers import Customer
from .orders import Order, OrderItem, ORDER_STATUSES

__all__ = [
    'User', 'SessionToken', 'USER_ROLES',
    'Item',
    'Customer',
    'Order', 'OrderItem', 'ORDER_STATUSES',
]
