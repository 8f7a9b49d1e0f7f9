"""Cart package: models, storage, and manager."""
from .models import TAX_RATE, Cart, CartItem
from .service import CartManager
from .storage import CartStorage, RedisCartStorage

__all__ = [
    "TAX_RATE",
    "Cart",
    "CartItem",
    "CartManager",
    "CartStorage",
    "RedisCartStorage",
]
