"""Shop store kept outside the mapping engine."""

from .models import Channel, Comment, Shop, StoreState
from .repository import InMemoryRepository, JsonFileRepository, StateRepository
from .service import ShopLocked, ShopNotFound, ShopService

__all__ = [
    "Channel",
    "Comment",
    "Shop",
    "StoreState",
    "StateRepository",
    "InMemoryRepository",
    "JsonFileRepository",
    "ShopService",
    "ShopNotFound",
    "ShopLocked",
]
