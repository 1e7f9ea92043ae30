from .base import BaseDatabase
from .kv import KeyValueMixin
from .users import UserMixin

__all__ = [
    "BaseDatabase",
    "KeyValueMixin",
    "UserMixin",
]
