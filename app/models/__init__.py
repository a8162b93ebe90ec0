"""Models Package - Export all models for easy imports"""

from app.models.base import BaseModel, SoftDeleteMixin, StatusMixin
from app.models.enums import *
from app.models.user import User
from app.models.bill import Bill
from app.models.inventory import BikeModel, BikeInventory
from app.models.counter import SystemCounter


__all__ = [
    # Base classes
    "BaseModel",
    "SoftDeleteMixin",
    "StatusMixin",

    # Users
    "User",

    # Bills
    "Bill",

    # Inventory
    "BikeModel",
    "BikeInventory",

    # Counters
    "SystemCounter",
]
