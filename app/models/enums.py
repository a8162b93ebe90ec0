"""Centralized Enum Definitions"""

import enum


# Users
class UserRole(str, enum.Enum):
    """User roles; admins see and modify every record"""
    ADMIN = "admin"
    USER = "user"


# Bills
class BillType(str, enum.Enum):
    """Payment plan of a sale"""
    CASH = "cash"
    LEASING = "leasing"
    ADVANCE = "advance"


class VehicleType(str, enum.Enum):
    """Vehicle classes sold by the dealer"""
    E_MOTORCYCLE = "E-MOTORCYCLE"
    E_MOTORBICYCLE = "E-MOTORBICYCLE"
    E_TRICYCLE = "E-TRICYCLE"


class BillStatus(str, enum.Enum):
    """Bill lifecycle status"""
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    CONVERTED = "converted"


# Inventory
class BikeStatus(str, enum.Enum):
    """Stock status of a single inventory item"""
    AVAILABLE = "available"
    SOLD = "sold"
    RESERVED = "reserved"
    DAMAGED = "damaged"
