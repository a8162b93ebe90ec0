"""Inventory Pydantic Schemas"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import BikeStatus


class BikeModelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., ge=0)
    is_ebicycle: bool = False
    is_tricycle: bool = False


class BikeModelResponse(BaseModel):
    id: UUID
    name: str
    price: Decimal
    is_ebicycle: bool
    is_tricycle: bool

    model_config = ConfigDict(from_attributes=True)


class InventoryItemCreate(BaseModel):
    """Schema for adding one bike to stock"""
    bike_model_id: UUID
    motor_number: str = Field(..., min_length=1, max_length=64)
    chassis_number: str = Field(..., min_length=1, max_length=64)
    notes: Optional[str] = None


class InventoryItemResponse(BaseModel):
    id: UUID
    bike_model_id: UUID
    bike_model: Optional[BikeModelResponse] = None
    motor_number: str
    chassis_number: str
    status: BikeStatus
    date_added: datetime
    date_sold: Optional[datetime] = None
    bill_id: Optional[UUID] = None
    notes: Optional[str] = None
    added_by: Optional[UUID] = None

    model_config = ConfigDict(from_attributes=True)


class InventoryDeleteRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)
