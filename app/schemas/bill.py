"""Bill Pydantic Schemas

Bills travel over the wire in camelCase, the shape the React client and
the pricing pipeline both use.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.enums import BillStatus, BillType, VehicleType


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BillResponse(CamelModel):
    """Bill as returned by the API"""
    id: UUID
    bill_number: str
    owner_id: Optional[UUID] = None
    bill_type: BillType
    vehicle_type: VehicleType
    is_ebicycle: bool
    is_tricycle: bool
    is_first_tricycle_sale: bool = False
    bike_model: str
    bike_price: Decimal
    rmv_charge: Optional[Decimal] = None
    down_payment: Optional[Decimal] = None
    balance_amount: Optional[Decimal] = None
    total_amount: Decimal
    customer_name: str
    customer_nic: str = Field(..., alias="customerNIC")
    customer_address: str
    motor_number: str
    chassis_number: str
    bill_date: Optional[datetime] = None
    estimated_delivery_date: Optional[datetime] = None
    status: BillStatus
    inventory_item_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class BillRequiredFields(CamelModel):
    """Fields a bill cannot be stored without; checked after pricing"""
    customer_name: str = Field(..., min_length=1)
    customer_nic: str = Field(..., min_length=1, alias="customerNIC")
    customer_address: str = Field(..., min_length=1)
    bike_model: str = Field(..., min_length=1)
    motor_number: str = Field(..., min_length=1)
    chassis_number: str = Field(..., min_length=1)
    bike_price: Decimal = Field(..., ge=0)


class BillStatusUpdate(BaseModel):
    """Body of PATCH /bills/{id}/status"""
    status: Optional[str] = None


class BillSuggestions(CamelModel):
    """Autocomplete values for the bill search box"""
    customers: List[str]
    bill_numbers: List[str]
    models: List[str]
