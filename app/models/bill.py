"""Bills: one sales transaction per row"""

from sqlalchemy import Column, String, Boolean, Numeric, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID, ENUM
from sqlalchemy.orm import relationship

from app.models.base import BaseModel
from app.models.enums import BillType, VehicleType, BillStatus


def _values(enum_cls):
    return [member.value for member in enum_cls]


class Bill(BaseModel):
    """
    A vehicle sale.

    Money columns are written by the pricing pipeline; `total_amount` is
    never taken from the client for cash or advance bills.
    """
    __tablename__ = "bills"

    bill_number = Column(String(32), unique=True, nullable=False, index=True)
    owner_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Classification
    bill_type = Column(
        ENUM(BillType, name="bill_type", values_callable=_values),
        default=BillType.CASH,
        nullable=False,
        index=True,
    )
    vehicle_type = Column(
        ENUM(VehicleType, name="vehicle_type", values_callable=_values),
        default=VehicleType.E_MOTORCYCLE,
        nullable=False,
    )
    is_ebicycle = Column(Boolean, default=False, nullable=False)
    is_tricycle = Column(Boolean, default=False, nullable=False, index=True)
    is_first_tricycle_sale = Column(Boolean, default=False, nullable=False)

    # Commercial
    bike_model = Column(String(255), nullable=False)
    bike_price = Column(Numeric(12, 2), nullable=False)
    rmv_charge = Column(Numeric(12, 2), nullable=True)
    down_payment = Column(Numeric(12, 2), nullable=True)
    balance_amount = Column(Numeric(12, 2), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0, index=True)

    # Customer
    customer_name = Column(String(255), nullable=False, index=True)
    customer_nic = Column(String(32), nullable=False, index=True)
    customer_address = Column(Text, nullable=False)

    # Vehicle identity
    motor_number = Column(String(64), nullable=False)
    chassis_number = Column(String(64), nullable=False)

    bill_date = Column(DateTime, nullable=True, index=True)
    estimated_delivery_date = Column(DateTime, nullable=True)

    status = Column(
        ENUM(BillStatus, name="bill_status", values_callable=_values),
        default=BillStatus.COMPLETED,
        nullable=False,
        index=True,
    )

    inventory_item_id = Column(
        UUID(as_uuid=True),
        ForeignKey("bike_inventory.id", ondelete="SET NULL", use_alter=True, name="fk_bills_inventory_item_id"),
        nullable=True,
    )

    # Relationships
    owner = relationship("User", back_populates="bills")
    inventory_item = relationship("BikeInventory", foreign_keys=[inventory_item_id])

    def __repr__(self) -> str:
        return f"<Bill {self.bill_number} {self.bill_type} {self.total_amount}>"
