"""Bike models and the physical inventory of bikes"""

from sqlalchemy import Column, String, Boolean, Numeric, DateTime, ForeignKey, Text, Index, text
from sqlalchemy.dialects.postgresql import UUID, ENUM
from sqlalchemy.orm import relationship

from app.models.base import BaseModel, SoftDeleteMixin
from app.models.enums import BikeStatus
from app.utils.time import get_utc_now


class BikeModel(BaseModel):
    """Catalogue entry; its flags decide the vehicle type of a sale"""
    __tablename__ = "bike_models"

    name = Column(String(255), unique=True, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    is_ebicycle = Column(Boolean, default=False, nullable=False)
    is_tricycle = Column(Boolean, default=False, nullable=False)

    items = relationship("BikeInventory", back_populates="bike_model")

    def __repr__(self) -> str:
        return f"<BikeModel {self.name}>"


class BikeInventory(BaseModel, SoftDeleteMixin):
    """
    One physical bike in stock.
    Motor and chassis numbers are unique among rows that are not soft-deleted.
    """
    __tablename__ = "bike_inventory"
    __table_args__ = (
        Index(
            "ix_bike_inventory_motor_number_live",
            "motor_number",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
        ),
        Index(
            "ix_bike_inventory_chassis_number_live",
            "chassis_number",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
        ),
        Index("ix_bike_inventory_model_status", "bike_model_id", "status"),
    )

    bike_model_id = Column(
        UUID(as_uuid=True),
        ForeignKey("bike_models.id", ondelete="RESTRICT"),
        nullable=False,
    )
    motor_number = Column(String(64), nullable=False)
    chassis_number = Column(String(64), nullable=False)
    status = Column(
        ENUM(BikeStatus, name="bike_status", values_callable=lambda e: [m.value for m in e]),
        default=BikeStatus.AVAILABLE,
        nullable=False,
        index=True,
    )
    date_added = Column(DateTime, default=get_utc_now, nullable=False)
    date_sold = Column(DateTime, nullable=True)
    bill_id = Column(
        UUID(as_uuid=True),
        ForeignKey("bills.id", ondelete="SET NULL"),
        nullable=True,
    )
    notes = Column(Text, nullable=True)
    added_by = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    deleted_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    delete_reason = Column(String(500), nullable=True)

    bike_model = relationship("BikeModel", back_populates="items", lazy="joined")

    def mark_sold(self, bill_id, status: BikeStatus = BikeStatus.SOLD) -> None:
        """Tie the item to a bill as sold (or reserved for a pending advance)"""
        self.status = status
        self.bill_id = bill_id
        self.date_sold = get_utc_now() if status == BikeStatus.SOLD else None

    def release(self) -> None:
        """Return the item to stock"""
        self.status = BikeStatus.AVAILABLE
        self.bill_id = None
        self.date_sold = None

    def __repr__(self) -> str:
        return f"<BikeInventory {self.motor_number}/{self.chassis_number} {self.status}>"
