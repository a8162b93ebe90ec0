"""Inventory Service - bike models and stock items"""

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import BikeStatus
from app.models.inventory import BikeInventory, BikeModel
from app.models.user import User
from app.schemas.inventory import BikeModelCreate, InventoryItemCreate

logger = logging.getLogger(__name__)


class InventoryItemNotFound(LookupError):
    pass


class BikeModelNotFound(LookupError):
    pass


class InventoryItemUnavailable(ValueError):
    pass


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class InventoryService:

    @staticmethod
    async def list_bike_models(db: AsyncSession) -> List[BikeModel]:
        result = await db.execute(select(BikeModel).order_by(BikeModel.name))
        return list(result.scalars().all())

    @staticmethod
    async def get_bike_model(db: AsyncSession, model_id: UUID) -> Optional[BikeModel]:
        result = await db.execute(select(BikeModel).where(BikeModel.id == model_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def create_bike_model(db: AsyncSession, data: BikeModelCreate) -> BikeModel:
        existing = await db.execute(select(BikeModel).where(BikeModel.name == data.name.strip()))
        if existing.scalar_one_or_none():
            raise ValueError(f"Bike model '{data.name}' already exists")
        if data.is_ebicycle and data.is_tricycle:
            raise ValueError("A bike model cannot be both an e-bicycle and a tricycle")
        bike_model = BikeModel(
            name=data.name.strip(),
            price=data.price,
            is_ebicycle=data.is_ebicycle,
            is_tricycle=data.is_tricycle,
        )
        db.add(bike_model)
        await db.commit()
        await db.refresh(bike_model)
        return bike_model

    @staticmethod
    async def get_item(
        db: AsyncSession,
        item_id: UUID,
        for_update: bool = False,
    ) -> Optional[BikeInventory]:
        """Fetch an item (soft-deleted ones included); optionally row-locked."""
        stmt = select(BikeInventory).where(BikeInventory.id == item_id)
        if for_update:
            stmt = stmt.with_for_update(of=BikeInventory)
        result = await db.execute(stmt)
        return result.unique().scalar_one_or_none()

    @staticmethod
    async def get_available_item(db: AsyncSession, item_id: UUID) -> BikeInventory:
        """
        Lock and return an item that can be sold.

        Raises:
            InventoryItemNotFound: missing or soft-deleted
            InventoryItemUnavailable: not in the available state
        """
        item = await InventoryService.get_item(db, item_id, for_update=True)
        if not item or item.is_deleted:
            raise InventoryItemNotFound("Inventory item not found")
        if item.status != BikeStatus.AVAILABLE:
            raise InventoryItemUnavailable(
                f"This bike is not available (current status: {item.status.value})"
            )
        return item

    @staticmethod
    async def find_available_by_identity(
        db: AsyncSession,
        motor_number: str,
        chassis_number: str,
    ) -> Optional[BikeInventory]:
        """Available, live item whose motor and chassis numbers match ignoring case."""
        result = await db.execute(
            select(BikeInventory)
            .where(
                func.lower(BikeInventory.motor_number) == motor_number.strip().lower(),
                func.lower(BikeInventory.chassis_number) == chassis_number.strip().lower(),
                BikeInventory.status == BikeStatus.AVAILABLE,
                BikeInventory.deleted_at.is_(None),
            )
            .with_for_update(of=BikeInventory)
        )
        return result.unique().scalars().first()

    @staticmethod
    async def list_items(
        db: AsyncSession,
        user: User,
        page: int = 1,
        page_size: int = 20,
        status: Optional[BikeStatus] = None,
        model_id: Optional[UUID] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[BikeInventory], int]:
        """
        Paginated stock listing. Regular users only see items they added.

        Returns:
            Tuple of (items, total count)
        """
        conditions = [BikeInventory.deleted_at.is_(None)]
        if not user.is_admin:
            conditions.append(BikeInventory.added_by == user.id)
        if status:
            conditions.append(BikeInventory.status == status)
        if model_id:
            conditions.append(BikeInventory.bike_model_id == model_id)
        if search and search.strip():
            pattern = f"%{_escape_like(search.strip())}%"
            conditions.append(or_(
                BikeInventory.motor_number.ilike(pattern, escape="\\"),
                BikeInventory.chassis_number.ilike(pattern, escape="\\"),
            ))

        total = await db.scalar(select(func.count(BikeInventory.id)).where(*conditions))
        result = await db.execute(
            select(BikeInventory)
            .where(*conditions)
            .order_by(BikeInventory.date_added.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(result.unique().scalars().all()), total or 0

    @staticmethod
    async def add_item(db: AsyncSession, user_id: UUID, data: InventoryItemCreate) -> BikeInventory:
        """
        Add a bike to stock.

        Raises:
            BikeModelNotFound: unknown bike model
            ValueError: motor or chassis number already in stock
        """
        if not await InventoryService.get_bike_model(db, data.bike_model_id):
            raise BikeModelNotFound("Bike model not found")

        item = BikeInventory(
            bike_model_id=data.bike_model_id,
            motor_number=data.motor_number.strip(),
            chassis_number=data.chassis_number.strip(),
            notes=data.notes,
            added_by=user_id,
            status=BikeStatus.AVAILABLE,
        )
        db.add(item)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ValueError(
                "A bike with this motor number or chassis number already exists in inventory"
            )
        return await InventoryService.get_item(db, item.id)

    @staticmethod
    async def soft_delete_item(
        db: AsyncSession,
        item: BikeInventory,
        deleted_by: UUID,
        reason: Optional[str] = None,
    ) -> BikeInventory:
        item.soft_delete()
        item.deleted_by = deleted_by
        item.delete_reason = reason
        await db.commit()
        logger.info(
            "Inventory item soft-deleted",
            extra={"item_id": str(item.id), "status": item.status.value, "reason": reason},
        )
        return item
