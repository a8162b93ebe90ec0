"""Inventory endpoints - bike models and stock"""

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.config import settings
from app.models.enums import BikeStatus
from app.models.user import User
from app.schemas.inventory import (
    BikeModelCreate,
    BikeModelResponse,
    InventoryDeleteRequest,
    InventoryItemCreate,
    InventoryItemResponse,
)
from app.schemas.responses import PaginatedResponse, PaginationMeta, SuccessResponse
from app.services.inventory_service import BikeModelNotFound, InventoryService

router = APIRouter()


@router.get("/models", response_model=SuccessResponse)
async def list_bike_models(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    models = await InventoryService.list_bike_models(db)
    return SuccessResponse(data=[BikeModelResponse.model_validate(m) for m in models])


@router.post("/models", response_model=SuccessResponse[BikeModelResponse])
async def create_bike_model(
    model_in: BikeModelCreate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Add a bike model to the catalogue. Admin only."""
    try:
        bike_model = await InventoryService.create_bike_model(db, model_in)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return SuccessResponse(data=BikeModelResponse.model_validate(bike_model), message="Bike model created")


@router.get("", response_model=PaginatedResponse[InventoryItemResponse])
async def list_inventory(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    item_status: Optional[BikeStatus] = Query(None, alias="status"),
    model_id: Optional[UUID] = Query(None, alias="modelId"),
    search: Optional[str] = Query(None),
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """List stock. Regular users only see items they added."""
    items, total = await InventoryService.list_items(
        db,
        current_user,
        page=page,
        page_size=limit,
        status=item_status,
        model_id=model_id,
        search=search,
    )
    return PaginatedResponse(
        data=[InventoryItemResponse.model_validate(i) for i in items],
        meta=PaginationMeta.build(page=page, page_size=limit, total=total),
    )


@router.post("", response_model=SuccessResponse[InventoryItemResponse], status_code=201)
async def add_inventory_item(
    item_in: InventoryItemCreate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    try:
        item = await InventoryService.add_item(db, current_user.id, item_in)
    except BikeModelNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return SuccessResponse(data=InventoryItemResponse.model_validate(item), message="Inventory item added")


@router.get("/{item_id}", response_model=SuccessResponse[InventoryItemResponse])
async def get_inventory_item(
    item_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    item = await InventoryService.get_item(db, item_id)
    if not item or item.is_deleted:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return SuccessResponse(data=InventoryItemResponse.model_validate(item))


@router.delete("/{item_id}", response_model=SuccessResponse)
async def delete_inventory_item(
    item_id: UUID,
    body: Optional[InventoryDeleteRequest] = Body(None),
    x_delete_reason: Optional[str] = Header(None),
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Soft-delete a stock item, keeping who deleted it and why. Admin only."""
    if not settings.INVENTORY_DELETE_ENABLED:
        raise HTTPException(status_code=403, detail="Inventory deletion is disabled")

    item = await InventoryService.get_item(db, item_id, for_update=True)
    if not item or item.is_deleted:
        raise HTTPException(status_code=404, detail="Inventory item not found")

    reason = (body.reason if body else None) or x_delete_reason
    await InventoryService.soft_delete_item(db, item, current_user.id, reason)
    return SuccessResponse(
        data={"id": str(item_id), "soft_deleted": True},
        message="Inventory item deleted successfully",
    )
