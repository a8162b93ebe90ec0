"""Bill endpoints - create, re-price, search and settle sales"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.logging import get_logger
from app.models.enums import BillStatus, BillType
from app.models.user import User
from app.schemas.bill import BillResponse, BillStatusUpdate, BillSuggestions
from app.schemas.responses import PaginatedResponse, PaginationMeta, SuccessResponse
from app.services.bill_service import BillAccessDenied, BillNotFound, BillService

logger = get_logger(__name__)

router = APIRouter()


def _bill_error(exc: Exception) -> HTTPException:
    if isinstance(exc, LookupError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, PermissionError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("", response_model=PaginatedResponse[BillResponse])
async def list_bills(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    bill_status: Optional[BillStatus] = Query(None, alias="status"),
    bill_type: Optional[BillType] = Query(None, alias="billType"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    min_amount: Optional[Decimal] = Query(None, alias="minAmount"),
    max_amount: Optional[Decimal] = Query(None, alias="maxAmount"),
    search: Optional[str] = Query(None),
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """List bills, newest first. Regular users only see their own."""
    bills, total = await BillService.list_bills(
        db,
        current_user,
        page=page,
        page_size=limit,
        status=bill_status,
        bill_type=bill_type,
        start_date=start_date,
        end_date=end_date,
        min_amount=min_amount,
        max_amount=max_amount,
        search=search,
    )
    return PaginatedResponse(
        data=[BillResponse.model_validate(b) for b in bills],
        meta=PaginationMeta.build(page=page, page_size=limit, total=total),
    )


@router.get("/suggestions", response_model=SuccessResponse[BillSuggestions])
async def bill_suggestions(
    q: str = Query(""),
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Autocomplete for customers, bill numbers and bike models."""
    found = await BillService.suggestions(db, current_user, q)
    return SuccessResponse(data=BillSuggestions(**found))


@router.post("", response_model=SuccessResponse[BillResponse], status_code=status.HTTP_201_CREATED)
async def create_bill(
    bill_in: Dict[str, Any] = Body(...),
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    Create a bill. Accepts camelCase or legacy snake_case fields plus an
    optional inventoryItemId; amounts and status are computed server-side.
    """
    try:
        bill = await BillService.create_bill(db, current_user, bill_in)
    except (LookupError, ValueError) as exc:
        raise _bill_error(exc)
    except IntegrityError as exc:
        logger.warning("Bill insert rejected", extra={"error": str(exc.orig)})
        raise HTTPException(status_code=400, detail="Bill conflicts with an existing record")
    return SuccessResponse(data=BillResponse.model_validate(bill), message="Bill created")


@router.get("/{bill_id}", response_model=SuccessResponse[BillResponse])
async def get_bill(
    bill_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    try:
        bill = await BillService.get_bill_for_user(db, current_user, bill_id)
    except (BillNotFound, BillAccessDenied) as exc:
        raise _bill_error(exc)
    return SuccessResponse(data=BillResponse.model_validate(bill))


@router.put("/{bill_id}", response_model=SuccessResponse[BillResponse])
async def update_bill(
    bill_id: UUID,
    bill_in: Dict[str, Any] = Body(...),
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    Patch a bill and re-run pricing. Unknown or malformed fields are
    ignored rather than rejected.
    """
    try:
        bill = await BillService.update_bill(db, current_user, bill_id, bill_in)
    except (BillNotFound, BillAccessDenied) as exc:
        raise _bill_error(exc)
    except (ValueError, SQLAlchemyError) as exc:
        logger.warning("Bill update failed", extra={"bill_id": str(bill_id), "error": str(exc)})
        raise HTTPException(status_code=400, detail=str(exc) or "Update failed")
    return SuccessResponse(data=BillResponse.model_validate(bill), message="Bill updated")


@router.patch("/{bill_id}/status", response_model=SuccessResponse[BillResponse])
async def update_bill_status(
    bill_id: UUID,
    body: BillStatusUpdate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Change a bill's status and sync its inventory item."""
    try:
        bill = await BillService.update_status(db, current_user, bill_id, body.status)
    except (LookupError, PermissionError, ValueError) as exc:
        raise _bill_error(exc)
    return SuccessResponse(data=BillResponse.model_validate(bill), message="Bill status updated")


@router.delete("/{bill_id}", response_model=SuccessResponse)
async def delete_bill(
    bill_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    try:
        await BillService.delete_bill(db, current_user, bill_id)
    except (BillNotFound, BillAccessDenied) as exc:
        raise _bill_error(exc)
    return SuccessResponse(data={"id": str(bill_id)}, message="Bill deleted successfully")
