"""Bill Service - creating, pricing, searching and settling bills"""

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from functools import partial
from typing import Any, Dict, List, Mapping, Optional, Tuple
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy import distinct, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.bill import Bill
from app.models.enums import BikeStatus, BillStatus, BillType, VehicleType
from app.models.inventory import BikeInventory
from app.models.user import User
from app.schemas.bill import BillRequiredFields
from app.services.bill_calculations import build_pricing_pipeline
from app.services.counter_service import CounterService
from app.services.inventory_service import InventoryService
from app.utils.bill_payload import normalize_bill_payload_with_report, to_decimal

logger = logging.getLogger(__name__)

# pricing payload key -> Bill column attribute
PAYLOAD_COLUMNS: Dict[str, str] = {
    "billType": "bill_type",
    "vehicleType": "vehicle_type",
    "status": "status",
    "isTricycle": "is_tricycle",
    "isEbicycle": "is_ebicycle",
    "isFirstTricycleSale": "is_first_tricycle_sale",
    "bikeModel": "bike_model",
    "bikePrice": "bike_price",
    "rmvCharge": "rmv_charge",
    "downPayment": "down_payment",
    "balanceAmount": "balance_amount",
    "totalAmount": "total_amount",
    "customerName": "customer_name",
    "customerNIC": "customer_nic",
    "customerAddress": "customer_address",
    "motorNumber": "motor_number",
    "chassisNumber": "chassis_number",
    "billDate": "bill_date",
    "estimatedDeliveryDate": "estimated_delivery_date",
}

_ENUM_COLUMNS = {"billType": BillType, "vehicleType": VehicleType, "status": BillStatus}
_MONEY_COLUMNS = {"bikePrice", "rmvCharge", "downPayment", "balanceAmount", "totalAmount"}
_DATE_COLUMNS = {"billDate", "estimatedDeliveryDate"}
_FLAG_COLUMNS = {"isTricycle", "isEbicycle", "isFirstTricycleSale"}

SUGGESTION_LIMIT = 5

# create-only fields read outside the payload normalizer
LEGACY_ADVANCE_KEYS = ("isAdvancePayment", "is_advance_payment", "advanceAmount", "advance_amount")


class BillNotFound(LookupError):
    pass


class BillAccessDenied(PermissionError):
    pass


def _to_naive_utc(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def bill_to_payload(bill: Bill) -> Dict[str, Any]:
    """Current state of a bill in the pricing pipeline's camelCase shape."""
    payload: Dict[str, Any] = {}
    for key, column in PAYLOAD_COLUMNS.items():
        value = getattr(bill, column)
        if value is None:
            continue
        if key in _ENUM_COLUMNS:
            value = value.value
        elif key in _DATE_COLUMNS:
            value = value.isoformat()
        payload[key] = value
    return payload


def apply_payload(bill: Bill, payload: Mapping[str, Any]) -> Bill:
    """Write priced payload values onto the bill's columns."""
    for key, column in PAYLOAD_COLUMNS.items():
        if key not in payload:
            continue
        value = payload[key]
        if value is None:
            setattr(bill, column, None)
        elif key in _ENUM_COLUMNS:
            setattr(bill, column, _ENUM_COLUMNS[key](value))
        elif key in _MONEY_COLUMNS:
            setattr(bill, column, to_decimal(value))
        elif key in _DATE_COLUMNS:
            setattr(bill, column, _to_naive_utc(value))
        elif key in _FLAG_COLUMNS:
            setattr(bill, column, bool(value))
        else:
            setattr(bill, column, str(value))
    return bill


def inventory_payload(item: BikeInventory) -> Dict[str, Any]:
    """Bike details a bill takes from the stock item it sells."""
    bike_model = item.bike_model
    if bike_model.is_tricycle:
        vehicle_type = VehicleType.E_TRICYCLE
    elif bike_model.is_ebicycle:
        vehicle_type = VehicleType.E_MOTORBICYCLE
    else:
        vehicle_type = VehicleType.E_MOTORCYCLE
    return {
        "bikeModel": bike_model.name,
        "motorNumber": item.motor_number,
        "chassisNumber": item.chassis_number,
        "bikePrice": Decimal(bike_model.price),
        "vehicleType": vehicle_type.value,
    }


def sync_inventory_status(item: BikeInventory, bill: Bill) -> None:
    """
    Keep a linked stock item in step with its bill's status.

    An item held by another bill is left alone, and a free item is only
    taken again while it is still available.
    """
    if item.bill_id is not None and item.bill_id != bill.id:
        logger.warning(
            "Inventory item held by another bill; status not synced",
            extra={"bill_id": str(bill.id), "item_id": str(item.id), "holder_bill_id": str(item.bill_id)},
        )
        return
    if item.bill_id is None and item.status != BikeStatus.AVAILABLE:
        return
    if bill.status == BillStatus.COMPLETED:
        item.mark_sold(bill.id)
    elif bill.status == BillStatus.PENDING:
        item.mark_sold(bill.id, status=BikeStatus.RESERVED)
    elif bill.status == BillStatus.CANCELLED:
        item.release()


def check_required_fields(payload: Mapping[str, Any]) -> None:
    try:
        BillRequiredFields.model_validate(payload)
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise ValueError(f"Validation error: missing or invalid {', '.join(fields)}")


def _legacy_advance_fields(raw: Mapping[str, Any], payload: Dict[str, Any]) -> None:
    """Older bill forms flag advances with isAdvancePayment / advanceAmount."""
    flag = raw.get("isAdvancePayment", raw.get("is_advance_payment"))
    if flag is True or str(flag).lower() == "true":
        payload["billType"] = BillType.ADVANCE.value
        if "downPayment" not in payload:
            advance = to_decimal(raw.get("advanceAmount", raw.get("advance_amount")))
            if advance is not None:
                payload["downPayment"] = advance


def _parse_uuid(value: Any, label: str) -> UUID:
    try:
        return UUID(str(value))
    except ValueError:
        raise ValueError(f"Invalid {label}")


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class BillService:

    @staticmethod
    def pricing_pipeline(db: AsyncSession):
        return build_pricing_pipeline(partial(CounterService.claim_first_tricycle_sale, db))

    @staticmethod
    async def get_bill(db: AsyncSession, bill_id: UUID) -> Optional[Bill]:
        result = await db.execute(select(Bill).where(Bill.id == bill_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_bill_for_user(db: AsyncSession, user: User, bill_id: UUID) -> Bill:
        """
        Fetch a bill the user may act on.

        Raises:
            BillNotFound: no such bill
            BillAccessDenied: user is neither the owner nor an admin
        """
        bill = await BillService.get_bill(db, bill_id)
        if not bill:
            raise BillNotFound("Bill not found")
        if not user.is_admin and bill.owner_id != user.id:
            raise BillAccessDenied("You do not have permission to access this bill")
        return bill

    @staticmethod
    async def create_bill(db: AsyncSession, user: User, raw: Mapping[str, Any]) -> Bill:
        """
        Create a bill, linking and reserving or selling an inventory item.

        The inventory lookup, the bill insert and the stock update commit
        together or not at all.

        Raises:
            ValueError: invalid ids, unavailable stock, missing required fields
            LookupError: the requested inventory item does not exist
        """
        raw = dict(raw or {})
        camel_item = raw.pop("inventoryItemId", None)
        snake_item = raw.pop("inventory_item_id", None)
        requested_item = camel_item or snake_item
        legacy = {key: raw.pop(key) for key in LEGACY_ADVANCE_KEYS if key in raw}
        normalized = normalize_bill_payload_with_report(raw)
        payload = dict(normalized.patch)
        _legacy_advance_fields(legacy, payload)

        try:
            item: Optional[BikeInventory] = None
            if requested_item:
                item_id = _parse_uuid(requested_item, "inventory item ID")
                item = await InventoryService.get_available_item(db, item_id)
            elif payload.get("motorNumber") and payload.get("chassisNumber"):
                item = await InventoryService.find_available_by_identity(
                    db, payload["motorNumber"], payload["chassisNumber"]
                )
            if item is not None:
                payload.update(inventory_payload(item))

            priced = await BillService.pricing_pipeline(db).run(payload)
            check_required_fields(priced)

            bill = Bill(
                id=uuid.uuid4(),
                bill_number=await CounterService.next_bill_number(db),
                owner_id=user.id,
                inventory_item_id=item.id if item is not None else None,
            )
            apply_payload(bill, priced)
            db.add(bill)
            await db.flush()

            if item is not None:
                sync_inventory_status(item, bill)

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(bill)
        logger.info(
            "Bill created",
            extra={
                "bill_id": str(bill.id),
                "bill_number": bill.bill_number,
                "bill_type": bill.bill_type.value,
                "inventory_item_id": str(bill.inventory_item_id) if bill.inventory_item_id else None,
                "ignored_fields": normalized.ignored,
            },
        )
        return bill

    @staticmethod
    async def update_bill(
        db: AsyncSession,
        user: User,
        bill_id: UUID,
        raw: Mapping[str, Any],
    ) -> Bill:
        """
        Apply a client patch and re-price the bill.

        The patch is normalized to a sparse set of known fields, laid over
        the bill's current values and run through the pricing pipeline, so
        amounts and status always follow from the merged state.
        """
        bill = await BillService.get_bill_for_user(db, user, bill_id)
        previous_status = bill.status

        normalized = normalize_bill_payload_with_report(raw)
        if normalized.ignored:
            logger.info(
                "Ignored bill update fields",
                extra={"bill_id": str(bill.id), "ignored_fields": normalized.ignored},
            )

        merged = {**bill_to_payload(bill), **normalized.patch}
        priced = await BillService.pricing_pipeline(db).run(merged)
        apply_payload(bill, priced)

        if bill.inventory_item_id and bill.status != previous_status:
            item = await InventoryService.get_item(db, bill.inventory_item_id, for_update=True)
            if item is not None:
                sync_inventory_status(item, bill)

        await db.commit()
        await db.refresh(bill)
        logger.info(
            "Bill updated",
            extra={"bill_id": str(bill.id), "fields": sorted(normalized.patch)},
        )
        return bill

    @staticmethod
    async def update_status(
        db: AsyncSession,
        user: User,
        bill_id: UUID,
        status_value: Optional[str],
    ) -> Bill:
        """
        Move a bill to a new status and sync its inventory item in the same
        transaction: completed sells it, pending reserves it, cancelled puts
        it back in stock, converted leaves it alone.
        """
        if not status_value:
            raise ValueError("Status is required")
        try:
            status = BillStatus(str(status_value).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid status '{status_value}'")

        try:
            bill = await BillService.get_bill_for_user(db, user, bill_id)
            bill.status = status
            if bill.inventory_item_id:
                item = await InventoryService.get_item(db, bill.inventory_item_id, for_update=True)
                if item is not None:
                    sync_inventory_status(item, bill)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(bill)
        logger.info("Bill status changed", extra={"bill_id": str(bill.id), "status": status.value})
        return bill

    @staticmethod
    async def delete_bill(db: AsyncSession, user: User, bill_id: UUID) -> None:
        """Delete a bill; a stock item it held goes back to available."""
        bill = await BillService.get_bill_for_user(db, user, bill_id)
        if bill.inventory_item_id:
            item = await InventoryService.get_item(db, bill.inventory_item_id, for_update=True)
            if item is not None and item.bill_id == bill.id:
                item.release()
        await db.delete(bill)
        await db.commit()
        logger.info("Bill deleted", extra={"bill_id": str(bill_id)})

    @staticmethod
    def _owner_scope(user: User) -> list:
        return [] if user.is_admin else [Bill.owner_id == user.id]

    @staticmethod
    async def list_bills(
        db: AsyncSession,
        user: User,
        page: int = 1,
        page_size: int = 20,
        status: Optional[BillStatus] = None,
        bill_type: Optional[BillType] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        min_amount: Optional[Decimal] = None,
        max_amount: Optional[Decimal] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Bill], int]:
        """
        Filtered, newest-first page of bills.

        `search` is split on whitespace; a bill matches when any token
        appears (case-insensitively) in its customer name, NIC, bill
        number or bike model.

        Returns:
            Tuple of (bills, total count)
        """
        conditions = BillService._owner_scope(user)
        if status:
            conditions.append(Bill.status == status)
        if bill_type:
            conditions.append(Bill.bill_type == bill_type)
        if start_date:
            conditions.append(Bill.bill_date >= start_date)
        if end_date:
            conditions.append(Bill.bill_date <= end_date)
        if min_amount is not None:
            conditions.append(Bill.total_amount >= min_amount)
        if max_amount is not None:
            conditions.append(Bill.total_amount <= max_amount)
        if search:
            tokens = [token for token in search.split() if token]
            searchable = (Bill.customer_name, Bill.customer_nic, Bill.bill_number, Bill.bike_model)
            if tokens:
                conditions.append(or_(*[
                    column.ilike(f"%{_escape_like(token)}%", escape="\\")
                    for token in tokens
                    for column in searchable
                ]))

        total = await db.scalar(select(func.count(Bill.id)).where(*conditions))
        result = await db.execute(
            select(Bill)
            .where(*conditions)
            .order_by(Bill.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(result.scalars().all()), total or 0

    @staticmethod
    async def suggestions(db: AsyncSession, user: User, query: str) -> Dict[str, List[str]]:
        """Up to five distinct customer names, bill numbers and bike models matching `query`."""
        pattern = f"%{_escape_like(query.strip())}%"
        scope = BillService._owner_scope(user)
        out: Dict[str, List[str]] = {}
        for key, column in (
            ("customers", Bill.customer_name),
            ("bill_numbers", Bill.bill_number),
            ("models", Bill.bike_model),
        ):
            result = await db.execute(
                select(distinct(column))
                .where(*scope, column.ilike(pattern, escape="\\"))
                .order_by(column)
                .limit(SUGGESTION_LIMIT)
            )
            out[key] = [value for value in result.scalars().all() if value]
        return out
