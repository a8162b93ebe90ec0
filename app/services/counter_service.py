"""Counter Service - atomic system-wide sequences"""

from sqlalchemy import func, literal, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.bill import Bill
from app.models.counter import SystemCounter

BILL_NUMBER_COUNTER = "bill_number"
TRICYCLE_SALES_COUNTER = "tricycle_sales"


class CounterService:
    """
    Counters are bumped with a single INSERT ... ON CONFLICT DO UPDATE
    ... RETURNING statement, so concurrent callers always see distinct
    values without holding a lock across requests.
    """

    @staticmethod
    async def increment(db: AsyncSession, name: str, seed=None) -> int:
        """
        Increment counter `name` and return its new value.

        `seed` is the value written when the row does not exist yet; it can
        be a scalar subquery so an existing table can initialize the counter.
        """
        initial = seed if seed is not None else literal(1)
        stmt = (
            insert(SystemCounter)
            .values(name=name, value=initial)
            .on_conflict_do_update(
                index_elements=[SystemCounter.name],
                set_={"value": SystemCounter.value + 1},
            )
            .returning(SystemCounter.value)
        )
        result = await db.execute(stmt)
        return int(result.scalar_one())

    @staticmethod
    async def next_bill_number(db: AsyncSession) -> str:
        """Next human-readable bill number, e.g. BILL-000042."""
        seed = select(func.count(Bill.id) + 1).scalar_subquery()
        value = await CounterService.increment(db, BILL_NUMBER_COUNTER, seed=seed)
        return f"{settings.BILL_NUMBER_PREFIX}{value:06d}"

    @staticmethod
    async def claim_first_tricycle_sale(db: AsyncSession) -> bool:
        """
        Count one more tricycle sale; True only for the first one ever.

        The counter is seeded from the tricycle bills already stored, so a
        database that predates the counter never hands out the flag again.
        """
        seed = select(func.count(Bill.id) + 1).where(Bill.is_tricycle.is_(True)).scalar_subquery()
        value = await CounterService.increment(db, TRICYCLE_SALES_COUNTER, seed=seed)
        return value == 1
