"""Named system-wide counters"""

from sqlalchemy import Column, String, BigInteger

from app.database import Base


class SystemCounter(Base):
    """
    One row per counter. Values only move through atomic upserts
    (see CounterService), never read-modify-write.
    """
    __tablename__ = "system_counters"

    name = Column(String(64), primary_key=True)
    value = Column(BigInteger, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<SystemCounter {self.name}={self.value}>"
