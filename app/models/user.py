"""Users & Authentication Model"""

from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import relationship

from app.models.base import BaseModel, StatusMixin
from app.models.enums import UserRole


class User(BaseModel, StatusMixin):
    """
    Back-office account. Regular users own the bills and inventory items
    they create; admins can see and change everything.
    """
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)

    role = Column(
        ENUM(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        default=UserRole.USER,
        nullable=False,
        index=True,
    )

    bills = relationship("Bill", back_populates="owner")

    @property
    def is_admin(self) -> bool:
        """Check if user is an admin"""
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
