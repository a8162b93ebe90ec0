"""User Pydantic Schemas"""

from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, EmailStr, ConfigDict

from app.models.enums import UserRole


class UserResponse(BaseModel):
    """Schema for user responses"""
    id: UUID
    email: EmailStr
    name: str
    role: UserRole
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
