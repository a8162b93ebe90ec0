"""User Endpoints"""

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user
from app.models.user import User as UserModel
from app.schemas.responses import SuccessResponse
from app.schemas.user import UserResponse

router = APIRouter()


@router.get("/me", response_model=SuccessResponse[UserResponse])
async def read_current_user(
    current_user: UserModel = Depends(get_current_user)
) -> SuccessResponse[UserResponse]:
    """Profile of the authenticated user."""
    return SuccessResponse(data=UserResponse.model_validate(current_user))
