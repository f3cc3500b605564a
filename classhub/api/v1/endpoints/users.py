# classhub/api/v1/endpoints/users.py
from fastapi import APIRouter, Depends

from classhub.schemas.user import MeResponse, UserProfile
from classhub.models.user import User
from classhub.core.security import get_current_user

router = APIRouter(tags=["users"])


@router.get("/me", response_model=MeResponse)
def read_me(current_user: User = Depends(get_current_user)):
    return MeResponse(user=UserProfile.model_validate(current_user))
