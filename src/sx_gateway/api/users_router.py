"""User profile endpoints.

GET /users/{user_id}  — profile (auth required)
PUT /users/{user_id}  — update own name / age / address / profilePicture
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sx_common.database import get_db_session
from src.sx_common.response import ApiResponse, respond
from src.sx_gateway.auth.dependencies import get_current_user
from src.sx_gateway.user.db_models import UserModel
from src.sx_gateway.user.schemas import ProfileUpdateRequest, UserInfo
from src.sx_gateway.user.service import UserService

router = APIRouter(prefix="/users", tags=["users"])
_service = UserService()


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user = await _service.get_user(db, user_id)
    return respond(request, UserInfo.from_model(user))


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    request: Request,
    body: ProfileUpdateRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user = await _service.update_profile(db, user_id, str(current_user.id), body)
    return respond(request, UserInfo.from_model(user), "Profile updated successfully")
