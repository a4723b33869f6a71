"""Auth endpoints.

POST /auth/register   — create account, returns user + token pair (201)
POST /auth/login      — email + password, returns user + token pair
POST /auth/refresh    — refresh token → new access token
GET  /auth/verify     — the user behind the Bearer token
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.sx_common.database import get_db_session
from src.sx_common.response import ApiResponse, respond
from src.sx_gateway.auth.dependencies import get_current_user
from src.sx_gateway.auth.jwt_handler import access_token_ttl_seconds
from src.sx_gateway.user.db_models import UserModel
from src.sx_gateway.user.schemas import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    UserInfo,
)
from src.sx_gateway.user.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()


@router.post("/register", status_code=status.HTTP_201_CREATED, summary="User registration")
async def register(
    request: Request,
    body: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user, tokens = await _service.register(db, body)
    data = AuthResponse(user=UserInfo.from_model(user), tokens=tokens)
    return respond(request, data, "User registered successfully")


@router.post("/login", summary="User login")
async def login(
    request: Request,
    body: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user, tokens = await _service.login(db, body.email, body.password)
    data = AuthResponse(user=UserInfo.from_model(user), tokens=tokens)
    return respond(request, data, "Login successful")


@router.post("/refresh", summary="Refresh access token")
async def refresh_token(request: Request, body: RefreshRequest) -> ApiResponse:
    data = RefreshResponse(
        access_token=_service.refresh(body.refresh_token),
        expires_in=access_token_ttl_seconds(),
    )
    return respond(request, data, "Token refreshed")


@router.get("/verify", summary="Resolve the current token")
async def verify(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
) -> ApiResponse:
    return respond(request, {"user": UserInfo.from_model(current_user).to_wire()})
