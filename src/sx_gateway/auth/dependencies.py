"""FastAPI dependencies that resolve the caller from a Bearer token.

    @router.post("/posts")
    async def create(user: Annotated[UserModel, Depends(get_current_user)]): ...

``get_current_user`` is the only source of the acting identity; routers pass
``str(user.id)`` down to the services as the actor.
"""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sx_common.database import get_db_session
from src.sx_common.errors import AccountDisabledError, InvalidCredentialsError
from src.sx_gateway.auth.jwt_handler import ACCESS, decode_token
from src.sx_gateway.user.db_models import UserModel

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")

_UNAUTHORIZED = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    try:
        claims = decode_token(token, expected_type=ACCESS)
        user_id = uuid.UUID(claims["sub"])
    except (InvalidCredentialsError, ValueError):
        raise _UNAUTHORIZED from None

    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise _UNAUTHORIZED
    if not user.is_active:
        raise AccountDisabledError()
    return user
