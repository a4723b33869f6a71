"""UserService: register, login, refresh and profile maintenance.

Login answers "unknown email" and "wrong password" with the same error so the
endpoint cannot be used to probe which emails are registered.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.sx_common.database import transactional
from src.sx_common.datetime_utils import utc_now
from src.sx_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    ProfileForbiddenError,
    UserNotFoundError,
)
from src.sx_gateway.auth.jwt_handler import (
    REFRESH,
    access_token_ttl_seconds,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.sx_gateway.auth.password import hash_password, verify_password
from src.sx_gateway.user.db_models import UserModel
from src.sx_gateway.user.schemas import (
    ProfileUpdateRequest,
    RegisterRequest,
    TokenPair,
)


def issue_tokens(user: UserModel) -> TokenPair:
    return TokenPair(
        access_token=create_access_token(str(user.id)),
        refresh_token=create_refresh_token(str(user.id)),
        expires_in=access_token_ttl_seconds(),
    )


class UserService:
    """Stateless; one instance per router module."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or logging.getLogger("stakex.user")

    async def _find_by_email(self, db: AsyncSession, email: str) -> UserModel | None:
        result = await db.execute(select(UserModel).where(UserModel.email == email))
        return result.scalar_one_or_none()

    async def _find_by_id(self, db: AsyncSession, user_id: str) -> UserModel | None:
        try:
            uid = uuid.UUID(user_id)
        except ValueError:
            return None
        result = await db.execute(select(UserModel).where(UserModel.id == uid))
        return result.scalar_one_or_none()

    async def register(
        self, db: AsyncSession, req: RegisterRequest
    ) -> tuple[UserModel, TokenPair]:
        async with transactional(db):
            if await self._find_by_email(db, req.email) is not None:
                raise EmailExistsError()
            user = UserModel(
                name=req.name,
                email=req.email,
                password_hash=hash_password(req.password),
                age=req.age,
                address=req.address,
                phone=req.phone,
                is_active=True,
            )
            db.add(user)
            try:
                await db.flush()
            except IntegrityError:
                # Lost a race with a concurrent registration of the same email
                raise EmailExistsError() from None
            await db.refresh(user)

        self._log.info("user registered id=%s", user.id)
        return user, issue_tokens(user)

    async def login(
        self, db: AsyncSession, email: str, password: str
    ) -> tuple[UserModel, TokenPair]:
        user = await self._find_by_email(db, email)
        if user is None or not verify_password(password, user.password_hash):
            self._log.info("login failed email=%s", email)
            raise InvalidCredentialsError()
        if not user.is_active:
            raise AccountDisabledError()
        return user, issue_tokens(user)

    def refresh(self, refresh_token: str) -> str:
        claims = decode_token(refresh_token, expected_type=REFRESH)
        return create_access_token(claims["sub"])

    async def get_user(self, db: AsyncSession, user_id: str) -> UserModel:
        user = await self._find_by_id(db, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def update_profile(
        self,
        db: AsyncSession,
        user_id: str,
        actor_id: str,
        req: ProfileUpdateRequest,
    ) -> UserModel:
        if user_id != actor_id:
            raise ProfileForbiddenError()
        changes = req.model_dump(exclude_unset=True)
        async with transactional(db):
            user = await self._find_by_id(db, user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            for field_name, value in changes.items():
                # name, age and address are NOT NULL columns
                if value is None and field_name != "profile_picture":
                    continue
                setattr(user, field_name, value)
            user.updated_at = utc_now()

        self._log.info("profile updated id=%s fields=%s", user_id, sorted(changes))
        return user
