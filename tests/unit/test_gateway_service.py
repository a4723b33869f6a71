"""Unit tests for UserService (mocked DB)."""

import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import ValidationError

from src.sx_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    ProfileForbiddenError,
    UserNotFoundError,
)
from src.sx_gateway.auth.jwt_handler import create_access_token, create_refresh_token
from src.sx_gateway.user.db_models import UserModel
from src.sx_gateway.user.schemas import ProfileUpdateRequest, RegisterRequest, UserInfo
from src.sx_gateway.user.service import UserService


def _make_user(is_active: bool = True) -> UserModel:
    user = UserModel()
    user.id = uuid.uuid4()
    user.name = "Alice"
    user.email = "alice@example.com"
    user.password_hash = "$2b$12$fakehash"
    user.age = 30
    user.address = "1 Main St"
    user.phone = None
    user.profile_picture = None
    user.is_active = is_active
    user.created_at = datetime(2025, 3, 1, tzinfo=UTC)
    return user


def _result(value) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def _register_request(**kwargs) -> RegisterRequest:
    fields = dict(
        name="Alice", email="Alice@Example.com", password="secret1", age=30, address="1 Main St"
    )
    fields.update(kwargs)
    return RegisterRequest(**fields)


@pytest.fixture
def mock_db() -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def service() -> UserService:
    return UserService()


class TestRegisterRequest:
    def test_email_lowercased(self) -> None:
        assert _register_request().email == "alice@example.com"

    @pytest.mark.parametrize(
        "override",
        [{"age": 12}, {"age": 121}, {"name": "A"}, {"password": "12345"}, {"address": "x" * 201}],
    )
    def test_invalid_fields(self, override) -> None:
        with pytest.raises(ValidationError):
            _register_request(**override)


class TestRegister:
    async def test_duplicate_email(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user()))
        with pytest.raises(EmailExistsError):
            await service.register(mock_db, _register_request())
        mock_db.add.assert_not_called()

    async def test_success_issues_tokens(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))

        async def _refresh(user: UserModel) -> None:
            user.id = uuid.uuid4()

        mock_db.refresh = AsyncMock(side_effect=_refresh)

        with patch("src.sx_gateway.user.service.hash_password", return_value="hashed"):
            user, tokens = await service.register(mock_db, _register_request())

        assert user.email == "alice@example.com"
        assert user.password_hash == "hashed"
        assert tokens.access_token != tokens.refresh_token
        mock_db.commit.assert_awaited_once()


class TestLogin:
    async def test_unknown_email(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))
        with pytest.raises(InvalidCredentialsError):
            await service.login(mock_db, "nobody@example.com", "secret1")

    async def test_wrong_password(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user()))
        with (
            patch("src.sx_gateway.user.service.verify_password", return_value=False),
            pytest.raises(InvalidCredentialsError),
        ):
            await service.login(mock_db, "alice@example.com", "wrong")

    async def test_disabled_account(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user(is_active=False)))
        with (
            patch("src.sx_gateway.user.service.verify_password", return_value=True),
            pytest.raises(AccountDisabledError),
        ):
            await service.login(mock_db, "alice@example.com", "secret1")

    async def test_success(self, service: UserService, mock_db: AsyncMock) -> None:
        user = _make_user()
        mock_db.execute = AsyncMock(return_value=_result(user))
        with patch("src.sx_gateway.user.service.verify_password", return_value=True):
            returned, tokens = await service.login(mock_db, "alice@example.com", "secret1")
        assert returned is user
        assert tokens.token_type == "Bearer"


class TestRefresh:
    def test_new_access_token(self, service: UserService) -> None:
        assert service.refresh(create_refresh_token("user-123"))

    def test_access_token_rejected(self, service: UserService) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            service.refresh(create_access_token("user-123"))


class TestProfile:
    async def test_get_unknown_user(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))
        with pytest.raises(UserNotFoundError):
            await service.get_user(mock_db, str(uuid.uuid4()))

    async def test_get_malformed_id_is_not_found(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(UserNotFoundError):
            await service.get_user(mock_db, "not-a-uuid")
        mock_db.execute.assert_not_called()

    async def test_update_other_profile_forbidden(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(ProfileForbiddenError):
            await service.update_profile(
                mock_db, str(uuid.uuid4()), str(uuid.uuid4()), ProfileUpdateRequest(name="Bob")
            )

    async def test_update_own_profile(self, service: UserService, mock_db: AsyncMock) -> None:
        user = _make_user()
        mock_db.execute = AsyncMock(return_value=_result(user))
        req = ProfileUpdateRequest.model_validate(
            {"name": "Alicia", "profilePicture": "https://img.example.com/a.png", "email": "x@y.z"}
        )

        updated = await service.update_profile(mock_db, str(user.id), str(user.id), req)

        assert updated.name == "Alicia"
        assert updated.profile_picture == "https://img.example.com/a.png"
        assert updated.email == "alice@example.com"

    def test_user_info_member_since(self) -> None:
        info = UserInfo.from_model(_make_user())
        assert info.member_since == "2025"
        assert "passwordHash" not in info.to_wire()
