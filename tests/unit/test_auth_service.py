import pytest
from sqlalchemy.exc import OperationalError

from core.exceptions import NotFoundError, ServiceError
from services.auth.auth_service import AuthService
from services.dataclasses.auth import INVALID_CREDENTIALS_MESSAGE
from utils.jwt_utils import JWTManager


class BrokenSession:
    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT users", {}, Exception("connection refused"))

    async def rollback(self):
        pass


@pytest.mark.asyncio
async def test_login_by_username_issues_token_with_role(db_session, make_user):
    await make_user("bob", "bob@x.com", "secret123")

    result = await AuthService(db_session).login("bob", "secret123")

    assert result.success is True
    assert result.user["username"] == "bob"
    assert "hashed_password" not in result.user
    assert JWTManager.extract_user_context(result.token)["role"] == "agent"


@pytest.mark.asyncio
async def test_login_by_email(db_session, make_user):
    await make_user("alice", "alice@x.com", "secret123", role="manager")

    result = await AuthService(db_session).login("alice@x.com", "secret123")

    assert result.success is True
    assert result.user["role"] == "manager"


@pytest.mark.asyncio
async def test_wrong_password_and_unknown_account_fail_identically(db_session, make_user):
    await make_user("bob", "bob@x.com", "secret123")
    service = AuthService(db_session)

    wrong_password = await service.login("bob", "wrong-password")
    unknown_account = await service.login("nobody", "wrong-password")

    assert wrong_password == unknown_account
    assert wrong_password.success is False
    assert wrong_password.token is None
    assert wrong_password.message == INVALID_CREDENTIALS_MESSAGE


@pytest.mark.asyncio
async def test_inactive_account_cannot_login(db_session, make_user):
    await make_user("carol", "carol@x.com", "secret123", is_active=False)

    result = await AuthService(db_session).login("carol", "secret123")

    assert result.success is False
    assert result.message == INVALID_CREDENTIALS_MESSAGE


@pytest.mark.asyncio
async def test_storage_failure_is_a_service_error_not_invalid_credentials():
    with pytest.raises(ServiceError) as exc_info:
        await AuthService(BrokenSession()).login("bob", "secret123")

    assert exc_info.value.status_code == 500
    assert "connection refused" not in exc_info.value.message


@pytest.mark.asyncio
async def test_get_user_profile(db_session, make_user):
    user = await make_user("bob", "bob@x.com", "secret123")
    service = AuthService(db_session)

    profile = await service.get_user_profile(user.id)
    assert profile["email"] == "bob@x.com"

    with pytest.raises(NotFoundError):
        await service.get_user_profile(9999)
