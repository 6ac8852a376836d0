import pytest
from sqlalchemy import func, select

from core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from models.database import Contact, PasswordResetToken, User
from services.auth.auth_service import AuthService
from services.auth.user_service import UserService
from services.send_mail.reset_service import ResetService

ADMIN = {"id": 1, "role": "admin"}


@pytest.mark.asyncio
async def test_create_user_hashes_password(db_session):
    user = await UserService(db_session).create_user("dave", "dave@x.com", "secret123", role="manager")

    assert user.id is not None
    assert user.hashed_password != "secret123"
    assert user.role == "manager"
    assert (await AuthService(db_session).login("dave", "secret123")).success is True


@pytest.mark.asyncio
async def test_duplicate_username_or_email_conflicts(db_session):
    service = UserService(db_session)
    await service.create_user("dave", "dave@x.com", "secret123")

    with pytest.raises(ConflictError):
        await service.create_user("dave", "other@x.com", "secret123")
    with pytest.raises(ConflictError):
        await service.create_user("other", "dave@x.com", "secret123")


@pytest.mark.asyncio
async def test_list_users_paginates_newest_first(db_session):
    service = UserService(db_session)
    for index in range(5):
        await service.create_user(f"user{index}", f"user{index}@x.com", "secret123")

    users, pagination = await service.list_users(page=1, limit=2)

    assert pagination == {"page": 1, "limit": 2, "total": 5, "total_pages": 3}
    assert [user.username for user in users] == ["user4", "user3"]

    last_page, _ = await service.list_users(page=3, limit=2)
    assert [user.username for user in last_page] == ["user0"]


@pytest.mark.asyncio
async def test_list_users_filters(db_session):
    service = UserService(db_session)
    await service.create_user("ana", "ana@x.com", "secret123", role="manager")
    await service.create_user("ben", "ben@x.com", "secret123")

    managers, pagination = await service.list_users(role="manager")
    assert [user.username for user in managers] == ["ana"]
    assert pagination["total"] == 1

    found, _ = await service.list_users(search="ben@")
    assert [user.username for user in found] == ["ben"]


@pytest.mark.asyncio
async def test_get_missing_user_raises_not_found(db_session):
    with pytest.raises(NotFoundError):
        await UserService(db_session).get_user(404)


@pytest.mark.asyncio
async def test_update_requires_a_field(db_session, make_user):
    user = await make_user("bob", "bob@x.com", "secret123")

    with pytest.raises(ValidationError):
        await UserService(db_session).update_user(user.id, {"email": None}, ADMIN)


@pytest.mark.asyncio
async def test_admin_update_rehashes_password(db_session, make_user):
    user = await make_user("bob", "bob@x.com", "secret123")

    await UserService(db_session).update_user(user.id, {"password": "changed123", "role": "manager"}, ADMIN)

    result = await AuthService(db_session).login("bob", "changed123")
    assert result.success is True
    assert result.user["role"] == "manager"


@pytest.mark.asyncio
async def test_self_service_update_is_limited_to_own_credentials(db_session, make_user):
    bob = await make_user("bob", "bob@x.com", "secret123")
    eve = await make_user("eve", "eve@x.com", "secret123")
    service = UserService(db_session)
    bob_ctx = {"id": bob.id, "role": "agent"}

    updated = await service.update_user(bob.id, {"email": "robert@x.com"}, bob_ctx)
    assert updated.email == "robert@x.com"

    with pytest.raises(AuthorizationError):
        await service.update_user(bob.id, {"role": "admin"}, bob_ctx)
    with pytest.raises(AuthorizationError):
        await service.update_user(eve.id, {"email": "mallory@x.com"}, bob_ctx)


@pytest.mark.asyncio
async def test_update_to_taken_email_conflicts(db_session, make_user):
    await make_user("bob", "bob@x.com", "secret123")
    eve = await make_user("eve", "eve@x.com", "secret123")

    with pytest.raises(ConflictError):
        await UserService(db_session).update_user(eve.id, {"email": "bob@x.com"}, ADMIN)


@pytest.mark.asyncio
async def test_admin_cannot_delete_themself(db_session, make_user):
    admin = await make_user("root", "root@x.com", "secret123", role="admin")

    with pytest.raises(ValidationError):
        await UserService(db_session).delete_user(admin.id, actor_id=admin.id)


@pytest.mark.asyncio
async def test_delete_clears_assignments_and_reset_tokens(db_session, make_user, fake_dispatcher):
    admin = await make_user("root", "root@x.com", "secret123", role="admin")
    bob = await make_user("bob", "bob@x.com", "secret123")
    db_session.add(Contact(full_name="Lead", email="lead@x.com", phone="555-0100", message="Hi", assigned_to=bob.id))
    await db_session.commit()
    await ResetService(db_session, fake_dispatcher).request_password_reset("bob")

    await UserService(db_session).delete_user(bob.id, actor_id=admin.id)

    assert await db_session.scalar(select(func.count()).select_from(User).where(User.id == bob.id)) == 0
    assert await db_session.scalar(
        select(func.count()).select_from(PasswordResetToken).where(PasswordResetToken.user_id == bob.id)
    ) == 0
    assigned = (await db_session.execute(select(Contact.assigned_to))).scalars().all()
    assert assigned == [None]
