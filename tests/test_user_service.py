import pytest

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.user import UserRole
from app.services import user_service


def test_password_hashing_round_trip():
    hashed = user_service.hash_password("s3cret-pass")

    assert hashed != "s3cret-pass"
    assert user_service.verify_password("s3cret-pass", hashed)
    assert not user_service.verify_password("wrong", hashed)
    assert not user_service.verify_password("s3cret-pass", "not-a-bcrypt-hash")


@pytest.mark.asyncio
async def test_create_and_authenticate(db):
    user = await user_service.create_user(
        {"username": "shipping1", "password": "s3cret-pass", "role": UserRole.SHIPPING}
    )
    assert user.password_hash.startswith("$2")

    logged_in = await user_service.authenticate("shipping1", "s3cret-pass")
    assert logged_in.id == user.id
    assert logged_in.last_login is not None

    with pytest.raises(ValidationError):
        await user_service.authenticate("shipping1", "wrong")
    with pytest.raises(ConflictError):
        await user_service.create_user({"username": "shipping1", "password": "another-pass"})


@pytest.mark.asyncio
async def test_deactivated_user_cannot_log_in(db):
    user = await user_service.create_user({"username": "prod1", "password": "s3cret-pass"})

    await user_service.deactivate_user(user.id)

    with pytest.raises(ValidationError):
        await user_service.authenticate("prod1", "s3cret-pass")


@pytest.mark.asyncio
async def test_groups_and_membership(db):
    group = await user_service.create_group({"name": "Shipping", "permissions": ["inventory:transfer"]})

    with pytest.raises(NotFoundError):
        await user_service.create_user({"username": "lost", "password": "s3cret-pass", "group_id": 404})

    user = await user_service.create_user({"username": "member", "password": "s3cret-pass", "group_id": group.id})
    assert user.group_id == group.id

    renamed = await user_service.update_group(group.id, {"name": "Dock"})
    assert renamed.name == "Dock"


@pytest.mark.asyncio
async def test_username_cannot_be_cleared(db):
    user = await user_service.create_user({"username": "manager1", "password": "s3cret-pass"})

    with pytest.raises(ValidationError):
        await user_service.update_user(user.id, {"username": None})
