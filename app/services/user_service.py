import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import bcrypt

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.user import User, UserGroup
from app.services.catalog_service import reject_nulls

log = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # Malformed stored hash
        return False


async def _check_unique(username: Optional[str], email: Optional[str], exclude_id: Optional[int] = None):
    if username:
        query = User.filter(username=username)
        if exclude_id:
            query = query.exclude(id=exclude_id)
        if await query.exists():
            raise ConflictError(f"Username {username} is already taken.")
    if email:
        query = User.filter(email=email)
        if exclude_id:
            query = query.exclude(id=exclude_id)
        if await query.exists():
            raise ConflictError(f"Email {email} is already registered.")


async def _check_group(group_id: Optional[int]):
    if group_id is not None and not await UserGroup.exists(id=group_id):
        raise NotFoundError(f"User group {group_id} not found.")


async def list_users() -> List[User]:
    return await User.all().order_by("username")


async def create_user(data: Dict[str, Any]) -> User:
    data = dict(data)
    password = data.pop("password")
    await _check_unique(data.get("username"), data.get("email"))
    await _check_group(data.get("group_id"))
    user = await User.create(**data, password_hash=hash_password(password))
    log.info(f"User {user.username} created with role {user.role.value}")
    return user


async def update_user(user_id: int, changes: Dict[str, Any]) -> User:
    reject_nulls(changes, ("username", "role", "is_active"))
    user = await User.get_or_none(id=user_id)
    if not user:
        raise NotFoundError(f"User {user_id} not found.")
    changes = dict(changes)
    password = changes.pop("password", None)
    await _check_unique(changes.get("username"), changes.get("email"), exclude_id=user_id)
    await _check_group(changes.get("group_id"))

    for name, value in changes.items():
        setattr(user, name, value)
    fields = list(changes)
    if password:
        user.password_hash = hash_password(password)
        fields.append("password_hash")
    if fields:
        await user.save(update_fields=fields)
    return user


async def deactivate_user(user_id: int) -> User:
    return await update_user(user_id, {"is_active": False})


async def authenticate(username: str, password: str) -> User:
    user = await User.get_or_none(username=username, is_active=True)
    if not user or not verify_password(password, user.password_hash):
        log.info(f"Failed login for {username}")
        raise ValidationError("Invalid credentials.")
    user.last_login = datetime.now(timezone.utc)
    await user.save(update_fields=["last_login"])
    return user


# ----------- Groups -----------

async def list_groups() -> List[UserGroup]:
    return await UserGroup.all().order_by("name")


async def create_group(data: Dict[str, Any]) -> UserGroup:
    if await UserGroup.exists(name=data["name"]):
        raise ConflictError(f"User group {data['name']} already exists.")
    return await UserGroup.create(**data)


async def update_group(group_id: int, changes: Dict[str, Any]) -> UserGroup:
    reject_nulls(changes, ("name", "permissions", "is_active"))
    group = await UserGroup.get_or_none(id=group_id)
    if not group:
        raise NotFoundError(f"User group {group_id} not found.")
    name = changes.get("name")
    if name and name != group.name and await UserGroup.exists(name=name):
        raise ConflictError(f"User group {name} already exists.")
    for attr, value in changes.items():
        setattr(group, attr, value)
    await group.save(update_fields=list(changes) + ["updated_at"])
    return group
