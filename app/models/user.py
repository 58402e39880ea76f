from enum import Enum
from tortoise import fields, models


class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    SHIPPING = "shipping"
    PROD = "prod"
    USER = "user"


class UserGroup(models.Model):
    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=100, unique=True)
    description = fields.TextField(null=True)
    permissions = fields.JSONField(default=list)
    is_active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "user_groups"


class User(models.Model):
    id = fields.IntField(primary_key=True)
    username = fields.CharField(max_length=100, unique=True)
    email = fields.CharField(max_length=255, unique=True, null=True)
    password_hash = fields.CharField(max_length=128)
    first_name = fields.CharField(max_length=100, null=True)
    last_name = fields.CharField(max_length=100, null=True)
    role = fields.CharEnumField(UserRole, default=UserRole.USER)
    group = fields.ForeignKeyField("models.UserGroup", related_name="users", null=True, on_delete=fields.SET_NULL)
    is_active = fields.BooleanField(default=True)
    last_login = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "users"
        indexes = [
            ("role",),
        ]
