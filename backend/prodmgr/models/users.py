from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from prodmgr.core.time import utcnow


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    password: str

    # Legacy single-role column; real assignments live in user_roles.
    role: str | None = Field(default="user")

    department: str | None = None
    position: str | None = None
    mobile: str | None = None
    phone: str | None = None

    is_active: bool = Field(default=True)
    is_blocked: bool = Field(default=False)
    last_login: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class Permission(SQLModel, table=True):
    __tablename__ = "permissions"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)
    display_name: str
    description: str | None = None
    category: str

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class Role(SQLModel, table=True):
    __tablename__ = "roles"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)
    display_name: str
    description: str | None = None
    is_super_admin: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class RolePermission(SQLModel, table=True):
    __tablename__ = "role_permissions"
    __table_args__ = (UniqueConstraint("role_id", "permission_id", name="uq_role_permissions_role_id_permission_id"),)

    id: int | None = Field(default=None, primary_key=True)
    role_id: int = Field(foreign_key="roles.id")
    permission_id: int = Field(foreign_key="permissions.id")

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class UserRole(SQLModel, table=True):
    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role_id", name="uq_user_roles_user_id_role_id"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id")
    role_id: int = Field(foreign_key="roles.id")
    assigned_by: int | None = Field(default=None, foreign_key="users.id")
    assigned_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
