from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import NamedTuple

from sqlmodel import Session, col, select

from prodmgr.models.users import Permission, Role, RolePermission, User, UserRole


class RolePermissionRow(NamedTuple):
    role_name: str
    role_display: str
    permission_name: str
    permission_display: str
    category: str


class UserRoleRow(NamedTuple):
    user_id: int
    user_email: str
    user_name: str | None
    role_name: str
    role_display: str
    is_super_admin: bool


@dataclass(frozen=True)
class PermissionReport:
    permissions: list[Permission] = field(default_factory=list)
    roles: list[Role] = field(default_factory=list)
    role_permissions: dict[str, list[RolePermissionRow]] = field(default_factory=dict)
    user_roles: dict[str, list[UserRoleRow]] = field(default_factory=dict)


def group_role_permissions(rows: Iterable[RolePermissionRow]) -> dict[str, list[RolePermissionRow]]:
    grouped: dict[str, list[RolePermissionRow]] = {}
    for row in rows:
        grouped.setdefault(row.role_name, []).append(row)
    return grouped


def group_user_roles(rows: Iterable[UserRoleRow]) -> dict[str, list[UserRoleRow]]:
    grouped: dict[str, list[UserRoleRow]] = {}
    for row in rows:
        grouped.setdefault(row.user_email, []).append(row)
    return grouped


def build_permission_report(
    permissions: Iterable[Permission],
    roles: Iterable[Role],
    role_permission_rows: Iterable[RolePermissionRow],
    user_role_rows: Iterable[UserRoleRow],
) -> PermissionReport:
    return PermissionReport(
        permissions=list(permissions),
        roles=list(roles),
        role_permissions=group_role_permissions(role_permission_rows),
        user_roles=group_user_roles(user_role_rows),
    )


def fetch_role_permission_rows(session: Session) -> list[RolePermissionRow]:
    stmt = (
        select(Role.name, Role.display_name, Permission.name, Permission.display_name, Permission.category)
        .select_from(RolePermission)
        .join(Role, col(RolePermission.role_id) == col(Role.id))
        .join(Permission, col(RolePermission.permission_id) == col(Permission.id))
        .order_by(col(RolePermission.id).asc())
    )
    return [RolePermissionRow(*row) for row in session.exec(stmt).all()]


def fetch_user_role_rows(session: Session) -> list[UserRoleRow]:
    stmt = (
        select(User.id, User.email, User.first_name, Role.name, Role.display_name, Role.is_super_admin)
        .select_from(UserRole)
        .join(User, col(UserRole.user_id) == col(User.id))
        .join(Role, col(UserRole.role_id) == col(Role.id))
        .order_by(col(UserRole.id).asc())
    )
    return [UserRoleRow(*row) for row in session.exec(stmt).all()]


def load_permission_report(session: Session) -> PermissionReport:
    permissions = session.exec(select(Permission).order_by(col(Permission.id).asc())).all()
    roles = session.exec(select(Role).order_by(col(Role.id).asc())).all()
    return build_permission_report(
        permissions,
        roles,
        fetch_role_permission_rows(session),
        fetch_user_role_rows(session),
    )


def _heading(title: str) -> list[str]:
    return [title, "=" * len(title)]


def render_permission_report(report: PermissionReport) -> str:
    lines: list[str] = _heading("Available Permissions:")
    if not report.permissions:
        lines.append("No permissions found in database")
    for perm in report.permissions:
        lines.append(f"   {perm.name} ({perm.category}) - {perm.display_name}")

    lines.append("")
    lines.extend(_heading("Available Roles:"))
    if not report.roles:
        lines.append("No roles found in database")
    for role in report.roles:
        flag = "Yes" if role.is_super_admin else "No"
        lines.append(f"   {role.name} - {role.display_name} (Super Admin: {flag})")

    lines.append("")
    lines.extend(_heading("Role-Permission Assignments:"))
    if not report.role_permissions:
        lines.append("No role-permission assignments found")
    for role_name, perms in report.role_permissions.items():
        lines.append(f"   {role_name}:")
        lines.extend(f"      - {p.permission_name} ({p.category})" for p in perms)

    lines.append("")
    lines.extend(_heading("User Role Assignments:"))
    if not report.user_roles:
        lines.append("No user-role assignments found")
    for email, assignments in report.user_roles.items():
        lines.append(f"   {email}:")
        for r in assignments:
            marker = " (SUPER ADMIN)" if r.is_super_admin else ""
            lines.append(f"      - {r.role_name}{marker}")

    return "\n".join(lines)
