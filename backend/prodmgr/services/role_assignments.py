"""Plan and apply bulk user → role assignments.

The plan is always built (and can be printed) before anything is written;
`execute_role_plan` applies it in a single transaction.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from sqlalchemy import delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from prodmgr.core.logging import get_logger
from prodmgr.models.users import Role, User, UserRole
from prodmgr.services.permissions_report import UserRoleRow, fetch_user_role_rows

logger = get_logger(__name__)


class PlanResolutionError(Exception):
    def __init__(self, missing_users: Sequence[str], missing_roles: Sequence[str]):
        self.missing_users = list(missing_users)
        self.missing_roles = list(missing_roles)
        parts = []
        if self.missing_users:
            parts.append(f"users not found: {', '.join(self.missing_users)}")
        if self.missing_roles:
            parts.append(f"roles not found: {', '.join(self.missing_roles)}")
        super().__init__("; ".join(parts))


@dataclass(frozen=True)
class RoleAssignment:
    email: str
    role_name: str


def parse_assignment(raw: str) -> RoleAssignment:
    """Parse an `EMAIL=ROLE` pair."""
    email, sep, role_name = raw.partition("=")
    email = email.strip().lower()
    role_name = role_name.strip()
    if not sep or not email or not role_name:
        raise ValueError(f"Expected EMAIL=ROLE, got {raw!r}")
    return RoleAssignment(email=email, role_name=role_name)


@dataclass(frozen=True)
class PlannedAssignment:
    user: User
    role: Role


@dataclass
class RoleAssignmentPlan:
    assignments: list[PlannedAssignment] = field(default_factory=list)
    removals: list[User] = field(default_factory=list)
    assigned_by_id: int | None = None

    @property
    def assignee_ids(self) -> list[int]:
        return sorted({a.user.id for a in self.assignments if a.user.id is not None})

    @property
    def removal_ids(self) -> list[int]:
        return [u.id for u in self.removals if u.id is not None]

    def describe(self) -> list[str]:
        lines = [f"{a.user.email} -> {a.role.display_name}" for a in self.assignments]
        lines.extend(f"REMOVE {u.email} - {u.first_name or ''} {u.last_name or ''}".rstrip() for u in self.removals)
        return lines

    def sql_preview(self) -> list[str]:
        lines: list[str] = []
        if self.assignee_ids:
            ids = ", ".join(str(i) for i in self.assignee_ids)
            lines.append(f"DELETE FROM user_roles WHERE user_id IN ({ids});")
        for a in self.assignments:
            assigned_by = "NULL" if self.assigned_by_id is None else str(self.assigned_by_id)
            lines.append(
                "INSERT INTO user_roles (user_id, role_id, assigned_by) "
                f"VALUES ({a.user.id}, {a.role.id}, {assigned_by});"
            )
        if self.removal_ids:
            ids = ", ".join(str(i) for i in self.removal_ids)
            lines.append(f"DELETE FROM user_roles WHERE user_id IN ({ids});")
            lines.append(f"DELETE FROM users WHERE id IN ({ids});")
        return lines


def _users_by_email(session: Session, emails: Iterable[str]) -> dict[str, User]:
    wanted = sorted({e.lower() for e in emails})
    if not wanted:
        return {}
    users = session.exec(select(User).where(func.lower(User.email).in_(wanted))).all()
    return {u.email.lower(): u for u in users}


def _roles_by_name(session: Session, names: Iterable[str]) -> dict[str, Role]:
    wanted = sorted(set(names))
    if not wanted:
        return {}
    roles = session.exec(select(Role).where(col(Role.name).in_(wanted))).all()
    return {r.name: r for r in roles}


def build_role_plan(
    session: Session,
    assignments: Sequence[RoleAssignment],
    removals: Sequence[str] = (),
    assigned_by: str | None = None,
) -> RoleAssignmentPlan:
    emails = [a.email for a in assignments]
    if assigned_by:
        emails.append(assigned_by)
    users = _users_by_email(session, emails)
    roles = _roles_by_name(session, [a.role_name for a in assignments])

    missing_users = sorted({e.lower() for e in emails} - set(users))
    missing_roles = sorted({a.role_name for a in assignments} - set(roles))
    if missing_users or missing_roles:
        raise PlanResolutionError(missing_users, missing_roles)

    planned: list[PlannedAssignment] = []
    seen: set[tuple[str, str]] = set()
    for a in assignments:
        key = (a.email.lower(), a.role_name)
        if key in seen:
            continue
        seen.add(key)
        planned.append(PlannedAssignment(user=users[key[0]], role=roles[a.role_name]))

    keep = {e.lower() for e in emails}
    # Unknown removal emails are skipped; assignees and the assigner are never removed.
    to_remove = [u for email, u in sorted(_users_by_email(session, removals).items()) if email not in keep]

    if assigned_by:
        assigned_by_id = users[assigned_by.lower()].id
    else:
        # First super-admin assignee assigns the rest (and themselves).
        assigned_by_id = next((p.user.id for p in planned if p.role.is_super_admin), None)

    return RoleAssignmentPlan(assignments=planned, removals=to_remove, assigned_by_id=assigned_by_id)


def execute_role_plan(session: Session, plan: RoleAssignmentPlan) -> list[UserRoleRow]:
    try:
        if plan.assignee_ids:
            session.execute(delete(UserRole).where(col(UserRole.user_id).in_(plan.assignee_ids)))
        for a in plan.assignments:
            session.add(UserRole(user_id=a.user.id, role_id=a.role.id, assigned_by=plan.assigned_by_id))
        if plan.removal_ids:
            session.execute(delete(UserRole).where(col(UserRole.user_id).in_(plan.removal_ids)))
            session.execute(delete(User).where(col(User.id).in_(plan.removal_ids)))
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("roles.plan.execute_failed assignments=%s removals=%s", len(plan.assignments), len(plan.removal_ids))
        raise

    logger.info("roles.plan.executed assignments=%s removals=%s", len(plan.assignments), len(plan.removal_ids))
    return fetch_user_role_rows(session)
