from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from sqlmodel import Session, col, select

from prodmgr.models.users import User

NOT_SET = "Not set"


@dataclass(frozen=True)
class UserSummary:
    total: int
    active: int
    blocked: int
    inactive: int


def list_users(session: Session) -> list[User]:
    return list(session.exec(select(User).order_by(col(User.id).asc())).all())


def summarize_users(users: Sequence[User]) -> UserSummary:
    return UserSummary(
        total=len(users),
        active=sum(1 for u in users if u.is_active and not u.is_blocked),
        blocked=sum(1 for u in users if u.is_blocked),
        inactive=sum(1 for u in users if not u.is_active),
    )


def _yes_no(value: bool | None) -> str:
    return "Yes" if value else "No"


def render_user_listing(users: Sequence[User]) -> str:
    if not users:
        return "No users found in database.\nYou may need to seed the database first."

    lines: list[str] = []
    for index, user in enumerate(users, start=1):
        name = f"{user.first_name or ''} {user.last_name or ''}".strip()
        lines.extend(
            [
                f"{index}. User ID: {user.id}",
                f"   Email: {user.email}",
                f"   Username: {user.username or NOT_SET}",
                f"   Name: {name or NOT_SET}",
                f"   Role: {user.role}",
                f"   Department: {user.department or NOT_SET}",
                f"   Position: {user.position or NOT_SET}",
                f"   Mobile: {user.mobile or NOT_SET}",
                f"   Phone: {user.phone or NOT_SET}",
                f"   Active: {_yes_no(user.is_active)}",
                f"   Blocked: {_yes_no(user.is_blocked)}",
                f"   Last Login: {user.last_login or 'Never'}",
                f"   Created: {user.created_at}",
                "",
            ]
        )

    summary = summarize_users(users)
    lines.extend(
        [
            f"Total Users: {summary.total}",
            f"Active Users: {summary.active}",
            f"Blocked Users: {summary.blocked}",
            f"Inactive Users: {summary.inactive}",
        ]
    )
    return "\n".join(lines)
