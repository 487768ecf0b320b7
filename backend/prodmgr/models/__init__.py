from prodmgr.models.jobs import Job
from prodmgr.models.projects import Client, Project
from prodmgr.models.users import Permission, Role, RolePermission, User, UserRole

__all__ = [
    "Client",
    "Project",
    "Job",
    "User",
    "Role",
    "Permission",
    "RolePermission",
    "UserRole",
]
