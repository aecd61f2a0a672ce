"""
Static operator directory.

Identity is not verified here: the dashboard ships a fixed list of operator
profiles and callers identify themselves by employee id. Role and permission
flags gate which endpoints an operator may use.
"""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class UserPermissions(BaseModel):
    dashboard: bool = True
    schedule: bool = True
    warehouse: bool = True
    import_clearance: bool = True
    approvals: bool = False
    tracking: bool = True
    transporter: bool = True
    resources: bool = False
    capacity: bool = False
    users: bool = False


class UserProfile(BaseModel):
    employee_id: str
    name: str
    role: UserRole = UserRole.USER
    permissions: UserPermissions = Field(default_factory=UserPermissions)
    status: str = "Active"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def can(self, permission: str) -> bool:
        if self.is_admin:
            return True
        return bool(getattr(self.permissions, permission, False))


FULL_ACCESS = UserPermissions(
    approvals=True,
    resources=True,
    capacity=True,
    users=True,
)

WRITER_ACCESS = UserPermissions(
    dashboard=False,
    warehouse=False,
    import_clearance=False,
    tracking=False,
    transporter=False,
)

USERS: list[UserProfile] = [
    UserProfile(employee_id="ADM-001", name="Operations Admin", role=UserRole.ADMIN, permissions=FULL_ACCESS),
    UserProfile(employee_id="OPS-101", name="Ops Coordinator"),
    UserProfile(employee_id="OPS-102", name="Ops Coordinator II"),
    UserProfile(employee_id="OPS-201", name="Senior Ops", permissions=UserPermissions(resources=True, capacity=True)),
    UserProfile(employee_id="WRT-301", name="Writer", permissions=WRITER_ACCESS),
]


def find_user(employee_id: str | None) -> UserProfile | None:
    wanted = (employee_id or "").strip()
    if not wanted:
        return None
    for user in USERS:
        if user.employee_id == wanted and user.status == "Active":
            return user
    return None
