"""권한 서비스 — 역할/권한 기반 접근 제어 평가기.

Access control evaluator. Permissions form a closed enumeration; a principal's
effective set is its explicit permission list, or its role's default set when
the list is empty. ``super_admin`` always holds every permission.
Evaluation is pure set membership and never touches the database.
"""

from enum import Enum
from typing import Iterable

from app.models.user import User


class Permission(str, Enum):
    """세분화된 권한 열거형 — Closed set of fine-grained permissions."""

    DASHBOARD = "dashboard"

    PERSONNEL = "personnel"
    PERSONNEL_CREATE = "personnel_create"
    PERSONNEL_EDIT = "personnel_edit"
    PERSONNEL_DELETE = "personnel_delete"
    PERSONNEL_VIEW = "personnel_view"

    BRANCHES = "branches"
    BRANCHES_CREATE = "branches_create"
    BRANCHES_EDIT = "branches_edit"
    BRANCHES_DELETE = "branches_delete"
    DEPARTMENTS = "departments"
    DEPARTMENTS_CREATE = "departments_create"
    DEPARTMENTS_EDIT = "departments_edit"
    DEPARTMENTS_DELETE = "departments_delete"
    TEAMS = "teams"
    TEAMS_CREATE = "teams_create"
    TEAMS_EDIT = "teams_edit"
    TEAMS_DELETE = "teams_delete"

    SHIFTS = "shifts"
    SHIFTS_CREATE = "shifts_create"
    SHIFTS_EDIT = "shifts_edit"
    SHIFTS_DELETE = "shifts_delete"
    SHIFTS_ASSIGN = "shifts_assign"
    SHIFTS_IMPORT = "shifts_import"

    ATTENDANCE = "attendance"
    ATTENDANCE_VIEW = "attendance_view"
    ATTENDANCE_EDIT = "attendance_edit"

    LEAVE_MANAGEMENT = "leave_management"
    LEAVE_APPROVE = "leave_approve"
    LEAVE_REJECT = "leave_reject"
    LEAVE_CREATE = "leave_create"

    QR_MANAGEMENT = "qr_management"
    QR_CREATE = "qr_create"
    QR_VIEW = "qr_view"
    QR_DISPLAY = "qr_display"

    NOTIFICATIONS = "notifications"

    REPORTS = "reports"
    REPORTS_PERSONNEL = "reports_personnel"
    REPORTS_ATTENDANCE = "reports_attendance"
    REPORTS_LEAVES = "reports_leaves"

    TASKS = "tasks"
    TASKS_CREATE = "tasks_create"
    TASKS_EDIT = "tasks_edit"
    TASKS_DELETE = "tasks_delete"

    SETTINGS = "settings"

    USER_MANAGEMENT = "user_management"
    USER_CREATE = "user_create"
    USER_EDIT = "user_edit"
    USER_DELETE = "user_delete"
    USER_PERMISSIONS = "user_permissions"


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    PERSONNEL = "personnel"


# 관리자 기본 권한 — 삭제 및 사용자 관리 제외 (Admin: no deletes, no user management)
_ADMIN_DEFAULTS: frozenset[Permission] = frozenset(
    p for p in Permission
    if not p.value.endswith("_delete") and not p.value.startswith("user_")
)

# 직원 기본 권한 — 조회 및 본인 신청 위주 (Personnel: views and self-service)
_PERSONNEL_DEFAULTS: frozenset[Permission] = frozenset({
    Permission.DASHBOARD,
    Permission.PERSONNEL_VIEW,
    Permission.SHIFTS,
    Permission.LEAVE_CREATE,
    Permission.QR_VIEW,
    Permission.TASKS,
})

DEFAULT_ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.SUPER_ADMIN: frozenset(Permission),
    Role.ADMIN: _ADMIN_DEFAULTS,
    Role.PERSONNEL: _PERSONNEL_DEFAULTS,
}


def parse_permissions(values: Iterable[str] | None) -> frozenset[Permission]:
    """문자열 목록을 권한 집합으로 변환, 알 수 없는 값은 버림.

    Convert stored permission strings to the enum set. Unknown strings are dropped.
    """
    known: set[Permission] = set()
    for value in values or ():
        try:
            known.add(Permission(value))
        except ValueError:
            continue
    return frozenset(known)


def parse_role(value: str | None) -> Role:
    """알 수 없는 역할은 최소 권한(personnel)으로 취급 — Unknown roles fall back to personnel."""
    try:
        return Role(value)
    except ValueError:
        return Role.PERSONNEL


class PermissionService:
    """접근 제어 평가기 — Access control evaluator over (principal, permission)."""

    def effective_permissions(self, user: User) -> frozenset[Permission]:
        """사용자의 유효 권한 집합을 계산합니다.

        Resolve the effective permission set for a principal.

        Args:
            user: 인증된 사용자 (Authenticated principal)

        Returns:
            frozenset[Permission]: 유효 권한 집합 (Effective permission set)
        """
        role: Role = parse_role(user.role)
        if role is Role.SUPER_ADMIN:
            return DEFAULT_ROLE_PERMISSIONS[Role.SUPER_ADMIN]
        explicit: frozenset[Permission] = parse_permissions(user.permissions)
        if explicit:
            return explicit
        return DEFAULT_ROLE_PERMISSIONS[role]

    def has_permission(self, user: User, permission: Permission) -> bool:
        return permission in self.effective_permissions(user)

    def has_any(self, user: User, permissions: Iterable[Permission]) -> bool:
        granted = self.effective_permissions(user)
        return any(p in granted for p in permissions)


permission_service: PermissionService = PermissionService()
