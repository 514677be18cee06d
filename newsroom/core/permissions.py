"""
Role-based access rules for the newsroom.

Roles are ordered ADMIN > PRODUCER > EDITOR > REPORTER. Reporters only touch
their own stories, and only a handful of fields on them.
"""
from newsroom.models.rundown_row import RowStatus
from newsroom.models.user import User, UserRole

ROLE_HIERARCHY = {
    UserRole.ADMIN: 4,
    UserRole.PRODUCER: 3,
    UserRole.EDITOR: 2,
    UserRole.REPORTER: 1,
}

ACTION_ROLES: dict[str, tuple[UserRole, ...]] = {
    "create_bulletin": (UserRole.ADMIN, UserRole.PRODUCER),
    "edit_bulletin": (UserRole.ADMIN, UserRole.PRODUCER),
    "delete_bulletin": (UserRole.ADMIN,),
    "lock_bulletin": (UserRole.ADMIN, UserRole.PRODUCER),
    "auto_generate_bulletins": (UserRole.ADMIN, UserRole.PRODUCER, UserRole.EDITOR),
    "create_row": (UserRole.ADMIN, UserRole.PRODUCER, UserRole.EDITOR),
    "edit_any_row": (UserRole.ADMIN, UserRole.PRODUCER, UserRole.EDITOR),
    "edit_own_row": (UserRole.ADMIN, UserRole.PRODUCER, UserRole.EDITOR, UserRole.REPORTER),
    "delete_row": (UserRole.ADMIN, UserRole.PRODUCER, UserRole.EDITOR),
    "approve_row": (UserRole.ADMIN, UserRole.PRODUCER, UserRole.EDITOR),
    "assign_reporter": (UserRole.ADMIN, UserRole.PRODUCER, UserRole.EDITOR),
    "manage_pools": (UserRole.ADMIN, UserRole.PRODUCER),
    "manage_users": (UserRole.ADMIN,),
}

STAFF_ROLES = (UserRole.ADMIN, UserRole.PRODUCER, UserRole.EDITOR)

ALL_ROW_FIELDS = frozenset({
    "slug",
    "segment",
    "story_producer_id",
    "reporter_id",
    "est_duration_secs",
    "actual_duration_secs",
    "is_float",
    "status",
    "script",
    "notes",
    "category_id",
})
REPORTER_ROW_FIELDS = frozenset({"slug", "script", "notes", "status"})

REPORTER_STATUSES = frozenset({RowStatus.DRAFT, RowStatus.READY})


def can_perform_action(user: User, action: str) -> bool:
    return user.role in ACTION_ROLES.get(action, ())


def has_role_at_least(user: User, role: UserRole) -> bool:
    return ROLE_HIERARCHY[user.role] >= ROLE_HIERARCHY[role]


def can_edit_row(user: User, row) -> bool:
    if user.role in STAFF_ROLES:
        return True
    if user.role == UserRole.REPORTER:
        if row.reporter_id == user.id:
            return True
        if row.status == RowStatus.BLANK and row.created_by == user.id:
            return True
    return False


def editable_row_fields(user: User) -> frozenset[str]:
    if user.role in STAFF_ROLES:
        return ALL_ROW_FIELDS
    return REPORTER_ROW_FIELDS


def allowed_row_statuses(user: User) -> frozenset[RowStatus]:
    if user.role in STAFF_ROLES:
        return frozenset(RowStatus)
    return REPORTER_STATUSES
