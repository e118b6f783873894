# services/file_portal/core/access_gate.py
"""
Who may do what.

One capability table keyed by (role, action) replaces per-endpoint role
comparisons. ``None`` stands for an anonymous caller.
"""

import enum
from typing import Optional, Union

from shared.exceptions import ForbiddenError
from services.file_portal.models.users import UserRole


class Action(str, enum.Enum):
    BROWSE = "browse"
    VIEW = "view"
    DOWNLOAD = "download"
    UPLOAD = "upload"
    DELETE_OWN_FILE = "delete_own_file"
    DELETE_ANY_FILE = "delete_any_file"
    MANAGE_CLASSES = "manage_classes"
    MANAGE_USERS = "manage_users"
    VIEW_DASHBOARD = "view_dashboard"


PUBLIC_ACTIONS = frozenset({Action.BROWSE, Action.VIEW, Action.DOWNLOAD})

CAPABILITIES = {
    None: PUBLIC_ACTIONS,
    UserRole.TEACHER: PUBLIC_ACTIONS | {Action.UPLOAD, Action.DELETE_OWN_FILE},
    UserRole.ADMIN: frozenset(Action),
}


def _as_role(role: Union[UserRole, str, None]) -> Optional[UserRole]:
    if role is None or isinstance(role, UserRole):
        return role
    try:
        return UserRole(str(role).lower())
    except ValueError:
        return None


def is_allowed(role: Union[UserRole, str, None], action: Action) -> bool:
    return action in CAPABILITIES.get(_as_role(role), PUBLIC_ACTIONS)


def can_delete_file(role: Union[UserRole, str, None], user_id: Optional[int], owner_id: Optional[int]) -> bool:
    if is_allowed(role, Action.DELETE_ANY_FILE):
        return True
    return (
        is_allowed(role, Action.DELETE_OWN_FILE)
        and user_id is not None
        and user_id == owner_id
    )


def require(role: Union[UserRole, str, None], action: Action) -> None:
    if not is_allowed(role, action):
        raise ForbiddenError(f"Not authorized to {action.value.replace('_', ' ')}")


def role_of(identity: Optional[dict]) -> Optional[UserRole]:
    """Role carried by an identity dict from shared.auth (None when anonymous)."""
    if not identity:
        return None
    return _as_role(identity.get("role"))
