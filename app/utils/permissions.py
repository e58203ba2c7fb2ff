# app/utils/permissions.py
"""Role tiers and the authorization decision table.

Everything here is pure: callers resolve membership and target facts from the
database and pass them in, so the same decision can be checked in tests
without a session.
"""
import enum
from typing import Optional

from app.config.security import SecurityConfig


class Tier(str, enum.Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    USER = "USER"


class Action(str, enum.Enum):
    CREATE_PROJECT = "create_project"
    UPDATE_PROJECT = "update_project"
    DELETE_PROJECT = "delete_project"
    LIST_USERS = "list_users"
    CREATE_USER = "create_user"
    UPDATE_USER = "update_user"
    DELETE_USER = "delete_user"
    ASSIGN_MEMBER = "assign_member"
    UNASSIGN_MEMBER = "unassign_member"
    VIEW_PROJECT = "view_project"
    CREATE_TASK = "create_task"
    UPDATE_TASK = "update_task"
    MOVE_TASK = "move_task"
    DELETE_TASK = "delete_task"


class DeleteMode(str, enum.Enum):
    ERASE = "erased"
    SOFT = "soft_deleted"


SUPER_ADMIN_ACTIONS = {
    Action.CREATE_PROJECT,
    Action.UPDATE_PROJECT,
    Action.DELETE_PROJECT,
    Action.LIST_USERS,
    Action.CREATE_USER,
    Action.UPDATE_USER,
    Action.DELETE_USER,
    Action.ASSIGN_MEMBER,
    Action.UNASSIGN_MEMBER,
}

TASK_ACTIONS = {
    Action.CREATE_TASK,
    Action.UPDATE_TASK,
    Action.MOVE_TASK,
    Action.DELETE_TASK,
}


def tier_for(username: str, role: str) -> Tier:
    """The only place the reserved super-admin login is recognised"""
    if username == SecurityConfig.ACCOUNTS['super_admin_username']:
        return Tier.SUPER_ADMIN
    if role == Tier.ADMIN.value:
        return Tier.ADMIN
    return Tier.USER


def can_view_all_projects(actor) -> bool:
    return actor.tier in (Tier.SUPER_ADMIN, Tier.ADMIN)


def is_allowed(
    actor,
    action: Action,
    *,
    is_member: bool = False,
    target_user_id: Optional[int] = None,
    task_soft_deleted: bool = False,
) -> bool:
    """Decide whether actor may perform action.

    is_member is the actor's explicit membership of the target project,
    target_user_id the user being managed, and task_soft_deleted whether the
    target task is already inert.
    """
    if action in SUPER_ADMIN_ACTIONS:
        if actor.tier != Tier.SUPER_ADMIN:
            return False
        if action == Action.DELETE_USER and target_user_id == actor.id:
            return False
        return True

    can_view = can_view_all_projects(actor) or is_member
    if action == Action.VIEW_PROJECT:
        return can_view

    if action in TASK_ACTIONS:
        if not can_view:
            return False
        if task_soft_deleted and actor.tier != Tier.SUPER_ADMIN:
            return False
        return True

    return False


def delete_mode(actor) -> DeleteMode:
    """Super-admin deletions erase, everyone else soft-deletes"""
    if actor.tier == Tier.SUPER_ADMIN:
        return DeleteMode.ERASE
    return DeleteMode.SOFT
