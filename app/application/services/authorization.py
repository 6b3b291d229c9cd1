"""Authorization policy: who may mutate which record.

Resource handlers pass the record's owner (`posted_by`, `created_by` or
`user_id`) and the caller's identity from the session token.
"""

from typing import Any

from app.core.exceptions import PermissionDenied
from app.domain.models.user import PRIVILEGED_ROLES, UserRole


def _same_identity(left: Any, right: Any) -> bool:
    return left is not None and right is not None and str(left) == str(right)


def is_privileged(role: UserRole) -> bool:
    return UserRole(role) in PRIVILEGED_ROLES


def can_mutate(caller_id: Any, caller_role: UserRole, owner_id: Any) -> bool:
    """Owners may mutate their own records; admins and super admins any record."""
    return _same_identity(caller_id, owner_id) or is_privileged(caller_role)


def ensure_can_mutate(caller_id: Any, caller_role: UserRole, owner_id: Any) -> None:
    if not can_mutate(caller_id, caller_role, owner_id):
        raise PermissionDenied("Access denied")


def can_toggle_active(caller_id: Any, caller_role: UserRole, target_id: Any) -> bool:
    """Admins may (de)activate other accounts, never their own."""
    return is_privileged(caller_role) and not _same_identity(caller_id, target_id)


def ensure_can_toggle_active(caller_id: Any, caller_role: UserRole, target_id: Any) -> None:
    if can_toggle_active(caller_id, caller_role, target_id):
        return
    if is_privileged(caller_role):
        raise PermissionDenied("You cannot deactivate your own account")
    raise PermissionDenied()
