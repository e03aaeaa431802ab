"""
Role-based permissions.

Two modules are guarded: ``inventory`` (suppliers, items, manual stock moves)
and ``procurement`` (quotations, purchase orders, supplier payments). Reads
are open to every role; only Admins delete.
"""
from typing import Dict, List
from print_erp.models.user import User

VIEW = "view"
CREATE = "create"
EDIT = "edit"
DELETE = "delete"
PAY = "pay"

DEFAULT_ROLE = "Staff"

ROLE_PERMISSIONS: Dict[str, Dict[str, List[str]]] = {
    "Admin": {
        "inventory": [VIEW, CREATE, EDIT, DELETE],
        "procurement": [VIEW, CREATE, EDIT, DELETE, PAY],
    },
    "Manager": {
        "inventory": [VIEW, CREATE, EDIT],
        "procurement": [VIEW, CREATE, EDIT, PAY],
    },
    "Staff": {
        "inventory": [VIEW],
        "procurement": [VIEW],
    },
}

def role_name(user: User) -> str:
    return user.role.name if user.role else DEFAULT_ROLE

def get_user_permissions(user: User) -> Dict[str, List[str]]:
    """Module -> allowed actions; inactive users get nothing"""
    if not user.is_active:
        return {}
    return {
        module: list(actions)
        for module, actions in ROLE_PERMISSIONS.get(role_name(user), {}).items()
    }

def has_permission(user: User, module: str, action: str) -> bool:
    return action in get_user_permissions(user).get(module, [])
