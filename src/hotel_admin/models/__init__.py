from .menu_access import MenuDefinition, MenuPermission
from .rbac import Role
from .user import User

__all__ = [
    "User",
    "Role",
    "MenuDefinition",
    "MenuPermission",
]
