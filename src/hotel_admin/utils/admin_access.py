"""
Admin-role policies applied by the routers.

The cascade engine and tree builder are role-agnostic; the conventions that the admin
role sees every menu and is left out of the toggle matrix live here.
"""

from hotel_admin.dependencies.permission_store import get_settings
from hotel_admin.models.user import User


def _normalize_role(role_name: str | None) -> str:
    return (role_name or "").strip().lower()


def is_admin_role(role_name: str | None) -> bool:
    return _normalize_role(role_name) == _normalize_role(get_settings().admin_role_name)


def is_admin_user(user: User | None) -> bool:
    if user is None:
        return False
    return is_admin_role(user.role_name)


def matrix_roles(role_names: list[str]) -> list[str]:
    """Roles shown as toggle columns: every role except the admin role."""
    return [name for name in role_names if not is_admin_role(name)]
