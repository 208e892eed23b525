from . import (  # noqa: F401
    auth,
    health,
    menu_permissions,
)

__all__ = [
    "auth",
    "health",
    "menu_permissions",
]
