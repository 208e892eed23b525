from .menu_permission_schemas import (
    ApiResponse,
    MenuItemSchema,
    MenuPermissionSchema,
    MenuTreeNodeSchema,
    RoleSchema,
)

__all__ = [
    "ApiResponse",
    "MenuItemSchema",
    "MenuPermissionSchema",
    "MenuTreeNodeSchema",
    "RoleSchema",
]
