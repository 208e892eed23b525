from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope shared by every menu-permission endpoint."""

    success: bool = Field(True, description="Whether the request fully succeeded")
    data: T | None = Field(None, description="Payload")
    message: str | None = Field(None, description="Human readable status or error message")


# ============================================================================
# Menu items
# ============================================================================


class MenuItemSchema(BaseModel):
    """Configured menu item."""

    menu_id: str
    label: str
    icon: str | None = None
    href: str | None = None
    parent_id: str | None = None
    sort_order: int = 0
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)


class CreateMenuItemRequest(BaseModel):
    """Request to create a new menu item."""

    menu_id: str = Field(..., min_length=1, max_length=100, json_schema_extra={"example": "room-type"})
    label: str = Field(..., min_length=1, max_length=128, json_schema_extra={"example": "Room Type"})
    icon: str | None = Field(default=None, max_length=64, json_schema_extra={"example": "Building2"})
    href: str | None = Field(default=None, max_length=256, json_schema_extra={"example": "/room-type"})
    parent_id: str | None = Field(default=None, max_length=100, json_schema_extra={"example": "room-operation"})
    sort_order: int = Field(default=0, ge=0)


class UpdateMenuItemRequest(BaseModel):
    """Partial update of a menu item; omitted fields are left unchanged."""

    label: str | None = Field(default=None, min_length=1, max_length=128)
    icon: str | None = Field(default=None, max_length=64)
    href: str | None = Field(default=None, max_length=256)
    parent_id: str | None = Field(default=None, max_length=100)
    sort_order: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class MenuChildSchema(BaseModel):
    menu_id: str
    label: str
    icon: str | None = None
    href: str | None = None
    sort_order: int = 0
    parent_id: str


class MenuTreeNodeSchema(BaseModel):
    """Root menu entry with its ordered sub-items."""

    menu_id: str
    label: str
    icon: str | None = None
    href: str | None = None
    sort_order: int = 0
    children: list[MenuChildSchema] = Field(default_factory=list)


class NavigationSchema(BaseModel):
    role_name: str
    menus: list[MenuTreeNodeSchema]
    expanded: list[str] = Field(default_factory=list, description="Parents to render expanded for the current path")


# ============================================================================
# Roles & permissions
# ============================================================================


class RoleSchema(BaseModel):
    id: int
    role_name: str
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class MenuPermissionSchema(BaseModel):
    role_name: str
    menu_id: str
    label: str
    can_view: bool
    updated_at: datetime | None = None


class UpdatePermissionRequest(BaseModel):
    """Request to set one role's visibility of one menu item."""

    role_name: str = Field(..., min_length=1, max_length=64, json_schema_extra={"example": "Sales Manager"})
    menu_id: str = Field(..., min_length=1, max_length=100, json_schema_extra={"example": "room-pricing"})
    can_view: bool


class TogglePermissionRequest(BaseModel):
    """Flip one cell of the permission matrix, cascading to related menu items."""

    role_name: str = Field(..., min_length=1, max_length=64, json_schema_extra={"example": "Sales Manager"})
    menu_id: str = Field(..., min_length=1, max_length=100, json_schema_extra={"example": "room-type"})
    current_value: bool | None = Field(
        default=None,
        description="Visibility the caller currently displays; the stored value is used when omitted",
    )


class PermissionWriteSchema(BaseModel):
    menu_id: str
    role_name: str
    can_view: bool


class FailedWriteSchema(PermissionWriteSchema):
    error: str


class ToggleResultSchema(BaseModel):
    plan: list[PermissionWriteSchema]
    succeeded: list[PermissionWriteSchema]
    failed: list[FailedWriteSchema]


class MatrixRowSchema(BaseModel):
    """One row of the admin permission matrix, in tree display order."""

    menu_id: str
    label: str
    icon: str | None = None
    href: str | None = None
    parent_id: str | None = None
    is_parent: bool = False
    child_count: int = 0
    permissions: dict[str, bool]


class PermissionMatrixSchema(BaseModel):
    roles: list[str]
    rows: list[MatrixRowSchema]
