"""
Router for Menu Permission Management.

Lets administrators control which menu items each staff role can see, and serves every
user the navigation tree their role is allowed to see.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi_cache.decorator import cache
from sqlalchemy.orm import Session

from hotel_admin.db import get_db
from hotel_admin.dependencies.authz import get_current_user, require_admin
from hotel_admin.models.menu_access import MenuPermission
from hotel_admin.models.user import User
from hotel_admin.schemas.menu_permission_schemas import (
    ApiResponse,
    CreateMenuItemRequest,
    FailedWriteSchema,
    MatrixRowSchema,
    MenuItemSchema,
    MenuPermissionSchema,
    MenuTreeNodeSchema,
    NavigationSchema,
    PermissionMatrixSchema,
    PermissionWriteSchema,
    RoleSchema,
    TogglePermissionRequest,
    ToggleResultSchema,
    UpdateMenuItemRequest,
    UpdatePermissionRequest,
)
from hotel_admin.services.menu_permission_service import (
    DuplicateMenuItemError,
    InvalidParentError,
    MenuItemNotFoundError,
    MenuPermissionStore,
)
from hotel_admin.services.menu_tree import MenuTree, expanded_parent_ids, visible_tree
from hotel_admin.services.permission_cascade import toggle_permission
from hotel_admin.utils.admin_access import is_admin_role, matrix_roles

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/menu-permissions", tags=["Menu_Permissions"])

# module-level dependencies to avoid calling Depends() inside function defaults
db_dependency = Depends(get_db)
admin_dependency = Depends(require_admin)
current_user_dependency = Depends(get_current_user)


# ============================================================================
# Helper Functions
# ============================================================================


def _navigation_tree(store: MenuPermissionStore, role_name: str) -> MenuTree:
    """Admin sees every active menu; other roles see what the matrix grants them."""
    tree = store.build_tree()
    if is_admin_role(role_name):
        return tree
    return visible_tree(tree, store.fetch_matrix(), role_name)


def _permission_schema(row: MenuPermission) -> MenuPermissionSchema:
    return MenuPermissionSchema(
        role_name=row.role_name,
        menu_id=row.menu_id,
        label=row.menu.label if row.menu is not None else row.menu_id,
        can_view=bool(row.can_view),
        updated_at=row.updated_at,
    )


# ============================================================================
# Menu items
# ============================================================================


@router.get(
    "/menu-items",
    response_model=ApiResponse[list[MenuItemSchema]],
    summary="Get all menu items",
    description="Retrieve every configured menu item, including inactive ones (Admin only)",
)
async def get_menu_items(
    _: User = admin_dependency,
    db: Session = db_dependency,
):
    try:
        menus = MenuPermissionStore(db).fetch_menu_definitions()
        return ApiResponse(data=[MenuItemSchema.model_validate(menu) for menu in menus])
    except Exception as e:
        logger.error(f"Error fetching menu items: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch menu items",
        ) from e


@router.post(
    "/menu-items",
    response_model=ApiResponse[MenuItemSchema],
    status_code=status.HTTP_201_CREATED,
    summary="Create menu item",
    description="Register a new menu item, optionally under a root parent (Admin only)",
)
async def create_menu_item(
    request: CreateMenuItemRequest,
    _: User = admin_dependency,
    db: Session = db_dependency,
):
    try:
        menu = MenuPermissionStore(db).create_menu_item(**request.model_dump())
        return ApiResponse(data=MenuItemSchema.model_validate(menu), message="Menu item created successfully")
    except DuplicateMenuItemError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except InvalidParentError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating menu item: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create menu item",
        ) from e


@router.put(
    "/menu-items/{menu_id}",
    response_model=ApiResponse[MenuItemSchema],
    summary="Update menu item",
    description="Update label, icon, link, parent, order or active flag of a menu item (Admin only)",
)
async def update_menu_item(
    menu_id: str,
    request: UpdateMenuItemRequest,
    _: User = admin_dependency,
    db: Session = db_dependency,
):
    try:
        changes = request.model_dump(exclude_unset=True)
        menu = MenuPermissionStore(db).update_menu_item(menu_id, **changes)
        return ApiResponse(data=MenuItemSchema.model_validate(menu), message="Menu item updated successfully")
    except MenuItemNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except InvalidParentError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating menu item {menu_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update menu item",
        ) from e


@router.get(
    "/menu-items/{role_name}",
    response_model=ApiResponse[list[MenuTreeNodeSchema]],
    summary="Get menu tree for a role",
    description="Navigation tree visible to the given role",
)
async def get_menu_items_by_role(
    role_name: str,
    _: User = current_user_dependency,
    db: Session = db_dependency,
):
    try:
        tree = _navigation_tree(MenuPermissionStore(db), role_name)
        return ApiResponse(data=tree.to_dicts())
    except Exception as e:
        logger.error(f"Error fetching menu items for role {role_name}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch menu items for role",
        ) from e


@router.get(
    "/tree",
    response_model=ApiResponse[list[MenuTreeNodeSchema]],
    summary="Get full menu tree",
    description="Every active menu item arranged as the navigation tree (Admin only)",
)
async def get_menu_tree(
    _: User = admin_dependency,
    db: Session = db_dependency,
):
    try:
        return ApiResponse(data=MenuPermissionStore(db).build_tree().to_dicts())
    except Exception as e:
        logger.error(f"Error building menu tree: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build menu tree",
        ) from e


@router.get(
    "/my-menus",
    response_model=ApiResponse[NavigationSchema],
    summary="Get current user's navigation",
    description="Menus visible to the current user's role, plus the parents to expand for the current page",
)
async def get_my_menus(
    path: str | None = Query(default=None, description="Current page path, e.g. /room-type"),
    current_user: User = current_user_dependency,
    db: Session = db_dependency,
):
    try:
        tree = _navigation_tree(MenuPermissionStore(db), current_user.role_name)
        navigation = NavigationSchema(
            role_name=current_user.role_name,
            menus=tree.to_dicts(),
            expanded=expanded_parent_ids(tree, path),
        )
        return ApiResponse(data=navigation)
    except Exception as e:
        logger.error(f"Error fetching user menus: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch user menus",
        ) from e


# ============================================================================
# Roles
# ============================================================================


@router.get(
    "/roles",
    response_model=ApiResponse[list[RoleSchema]],
    summary="List roles",
    description="Every selectable staff role",
)
@cache(expire=120)  # Cache for 2 minutes (very stable metadata)
def get_roles(_: User = current_user_dependency, db: Session = db_dependency):
    roles = MenuPermissionStore(db).fetch_roles()
    return {"success": True, "data": [RoleSchema.model_validate(role).model_dump(mode="json") for role in roles], "message": None}


# ============================================================================
# Permissions
# ============================================================================


@router.get(
    "/permissions",
    response_model=ApiResponse[list[MenuPermissionSchema]],
    summary="List permission rows",
    description="Every stored (role, menu item) visibility row (Admin only)",
)
async def get_permissions(
    _: User = admin_dependency,
    db: Session = db_dependency,
):
    try:
        rows = MenuPermissionStore(db).fetch_permission_rows()
        return ApiResponse(data=[_permission_schema(row) for row in rows])
    except Exception as e:
        logger.error(f"Error fetching permissions: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch permissions",
        ) from e


@router.get(
    "/permissions/matrix",
    response_model=ApiResponse[PermissionMatrixSchema],
    summary="Get permission matrix",
    description="Menu items in navigation order with per-role visibility; the admin role is not listed (Admin only)",
)
async def get_permission_matrix(
    search: str | None = Query(default=None, description="Case-insensitive label filter"),
    role: str | None = Query(default=None, description="Role used by only_visible"),
    only_visible: bool = Query(default=False, description="Keep only rows visible to `role`"),
    _: User = admin_dependency,
    db: Session = db_dependency,
):
    try:
        store = MenuPermissionStore(db)
        tree = store.build_tree()
        matrix = store.fetch_matrix()
        roles = matrix_roles([r.role_name for r in store.fetch_roles()])

        needle = (search or "").strip().lower()
        rows = []
        for item in tree.flatten():
            if needle and needle not in item.label.lower():
                continue
            if only_visible and role and not matrix.can_view(item.menu_id, role):
                continue
            children = tree.children_of(item.menu_id)
            rows.append(
                MatrixRowSchema(
                    menu_id=item.menu_id,
                    label=item.label,
                    icon=item.icon,
                    href=item.href,
                    parent_id=item.parent_id,
                    is_parent=bool(children),
                    child_count=len(children),
                    permissions={name: matrix.can_view(item.menu_id, name) for name in roles},
                )
            )
        return ApiResponse(data=PermissionMatrixSchema(roles=roles, rows=rows))
    except Exception as e:
        logger.error(f"Error building permission matrix: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build permission matrix",
        ) from e


@router.put(
    "/permissions",
    response_model=ApiResponse[MenuPermissionSchema],
    summary="Update one permission",
    description="Set whether a role can view a menu item, without cascading (Admin only)",
)
async def update_permission(
    request: UpdatePermissionRequest,
    _: User = admin_dependency,
    db: Session = db_dependency,
):
    store = MenuPermissionStore(db)
    if store.get_menu(request.menu_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Menu item '{request.menu_id}' not found")

    try:
        row = store.write_permission(request.role_name, request.menu_id, request.can_view)
        return ApiResponse(data=_permission_schema(row), message="Permission updated successfully")
    except Exception as e:
        logger.error(f"Error updating permission: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update permission",
        ) from e


@router.post(
    "/permissions/toggle",
    response_model=ApiResponse[ToggleResultSchema],
    summary="Toggle a permission with cascade",
    description=(
        "Flip one role's visibility of a menu item. Toggling a parent applies to all of its sub-items; "
        "showing a sub-item shows its parent; hiding the last visible sub-item hides its parent (Admin only)"
    ),
)
async def toggle_menu_permission(
    request: TogglePermissionRequest,
    _: User = admin_dependency,
    db: Session = db_dependency,
):
    store = MenuPermissionStore(db)
    if store.get_menu(request.menu_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Menu item '{request.menu_id}' not found")
    if not store.role_exists(request.role_name):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Role '{request.role_name}' not found")

    try:
        tree = store.build_tree()
        matrix = store.fetch_matrix()
        current_value = request.current_value
        if current_value is None:
            current_value = matrix.can_view(request.menu_id, request.role_name)

        outcome = await toggle_permission(
            tree,
            matrix,
            request.menu_id,
            request.role_name,
            current_value,
            store.write_permission_async,
        )
    except Exception as e:
        db.rollback()
        logger.error(f"Error toggling permission: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update permission(s)",
        ) from e

    result = ToggleResultSchema(
        plan=[PermissionWriteSchema(**write._asdict()) for write in outcome.plan],
        succeeded=[PermissionWriteSchema(**write._asdict()) for write in outcome.result.succeeded],
        failed=[FailedWriteSchema(**failure.write._asdict(), error=str(failure.error)) for failure in outcome.result.failed],
    )
    return ApiResponse(success=outcome.ok, data=result, message=outcome.message)


# ============================================================================
# Initialization
# ============================================================================


@router.post(
    "/initialize",
    response_model=ApiResponse[dict[str, int]],
    summary="Initialize menu definitions",
    description="Seed the default hotel back-office menus, roles and role access (Admin only)",
)
async def initialize_menus(
    _: User = admin_dependency,
    db: Session = db_dependency,
):
    try:
        counts = MenuPermissionStore(db).seed_defaults()
        return ApiResponse(data=counts, message="Menu definitions initialized successfully")
    except Exception as e:
        db.rollback()
        logger.error(f"Error initializing menus: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to initialize menu definitions",
        ) from e
