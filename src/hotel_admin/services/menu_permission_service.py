"""
Database-backed menu permission store.

Reads menu item and permission snapshots for the tree builder and cascade engine, and
persists single permission rows. Each permission write commits on its own: the store
offers no multi-row transaction for a cascade.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hotel_admin.models.menu_access import MenuDefinition, MenuPermission
from hotel_admin.models.rbac import Role
from hotel_admin.services.menu_tree import MenuItem, MenuTree, build_tree
from hotel_admin.services.permission_cascade import PermissionEntry, PermissionMatrix

logger = logging.getLogger(__name__)


class MenuItemNotFoundError(LookupError):
    def __init__(self, menu_id: str):
        super().__init__(f"Menu item '{menu_id}' not found")
        self.menu_id = menu_id


class DuplicateMenuItemError(ValueError):
    def __init__(self, menu_id: str):
        super().__init__(f"Menu item '{menu_id}' already exists")
        self.menu_id = menu_id


class InvalidParentError(ValueError):
    pass


# ============================================================================
# Default Menu Definitions
# ============================================================================


DEFAULT_MENUS = [
    {"menu_id": "dashboard", "label": "Dashboard", "icon": "LayoutDashboard", "href": "/dashboard", "sort_order": 1},
    {"menu_id": "reservation", "label": "Reservation", "icon": "Calendar", "href": "/reservations", "sort_order": 2},
    {"menu_id": "room-operation", "label": "Room Operation", "icon": "Building2", "sort_order": 3},
    {"menu_id": "room-group", "label": "Room Group", "icon": "Building2", "href": "/room-group", "parent_id": "room-operation", "sort_order": 1},
    {"menu_id": "room-type", "label": "Room Type", "icon": "Building2", "href": "/room-type", "parent_id": "room-operation", "sort_order": 2},
    {"menu_id": "room-management", "label": "Room Group Room Types", "icon": "Settings", "href": "/room-management", "parent_id": "room-operation", "sort_order": 3},
    {"menu_id": "room-type-images", "label": "Room Type Image", "icon": "Image", "href": "/room-type-images", "parent_id": "room-operation", "sort_order": 4},
    {"menu_id": "room-pricing", "label": "Room Pricing", "icon": "DollarSign", "href": "/room-pricing", "parent_id": "room-operation", "sort_order": 5},
    {"menu_id": "rooms", "label": "Rooms", "icon": "Bed", "href": "/rooms", "parent_id": "room-operation", "sort_order": 6},
    {"menu_id": "manage-guests", "label": "Manage Guests", "icon": "User", "href": "/guests", "sort_order": 4},
    {"menu_id": "promo-code", "label": "Promo Code", "icon": "CreditCard", "href": "/promo-code", "sort_order": 5},
    {"menu_id": "gift-card", "label": "Gift Card", "icon": "Gift", "href": "/gift-card-management", "sort_order": 6},
    {"menu_id": "employee-management", "label": "Employee Management", "icon": "User", "href": "/employee-management", "sort_order": 7},
    {"menu_id": "permission-management", "label": "Permission Management", "icon": "Settings", "href": "/permission-management", "sort_order": 8},
    {"menu_id": "report", "label": "Report", "icon": "BarChart3", "sort_order": 9},
    {"menu_id": "booking-report", "label": "Booking Report", "icon": "Calendar", "href": "/reports/reservations", "parent_id": "report", "sort_order": 1},
]

DEFAULT_ROLES = {
    "Reservation Officer": "Creates and maintains guest reservations",
    "Sales Manager": "Manages pricing, promo codes and gift cards",
    "Front Office Manager": "Oversees rooms, guests and daily front office operation",
    "Admin": "Full access to every screen",
}

# Which roles can see which menus after initialization (admin sees everything)
DEFAULT_ROLE_ACCESS = {
    "Reservation Officer": ["dashboard", "reservation", "manage-guests"],
    "Sales Manager": [
        "dashboard", "reservation",
        "room-operation", "room-type", "room-pricing",
        "promo-code", "gift-card",
        "report", "booking-report",
    ],
    "Front Office Manager": [
        "dashboard", "reservation",
        "room-operation", "room-group", "room-type", "room-management", "room-type-images", "room-pricing", "rooms",
        "manage-guests",
        "report", "booking-report",
    ],
    "Admin": [m["menu_id"] for m in DEFAULT_MENUS],
}


def to_menu_item(menu: MenuDefinition) -> MenuItem:
    return MenuItem(
        menu_id=menu.menu_id,
        label=menu.label,
        icon=menu.icon,
        href=menu.href,
        parent_id=menu.parent_id,
        sort_order=menu.sort_order or 0,
        is_active=bool(menu.is_active),
    )


class MenuPermissionStore:
    """Menu item and permission persistence for one database session."""

    def __init__(self, db: Session):
        self.db = db

    # ---- Menu items ----

    def get_menu(self, menu_id: str) -> MenuDefinition | None:
        return self.db.query(MenuDefinition).filter(MenuDefinition.menu_id == menu_id).one_or_none()

    def require_menu(self, menu_id: str) -> MenuDefinition:
        menu = self.get_menu(menu_id)
        if menu is None:
            raise MenuItemNotFoundError(menu_id)
        return menu

    def fetch_menu_definitions(self) -> list[MenuDefinition]:
        return self.db.query(MenuDefinition).order_by(MenuDefinition.sort_order, MenuDefinition.label).all()

    def fetch_menu_items(self) -> list[MenuItem]:
        """All configured menu items, including inactive ones."""
        return [to_menu_item(menu) for menu in self.fetch_menu_definitions()]

    def build_tree(self) -> MenuTree:
        return build_tree(self.fetch_menu_items())

    def _validate_parent(self, menu_id: str, parent_id: str | None) -> None:
        if not parent_id:
            return
        if parent_id == menu_id:
            raise InvalidParentError("A menu item cannot be its own parent")
        parent = self.get_menu(parent_id)
        if parent is None:
            raise InvalidParentError(f"Parent menu item '{parent_id}' not found")
        if parent.parent_id:
            raise InvalidParentError(f"'{parent_id}' is itself a sub-item; menus only nest one level deep")
        has_children = self.db.query(MenuDefinition).filter(MenuDefinition.parent_id == menu_id).first() is not None
        if has_children:
            raise InvalidParentError(f"'{menu_id}' has sub-items and cannot be nested under another menu")

    def create_menu_item(
        self,
        menu_id: str,
        label: str,
        icon: str | None = None,
        href: str | None = None,
        parent_id: str | None = None,
        sort_order: int = 0,
    ) -> MenuDefinition:
        if self.get_menu(menu_id) is not None:
            raise DuplicateMenuItemError(menu_id)
        self._validate_parent(menu_id, parent_id)

        menu = MenuDefinition(
            menu_id=menu_id,
            label=label,
            icon=icon,
            href=href,
            parent_id=parent_id or None,
            sort_order=sort_order,
            is_active=True,
        )
        self.db.add(menu)
        self.db.commit()
        self.db.refresh(menu)
        logger.info("Created menu item %s (parent=%s)", menu_id, parent_id)
        return menu

    def update_menu_item(self, menu_id: str, **changes) -> MenuDefinition:
        menu = self.require_menu(menu_id)
        if "parent_id" in changes:
            changes["parent_id"] = changes["parent_id"] or None
            self._validate_parent(menu_id, changes["parent_id"])

        for key, value in changes.items():
            # label, sort_order and is_active are NOT NULL; None there means "unchanged"
            if value is None and key in {"label", "sort_order", "is_active"}:
                continue
            if hasattr(menu, key):
                setattr(menu, key, value)
        self.db.commit()
        self.db.refresh(menu)
        logger.info("Updated menu item %s: %s", menu_id, sorted(changes))
        return menu

    # ---- Roles ----

    def fetch_roles(self) -> list[Role]:
        return self.db.query(Role).order_by(Role.id).all()

    def role_exists(self, role_name: str) -> bool:
        return self.db.query(Role).filter(Role.role_name == role_name).first() is not None

    # ---- Permissions ----

    def fetch_permission_rows(self) -> list[MenuPermission]:
        return self.db.query(MenuPermission).order_by(MenuPermission.role_name, MenuPermission.menu_id).all()

    def fetch_permission_entries(self) -> list[PermissionEntry]:
        return [
            PermissionEntry(role_name=row.role_name, menu_id=row.menu_id, can_view=bool(row.can_view), updated_at=row.updated_at)
            for row in self.fetch_permission_rows()
        ]

    def fetch_matrix(self) -> PermissionMatrix:
        return PermissionMatrix.from_entries(self.fetch_permission_entries())

    def write_permission(self, role_name: str, menu_id: str, can_view: bool) -> MenuPermission:
        """Upsert one permission row and commit it; last write wins."""
        try:
            row = (
                self.db.query(MenuPermission)
                .filter(MenuPermission.role_name == role_name, MenuPermission.menu_id == menu_id)
                .one_or_none()
            )
            if row is None:
                row = MenuPermission(role_name=role_name, menu_id=menu_id, can_view=can_view)
                self.db.add(row)
            else:
                row.can_view = can_view
                row.updated_at = datetime.now(UTC)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return row

    async def write_permission_async(self, menu_id: str, role_name: str, can_view: bool) -> None:
        """Writer with the cascade engine's argument order."""
        self.write_permission(role_name, menu_id, can_view)

    # ---- Seeding ----

    def seed_defaults(self) -> dict[str, int]:
        """Create or refresh default menus and roles, and grant default access where no row exists."""
        menus_created = 0
        for menu_data in DEFAULT_MENUS:
            existing = self.get_menu(menu_data["menu_id"])
            if existing:
                for key, value in menu_data.items():
                    setattr(existing, key, value)
            else:
                self.db.add(MenuDefinition(**menu_data, is_active=True))
                menus_created += 1
        self.db.flush()

        roles_created = 0
        for role_name, description in DEFAULT_ROLES.items():
            role = self.db.query(Role).filter(Role.role_name == role_name).one_or_none()
            if role is None:
                self.db.add(Role(role_name=role_name, description=description))
                roles_created += 1
        self.db.flush()

        grants = 0
        for role_name, menu_ids in DEFAULT_ROLE_ACCESS.items():
            for menu_id in menu_ids:
                exists = (
                    self.db.query(MenuPermission)
                    .filter(MenuPermission.role_name == role_name, MenuPermission.menu_id == menu_id)
                    .first()
                )
                if exists is None:
                    self.db.add(MenuPermission(role_name=role_name, menu_id=menu_id, can_view=True))
                    grants += 1

        self.db.commit()
        logger.info("Seeded menu permissions: menus=%d roles=%d grants=%d", menus_created, roles_created, grants)
        return {"menus": menus_created, "roles": roles_created, "grants": grants}
