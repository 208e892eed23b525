"""
Menu tree assembly for the navigation sidebar and the permission matrix.

Turns a flat snapshot of menu items into an ordered two-level tree (root items with
their direct children). Both the admin permission matrix and the end-user sidebar
render from the same tree so ordering is identical everywhere.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hotel_admin.services.permission_cascade import PermissionMatrix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MenuItem:
    """Snapshot of one configured menu entry."""

    menu_id: str
    label: str
    icon: str | None = None
    href: str | None = None
    parent_id: str | None = None
    sort_order: int = 0
    is_active: bool = True

    @property
    def is_root(self) -> bool:
        return not self.parent_id

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "MenuItem":
        """Build an item from an API/ORM-like mapping, tolerating missing optional keys."""
        return cls(
            menu_id=str(data["menu_id"]),
            label=data.get("label") or "",
            icon=data.get("icon") or None,
            href=data.get("href") or None,
            parent_id=data.get("parent_id") or None,
            sort_order=data.get("sort_order") or 0,
            is_active=data.get("is_active", True) is not False,
        )


@dataclass
class MenuNode:
    item: MenuItem
    children: list["MenuNode"] = field(default_factory=list)

    @property
    def menu_id(self) -> str:
        return self.item.menu_id

    @property
    def has_children(self) -> bool:
        return bool(self.children)


class MenuTree:
    """
    Ordered sequence of root nodes, each carrying its ordered children.

    The tree is a derived view: it is rebuilt from item snapshots on every read and
    keeps only a lookup index over its own nodes.
    """

    def __init__(self, roots: list[MenuNode] | None = None):
        self.roots: list[MenuNode] = list(roots or [])
        self._nodes: dict[str, MenuNode] = {}
        self._parents: dict[str, str] = {}
        for root in self.roots:
            self._nodes[root.menu_id] = root
            for child in root.children:
                self._nodes[child.menu_id] = child
                self._parents[child.menu_id] = root.menu_id

    def __iter__(self) -> Iterator[MenuNode]:
        return iter(self.roots)

    def __len__(self) -> int:
        return len(self.roots)

    def __contains__(self, menu_id: object) -> bool:
        return menu_id in self._nodes

    def __repr__(self) -> str:
        return f"MenuTree({[node.menu_id for node in self.roots]!r})"

    def find(self, menu_id: str) -> MenuNode | None:
        return self._nodes.get(menu_id)

    def children_of(self, menu_id: str) -> list[MenuNode]:
        node = self._nodes.get(menu_id)
        return list(node.children) if node else []

    def parent_of(self, menu_id: str) -> MenuNode | None:
        parent_id = self._parents.get(menu_id)
        return self._nodes.get(parent_id) if parent_id else None

    def flatten(self) -> list[MenuItem]:
        """Items in display order: each root immediately followed by its children."""
        items: list[MenuItem] = []
        for root in self.roots:
            items.append(root.item)
            items.extend(child.item for child in root.children)
        return items

    def to_dicts(self) -> list[dict[str, Any]]:
        return [
            {
                "menu_id": root.item.menu_id,
                "label": root.item.label,
                "icon": root.item.icon,
                "href": root.item.href,
                "sort_order": root.item.sort_order,
                "children": [
                    {
                        "menu_id": child.item.menu_id,
                        "label": child.item.label,
                        "icon": child.item.icon,
                        "href": child.item.href,
                        "sort_order": child.item.sort_order,
                        "parent_id": root.item.menu_id,
                    }
                    for child in root.children
                ],
            }
            for root in self.roots
        ]


def _sort_key(item: MenuItem) -> tuple[int, str]:
    return (item.sort_order or 0, item.label or "")


def build_tree(items: Iterable[MenuItem]) -> MenuTree:
    """
    Assemble active menu items into a sorted two-level tree.

    Siblings are ordered by ``sort_order`` then ``label``; the sort is stable so
    identical pairs keep their input order. Children pointing at a missing, inactive
    or non-root parent are dropped rather than promoted to roots.

    Args:
        items: Flat, unsorted menu items (inactive ones are ignored)

    Returns:
        MenuTree with ordered roots and ordered children
    """
    active = [item for item in items if item.is_active]

    roots: list[MenuItem] = []
    children_by_parent: dict[str, list[MenuItem]] = {}
    for item in active:
        if item.is_root:
            roots.append(item)
        else:
            children_by_parent.setdefault(item.parent_id, []).append(item)

    roots.sort(key=_sort_key)
    root_ids = {root.menu_id for root in roots}

    orphans = [child.menu_id for parent_id, kids in children_by_parent.items() if parent_id not in root_ids for child in kids]
    if orphans:
        logger.debug("Dropping orphan menu items without an active root parent: %s", orphans)

    nodes = []
    for root in roots:
        kids = sorted(children_by_parent.get(root.menu_id, []), key=_sort_key)
        nodes.append(MenuNode(item=root, children=[MenuNode(item=kid) for kid in kids]))
    return MenuTree(nodes)


def visible_tree(tree: MenuTree, matrix: "PermissionMatrix", role_name: str) -> MenuTree:
    """
    Navigation tree for a single role.

    Hidden roots take their children with them. A grouping root (no ``href``) whose
    children are all hidden is dropped because there is nothing left to navigate to.
    """
    nodes = []
    for root in tree:
        if not matrix.can_view(root.menu_id, role_name):
            continue
        kids = [MenuNode(item=child.item) for child in root.children if matrix.can_view(child.menu_id, role_name)]
        if root.has_children and not kids and not root.item.href:
            continue
        nodes.append(MenuNode(item=root.item, children=kids))
    return MenuTree(nodes)


def expanded_parent_ids(tree: MenuTree, current_path: str | None) -> list[str]:
    """Roots that should render expanded because a child links to ``current_path``."""
    if not current_path:
        return []
    return [root.menu_id for root in tree if any(child.item.href == current_path for child in root.children)]
