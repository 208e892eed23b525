import logging

from hotel_admin.services.menu_tree import MenuItem, build_tree, expanded_parent_ids, visible_tree
from hotel_admin.services.permission_cascade import PermissionMatrix


def _item(menu_id, label=None, parent_id=None, sort_order=0, href=None, is_active=True):
    return MenuItem(
        menu_id=menu_id,
        label=label or menu_id.title(),
        href=href,
        parent_id=parent_id,
        sort_order=sort_order,
        is_active=is_active,
    )


ROOM_OPERATION = [
    _item("dashboard", "Dashboard", sort_order=1, href="/dashboard"),
    _item("room-operation", "Room Operation", sort_order=3),
    _item("rooms", "Rooms", parent_id="room-operation", sort_order=6, href="/rooms"),
    _item("room-type", "Room Type", parent_id="room-operation", sort_order=2, href="/room-type"),
    _item("room-group", "Room Group", parent_id="room-operation", sort_order=1, href="/room-group"),
    _item("reservation", "Reservation", sort_order=2, href="/reservations"),
]


def test_build_tree_orders_roots_and_children():
    tree = build_tree(ROOM_OPERATION)

    assert [node.menu_id for node in tree] == ["dashboard", "reservation", "room-operation"]
    assert [child.menu_id for child in tree.find("room-operation").children] == ["room-group", "room-type", "rooms"]
    assert tree.find("dashboard").children == []


def test_build_tree_is_independent_of_input_order():
    forward = build_tree(ROOM_OPERATION)
    backward = build_tree(list(reversed(ROOM_OPERATION)))

    assert forward.to_dicts() == backward.to_dicts()


def test_equal_sort_order_falls_back_to_label():
    tree = build_tree([_item("b", "Bravo", sort_order=1), _item("a", "Alpha", sort_order=1), _item("c", "Charlie", sort_order=0)])

    assert [node.item.label for node in tree] == ["Charlie", "Alpha", "Bravo"]


def test_identical_sort_keys_keep_input_order():
    tree = build_tree([_item("first", "Same", sort_order=1), _item("second", "Same", sort_order=1)])

    assert [node.menu_id for node in tree] == ["first", "second"]


def test_orphan_children_are_dropped(caplog):
    items = [_item("dashboard", sort_order=1), _item("ghost-child", parent_id="missing-parent")]

    with caplog.at_level(logging.DEBUG, logger="hotel_admin.services.menu_tree"):
        tree = build_tree(items)

    assert [node.menu_id for node in tree] == ["dashboard"]
    assert "ghost-child" not in tree
    assert "ghost-child" in caplog.text


def test_grandchildren_are_not_nested():
    items = [
        _item("report", sort_order=1),
        _item("booking-report", parent_id="report"),
        _item("booking-detail", parent_id="booking-report"),
    ]

    tree = build_tree(items)

    assert [child.menu_id for child in tree.find("report").children] == ["booking-report"]
    assert tree.find("booking-report").children == []
    assert "booking-detail" not in tree


def test_inactive_items_are_excluded():
    items = ROOM_OPERATION + [
        _item("gift-card", sort_order=4, is_active=False),
        _item("room-pricing", parent_id="room-operation", sort_order=5, is_active=False),
    ]

    tree = build_tree(items)

    assert "gift-card" not in tree
    assert "room-pricing" not in tree


def test_children_of_inactive_parent_are_dropped():
    items = [_item("report", is_active=False), _item("booking-report", parent_id="report")]

    assert len(build_tree(items)) == 0


def test_empty_input_builds_empty_tree():
    tree = build_tree([])

    assert len(tree) == 0
    assert tree.flatten() == []


def test_lookup_helpers():
    tree = build_tree(ROOM_OPERATION)

    assert tree.parent_of("room-type").menu_id == "room-operation"
    assert tree.parent_of("room-operation") is None
    assert [node.menu_id for node in tree.children_of("room-operation")] == ["room-group", "room-type", "rooms"]
    assert tree.children_of("unknown") == []
    assert [item.menu_id for item in tree.flatten()] == [
        "dashboard",
        "reservation",
        "room-operation",
        "room-group",
        "room-type",
        "rooms",
    ]


def test_from_mapping_tolerates_missing_optional_fields():
    item = MenuItem.from_mapping({"menu_id": "promo-code", "label": "Promo Code", "parent_id": "", "sort_order": None})

    assert item.parent_id is None
    assert item.sort_order == 0
    assert item.is_active is True
    assert item.is_root


def test_visible_tree_filters_by_role():
    tree = build_tree(ROOM_OPERATION)
    matrix = PermissionMatrix(
        {
            "dashboard": {"Sales Manager": True},
            "room-operation": {"Sales Manager": True},
            "room-type": {"Sales Manager": True},
            "reservation": {"Sales Manager": False},
        }
    )

    visible = visible_tree(tree, matrix, "Sales Manager")

    assert [node.menu_id for node in visible] == ["dashboard", "room-operation"]
    assert [child.menu_id for child in visible.find("room-operation").children] == ["room-type"]


def test_visible_tree_drops_group_without_visible_children():
    tree = build_tree(ROOM_OPERATION)
    matrix = PermissionMatrix({"room-operation": {"Sales Manager": True}})

    assert "room-operation" not in visible_tree(tree, matrix, "Sales Manager")


def test_expanded_parent_ids_follow_current_path():
    tree = build_tree(ROOM_OPERATION)

    assert expanded_parent_ids(tree, "/room-type") == ["room-operation"]
    assert expanded_parent_ids(tree, "/dashboard") == []
    assert expanded_parent_ids(tree, None) == []
