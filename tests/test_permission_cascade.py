import pytest

from hotel_admin.services.menu_tree import MenuItem, build_tree
from hotel_admin.services.permission_cascade import (
    PermissionEntry,
    PermissionMatrix,
    PermissionWrite,
    plan_toggle,
    summarize_toggle,
    toggle_permission,
)

ROLE = "Sales Manager"


@pytest.fixture
def rooms_tree():
    return build_tree(
        [
            MenuItem(menu_id="rooms", label="Rooms", sort_order=1),
            MenuItem(menu_id="room-type", label="Room Type", parent_id="rooms", sort_order=1),
            MenuItem(menu_id="room-pricing", label="Room Pricing", parent_id="rooms", sort_order=2),
            MenuItem(menu_id="dashboard", label="Dashboard", href="/dashboard", sort_order=0),
        ]
    )


def _matrix(visible: list[str], role: str = ROLE) -> PermissionMatrix:
    return PermissionMatrix.from_entries(PermissionEntry(role_name=role, menu_id=menu_id, can_view=True) for menu_id in visible)


def test_parent_toggle_on_cascades_to_every_child(rooms_tree):
    plan = plan_toggle(rooms_tree, _matrix([]), "rooms", ROLE, False)

    assert plan == [
        PermissionWrite("rooms", ROLE, True),
        PermissionWrite("room-type", ROLE, True),
        PermissionWrite("room-pricing", ROLE, True),
    ]


def test_parent_toggle_off_hides_every_child(rooms_tree):
    plan = plan_toggle(rooms_tree, _matrix(["rooms", "room-type"]), "rooms", ROLE, True)

    assert set(plan) == {
        PermissionWrite("rooms", ROLE, False),
        PermissionWrite("room-type", ROLE, False),
        PermissionWrite("room-pricing", ROLE, False),
    }


def test_child_toggle_on_shows_hidden_parent(rooms_tree):
    plan = plan_toggle(rooms_tree, _matrix([]), "room-type", ROLE, False)

    assert plan == [PermissionWrite("room-type", ROLE, True), PermissionWrite("rooms", ROLE, True)]


def test_child_toggle_on_leaves_visible_parent_alone(rooms_tree):
    plan = plan_toggle(rooms_tree, _matrix(["rooms", "room-type"]), "room-pricing", ROLE, False)

    assert plan == [PermissionWrite("room-pricing", ROLE, True)]


def test_last_visible_child_off_hides_parent(rooms_tree):
    plan = plan_toggle(rooms_tree, _matrix(["rooms", "room-type"]), "room-type", ROLE, True)

    assert set(plan) == {PermissionWrite("room-type", ROLE, False), PermissionWrite("rooms", ROLE, False)}


def test_child_off_with_visible_sibling_keeps_parent(rooms_tree):
    plan = plan_toggle(rooms_tree, _matrix(["rooms", "room-type", "room-pricing"]), "room-type", ROLE, True)

    assert plan == [PermissionWrite("room-type", ROLE, False)]


def test_sibling_visibility_is_checked_per_role(rooms_tree):
    matrix = PermissionMatrix({"rooms": {ROLE: True}, "room-type": {ROLE: True}, "room-pricing": {"Reservation Officer": True}})

    plan = plan_toggle(rooms_tree, matrix, "room-type", ROLE, True)

    assert PermissionWrite("rooms", ROLE, False) in plan


def test_standalone_toggle_is_a_single_write(rooms_tree):
    assert plan_toggle(rooms_tree, _matrix(["dashboard"]), "dashboard", ROLE, True) == [PermissionWrite("dashboard", ROLE, False)]


def test_unknown_menu_is_treated_as_standalone(rooms_tree):
    assert plan_toggle(rooms_tree, _matrix([]), "not-in-tree", ROLE, False) == [PermissionWrite("not-in-tree", ROLE, True)]


def test_plan_does_not_mutate_matrix(rooms_tree):
    matrix = _matrix(["rooms", "room-type"])
    before = matrix.to_dict()

    plan_toggle(rooms_tree, matrix, "rooms", ROLE, True)

    assert matrix.to_dict() == before


def test_unknown_cells_read_as_hidden():
    matrix = PermissionMatrix()

    assert matrix.can_view("rooms", ROLE) is False
    assert matrix.visible_menu_ids(ROLE) == set()


def test_with_writes_returns_new_matrix():
    matrix = _matrix(["rooms"])

    merged = matrix.with_writes([PermissionWrite("rooms", ROLE, False), PermissionWrite("room-type", ROLE, True)])

    assert matrix.can_view("rooms", ROLE) is True
    assert merged.can_view("rooms", ROLE) is False
    assert merged.visible_menu_ids(ROLE) == {"room-type"}


async def test_rooms_scenario_end_to_end(rooms_tree):
    store: dict[tuple[str, str], bool] = {}

    def write_one(menu_id, role_name, can_view):
        store[(menu_id, role_name)] = can_view

    matrix = _matrix([])

    first = await toggle_permission(rooms_tree, matrix, "room-type", ROLE, False, write_one)
    assert set(first.plan) == {PermissionWrite("room-type", ROLE, True), PermissionWrite("rooms", ROLE, True)}

    second = await toggle_permission(rooms_tree, first.matrix, "room-pricing", ROLE, False, write_one)
    assert second.plan == [PermissionWrite("room-pricing", ROLE, True)]

    third = await toggle_permission(rooms_tree, second.matrix, "room-type", ROLE, True, write_one)
    assert third.plan == [PermissionWrite("room-type", ROLE, False)]

    assert store == {
        ("room-type", ROLE): False,
        ("rooms", ROLE): True,
        ("room-pricing", ROLE): True,
    }
    assert third.matrix.visible_menu_ids(ROLE) == {"rooms", "room-pricing"}


async def test_failed_writes_do_not_reach_reconciled_matrix(rooms_tree):
    def write_one(menu_id, role_name, can_view):
        if menu_id == "rooms":
            raise RuntimeError("database is locked")

    outcome = await toggle_permission(rooms_tree, _matrix([]), "room-type", ROLE, False, write_one)

    assert not outcome.ok
    assert outcome.matrix.can_view("room-type", ROLE) is True
    assert outcome.matrix.can_view("rooms", ROLE) is False
    assert "rooms (Sales Manager) -> visible: database is locked" in outcome.message


def test_summary_names_parent_only_when_written(rooms_tree):
    hidden_parent = plan_toggle(rooms_tree, _matrix([]), "room-type", ROLE, False)
    visible_parent = plan_toggle(rooms_tree, _matrix(["rooms", "room-type"]), "room-pricing", ROLE, False)

    assert summarize_toggle(rooms_tree, hidden_parent) == "Sales Manager permission for Room Type and parent Rooms set to visible"
    assert summarize_toggle(rooms_tree, visible_parent) == "Sales Manager permission for Room Pricing set to visible"


def test_summary_messages(rooms_tree):
    group = plan_toggle(rooms_tree, _matrix([]), "rooms", ROLE, False)
    last_child_off = plan_toggle(rooms_tree, _matrix(["rooms", "room-type"]), "room-type", ROLE, True)
    standalone = plan_toggle(rooms_tree, _matrix(["dashboard"]), "dashboard", ROLE, True)

    assert summarize_toggle(rooms_tree, group) == "Sales Manager permission for Rooms and 2 sub-item(s) set to visible"
    assert summarize_toggle(rooms_tree, last_child_off) == "Sales Manager permission for Room Type and parent Rooms set to hidden"
    assert summarize_toggle(rooms_tree, standalone) == "Sales Manager permission for Dashboard set to hidden"
