"""
Permission cascade engine for role-based menu visibility.

A single visibility toggle on the permission matrix may require several writes to keep
parent and child menu entries consistent:

- toggling a parent shows/hides the whole group (parent and every child)
- showing a child also shows its parent when the parent is hidden
- hiding the last visible child also hides its parent

``plan_toggle`` computes those writes without any I/O; ``apply_plan`` sends them through
a caller-supplied writer concurrently and reports each entry's outcome. Successful writes
are never rolled back when a sibling write fails.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, NamedTuple

from hotel_admin.services.menu_tree import MenuTree

logger = logging.getLogger(__name__)

TOTAL_FAILURE_MESSAGE = "Failed to update permission(s)"

WriteOne = Callable[[str, str, bool], Awaitable[Any] | None]


@dataclass(frozen=True)
class PermissionEntry:
    """One persisted (role, menu item) visibility row."""

    role_name: str
    menu_id: str
    can_view: bool
    updated_at: datetime | None = None


class PermissionWrite(NamedTuple):
    menu_id: str
    role_name: str
    can_view: bool

    def describe(self) -> str:
        state = "visible" if self.can_view else "hidden"
        return f"{self.menu_id} ({self.role_name}) -> {state}"


class PermissionMatrix:
    """
    Read-only snapshot of ``(menu_id, role_name) -> can_view``.

    Pairs without a row read as hidden. Merging writes returns a new matrix and leaves
    the original untouched.
    """

    def __init__(self, cells: dict[str, dict[str, bool]] | None = None):
        self._cells: dict[str, dict[str, bool]] = {menu_id: dict(roles) for menu_id, roles in (cells or {}).items()}

    @classmethod
    def from_entries(cls, entries: Iterable[PermissionEntry]) -> "PermissionMatrix":
        cells: dict[str, dict[str, bool]] = {}
        for entry in entries:
            cells.setdefault(entry.menu_id, {})[entry.role_name] = bool(entry.can_view)
        return cls(cells)

    def can_view(self, menu_id: str, role_name: str) -> bool:
        return self._cells.get(menu_id, {}).get(role_name, False)

    def visible_menu_ids(self, role_name: str) -> set[str]:
        return {menu_id for menu_id, roles in self._cells.items() if roles.get(role_name)}

    def with_writes(self, writes: Iterable[PermissionWrite]) -> "PermissionMatrix":
        merged = PermissionMatrix(self._cells)
        for write in writes:
            merged._cells.setdefault(write.menu_id, {})[write.role_name] = write.can_view
        return merged

    def to_dict(self) -> dict[str, dict[str, bool]]:
        return {menu_id: dict(roles) for menu_id, roles in self._cells.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PermissionMatrix):
            return NotImplemented
        return self._cells == other._cells


@dataclass(frozen=True)
class FailedWrite:
    write: PermissionWrite
    error: BaseException


@dataclass
class ApplyResult:
    succeeded: list[PermissionWrite] = field(default_factory=list)
    failed: list[FailedWrite] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def total_failure(self) -> bool:
        return bool(self.failed) and not self.succeeded

    def error_message(self) -> str | None:
        """User-facing summary of failed writes, or None when everything persisted."""
        if self.ok:
            return None
        if self.total_failure:
            return TOTAL_FAILURE_MESSAGE
        details = ", ".join(f"{failure.write.describe()}: {failure.error}" for failure in self.failed)
        total = len(self.succeeded) + len(self.failed)
        return f"Failed to update {len(self.failed)} of {total} permission(s): {details}"


def plan_toggle(
    tree: MenuTree,
    matrix: PermissionMatrix,
    menu_id: str,
    role_name: str,
    current_value: bool,
) -> list[PermissionWrite]:
    """
    Compute every write needed to flip one cell of the permission matrix.

    Args:
        tree: Current menu tree (active items only)
        matrix: Current permission snapshot, used for sibling/parent state
        menu_id: Menu item being toggled; items absent from the tree are standalone
        role_name: Role whose visibility changes
        current_value: Visibility the caller currently shows for the cell

    Returns:
        Ordered writes, the toggled item (and its parent) before any children
    """
    new_value = not current_value
    children = tree.children_of(menu_id)
    parent = tree.parent_of(menu_id)

    plan = [PermissionWrite(menu_id, role_name, new_value)]
    if children:
        plan.extend(PermissionWrite(child.menu_id, role_name, new_value) for child in children)
    elif parent is not None:
        if new_value:
            if not matrix.can_view(parent.menu_id, role_name):
                plan.append(PermissionWrite(parent.menu_id, role_name, True))
        else:
            still_visible = [
                sibling.menu_id
                for sibling in parent.children
                if sibling.menu_id != menu_id and matrix.can_view(sibling.menu_id, role_name)
            ]
            if not still_visible:
                plan.append(PermissionWrite(parent.menu_id, role_name, False))

    logger.debug("Planned %d permission write(s) for %s/%s: %s", len(plan), role_name, menu_id, plan)
    return plan


async def _settle(write_one: WriteOne, write: PermissionWrite) -> Any:
    outcome = write_one(write.menu_id, write.role_name, write.can_view)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return outcome


async def apply_plan(plan: Iterable[PermissionWrite], write_one: WriteOne) -> ApplyResult:
    """
    Send every planned write concurrently and collect per-entry outcomes.

    All writes are attempted even when some fail; an exception raised by ``write_one``
    marks only that entry as failed. Cancellation of the caller is propagated.
    """
    writes = list(plan)
    outcomes = await asyncio.gather(*(_settle(write_one, write) for write in writes), return_exceptions=True)

    result = ApplyResult()
    for write, outcome in zip(writes, outcomes, strict=True):
        if isinstance(outcome, Exception):
            logger.warning("Permission write failed for %s: %s", write.describe(), outcome)
            result.failed.append(FailedWrite(write=write, error=outcome))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            result.succeeded.append(write)
    return result


@dataclass
class ToggleOutcome:
    plan: list[PermissionWrite]
    result: ApplyResult
    matrix: PermissionMatrix
    message: str

    @property
    def ok(self) -> bool:
        return self.result.ok


def summarize_toggle(tree: MenuTree, plan: list[PermissionWrite]) -> str:
    """Describe a plan whose first entry is the toggled item; related items are named only when written."""
    toggled, related = plan[0], plan[1:]
    node = tree.find(toggled.menu_id)
    label = node.item.label if node else toggled.menu_id
    state = "visible" if toggled.can_view else "hidden"
    prefix = f"{toggled.role_name} permission for {label}"
    if node is not None and node.has_children:
        return f"{prefix} and {len(related)} sub-item(s) set to {state}"
    parent = tree.parent_of(toggled.menu_id)
    if parent is not None and any(write.menu_id == parent.menu_id for write in related):
        return f"{prefix} and parent {parent.item.label} set to {state}"
    return f"{prefix} set to {state}"


async def toggle_permission(
    tree: MenuTree,
    matrix: PermissionMatrix,
    menu_id: str,
    role_name: str,
    current_value: bool,
    write_one: WriteOne,
) -> ToggleOutcome:
    """Plan, apply and reconcile one toggle; only persisted writes reach the new matrix."""
    plan = plan_toggle(tree, matrix, menu_id, role_name, current_value)
    result = await apply_plan(plan, write_one)
    reconciled = matrix.with_writes(result.succeeded)
    message = result.error_message() or summarize_toggle(tree, plan)
    if result.ok:
        logger.info(message)
    return ToggleOutcome(plan=plan, result=result, matrix=reconciled, message=message)
