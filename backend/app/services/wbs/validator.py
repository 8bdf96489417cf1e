"""Hierarchy and budget rules for WBS items.

The checks here are pure: they look at items already loaded from storage and raise
a ``WbsError`` subclass naming the first violated rule. Sequencing the checks and
fetching the rows is the job of ``app.services.wbs.service``.

Type table::

    Summary     -> Summary | WorkPackage
    WorkPackage -> Activity
    Activity    -> (no children)
"""
import datetime as dt
from decimal import Decimal
from typing import Iterable

from app.db.models.wbs import WbsType
from app.services.wbs.errors import (
    BudgetContainmentViolation,
    ScheduleFieldViolation,
    TypeHierarchyViolation,
)

SUMMARY = WbsType.summary.value
WORK_PACKAGE = WbsType.work_package.value
ACTIVITY = WbsType.activity.value

ALLOWED_CHILDREN: dict[str, set[str]] = {
    SUMMARY: {SUMMARY, WORK_PACKAGE},
    WORK_PACKAGE: {ACTIVITY},
    ACTIVITY: set(),
}


class WbsIndex:
    """In-memory ``id -> item`` index of one project's WBS."""

    def __init__(self, items: Iterable):
        self.by_id = {}
        self.children: dict[int | None, list] = {}
        for it in items:
            self.by_id[it.id] = it
            self.children.setdefault(it.parent_id, []).append(it)

    def get(self, item_id: int | None):
        return self.by_id.get(item_id)

    def children_of(self, item_id: int | None) -> list:
        return self.children.get(item_id, [])

    def ancestors(self, item):
        """Yield the parent chain of ``item`` up to the root, nearest first."""
        seen = {item.id}
        cur = self.by_id.get(item.parent_id)
        while cur is not None and cur.id not in seen:
            yield cur
            seen.add(cur.id)
            cur = self.by_id.get(cur.parent_id)

    def subtree(self, item) -> list:
        """Descendants of ``item`` in breadth-first order (``item`` excluded)."""
        out = []
        queue = list(self.children_of(item.id))
        while queue:
            node = queue.pop(0)
            out.append(node)
            queue.extend(self.children_of(node.id))
        return out


def _type_value(t) -> str:
    return t.value if isinstance(t, WbsType) else str(t)


def budget_sum(items: Iterable) -> Decimal:
    """Sum of budgets of the non-Activity items."""
    return sum(
        (Decimal(it.budgeted_cost or 0) for it in items if _type_value(it.type) != ACTIVITY),
        Decimal("0"),
    )


def check_top_level_type(wbs_type) -> None:
    if _type_value(wbs_type) != SUMMARY:
        raise TypeHierarchyViolation("Top-level WBS items must be of type 'Summary'")


def check_parent_child_types(parent_type, child_type) -> None:
    parent_type, child_type = _type_value(parent_type), _type_value(child_type)
    if child_type in ALLOWED_CHILDREN[parent_type]:
        return
    if parent_type == SUMMARY:
        raise TypeHierarchyViolation(
            "A 'Summary' WBS item cannot have an 'Activity' as a direct child. "
            "It must have a 'WorkPackage' in between."
        )
    if parent_type == WORK_PACKAGE:
        if child_type == WORK_PACKAGE:
            raise TypeHierarchyViolation("Only one level of 'WorkPackage' is allowed")
        raise TypeHierarchyViolation("A 'WorkPackage' can only have 'Activity' items as children")
    raise TypeHierarchyViolation("'Activity' items cannot have children")


def check_single_work_package_level(index: WbsIndex, parent) -> None:
    """Reject a new WorkPackage below ``parent`` if the path to the root already has one."""
    chain = [parent, *index.ancestors(parent)]
    if any(_type_value(it.type) == WORK_PACKAGE for it in chain):
        raise TypeHierarchyViolation("Only one level of 'WorkPackage' is allowed")


def check_activity_budget(wbs_type, budgeted_cost: Decimal | None) -> None:
    if _type_value(wbs_type) == ACTIVITY and Decimal(budgeted_cost or 0) != 0:
        raise BudgetContainmentViolation("Activity items cannot carry a budget")


def check_budget_within_parent(parent, budgeted_cost: Decimal, siblings: Iterable) -> None:
    """``siblings`` are the parent's other children, the item itself excluded."""
    parent_budget = Decimal(parent.budgeted_cost or 0)
    budgeted_cost = Decimal(budgeted_cost or 0)
    if budgeted_cost > parent_budget:
        raise BudgetContainmentViolation(f"Budget cannot exceed parent's budget of {parent_budget}")
    total = budget_sum(siblings) + budgeted_cost
    if total > parent_budget:
        raise BudgetContainmentViolation(
            f"Sum of all child budgets ({total}) cannot exceed parent's budget ({parent_budget})"
        )


def check_children_budget(budgeted_cost: Decimal, children: Iterable) -> None:
    children_sum = budget_sum(children)
    if children_sum > Decimal(budgeted_cost or 0):
        raise BudgetContainmentViolation(
            f"Budget cannot be less than the sum of child budgets ({children_sum})"
        )


def check_children_compatible(new_type, children: list) -> None:
    if not children:
        return
    new_type = _type_value(new_type)
    child_types = {_type_value(c.type) for c in children}
    if new_type == ACTIVITY:
        raise TypeHierarchyViolation(
            "Cannot change to 'Activity' type because this item has children. "
            "'Activity' items cannot have children."
        )
    if new_type == WORK_PACKAGE and child_types - {ACTIVITY}:
        raise TypeHierarchyViolation(
            "Cannot change to 'WorkPackage' type because this item has non-Activity children. "
            "'WorkPackage' items can only have 'Activity' children."
        )
    if new_type == SUMMARY and ACTIVITY in child_types:
        raise TypeHierarchyViolation(
            "Cannot change to 'Summary' type because this item has 'Activity' children. "
            "A 'Summary' WBS item cannot have an 'Activity' as a direct child."
        )


def check_schedule_fields(wbs_type, start_date: dt.date | None, end_date: dt.date | None) -> None:
    if _type_value(wbs_type) != ACTIVITY:
        if start_date is not None or end_date is not None:
            raise ScheduleFieldViolation("Summary and WorkPackage items cannot have dates")
        return
    if start_date and end_date and start_date > end_date:
        raise ScheduleFieldViolation("Start date cannot be after end date")


def next_code(parent, siblings: Iterable) -> str:
    """Next free dotted code below ``parent`` (``None`` for the top level)."""
    numbers = []
    for s in siblings:
        tail = str(s.code).rsplit(".", 1)[-1]
        if tail.isdigit():
            numbers.append(int(tail))
    n = max(numbers, default=0) + 1
    return f"{parent.code}.{n}" if parent is not None else str(n)
