import datetime as dt
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.services.wbs import validator as rules
from app.services.wbs.errors import BudgetContainmentViolation, ScheduleFieldViolation, TypeHierarchyViolation


def _item(id, parent_id=None, type="Summary", budget="0", code="1"):
    return SimpleNamespace(id=id, parent_id=parent_id, type=type, budgeted_cost=Decimal(budget), code=code)


def test_top_level_must_be_summary():
    rules.check_top_level_type("Summary")
    with pytest.raises(TypeHierarchyViolation, match="Top-level WBS items must be of type 'Summary'"):
        rules.check_top_level_type("WorkPackage")


@pytest.mark.parametrize(
    "parent,child,ok",
    [
        ("Summary", "Summary", True),
        ("Summary", "WorkPackage", True),
        ("Summary", "Activity", False),
        ("WorkPackage", "Activity", True),
        ("WorkPackage", "Summary", False),
        ("WorkPackage", "WorkPackage", False),
        ("Activity", "Activity", False),
    ],
)
def test_parent_child_type_table(parent, child, ok):
    if ok:
        rules.check_parent_child_types(parent, child)
    else:
        with pytest.raises(TypeHierarchyViolation):
            rules.check_parent_child_types(parent, child)


def test_work_package_under_work_package_names_the_level_rule():
    with pytest.raises(TypeHierarchyViolation, match="Only one level of 'WorkPackage' is allowed"):
        rules.check_parent_child_types("WorkPackage", "WorkPackage")


def test_single_work_package_level_walks_ancestors():
    root = _item(1)
    wp = _item(2, parent_id=1, type="WorkPackage")
    # a Summary sitting below a WorkPackage only exists in corrupted data, the walk must still see it
    nested = _item(3, parent_id=2)
    index = rules.WbsIndex([root, wp, nested])
    rules.check_single_work_package_level(index, root)
    with pytest.raises(TypeHierarchyViolation):
        rules.check_single_work_package_level(index, nested)


def test_ancestors_stop_on_a_parent_loop():
    a = _item(1, parent_id=2)
    b = _item(2, parent_id=1)
    index = rules.WbsIndex([a, b])
    assert [it.id for it in index.ancestors(a)] == [2]


def test_subtree_is_breadth_first():
    items = [_item(1), _item(2, 1), _item(3, 1), _item(4, 2)]
    index = rules.WbsIndex(items)
    assert [it.id for it in index.subtree(items[0])] == [2, 3, 4]


def test_budget_within_parent():
    parent = _item(1, budget="1000")
    rules.check_budget_within_parent(parent, Decimal("1000"), [])
    with pytest.raises(BudgetContainmentViolation, match="Budget cannot exceed parent's budget of 1000"):
        rules.check_budget_within_parent(parent, Decimal("1200"), [])


def test_sibling_sum_within_parent_ignores_activities():
    parent = _item(1, budget="1000")
    siblings = [_item(2, 1, "WorkPackage", "700"), _item(3, 1, "Activity", "500")]
    rules.check_budget_within_parent(parent, Decimal("300"), siblings)
    with pytest.raises(BudgetContainmentViolation, match=r"Sum of all child budgets \(1100\)"):
        rules.check_budget_within_parent(parent, Decimal("400"), siblings)


def test_children_budget_floor():
    children = [_item(2, 1, "WorkPackage", "600"), _item(3, 1, "WorkPackage", "300")]
    rules.check_children_budget(Decimal("900"), children)
    with pytest.raises(BudgetContainmentViolation, match=r"sum of child budgets \(900\)"):
        rules.check_children_budget(Decimal("899.99"), children)


def test_activity_budget_must_be_zero():
    rules.check_activity_budget("Activity", Decimal("0"))
    rules.check_activity_budget("WorkPackage", Decimal("10"))
    with pytest.raises(BudgetContainmentViolation):
        rules.check_activity_budget("Activity", Decimal("0.01"))


def test_children_compatible_with_new_type():
    activities = [_item(2, 1, "Activity")]
    rules.check_children_compatible("WorkPackage", activities)
    rules.check_children_compatible("Activity", [])
    with pytest.raises(TypeHierarchyViolation, match="Cannot change to 'Activity'"):
        rules.check_children_compatible("Activity", activities)
    with pytest.raises(TypeHierarchyViolation, match="Cannot change to 'Summary'"):
        rules.check_children_compatible("Summary", activities)
    with pytest.raises(TypeHierarchyViolation, match="Cannot change to 'WorkPackage'"):
        rules.check_children_compatible("WorkPackage", [_item(3, 1, "WorkPackage")])


def test_schedule_fields():
    rules.check_schedule_fields("Activity", dt.date(2024, 1, 1), dt.date(2024, 1, 1))
    rules.check_schedule_fields("Activity", None, None)
    rules.check_schedule_fields("Summary", None, None)
    with pytest.raises(ScheduleFieldViolation):
        rules.check_schedule_fields("Activity", dt.date(2024, 1, 2), dt.date(2024, 1, 1))
    with pytest.raises(ScheduleFieldViolation):
        rules.check_schedule_fields("WorkPackage", dt.date(2024, 1, 1), None)


def test_next_code():
    assert rules.next_code(None, []) == "1"
    assert rules.next_code(None, [_item(1, code="1"), _item(2, code="3")]) == "4"
    parent = _item(1, code="2")
    assert rules.next_code(parent, []) == "2.1"
    assert rules.next_code(parent, [_item(5, 1, code="2.2")]) == "2.3"
