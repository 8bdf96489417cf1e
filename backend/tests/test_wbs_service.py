import datetime as dt
from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.crud.dependencies import list_dependencies
from app.crud.wbs import get_wbs_item, list_wbs_items
from app.schemas.dependencies import DependencyCreate
from app.schemas.wbs import WbsImportRow, WbsItemUpdate, WbsProgressUpdate
from app.services.schedule.dependencies import add_dependency
from app.services.wbs.errors import (
    BudgetContainmentViolation,
    NotFound,
    ProtectedItem,
    ScheduleFieldViolation,
    TypeHierarchyViolation,
)
from app.services.wbs.importer import import_wbs_rows
from app.services.wbs.service import (
    budget_summary,
    delete_wbs_item,
    finalize_budget,
    update_progress,
    validate_and_update,
)


def test_top_level_work_package_is_rejected(db, project, add_item):
    with pytest.raises(TypeHierarchyViolation, match="Top-level WBS items must be of type 'Summary'"):
        add_item(project.id, None, "WorkPackage")
    assert len(list_wbs_items(db, project.id)) == 3


def test_top_level_summary_gets_next_code(project, add_item):
    item = add_item(project.id, None, "Summary", name="Handover")
    assert item.code == "4"
    assert item.level == 1
    assert item.is_top_level


def test_child_budget_cannot_exceed_parent(db, project, top_level, add_item):
    parent = add_item(project.id, top_level["1"].id, "Summary", "1000")
    with pytest.raises(BudgetContainmentViolation, match="exceed parent's budget"):
        add_item(project.id, parent.id, "WorkPackage", "1200")
    assert list_wbs_items(db, project.id)[-1].id == parent.id


def test_sibling_budgets_cannot_exceed_parent(project, top_level, add_item):
    parent = add_item(project.id, top_level["1"].id, "Summary", "1000")
    add_item(project.id, parent.id, "WorkPackage", "700")
    with pytest.raises(BudgetContainmentViolation, match="Sum of all child budgets"):
        add_item(project.id, parent.id, "WorkPackage", "400")
    add_item(project.id, parent.id, "WorkPackage", "300")


def test_only_one_work_package_level(project, top_level, add_item):
    wp = add_item(project.id, top_level["2"].id, "WorkPackage", "1000")
    add_item(project.id, wp.id, "Activity", start=dt.date(2024, 1, 1), end=dt.date(2024, 1, 5))
    with pytest.raises(TypeHierarchyViolation, match="Only one level of 'WorkPackage' is allowed"):
        add_item(project.id, wp.id, "WorkPackage")


def test_summary_cannot_hold_activities(project, top_level, add_item):
    with pytest.raises(TypeHierarchyViolation, match="'WorkPackage' in between"):
        add_item(project.id, top_level["1"].id, "Activity")


def test_activity_cannot_carry_budget(project, top_level, add_item):
    wp = add_item(project.id, top_level["1"].id, "WorkPackage", "500")
    with pytest.raises(BudgetContainmentViolation, match="Activity items cannot carry a budget"):
        add_item(project.id, wp.id, "Activity", "10")


def test_activity_dates_and_duration(project, top_level, add_item):
    wp = add_item(project.id, top_level["1"].id, "WorkPackage", "500")
    act = add_item(project.id, wp.id, "Activity", start=dt.date(2024, 1, 5), end=dt.date(2024, 1, 8))
    assert act.code == "1.1.1"
    assert act.level == 3
    assert act.duration == 4
    with pytest.raises(ScheduleFieldViolation):
        add_item(project.id, wp.id, "Activity", start=dt.date(2024, 1, 9), end=dt.date(2024, 1, 8))


def test_unknown_parent(project, add_item):
    with pytest.raises(NotFound):
        add_item(project.id, 9999, "Summary")


def test_missing_parent_is_reported_before_activity_rules(project, add_item):
    with pytest.raises(NotFound, match="Parent WBS item not found"):
        add_item(project.id, 9999, "Activity", "10")


def test_top_level_type_is_reported_before_budget_and_dates(project, add_item):
    with pytest.raises(TypeHierarchyViolation, match="Top-level WBS items must be of type 'Summary'"):
        add_item(project.id, None, "Activity", "10")
    with pytest.raises(TypeHierarchyViolation, match="Top-level WBS items must be of type 'Summary'"):
        add_item(project.id, None, "WorkPackage", start=dt.date(2024, 1, 1), end=dt.date(2024, 1, 2))


def test_update_keeps_top_level_summary(db, top_level):
    with pytest.raises(TypeHierarchyViolation):
        validate_and_update(db, top_level["1"].id, WbsItemUpdate(type="WorkPackage"))
    assert get_wbs_item(db, top_level["1"].id).type == "Summary"
    with pytest.raises(TypeHierarchyViolation, match="Top-level"):
        validate_and_update(db, top_level["1"].id, WbsItemUpdate(type="Activity"))


def test_update_rejects_blank_name():
    with pytest.raises(ValidationError):
        WbsItemUpdate(name="")
    with pytest.raises(ValidationError):
        WbsItemUpdate(name="   ")
    assert WbsItemUpdate(name=" Piling ").name == "Piling"


def test_update_budget_is_checked_both_ways(db, project, top_level, add_item):
    parent = add_item(project.id, top_level["1"].id, "Summary", "1000")
    wp = add_item(project.id, parent.id, "WorkPackage", "600")
    add_item(project.id, parent.id, "WorkPackage", "300")

    with pytest.raises(BudgetContainmentViolation, match="Sum of all child budgets"):
        validate_and_update(db, wp.id, WbsItemUpdate(budgeted_cost=Decimal("800")))
    with pytest.raises(BudgetContainmentViolation, match="less than the sum of child budgets"):
        validate_and_update(db, parent.id, WbsItemUpdate(budgeted_cost=Decimal("850")))

    updated = validate_and_update(db, wp.id, WbsItemUpdate(budgeted_cost=Decimal("700"), name=" Piling "))
    assert updated.budgeted_cost == Decimal("700")
    assert updated.name == "Piling"


def test_type_change_checks_children(db, project, top_level, add_item):
    wp = add_item(project.id, top_level["1"].id, "WorkPackage", "500")
    add_item(project.id, wp.id, "Activity")
    with pytest.raises(TypeHierarchyViolation, match="Cannot change to 'Summary'"):
        validate_and_update(db, wp.id, WbsItemUpdate(type="Summary"))


def test_type_change_respects_parent(db, project, top_level, add_item):
    wp = add_item(project.id, top_level["1"].id, "WorkPackage", "500")
    act = add_item(project.id, wp.id, "Activity", start=dt.date(2024, 1, 1), end=dt.date(2024, 1, 2))
    with pytest.raises(TypeHierarchyViolation):
        # a WorkPackage cannot sit under a WorkPackage
        validate_and_update(db, act.id, WbsItemUpdate(type="WorkPackage"))
    assert get_wbs_item(db, act.id).start_date == dt.date(2024, 1, 1)

    leaf = add_item(project.id, top_level["3"].id, "WorkPackage", "100")
    became = validate_and_update(db, leaf.id, WbsItemUpdate(type="Summary"))
    assert became.type == "Summary"
    assert became.start_date is None and became.duration is None


def test_update_progress(db, project, top_level, add_item):
    wp = add_item(project.id, top_level["1"].id, "WorkPackage", "500")
    item = update_progress(db, wp.id, WbsProgressUpdate(percent_complete=Decimal("40"), actual_start_date=dt.date(2024, 2, 1)))
    assert item.percent_complete == Decimal("40")
    with pytest.raises(ScheduleFieldViolation):
        update_progress(db, wp.id, WbsProgressUpdate(actual_end_date=dt.date(2024, 1, 1)))


def test_delete_removes_subtree_and_dependencies(db, project, top_level, add_item):
    wp = add_item(project.id, top_level["2"].id, "WorkPackage", "500")
    a = add_item(project.id, wp.id, "Activity", start=dt.date(2024, 1, 1), end=dt.date(2024, 1, 2))
    b = add_item(project.id, wp.id, "Activity", start=dt.date(2024, 1, 3), end=dt.date(2024, 1, 4))
    add_dependency(db, DependencyCreate(predecessor_id=a.id, successor_id=b.id))
    wp_id = wp.id

    assert delete_wbs_item(db, wp_id) == 3
    assert [it.code for it in list_wbs_items(db, project.id)] == ["1", "2", "3"]
    assert list_dependencies(db, project.id) == []

    # codes stay unique after deletions
    assert add_item(project.id, top_level["2"].id, "WorkPackage", "10").code == "2.1"


def test_codes_continue_after_highest_sibling(db, project, top_level, add_item):
    first = add_item(project.id, top_level["2"].id, "WorkPackage", "10")
    add_item(project.id, top_level["2"].id, "WorkPackage", "10")
    delete_wbs_item(db, first.id)
    assert add_item(project.id, top_level["2"].id, "WorkPackage", "10").code == "2.3"


def test_top_level_items_are_protected(db, top_level):
    with pytest.raises(ProtectedItem):
        delete_wbs_item(db, top_level["1"].id)


def test_finalize_budget_requires_work_packages(db, project, top_level, add_item):
    add_item(project.id, top_level["1"].id, "WorkPackage", "3000")
    with pytest.raises(BudgetContainmentViolation, match="Procurement & Construction, Testing & Commissioning"):
        finalize_budget(db, project.id)


def test_finalize_budget_rolls_up(db, project, top_level, add_item):
    nested = add_item(project.id, top_level["2"].id, "Summary", "60000")
    add_item(project.id, top_level["1"].id, "WorkPackage", "3000")
    add_item(project.id, nested.id, "WorkPackage", "40000")
    add_item(project.id, nested.id, "WorkPackage", "10000")
    add_item(project.id, top_level["3"].id, "WorkPackage", "4000")

    before = budget_summary(db, project.id)
    assert before.allocated == Decimal("100000")
    assert not before.finalized

    finalize_budget(db, project.id)
    budgets = {it.code: it.budgeted_cost for it in list_wbs_items(db, project.id)}
    assert budgets["2.1"] == Decimal("50000")
    assert budgets["2"] == Decimal("50000")
    assert budgets["1"] == Decimal("3000")

    after = budget_summary(db, project.id)
    assert after.allocated == after.work_package_total == Decimal("57000")
    assert after.finalized


def test_import_creates_updates_and_reports_rows(db, project):
    rows = [
        WbsImportRow(code="1.1", name="Design", type="WorkPackage", amount=Decimal("2000")),
        WbsImportRow(code="1.1.1", name="Drawings", type="Activity"),
        WbsImportRow(code="9.1", name="Orphan", type="WorkPackage", amount=Decimal("10")),
        WbsImportRow(code="1.2", name="Bad", type="Activity", amount=Decimal("5")),
        WbsImportRow(code="1", name="Engineering", type="Summary", amount=Decimal("5000")),
        WbsImportRow(code="1.3", name="Too big", type="WorkPackage", amount=Decimal("4000")),
    ]
    result = import_wbs_rows(db, project.id, rows)

    assert (result.created, result.updated) == (2, 1)
    assert [e.row_num for e in result.errors] == [3, 4, 6]
    assert "not found" in result.errors[0].message
    by_code = {it.code: it for it in list_wbs_items(db, project.id)}
    assert by_code["1"].name == "Engineering"
    assert by_code["1.1.1"].parent_id == by_code["1.1"].id
    assert "1.3" not in by_code
