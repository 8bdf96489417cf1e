"""Validated mutations of the WBS tree.

Every mutation reads the rows it validates against (parent, siblings, children)
with a row lock, checks the rules of ``app.services.wbs.validator`` in order and
writes in the same transaction. A violated rule rolls the transaction back, so a
rejected request never leaves partial state behind.
"""
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.logging import logger
from app.crud.projects import get_project
from app.crud.wbs import (
    create_wbs_item,
    delete_wbs_items,
    get_wbs_item,
    list_children,
    list_wbs_items,
    update_wbs_item,
)
from app.db.models.wbs import WbsItem
from app.schemas.wbs import BudgetSummaryOut, WbsItemCreate, WbsItemUpdate, WbsProgressUpdate
from app.services.schedule.propagator import duration_days
from app.services.wbs import validator as rules
from app.services.wbs.errors import (
    BudgetContainmentViolation,
    NotFound,
    ProtectedItem,
    ScheduleFieldViolation,
    WbsError,
)
from app.services.wbs.validator import ACTIVITY, SUMMARY, WORK_PACKAGE, WbsIndex

FINALIZED_TOLERANCE = Decimal("0.01")


def _rejected(db: Session, op: str, e: WbsError, commit: bool, **ctx) -> None:
    if commit:
        db.rollback()
    logger.warning("wbs_rule_violation", op=op, rule=type(e).__name__, message=e.message, **ctx)


def _duration(start, end) -> int | None:
    if start is None or end is None:
        return None
    return duration_days(start, end)


def _check_work_package_depth(db: Session, parent: WbsItem, wbs_type: str) -> None:
    if wbs_type == WORK_PACKAGE and parent.type == SUMMARY and not parent.is_top_level:
        rules.check_single_work_package_level(WbsIndex(list_wbs_items(db, parent.project_id)), parent)


def _placed_values(db: Session, data: WbsItemCreate, code: str | None = None) -> dict:
    project = get_project(db, data.project_id)
    if not project:
        raise NotFound("Project not found")

    wbs_type = data.type.value
    parent = None
    if data.parent_id is None:
        rules.check_top_level_type(wbs_type)
        siblings = list_children(db, project.id, None)
    else:
        parent = get_wbs_item(db, data.parent_id, lock=True)
        if parent is None or parent.project_id != project.id:
            raise NotFound("Parent WBS item not found")
        siblings = list_children(db, project.id, parent.id, lock=True)
        if wbs_type != ACTIVITY:
            rules.check_budget_within_parent(parent, data.budgeted_cost, siblings)
        rules.check_parent_child_types(parent.type, wbs_type)
        _check_work_package_depth(db, parent, wbs_type)
    rules.check_activity_budget(wbs_type, data.budgeted_cost)
    rules.check_schedule_fields(wbs_type, data.start_date, data.end_date)

    return {
        "project_id": project.id,
        "parent_id": parent.id if parent else None,
        "name": data.name.strip(),
        "description": data.description,
        "level": parent.level + 1 if parent else 1,
        "code": code or rules.next_code(parent, siblings),
        "type": wbs_type,
        "is_top_level": parent is None,
        "budgeted_cost": data.budgeted_cost,
        "actual_cost": Decimal("0"),
        "percent_complete": Decimal("0"),
        "start_date": data.start_date,
        "end_date": data.end_date,
        "duration": _duration(data.start_date, data.end_date),
    }


def validate_and_create(
    db: Session, data: WbsItemCreate, commit: bool = True, code: str | None = None
) -> WbsItem:
    """Validate a new item against its parent and siblings and insert it.

    ``code`` overrides the generated dotted code (used by bulk import).
    """
    try:
        values = _placed_values(db, data, code)
    except WbsError as e:
        _rejected(db, "create", e, commit, project_id=data.project_id, parent_id=data.parent_id)
        raise
    item = create_wbs_item(db, values, commit=commit)
    logger.info(
        "wbs_item_created",
        project_id=item.project_id,
        wbs_item_id=item.id,
        code=item.code,
        type=item.type,
    )
    return item


def _patch_values(db: Session, item: WbsItem, data: WbsItemUpdate) -> dict:
    patch = data.model_dump(exclude_unset=True)
    for field in ("name", "type", "budgeted_cost"):
        if patch.get(field, ...) is None:
            patch.pop(field)

    new_type = patch["type"].value if "type" in patch else item.type
    new_budget = patch.get("budgeted_cost", item.budgeted_cost)
    type_changed = new_type != item.type
    budget_changed = Decimal(new_budget) != Decimal(item.budgeted_cost)

    if type_changed and new_type != ACTIVITY:
        # leaving Activity drops the schedule unless the patch sets dates itself
        start, end = patch.get("start_date"), patch.get("end_date")
    else:
        start = patch.get("start_date", item.start_date)
        end = patch.get("end_date", item.end_date)

    parent = None
    if item.parent_id is not None:
        parent = get_wbs_item(db, item.parent_id, lock=True)
        if parent is None:
            raise NotFound("Parent WBS item not found")
    if item.is_top_level or item.parent_id is None:
        rules.check_top_level_type(new_type)
    children = list_children(db, item.project_id, item.id)

    if parent is not None and new_type != ACTIVITY and (budget_changed or type_changed):
        siblings = [s for s in list_children(db, item.project_id, parent.id, lock=True) if s.id != item.id]
        rules.check_budget_within_parent(parent, new_budget, siblings)
    if budget_changed and new_type != ACTIVITY:
        rules.check_children_budget(new_budget, children)

    if type_changed:
        if parent is not None:
            rules.check_parent_child_types(parent.type, new_type)
            _check_work_package_depth(db, parent, new_type)
        rules.check_children_compatible(new_type, children)
    rules.check_activity_budget(new_type, new_budget)
    rules.check_schedule_fields(new_type, start, end)

    values = dict(patch)
    if "name" in values:
        values["name"] = values["name"].strip()
    values["type"] = new_type
    values["budgeted_cost"] = new_budget
    values["start_date"] = start
    values["end_date"] = end
    values["duration"] = _duration(start, end)
    return values


def validate_and_update(db: Session, wbs_item_id: int, data: WbsItemUpdate, commit: bool = True) -> WbsItem:
    item = get_wbs_item(db, wbs_item_id, lock=True)
    try:
        if not item:
            raise NotFound("WBS item not found")
        values = _patch_values(db, item, data)
    except WbsError as e:
        _rejected(db, "update", e, commit, wbs_item_id=wbs_item_id)
        raise
    item = update_wbs_item(db, item, values, commit=commit)
    logger.info("wbs_item_updated", wbs_item_id=item.id, fields=sorted(data.model_fields_set))
    return item


def update_progress(db: Session, wbs_item_id: int, data: WbsProgressUpdate) -> WbsItem:
    item = get_wbs_item(db, wbs_item_id)
    if not item:
        raise NotFound("WBS item not found")
    patch = data.model_dump(exclude_unset=True)
    if patch.get("percent_complete", ...) is None:
        patch.pop("percent_complete", None)
    start = patch.get("actual_start_date", item.actual_start_date)
    end = patch.get("actual_end_date", item.actual_end_date)
    if start and end and start > end:
        raise ScheduleFieldViolation("Actual start date cannot be after actual end date")
    return update_wbs_item(db, item, patch)


def delete_wbs_item(db: Session, wbs_item_id: int) -> int:
    """Delete an item and its whole subtree; returns the number of removed items."""
    item = get_wbs_item(db, wbs_item_id)
    if not item:
        raise NotFound("WBS item not found")
    if item.is_top_level:
        raise ProtectedItem("Cannot delete top-level WBS items")

    index = WbsIndex(list_wbs_items(db, item.project_id))
    ids = [item.id] + [c.id for c in index.subtree(item)]
    removed = delete_wbs_items(db, ids)
    logger.info("wbs_item_deleted", wbs_item_id=wbs_item_id, removed=removed)
    return removed


def finalize_budget(db: Session, project_id: int) -> list[WbsItem]:
    """Roll WorkPackage budgets up into their Summary ancestors."""
    if not get_project(db, project_id):
        raise NotFound("Project not found")
    items = list_wbs_items(db, project_id)
    index = WbsIndex(items)
    summaries = [it for it in items if it.type == SUMMARY]

    missing = [
        s for s in summaries
        if not any(d.type == WORK_PACKAGE for d in index.subtree(s))
    ]
    if missing:
        names = ", ".join(s.name for s in missing)
        raise BudgetContainmentViolation(
            f'The summary WBS "{names}" do not have any child work package WBS. '
            "Include work package WBS or delete the summary WBS."
        )

    rolled: dict[int, Decimal] = {}
    deepest_first = sorted(summaries, key=lambda s: len(list(index.ancestors(s))), reverse=True)
    for s in deepest_first:
        rolled[s.id] = sum(
            (
                rolled.get(c.id, Decimal(c.budgeted_cost))
                for c in index.children_of(s.id)
                if c.type != ACTIVITY
            ),
            Decimal("0"),
        )

    changed = 0
    for s in summaries:
        if Decimal(s.budgeted_cost) != rolled[s.id]:
            s.budgeted_cost = rolled[s.id]
            changed += 1
    db.commit()
    logger.info("wbs_budget_finalized", project_id=project_id, summaries=len(summaries), changed=changed)
    return summaries


def budget_summary(db: Session, project_id: int) -> BudgetSummaryOut:
    project = get_project(db, project_id)
    if not project:
        raise NotFound("Project not found")
    items = list_wbs_items(db, project_id)
    allocated = rules.budget_sum(it for it in items if it.is_top_level and it.type == SUMMARY)
    wp_total = rules.budget_sum(it for it in items if it.type == WORK_PACKAGE)
    return BudgetSummaryOut(
        project_id=project_id,
        project_budget=project.budget,
        allocated=allocated,
        work_package_total=wp_total,
        finalized=wp_total > 0 and abs(wp_total - allocated) < FINALIZED_TOLERANCE,
    )
