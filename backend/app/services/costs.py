from sqlalchemy.orm import Session

from app.core.logging import logger
from app.crud.costs import create_cost_entries, delete_cost_entry, get_cost_entry
from app.crud.projects import get_project
from app.crud.wbs import get_wbs_item, list_wbs_items
from app.db.models.cost_entry import CostEntry
from app.db.models.wbs import WbsType
from app.schemas.costs import CostEntryCreate, CostImportIn
from app.services.wbs.errors import NotFound, TypeHierarchyViolation

COST_BEARING_TYPES = {WbsType.summary.value, WbsType.work_package.value}


def add_cost_entry(db: Session, data: CostEntryCreate) -> CostEntry:
    item = get_wbs_item(db, data.wbs_item_id)
    if not item:
        raise NotFound("WBS item not found")
    if item.type not in COST_BEARING_TYPES:
        raise TypeHierarchyViolation("Cost entries can only be added to 'WorkPackage' or 'Summary' items")
    (entry,) = create_cost_entries(db, [data.model_dump()])
    logger.info("cost_entry_created", wbs_item_id=item.id, cost_entry_id=entry.id, amount=str(entry.amount))
    return entry


def import_cost_rows(db: Session, data: CostImportIn) -> tuple[list[CostEntry], list[str]]:
    """All-or-nothing: returns ``([], errors)`` if any row is invalid."""
    if not get_project(db, data.project_id):
        raise NotFound("Project not found")
    by_code = {it.code: it for it in list_wbs_items(db, data.project_id)}

    rows: list[dict] = []
    errors: list[str] = []
    for n, row in enumerate(data.rows, start=1):
        item = by_code.get(row.wbs_code)
        if item is None:
            errors.append(f"Row {n}: WBS code '{row.wbs_code}' not found")
            continue
        if item.type not in COST_BEARING_TYPES:
            errors.append(
                f"Row {n}: WBS code '{row.wbs_code}' is of type '{item.type}'. "
                "Cost entries can only be added to 'Summary' or 'WorkPackage' types."
            )
            continue
        rows.append(
            {
                "wbs_item_id": item.id,
                "amount": row.amount,
                "description": row.description or "",
                "entry_date": row.entry_date,
            }
        )

    if errors:
        logger.warning("cost_import_rejected", project_id=data.project_id, errors=len(errors))
        return [], errors
    if not rows:
        return [], ["No valid cost entries found in the data"]
    entries = create_cost_entries(db, rows)
    logger.info("cost_import_finished", project_id=data.project_id, created=len(entries))
    return entries, []


def remove_cost_entry(db: Session, cost_entry_id: int) -> None:
    entry = get_cost_entry(db, cost_entry_id)
    if not entry:
        raise NotFound("Cost entry not found")
    delete_cost_entry(db, entry)
