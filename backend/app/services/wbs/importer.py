"""Bulk create-or-update of WBS items from already parsed rows.

Rows are matched to existing items by ``code``; the parent is the item whose code is
the row's code minus its last segment (``"1.2.3"`` -> ``"1.2"``). Each row is
validated and written inside its own savepoint, so one bad row never blocks the
others. Rows are processed in order: a parent has to come before its children.
"""
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.logging import logger
from app.crud.projects import get_project
from app.crud.wbs import get_wbs_item_by_code
from app.db.models.wbs import WbsType
from app.schemas.wbs import WbsImportRow, WbsItemCreate, WbsItemUpdate
from app.services.wbs.errors import NotFound, WbsError
from app.services.wbs.service import validate_and_create, validate_and_update

VALID_TYPES = {t.value for t in WbsType}


@dataclass
class ImportRowError:
    message: str
    row_num: int
    code: str | None = None


@dataclass
class ImportResult:
    created: int = 0
    updated: int = 0
    errors: list[ImportRowError] | None = None


def _row_problem(row: WbsImportRow) -> str | None:
    if not row.code or not row.name or not row.type:
        return "Missing required fields (code, name, type)"
    if row.type not in VALID_TYPES:
        return f"Invalid WBS type '{row.type}' - must be Summary, WorkPackage, or Activity"
    amount = row.amount or Decimal("0")
    if row.type == WbsType.activity.value:
        if amount != 0:
            return "Activity type cannot have a budget amount (must be 0 or empty)"
    elif amount <= 0:
        return f"{row.type} type must have a positive budget amount"
    return None


def _apply_row(db: Session, project_id: int, row: WbsImportRow) -> bool:
    """Create or update one row; returns True if a new item was created."""
    code = row.code.strip()
    amount = row.amount or Decimal("0")
    existing = get_wbs_item_by_code(db, project_id, code)
    if existing:
        validate_and_update(
            db,
            existing.id,
            WbsItemUpdate(name=row.name, description=row.description, type=row.type, budgeted_cost=amount),
            commit=False,
        )
        return False

    parent_id = None
    if "." in code:
        parent_code = code.rsplit(".", 1)[0]
        parent = get_wbs_item_by_code(db, project_id, parent_code)
        if not parent:
            raise NotFound(f"Parent WBS item with code '{parent_code}' not found")
        parent_id = parent.id

    validate_and_create(
        db,
        WbsItemCreate(
            project_id=project_id,
            parent_id=parent_id,
            name=row.name,
            description=row.description,
            type=row.type,
            budgeted_cost=amount,
        ),
        commit=False,
        code=code,
    )
    return True


def import_wbs_rows(db: Session, project_id: int, rows: list[WbsImportRow]) -> ImportResult:
    if not get_project(db, project_id):
        raise NotFound("Project not found")

    result = ImportResult(errors=[])
    for row_num, row in enumerate(rows, start=1):
        problem = _row_problem(row)
        if problem:
            result.errors.append(ImportRowError(problem, row_num=row_num, code=row.code))
            continue
        try:
            with db.begin_nested():
                created = _apply_row(db, project_id, row)
        except WbsError as e:
            result.errors.append(ImportRowError(e.message, row_num=row_num, code=row.code))
            continue
        except SQLAlchemyError as e:
            logger.warning("wbs_import_row_failed", project_id=project_id, row_num=row_num, error=str(e))
            result.errors.append(
                ImportRowError(f"Failed to process WBS item - {e}", row_num=row_num, code=row.code)
            )
            continue
        if created:
            result.created += 1
        else:
            result.updated += 1
    db.commit()

    logger.info(
        "wbs_import_finished",
        project_id=project_id,
        rows=len(rows),
        created=result.created,
        updated=result.updated,
        errors=len(result.errors),
    )
    return result
