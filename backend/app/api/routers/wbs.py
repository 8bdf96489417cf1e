from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_project_or_404
from app.crud.wbs import get_wbs_item, list_wbs_items
from app.db.models.project import Project
from app.schemas.wbs import (
    BudgetSummaryOut,
    ImportRowErrorOut,
    WbsImportIn,
    WbsImportOut,
    WbsItemCreate,
    WbsItemOut,
    WbsItemUpdate,
    WbsProgressUpdate,
)
from app.services.wbs.errors import NotFound
from app.services.wbs.importer import import_wbs_rows
from app.services.wbs.service import (
    budget_summary,
    delete_wbs_item,
    finalize_budget,
    update_progress,
    validate_and_create,
    validate_and_update,
)

router = APIRouter()


@router.get("/projects/{project_id}/wbs", response_model=list[WbsItemOut])
def get_project_wbs(p: Project = Depends(get_project_or_404), db: Session = Depends(get_db)):
    return list_wbs_items(db, p.id)


@router.get("/projects/{project_id}/wbs/budget-summary", response_model=BudgetSummaryOut)
def get_budget_summary(project_id: int, db: Session = Depends(get_db)):
    return budget_summary(db, project_id)


@router.post("/projects/{project_id}/wbs/finalize-budget", response_model=list[WbsItemOut])
def post_finalize_budget(project_id: int, db: Session = Depends(get_db)):
    return finalize_budget(db, project_id)


@router.post("/projects/{project_id}/wbs/import", response_model=WbsImportOut)
def post_wbs_import(project_id: int, data: WbsImportIn, db: Session = Depends(get_db)):
    result = import_wbs_rows(db, project_id, data.rows)
    return WbsImportOut(
        created=result.created,
        updated=result.updated,
        errors=[ImportRowErrorOut(row_num=e.row_num, code=e.code, message=e.message) for e in result.errors],
    )


@router.post("/wbs", response_model=WbsItemOut, status_code=201)
def post_wbs_item(data: WbsItemCreate, db: Session = Depends(get_db)):
    return validate_and_create(db, data)


@router.get("/wbs/{wbs_item_id}", response_model=WbsItemOut)
def get_wbs_item_endpoint(wbs_item_id: int, db: Session = Depends(get_db)):
    item = get_wbs_item(db, wbs_item_id)
    if not item:
        raise NotFound("WBS item not found")
    return item


@router.patch("/wbs/{wbs_item_id}", response_model=WbsItemOut)
def patch_wbs_item(wbs_item_id: int, data: WbsItemUpdate, db: Session = Depends(get_db)):
    return validate_and_update(db, wbs_item_id, data)


@router.patch("/wbs/{wbs_item_id}/progress", response_model=WbsItemOut)
def patch_wbs_progress(wbs_item_id: int, data: WbsProgressUpdate, db: Session = Depends(get_db)):
    return update_progress(db, wbs_item_id, data)


@router.delete("/wbs/{wbs_item_id}")
def delete_wbs_item_endpoint(wbs_item_id: int, db: Session = Depends(get_db)):
    removed = delete_wbs_item(db, wbs_item_id)
    return {"status": "ok", "removed": removed}
