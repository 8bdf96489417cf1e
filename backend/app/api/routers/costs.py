from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.crud.costs import list_cost_entries
from app.crud.wbs import get_wbs_item
from app.schemas.costs import CostEntryCreate, CostEntryOut, CostImportIn
from app.services.costs import add_cost_entry, import_cost_rows, remove_cost_entry
from app.services.wbs.errors import NotFound

router = APIRouter()


@router.get("/wbs/{wbs_item_id}/costs", response_model=list[CostEntryOut])
def get_cost_entries(wbs_item_id: int, db: Session = Depends(get_db)):
    if not get_wbs_item(db, wbs_item_id):
        raise NotFound("WBS item not found")
    return list_cost_entries(db, wbs_item_id)


@router.post("/costs", response_model=CostEntryOut, status_code=201)
def post_cost_entry(data: CostEntryCreate, db: Session = Depends(get_db)):
    return add_cost_entry(db, data)


@router.post("/costs/import", response_model=list[CostEntryOut], status_code=201)
def post_cost_import(data: CostImportIn, db: Session = Depends(get_db)):
    entries, errors = import_cost_rows(db, data)
    if errors:
        raise HTTPException(status_code=400, detail={"message": "Cost import rejected", "errors": errors})
    return entries


@router.delete("/costs/{cost_entry_id}")
def delete_cost_entry_endpoint(cost_entry_id: int, db: Session = Depends(get_db)):
    remove_cost_entry(db, cost_entry_id)
    return {"status": "ok"}
