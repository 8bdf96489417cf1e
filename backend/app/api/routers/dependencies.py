from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_project_or_404
from app.crud.dependencies import list_dependencies, list_item_dependencies
from app.crud.wbs import get_wbs_item
from app.db.models.project import Project
from app.schemas.dependencies import DependencyCreate, DependencyOut
from app.services.schedule.dependencies import add_dependency, remove_dependency
from app.services.wbs.errors import NotFound

router = APIRouter()


@router.get("/projects/{project_id}/dependencies", response_model=list[DependencyOut])
def get_project_dependencies(p: Project = Depends(get_project_or_404), db: Session = Depends(get_db)):
    return list_dependencies(db, p.id)


@router.get("/wbs/{wbs_item_id}/dependencies", response_model=list[DependencyOut])
def get_item_dependencies(wbs_item_id: int, db: Session = Depends(get_db)):
    if not get_wbs_item(db, wbs_item_id):
        raise NotFound("WBS item not found")
    return list_item_dependencies(db, wbs_item_id)


@router.post("/dependencies", response_model=DependencyOut, status_code=201)
def post_dependency(data: DependencyCreate, db: Session = Depends(get_db)):
    return add_dependency(db, data)


@router.delete("/dependencies/{dependency_id}")
def delete_dependency_endpoint(dependency_id: int, db: Session = Depends(get_db)):
    remove_dependency(db, dependency_id)
    return {"status": "ok"}
