from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_project_or_404
from app.crud.projects import list_projects
from app.db.models.project import Project
from app.schemas.project import ProjectCreate, ProjectOut, ProjectUpdate
from app.services.projects import change_project, create_project_with_wbs, remove_project

router = APIRouter()

@router.get("", response_model=list[ProjectOut])
def get_projects(db: Session = Depends(get_db)):
    return list_projects(db)

@router.post("", response_model=ProjectOut, status_code=201)
def post_project(data: ProjectCreate, db: Session = Depends(get_db)):
    return create_project_with_wbs(db, data)


@router.get("/{project_id}", response_model=ProjectOut)
def get_project_endpoint(p: Project = Depends(get_project_or_404)):
    return p


@router.patch("/{project_id}", response_model=ProjectOut)
def patch_project(project_id: int, data: ProjectUpdate, db: Session = Depends(get_db)):
    return change_project(db, project_id, data)


@router.delete("/{project_id}")
def delete_project_endpoint(project_id: int, db: Session = Depends(get_db)):
    remove_project(db, project_id)
    return {"status": "ok"}
