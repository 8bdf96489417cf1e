from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.crud.projects import get_project
from app.db.models.project import Project

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_project_or_404(project_id: int, db: Session = Depends(get_db)) -> Project:
    p = get_project(db, project_id)
    if not p:
        raise HTTPException(status_code=404, detail="Project not found")
    return p
