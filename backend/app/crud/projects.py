from sqlalchemy import select
from sqlalchemy.orm import Session
from app.db.models.project import Project
from app.db.models.wbs import WbsItem
from app.db.models.dependency import Dependency
from app.db.models.cost_entry import CostEntry

def list_projects(db: Session):
    return db.query(Project).order_by(Project.id).all()

def get_project(db: Session, project_id: int) -> Project | None:
    return db.query(Project).filter(Project.id == project_id).one_or_none()

def create_project(db: Session, data: dict, commit: bool = True) -> Project:
    p = Project(**data)
    db.add(p)
    if commit:
        db.commit()
        db.refresh(p)
    else:
        db.flush()
    return p


def update_project(db: Session, p: Project, data: dict) -> Project:
    for field, value in data.items():
        setattr(p, field, value)
    db.commit()
    db.refresh(p)
    return p


def delete_project(db: Session, p: Project) -> None:
    item_ids = select(WbsItem.id).where(WbsItem.project_id == p.id)
    db.query(CostEntry).filter(CostEntry.wbs_item_id.in_(item_ids)).delete(synchronize_session=False)
    db.query(Dependency).filter(Dependency.predecessor_id.in_(item_ids)).delete(synchronize_session=False)
    db.query(Dependency).filter(Dependency.successor_id.in_(item_ids)).delete(synchronize_session=False)
    # detach the tree so the bulk delete has no self-references
    db.query(WbsItem).filter(WbsItem.project_id == p.id, WbsItem.parent_id.is_not(None)).update(
        {WbsItem.parent_id: None}, synchronize_session=False
    )
    db.query(WbsItem).filter(WbsItem.project_id == p.id).delete(synchronize_session=False)
    db.delete(p)
    db.commit()
