from sqlalchemy.orm import Session
from sqlalchemy import or_

from app.db.models.dependency import Dependency
from app.db.models.wbs import WbsItem


def list_dependencies(db: Session, project_id: int) -> list[Dependency]:
    """Dependencies whose predecessor belongs to the project."""
    return (
        db.query(Dependency)
        .join(WbsItem, Dependency.predecessor_id == WbsItem.id)
        .filter(WbsItem.project_id == project_id)
        .order_by(Dependency.id)
        .all()
    )


def list_item_dependencies(db: Session, wbs_item_id: int) -> list[Dependency]:
    return (
        db.query(Dependency)
        .filter(or_(Dependency.predecessor_id == wbs_item_id, Dependency.successor_id == wbs_item_id))
        .order_by(Dependency.id)
        .all()
    )


def get_dependency(db: Session, dependency_id: int) -> Dependency | None:
    return db.query(Dependency).filter(Dependency.id == dependency_id).one_or_none()


def find_dependency(db: Session, predecessor_id: int, successor_id: int) -> Dependency | None:
    return (
        db.query(Dependency)
        .filter(Dependency.predecessor_id == predecessor_id, Dependency.successor_id == successor_id)
        .one_or_none()
    )


def create_dependency(db: Session, predecessor_id: int, successor_id: int, type: str, lag: int) -> Dependency:
    dep = Dependency(
        predecessor_id=predecessor_id,
        successor_id=successor_id,
        type=type,
        lag=lag,
    )
    db.add(dep)
    db.commit()
    db.refresh(dep)
    return dep


def delete_dependency(db: Session, dep: Dependency) -> None:
    db.delete(dep)
    db.commit()
