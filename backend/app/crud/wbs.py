from sqlalchemy.orm import Session
from sqlalchemy import or_

from app.db.models.wbs import WbsItem
from app.db.models.dependency import Dependency
from app.db.models.cost_entry import CostEntry


def get_wbs_item(db: Session, wbs_item_id: int, lock: bool = False) -> WbsItem | None:
    qry = db.query(WbsItem).filter(WbsItem.id == wbs_item_id)
    if lock:
        qry = qry.with_for_update()
    return qry.one_or_none()


def list_wbs_items(db: Session, project_id: int) -> list[WbsItem]:
    return (
        db.query(WbsItem)
        .filter(WbsItem.project_id == project_id)
        .order_by(WbsItem.id)
        .all()
    )


def list_children(db: Session, project_id: int, parent_id: int | None, lock: bool = False) -> list[WbsItem]:
    qry = db.query(WbsItem).filter(WbsItem.project_id == project_id)
    if parent_id is None:
        qry = qry.filter(WbsItem.parent_id.is_(None))
    else:
        qry = qry.filter(WbsItem.parent_id == parent_id)
    if lock:
        qry = qry.with_for_update()
    return qry.order_by(WbsItem.id).all()


def get_wbs_item_by_code(db: Session, project_id: int, code: str) -> WbsItem | None:
    return (
        db.query(WbsItem)
        .filter(WbsItem.project_id == project_id, WbsItem.code == code)
        .one_or_none()
    )


def create_wbs_item(db: Session, data: dict, commit: bool = True) -> WbsItem:
    item = WbsItem(**data)
    db.add(item)
    if commit:
        db.commit()
        db.refresh(item)
    else:
        db.flush()
    return item


def update_wbs_item(db: Session, item: WbsItem, data: dict, commit: bool = True) -> WbsItem:
    for field, value in data.items():
        setattr(item, field, value)
    if commit:
        db.commit()
        db.refresh(item)
    else:
        db.flush()
    return item


def delete_wbs_items(db: Session, ids: list[int]) -> int:
    """Remove the given items along with their cost entries and dependencies."""
    if not ids:
        return 0
    db.query(CostEntry).filter(CostEntry.wbs_item_id.in_(ids)).delete(synchronize_session=False)
    db.query(Dependency).filter(
        or_(Dependency.predecessor_id.in_(ids), Dependency.successor_id.in_(ids))
    ).delete(synchronize_session=False)
    # deepest first so parent_id never points at a removed row
    for wbs_item_id in reversed(ids):
        db.query(WbsItem).filter(WbsItem.id == wbs_item_id).delete(synchronize_session=False)
    db.commit()
    return len(ids)
