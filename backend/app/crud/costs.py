from decimal import Decimal
from sqlalchemy.orm import Session
from app.db.models.cost_entry import CostEntry
from app.db.models.wbs import WbsItem

def list_cost_entries(db: Session, wbs_item_id: int):
    return (
        db.query(CostEntry)
        .filter(CostEntry.wbs_item_id == wbs_item_id)
        .order_by(CostEntry.entry_date, CostEntry.id)
        .all()
    )

def get_cost_entry(db: Session, cost_entry_id: int) -> CostEntry | None:
    return db.query(CostEntry).filter(CostEntry.id == cost_entry_id).one_or_none()

def _add_actual_cost(db: Session, wbs_item_id: int, amount: Decimal) -> None:
    item = db.query(WbsItem).filter(WbsItem.id == wbs_item_id).with_for_update().one()
    item.actual_cost = Decimal(item.actual_cost or 0) + Decimal(amount)

def create_cost_entries(db: Session, rows: list[dict]) -> list[CostEntry]:
    """Insert entries and add their amounts to the items' actual cost in one commit."""
    entries = [CostEntry(**r) for r in rows]
    db.add_all(entries)
    for e in entries:
        _add_actual_cost(db, e.wbs_item_id, e.amount)
    db.commit()
    for e in entries:
        db.refresh(e)
    return entries

def delete_cost_entry(db: Session, entry: CostEntry) -> None:
    _add_actual_cost(db, entry.wbs_item_id, -Decimal(entry.amount))
    db.delete(entry)
    db.commit()
