import datetime as dt
from decimal import Decimal
from sqlalchemy import ForeignKey, Date, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import Base
from app.db.models._mixins import TimestampMixin

class CostEntry(Base, TimestampMixin):
    __tablename__ = "cost_entry"

    id: Mapped[int] = mapped_column(primary_key=True)
    wbs_item_id: Mapped[int] = mapped_column(ForeignKey("wbs_item.id", ondelete="CASCADE"), index=True)
    amount: Mapped[Decimal]
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    entry_date: Mapped[dt.date] = mapped_column(Date)

    wbs_item = relationship("WbsItem")
