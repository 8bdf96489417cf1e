import datetime as dt
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Text, ForeignKey, Date, Integer, Numeric, Boolean, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.db.models._mixins import TimestampMixin

class WbsType(str, Enum):
    summary = "Summary"
    work_package = "WorkPackage"
    activity = "Activity"

class WbsItem(Base, TimestampMixin):
    __tablename__ = "wbs_item"
    __table_args__ = (UniqueConstraint("project_id", "code", name="uq_wbs_item_project_code"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("project.id", ondelete="CASCADE"), index=True)
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("wbs_item.id", ondelete="CASCADE"), nullable=True, index=True
    )

    name: Mapped[str] = mapped_column(String(512))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    level: Mapped[int] = mapped_column(Integer, default=1)
    code: Mapped[str] = mapped_column(String(128), index=True)  # "1", "1.2", "1.2.1"
    type: Mapped[str] = mapped_column(String(32), default=WbsType.summary.value)
    is_top_level: Mapped[bool] = mapped_column(Boolean, default=False)

    budgeted_cost: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    actual_cost: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    percent_complete: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"))

    # Activity only
    start_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)  # inclusive days

    actual_start_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    actual_end_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)

    project = relationship("Project", back_populates="wbs_items")
