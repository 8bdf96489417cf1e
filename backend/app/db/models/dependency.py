from enum import Enum
from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.db.models._mixins import TimestampMixin


class DependencyType(str, Enum):
    fs = "FS"  # finish -> start
    ss = "SS"  # start -> start
    ff = "FF"  # finish -> finish
    sf = "SF"  # start -> finish


class Dependency(Base, TimestampMixin):
    __tablename__ = "dependency"
    __table_args__ = (
        UniqueConstraint(
            "predecessor_id",
            "successor_id",
            name="uq_dependency_pair",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    predecessor_id: Mapped[int] = mapped_column(ForeignKey("wbs_item.id", ondelete="CASCADE"), index=True)
    successor_id: Mapped[int] = mapped_column(ForeignKey("wbs_item.id", ondelete="CASCADE"), index=True)
    type: Mapped[str] = mapped_column(String(2), default=DependencyType.fs.value)
    lag: Mapped[int] = mapped_column(Integer, default=0)  # days
