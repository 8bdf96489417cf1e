import datetime as dt
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field

from app.db.models.wbs import WbsType


class WbsItemBase(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    type: WbsType | None = None
    budgeted_cost: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    start_date: dt.date | None = None
    end_date: dt.date | None = None


class WbsItemCreate(WbsItemBase):
    project_id: int
    parent_id: int | None = None
    name: str = Field(..., min_length=1)
    type: WbsType
    budgeted_cost: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)


class WbsItemUpdate(WbsItemBase):
    pass


class WbsProgressUpdate(BaseModel):
    percent_complete: Decimal | None = Field(default=None, ge=0, le=100)
    actual_start_date: dt.date | None = None
    actual_end_date: dt.date | None = None


class WbsItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    parent_id: int | None = None
    name: str
    description: str | None = None
    level: int
    code: str
    type: str
    is_top_level: bool
    budgeted_cost: Decimal
    actual_cost: Decimal
    percent_complete: Decimal
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    duration: int | None = None
    actual_start_date: dt.date | None = None
    actual_end_date: dt.date | None = None


class BudgetSummaryOut(BaseModel):
    project_id: int
    project_budget: Decimal
    allocated: Decimal
    work_package_total: Decimal
    finalized: bool


class WbsImportRow(BaseModel):
    code: str | None = None
    name: str | None = None
    type: str | None = None
    amount: Decimal | None = Field(default=None, decimal_places=2)
    description: str | None = None


class WbsImportIn(BaseModel):
    rows: list[WbsImportRow]


class ImportRowErrorOut(BaseModel):
    row_num: int
    code: str | None = None
    message: str


class WbsImportOut(BaseModel):
    created: int
    updated: int
    errors: list[ImportRowErrorOut]
