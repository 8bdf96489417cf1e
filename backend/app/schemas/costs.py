import datetime as dt
from decimal import Decimal
from pydantic import BaseModel, ConfigDict

class CostEntryCreate(BaseModel):
    wbs_item_id: int
    amount: Decimal
    entry_date: dt.date
    description: str = ""

class CostImportRow(BaseModel):
    wbs_code: str
    amount: Decimal
    entry_date: dt.date
    description: str | None = None

class CostImportIn(BaseModel):
    project_id: int
    rows: list[CostImportRow]

class CostEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    wbs_item_id: int
    amount: Decimal
    description: str | None = None
    entry_date: dt.date
