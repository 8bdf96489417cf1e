import datetime as dt
from decimal import Decimal
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field, model_validator

Currency = Literal["USD", "EUR", "SAR"]

class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    start_date: dt.date
    end_date: dt.date
    budget: Decimal = Field(..., gt=0, decimal_places=2)
    currency: Currency | None = None

    @model_validator(mode="after")
    def _dates_in_order(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class ProjectUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    budget: Decimal | None = Field(default=None, gt=0, decimal_places=2)
    currency: Currency | None = None

class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    start_date: dt.date
    end_date: dt.date
    budget: Decimal
    currency: str
