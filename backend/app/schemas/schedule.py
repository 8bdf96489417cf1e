import datetime as dt
from pydantic import BaseModel

from app.schemas.dependencies import DependencyOut


class ScheduleUpdateError(BaseModel):
    wbs_item_id: int
    message: str


class FinalizeScheduleOut(BaseModel):
    updated_count: int
    error_count: int
    errors: list[ScheduleUpdateError]


class ScheduleActivityOut(BaseModel):
    id: int
    code: str
    name: str
    start_date: dt.date
    end_date: dt.date
    duration: int
    critical: bool = False


class ScheduleOut(BaseModel):
    activities: list[ScheduleActivityOut]
    dependencies: list[DependencyOut]
    critical_path: list[int]
