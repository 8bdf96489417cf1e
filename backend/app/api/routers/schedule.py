from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.schemas.schedule import FinalizeScheduleOut, ScheduleOut
from app.services.schedule.critical_path import schedule_view
from app.services.schedule.propagator import finalize_schedule

router = APIRouter()


@router.post("/{project_id}/schedule/finalize", response_model=FinalizeScheduleOut)
def post_finalize_schedule(project_id: int, db: Session = Depends(get_db)):
    return finalize_schedule(db, project_id)


@router.get("/{project_id}/schedule", response_model=ScheduleOut)
def get_schedule(project_id: int, db: Session = Depends(get_db)):
    return schedule_view(db, project_id)
