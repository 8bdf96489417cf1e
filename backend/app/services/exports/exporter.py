import datetime as dt
from pathlib import Path
import pandas as pd
from sqlalchemy.orm import Session

from app.core.config import settings
from app.crud.projects import get_project
from app.crud.wbs import list_wbs_items
from app.services.schedule.critical_path import schedule_view
from app.services.wbs.errors import NotFound

WBS_COLUMNS = [
    "code", "name", "type", "level", "budgeted_cost", "actual_cost",
    "percent_complete", "start_date", "end_date", "duration",
]

def wbs_frame(items) -> pd.DataFrame:
    rows = [{c: getattr(it, c) for c in WBS_COLUMNS} for it in items]
    df = pd.DataFrame(rows, columns=WBS_COLUMNS)
    for c in ("budgeted_cost", "actual_cost", "percent_complete"):
        df[c] = df[c].astype(float)
    return df

def export_wbs_xlsx(db: Session, project_id: int, out_path: Path):
    # sheets: wbs (all items in code order), schedule (activities with critical flag)
    if not get_project(db, project_id):
        raise NotFound("Project not found")
    items = sorted(list_wbs_items(db, project_id), key=lambda it: _code_key(it.code))
    df_wbs = wbs_frame(items)
    view = schedule_view(db, project_id)
    df_schedule = pd.DataFrame(
        [a.model_dump() for a in view.activities],
        columns=["id", "code", "name", "start_date", "end_date", "duration", "critical"],
    )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(out_path, engine="xlsxwriter") as w:
        df_wbs.to_excel(w, index=False, sheet_name="wbs")
        df_schedule.to_excel(w, index=False, sheet_name="schedule")
    return out_path

def _code_key(code: str):
    return tuple(int(p) if p.isdigit() else 0 for p in str(code).split("."))

def default_export_path(prefix: str, ext: str) -> Path:
    ts = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%d_%H%M%S")
    return Path(settings.EXPORT_DIR) / f"{prefix}_{ts}.{ext}"
