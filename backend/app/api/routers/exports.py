from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.services.exports.exporter import default_export_path, export_wbs_xlsx

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/wbs.xlsx")
def export_wbs(project_id: int = Query(...), db: Session = Depends(get_db)):
    out = default_export_path(f"wbs_{project_id}", "xlsx")
    export_wbs_xlsx(db, project_id, out)
    return FileResponse(str(out), media_type=XLSX_MEDIA_TYPE, filename=out.name)
