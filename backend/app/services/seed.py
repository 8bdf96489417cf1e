import datetime as dt
from sqlalchemy.orm import Session
from app.db.session import SessionLocal
from app.core.config import settings
from app.core.logging import logger
from app.crud.projects import list_projects
from app.schemas.project import ProjectCreate
from app.services.projects import create_project_with_wbs

def seed_demo():
    db: Session = SessionLocal()
    try:
        # Create default project if none
        if not list_projects(db):
            today = dt.date.today()
            p = create_project_with_wbs(db, ProjectCreate(
                name="Demo Project",
                description="Seeded demo project",
                start_date=today,
                end_date=today + dt.timedelta(days=365),
                budget=settings.DEMO_PROJECT_BUDGET,
                currency=settings.DEFAULT_CURRENCY,
            ))
            logger.info("demo_seeded", project_id=p.id)
    finally:
        db.close()
