# import all models for Alembic
from app.db.models.project import Project
from app.db.models.wbs import WbsItem
from app.db.models.dependency import Dependency
from app.db.models.cost_entry import CostEntry
