from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.logging import logger
from app.crud.projects import create_project, delete_project, get_project, update_project
from app.crud.wbs import create_wbs_item, list_wbs_items, update_wbs_item
from app.db.models.project import Project
from app.db.models.wbs import WbsType
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.services.wbs.errors import NotFound, ProjectBudgetLocked, ScheduleFieldViolation, WbsError

CENTS = Decimal("0.01")
PROCUREMENT_ITEM = "Procurement & Construction"

# name, share of the project budget, description
DEFAULT_TOP_LEVEL = (
    ("Engineering & Design", Decimal("0.05"), "Engineering and design phase"),
    (PROCUREMENT_ITEM, Decimal("0.85"), "Procurement and construction phase"),
    ("Testing & Commissioning", Decimal("0.10"), "Testing and commissioning phase"),
)


def default_budget_split(budget: Decimal) -> list[Decimal]:
    """5/85/10 split in cents; the procurement share takes the rounding remainder."""
    budget = Decimal(budget)
    shares = [(budget * share).quantize(CENTS, rounding=ROUND_HALF_UP) for _, share, _ in DEFAULT_TOP_LEVEL]
    shares[1] = budget - shares[0] - shares[2]
    return shares


def create_project_with_wbs(db: Session, data: ProjectCreate) -> Project:
    p = create_project(
        db,
        {
            "name": data.name.strip(),
            "description": data.description,
            "start_date": data.start_date,
            "end_date": data.end_date,
            "budget": data.budget,
            "currency": data.currency or settings.DEFAULT_CURRENCY,
        },
        commit=False,
    )
    for n, ((name, _, description), amount) in enumerate(
        zip(DEFAULT_TOP_LEVEL, default_budget_split(data.budget)), start=1
    ):
        create_wbs_item(
            db,
            {
                "project_id": p.id,
                "parent_id": None,
                "name": name,
                "description": description,
                "level": 1,
                "code": str(n),
                "type": WbsType.summary.value,
                "is_top_level": True,
                "budgeted_cost": amount,
                "actual_cost": Decimal("0"),
                "percent_complete": Decimal("0"),
            },
            commit=False,
        )
    db.commit()
    db.refresh(p)
    logger.info("project_created", project_id=p.id, budget=str(p.budget), currency=p.currency)
    return p


def _apply_budget_change(db: Session, p: Project, new_budget: Decimal) -> None:
    items = list_wbs_items(db, p.id)
    only_defaults = len(items) == len(DEFAULT_TOP_LEVEL) and all(
        it.is_top_level and it.parent_id is None for it in items
    )
    if not only_defaults:
        raise ProjectBudgetLocked("Cannot change project budget after custom WBS items have been added")

    procurement = next((it for it in items if it.name == PROCUREMENT_ITEM), None)
    if procurement is None:
        return
    adjusted = Decimal(procurement.budgeted_cost) + (Decimal(new_budget) - Decimal(p.budget))
    if adjusted < 0:
        raise ProjectBudgetLocked(
            "Cannot reduce project budget by this amount as it would result in a negative budget "
            "for the Procurement & Construction WBS item"
        )
    update_wbs_item(db, procurement, {"budgeted_cost": adjusted}, commit=False)


def change_project(db: Session, project_id: int, data: ProjectUpdate) -> Project:
    p = get_project(db, project_id)
    if not p:
        raise NotFound("Project not found")
    patch = data.model_dump(exclude_unset=True, exclude_none=True)
    try:
        if patch.get("start_date", p.start_date) > patch.get("end_date", p.end_date):
            raise ScheduleFieldViolation("Project start date cannot be after end date")
        if "budget" in patch and Decimal(patch["budget"]) != Decimal(p.budget):
            _apply_budget_change(db, p, patch["budget"])
    except WbsError as e:
        db.rollback()
        logger.warning("project_update_rejected", project_id=project_id, rule=type(e).__name__, message=e.message)
        raise
    return update_project(db, p, patch)


def remove_project(db: Session, project_id: int) -> None:
    p = get_project(db, project_id)
    if not p:
        raise NotFound("Project not found")
    delete_project(db, p)
    logger.info("project_deleted", project_id=project_id)
