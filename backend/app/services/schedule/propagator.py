"""Dependency-driven schedule propagation ("finalize schedule").

Each dependency sets a floor for one date of its successor:

    FS  successor.start >= predecessor.end   + lag
    SS  successor.start >= predecessor.start + lag
    FF  successor.end   >= predecessor.end   + lag
    SF  successor.end   >= predecessor.start + lag

A violated floor moves the successor forward; start and end always move by the same
number of days so the activity keeps its duration. Activities are visited in
topological order, so every predecessor is final before its successors are looked
at and one pass is enough. A cycle aborts the run before anything is written.
"""
import datetime as dt

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.logging import logger
from app.crud.dependencies import list_dependencies
from app.crud.projects import get_project
from app.crud.wbs import list_wbs_items, update_wbs_item
from app.db.models.dependency import DependencyType
from app.db.models.wbs import WbsType
from app.schemas.schedule import FinalizeScheduleOut, ScheduleUpdateError
from app.services.schedule.graph import CycleDetected, DependencyGraph
from app.services.wbs.errors import NotFound, PersistenceFailure, ScheduleCycleError

DAY = dt.timedelta(days=1)


def duration_days(start: dt.date, end: dt.date) -> int:
    """Inclusive day count: ``ceil((end - start) / 1 day) + 1``."""
    return (end - start).days + 1


def _floor_and_current(dep_type, lag, pred_start, pred_end, succ_start, succ_end):
    lag = dt.timedelta(days=lag or 0)
    dep_type = dep_type.value if isinstance(dep_type, DependencyType) else dep_type
    if dep_type == DependencyType.fs.value:
        return pred_end + lag, succ_start
    if dep_type == DependencyType.ss.value:
        return pred_start + lag, succ_start
    if dep_type == DependencyType.ff.value:
        return pred_end + lag, succ_end
    if dep_type == DependencyType.sf.value:
        return pred_start + lag, succ_end
    raise ValueError(f"unknown dependency type {dep_type!r}")


def constraint_shift(dep_type, lag, pred_start, pred_end, succ_start, succ_end) -> int:
    """Days the successor has to move forward to satisfy one dependency."""
    floor, current = _floor_and_current(dep_type, lag, pred_start, pred_end, succ_start, succ_end)
    return max((floor - current).days, 0)


def constraint_slack(dep_type, lag, pred_start, pred_end, succ_start, succ_end) -> int:
    """Days between the successor's constrained date and its floor (negative if violated)."""
    floor, current = _floor_and_current(dep_type, lag, pred_start, pred_end, succ_start, succ_end)
    return (current - floor).days


def schedulable(items) -> list:
    return [
        it for it in items
        if it.type == WbsType.activity.value and it.start_date is not None and it.end_date is not None
    ]


def ordered_graph(activities, dependencies) -> tuple[DependencyGraph, list[int]]:
    graph = DependencyGraph([a.id for a in activities], dependencies)
    try:
        order = graph.topological_order()
    except CycleDetected as e:
        codes = {a.id: a.code for a in activities}
        names = ", ".join(str(codes.get(n, n)) for n in e.nodes)
        raise ScheduleCycleError(f"Dependency cycle detected between activities: {names}") from e
    return graph, order


def propagate(items, dependencies) -> dict[int, tuple[dt.date, dt.date]]:
    """New ``(start, end)`` for every activity whose dates have to move.

    Items that are not Activities or lack either date are ignored, as are
    dependencies touching them. Raises ``ScheduleCycleError`` on a cycle.
    """
    activities = schedulable(items)
    graph, order = ordered_graph(activities, dependencies)
    dates = {a.id: (a.start_date, a.end_date) for a in activities}

    for n in order:
        start, end = dates[n]
        for dep in graph.incoming[n]:
            p_start, p_end = dates[dep.predecessor_id]
            shift = constraint_shift(dep.type, dep.lag, p_start, p_end, start, end)
            if shift:
                start, end = start + shift * DAY, end + shift * DAY
        dates[n] = (start, end)

    return {
        a.id: dates[a.id]
        for a in activities
        if dates[a.id] != (a.start_date, a.end_date)
    }


def _persist_dates(db: Session, item, start: dt.date, end: dt.date) -> None:
    item_id = item.id
    try:
        with db.begin_nested():
            update_wbs_item(
                db,
                item,
                {"start_date": start, "end_date": end, "duration": duration_days(start, end)},
                commit=False,
            )
    except SQLAlchemyError as e:
        logger.warning("schedule_item_update_failed", wbs_item_id=item_id, error=str(e))
        raise PersistenceFailure(f"Failed to update WBS item {item_id}: {e}") from e


def finalize_schedule(db: Session, project_id: int) -> FinalizeScheduleOut:
    if not get_project(db, project_id):
        raise NotFound("Project not found")

    items = list_wbs_items(db, project_id)
    deps = list_dependencies(db, project_id)
    try:
        moves = propagate(items, deps)
    except ScheduleCycleError as e:
        logger.warning("schedule_cycle", project_id=project_id, message=e.message)
        raise

    by_id = {it.id: it for it in items}
    updated = 0
    errors: list[ScheduleUpdateError] = []
    for item_id, (start, end) in moves.items():
        try:
            _persist_dates(db, by_id[item_id], start, end)
            updated += 1
        except PersistenceFailure as e:
            errors.append(ScheduleUpdateError(wbs_item_id=item_id, message=e.message))
    db.commit()

    logger.info(
        "schedule_finalized",
        project_id=project_id,
        activities=len(schedulable(items)),
        dependencies=len(deps),
        updated=updated,
        errors=len(errors),
    )
    return FinalizeScheduleOut(updated_count=updated, error_count=len(errors), errors=errors)
