from sqlalchemy.orm import Session

from app.crud.dependencies import list_dependencies
from app.crud.projects import get_project
from app.crud.wbs import list_wbs_items
from app.schemas.dependencies import DependencyOut
from app.schemas.schedule import ScheduleActivityOut, ScheduleOut
from app.services.schedule.propagator import (
    constraint_slack,
    duration_days,
    ordered_graph,
    propagate,
    schedulable,
)
from app.services.wbs.errors import NotFound


def critical_path(items, dependencies) -> list[int]:
    """Chain of driving dependencies ending at the latest-finishing activity.

    Dates are taken as they would be after finalisation, so the path is the same
    whether or not the stored schedule has been finalised yet. A dependency drives
    its successor when it has zero slack; among several, the one whose predecessor
    finishes last wins.
    """
    activities = schedulable(items)
    if not activities:
        return []
    graph, order = ordered_graph(activities, dependencies)
    dates = {a.id: (a.start_date, a.end_date) for a in activities}
    dates.update(propagate(activities, dependencies))

    prev: dict[int, int | None] = {}
    for n in order:
        start, end = dates[n]
        best_pred = None
        for dep in graph.incoming[n]:
            p_start, p_end = dates[dep.predecessor_id]
            if constraint_slack(dep.type, dep.lag, p_start, p_end, start, end) != 0:
                continue
            if best_pred is None or p_end > dates[best_pred][1]:
                best_pred = dep.predecessor_id
        prev[n] = best_pred

    last = max(order, key=lambda n: dates[n][1])
    path: list[int] = []
    node: int | None = last
    while node is not None:
        path.append(node)
        node = prev.get(node)
    path.reverse()
    return path


def schedule_view(db: Session, project_id: int) -> ScheduleOut:
    if not get_project(db, project_id):
        raise NotFound("Project not found")
    items = list_wbs_items(db, project_id)
    deps = list_dependencies(db, project_id)

    path = critical_path(items, deps)
    on_path = set(path)
    activities = [
        ScheduleActivityOut(
            id=a.id,
            code=a.code,
            name=a.name,
            start_date=a.start_date,
            end_date=a.end_date,
            duration=duration_days(a.start_date, a.end_date),
            critical=a.id in on_path,
        )
        for a in schedulable(items)
    ]
    return ScheduleOut(
        activities=activities,
        dependencies=[DependencyOut.model_validate(d) for d in deps],
        critical_path=path,
    )
