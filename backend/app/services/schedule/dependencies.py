from sqlalchemy.orm import Session

from app.core.logging import logger
from app.crud.dependencies import (
    create_dependency,
    delete_dependency,
    find_dependency,
    get_dependency,
    list_dependencies,
)
from app.crud.wbs import get_wbs_item, list_wbs_items
from app.db.models.dependency import Dependency
from app.db.models.wbs import WbsType
from app.schemas.dependencies import DependencyCreate
from app.services.schedule.graph import DependencyGraph
from app.services.wbs.errors import (
    DependencyConflict,
    InvalidDependencyEndpoints,
    NotFound,
    SelfDependency,
    WbsError,
)


def _check_endpoints(db: Session, data: DependencyCreate):
    if data.predecessor_id == data.successor_id:
        raise SelfDependency("Cannot create self-dependency")

    predecessor = get_wbs_item(db, data.predecessor_id)
    if not predecessor:
        raise NotFound("Predecessor WBS item not found")
    successor = get_wbs_item(db, data.successor_id)
    if not successor:
        raise NotFound("Successor WBS item not found")

    if predecessor.type != WbsType.activity.value or successor.type != WbsType.activity.value:
        raise InvalidDependencyEndpoints("Dependencies can only be created between 'Activity' items")
    if predecessor.project_id != successor.project_id:
        raise InvalidDependencyEndpoints("Dependencies can only link activities of the same project")
    return predecessor, successor


def add_dependency(db: Session, data: DependencyCreate) -> Dependency:
    try:
        predecessor, _ = _check_endpoints(db, data)
        if find_dependency(db, data.predecessor_id, data.successor_id):
            raise DependencyConflict("Dependency already exists")

        activity_ids = [
            it.id for it in list_wbs_items(db, predecessor.project_id)
            if it.type == WbsType.activity.value
        ]
        graph = DependencyGraph(activity_ids, list_dependencies(db, predecessor.project_id))
        if graph.reaches(data.successor_id, data.predecessor_id):
            raise DependencyConflict("Dependency would create a cycle")
    except WbsError as e:
        logger.warning(
            "dependency_rejected",
            predecessor_id=data.predecessor_id,
            successor_id=data.successor_id,
            rule=type(e).__name__,
            message=e.message,
        )
        raise

    dep = create_dependency(db, data.predecessor_id, data.successor_id, data.type.value, data.lag)
    logger.info(
        "dependency_created",
        dependency_id=dep.id,
        predecessor_id=dep.predecessor_id,
        successor_id=dep.successor_id,
        type=dep.type,
        lag=dep.lag,
    )
    return dep


def remove_dependency(db: Session, dependency_id: int) -> None:
    dep = get_dependency(db, dependency_id)
    if not dep:
        raise NotFound("Dependency not found")
    delete_dependency(db, dep)
    logger.info("dependency_deleted", dependency_id=dependency_id)
