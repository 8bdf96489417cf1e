from fastapi import APIRouter
from app.api.routers import projects, wbs, dependencies, costs, schedule, exports

api_router = APIRouter()
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(wbs.router, tags=["wbs"])
api_router.include_router(dependencies.router, tags=["dependencies"])
api_router.include_router(costs.router, tags=["costs"])
api_router.include_router(schedule.router, prefix="/projects", tags=["schedule"])
api_router.include_router(exports.router, prefix="/exports", tags=["exports"])
