from fastapi import APIRouter
from app.api.routes_health import router as health_router
from app.api.routes_configs import router as configs_router
from app.api.routes_projects import router as projects_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(configs_router, tags=["configs"])
router.include_router(projects_router, tags=["projects"])
