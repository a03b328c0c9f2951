from fastapi import APIRouter
from app.api.v1.endpoints import auth, projects, keys, dashboard, history, settings

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(keys.router, prefix="/keys", tags=["keys"])
api_router.include_router(dashboard.router, tags=["dashboard"])
api_router.include_router(history.router, prefix="/history", tags=["history"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
