from fastapi import APIRouter
from socratix.api.v1.endpoints import progress, sessions, study

api_router = APIRouter()
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(study.router, prefix="/study", tags=["study"])
api_router.include_router(progress.router, prefix="/progress", tags=["progress"])
