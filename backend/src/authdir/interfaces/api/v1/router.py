"""Aggregate all v1 routers."""
from fastapi import APIRouter

from .routers.files import router as files_router
from .routers.recovery import router as recovery_router
from .routers.sessions import router as sessions_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(sessions_router)
v1_router.include_router(recovery_router)
v1_router.include_router(files_router)
