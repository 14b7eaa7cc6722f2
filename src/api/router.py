from fastapi import APIRouter

from src.api.health.router import root_router
from src.api.health.router import router as health_router
from src.api.notification.router import router as notification_router
from src.api.role.router import router as role_router
from src.api.role_request.router import router as role_request_router
from src.api.staff.router import router as staff_router

# V1 API router
v1_router = APIRouter(prefix="/v1")

# Include domain routers
v1_router.include_router(notification_router)
v1_router.include_router(role_router)
v1_router.include_router(role_request_router)
v1_router.include_router(staff_router)

# Main API router
api_router = APIRouter()
api_router.include_router(root_router)
api_router.include_router(health_router)
api_router.include_router(v1_router)
