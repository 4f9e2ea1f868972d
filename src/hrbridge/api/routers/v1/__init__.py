"""API v1 routers."""

from fastapi import APIRouter

from .employees import router as employees_router

# Create v1 router that includes all v1 endpoints
router = APIRouter(prefix="/v1")

router.include_router(employees_router)

__all__ = ["router", "employees_router"]
