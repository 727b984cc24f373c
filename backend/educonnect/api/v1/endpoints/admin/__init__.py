"""
Admin API endpoints for the EduConnect admin console.
All endpoints require the ADMIN role.
"""
from fastapi import APIRouter

from educonnect.api.v1.endpoints.admin import analytics, users, classes

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

admin_router.include_router(analytics.router, prefix="/analytics", tags=["Admin Analytics"])
admin_router.include_router(users.router, prefix="/users", tags=["Admin Users"])
admin_router.include_router(classes.router, prefix="/classes", tags=["Admin Classes"])
