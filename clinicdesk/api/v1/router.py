"""API v1 router configuration."""

from fastapi import APIRouter

from clinicdesk.api.v1.endpoints import admin, auth, doctor, health, patient

api_router = APIRouter()

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(patient.router, prefix="/patient", tags=["Patient"])
api_router.include_router(doctor.router, prefix="/doctor", tags=["Doctor"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
