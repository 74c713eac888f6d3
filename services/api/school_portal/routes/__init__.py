"""API routes."""

from fastapi import APIRouter

from school_portal.routes import admin, admissions, auth, portal, public, teacher

api_router = APIRouter()

# Public pages (school profile, news, fee receipts)
api_router.include_router(public.router, prefix="/v1/public", tags=["public"])

# Admin / applicant sign-in
api_router.include_router(auth.router, prefix="/v1/auth", tags=["auth"])

# Admissions workflow (applicants)
api_router.include_router(admissions.router, prefix="/v1/admissions", tags=["admissions"])

# Student portal
api_router.include_router(portal.router, prefix="/v1/portal", tags=["portal"])

# Teacher dashboard
api_router.include_router(teacher.router, prefix="/v1/teacher", tags=["teacher"])

# Admin dashboard
api_router.include_router(admin.router, prefix="/v1/admin", tags=["admin"])
