from fastapi import APIRouter
from uniplace.api.v1.endpoints import blogs, companies, dashboard, drives, emails, reports, results, settings

api_router = APIRouter(prefix="/api/v1")

# Include all endpoint routers
api_router.include_router(dashboard.router)
api_router.include_router(drives.router)
api_router.include_router(results.router)
api_router.include_router(reports.router)
api_router.include_router(emails.router)
api_router.include_router(companies.router)
api_router.include_router(settings.router)
api_router.include_router(blogs.router)
api_router.include_router(blogs.admin_router)
