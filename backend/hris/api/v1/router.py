from fastapi import APIRouter

from hris.api.v1.endpoints import auth, employees, health, pages

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(pages.router)
api_router.include_router(employees.router)
