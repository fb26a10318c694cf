from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hris.api.v1.router import api_router
from hris.core.config import settings
from hris.services.data_service import data_service
from hris.services.identity_service import identity_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    try:
        await data_service.initialize(settings)
    except Exception:
        logger.exception("Failed to initialize DataService — continuing without Supabase data")
    try:
        await identity_service.initialize(settings)
    except Exception:
        logger.exception("Failed to initialize IdentityService — continuing without Supabase auth")
    yield
    await data_service.close()
    await identity_service.close()


app = FastAPI(
    title="HRIS API",
    description="Employee records, access control and table views backed by Supabase",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "HRIS API", "app": settings.APP_NAME, "company": settings.COMPANY_NAME}
