"""FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import health, routes
from .config import settings
from .services.locking import LockUnavailableError


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name)
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # A run that finds the workbook locked is abandoned, never queued.
    @app.exception_handler(LockUnavailableError)
    async def lock_unavailable(request: Request, exc: LockUnavailableError) -> JSONResponse:
        logging.warning(f"Allocation run rejected on {request.url.path}: {exc}")
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "workbook": str(settings.workbook_file),
            "sheets": {
                "drivers": settings.drivers_sheet,
                "deliveries": settings.deliveries_sheet,
                "routes": settings.routes_sheet,
            },
            "max_deliveries_per_route": settings.max_deliveries_per_route,
            "run": f"{settings.api_prefix}/routes/run",
            "health": f"{settings.api_prefix}/health",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(routes.router, prefix=settings.api_prefix)
    return app


app = create_app()
