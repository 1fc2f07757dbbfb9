from fastapi import FastAPI

from . import admin, auth, certificates, health, learning


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the FastAPI application."""
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(learning.router)
    app.include_router(certificates.router)
    app.include_router(admin.router)
