from fastapi import FastAPI

from . import auth, health, me, registry, review


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the FastAPI application."""
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(me.router)
    app.include_router(review.router)
    app.include_router(registry.router)
