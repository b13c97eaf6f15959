"""
TRAILGUARD PRIME API - Main Application Entry Point

FastAPI surface over the trailing-stop coordinator. The runtime (engine,
paper ledger, event bus and optional keeper) is wired at startup.
"""

from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from trailguard_prime.api.config import settings
from trailguard_prime.api.dependencies import get_engine_runtime
from trailguard_prime.api.services.runtime import EngineRuntime, init_runtime, close_runtime


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the runtime on startup, stop the keeper and drain the bus on shutdown."""
    await init_runtime()
    yield
    await close_runtime()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="TRAILGUARD PRIME - Trailing stop pricing engine API",
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    from trailguard_prime.api.orders.routes import router as orders_router
    from trailguard_prime.api.paper.routes import router as paper_router

    app.include_router(orders_router, prefix="/api/v1/orders", tags=["Orders"])
    app.include_router(paper_router, prefix="/api/v1/paper", tags=["Paper"])

    @app.get("/api/health", tags=["Health"])
    async def health_check(runtime: EngineRuntime = Depends(get_engine_runtime)):
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
            "service": settings.APP_NAME,
            "mode": runtime.config.config.mode,
            "feeds": runtime.registry.list_feeds(),
            "orders": len(runtime.engine.list_orders()),
            "keeper_running": runtime.keeper.is_running,
        }

    @app.get("/api/v1/engine/stats", tags=["Engine"])
    async def engine_stats(runtime: EngineRuntime = Depends(get_engine_runtime)):
        return {
            "coordinator": runtime.coordinator.get_statistics(),
            "keeper": runtime.keeper.get_statistics(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "trailguard_prime.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
