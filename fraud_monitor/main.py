# main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fraud_monitor import config
from fraud_monitor.api.endpoints import router as api_router
from fraud_monitor.api.websocket import router as ws_router
from fraud_monitor.database import close_async_connection, get_async_database, ping_database
from fraud_monitor.services.relay import BroadcastRelay
from fraud_monitor.services.rooms import RoomRegistry
from fraud_monitor.services.transport import ConnectionManager

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if get_async_database() is None:
        logger.warning("⚠️ MONGODB_URL not set, report endpoints disabled")
    logger.info(f"🚀 {config.SERVICE_NAME} ready, WebSocket enabled for real-time updates")
    yield
    logger.info("Shutting down, flushing pending deliveries")
    await app.state.connections.drain()
    await close_async_connection()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Fraud Detection Web API",
        description="Fraud monitoring backend with real-time alert push channel",
        version=config.VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Push channel and relay are per-app service objects
    app.state.connections = ConnectionManager(RoomRegistry())
    app.state.relay = BroadcastRelay(app.state.connections)

    @app.get("/")
    async def root():
        return {
            "name": "Fraud Detection Web API",
            "version": config.VERSION,
            "status": "running",
            "endpoints": {
                "health": "/health",
                "frauds": "/api/frauds/recent",
                "predictions": "/api/predictions (webhook)",
                "websocket": "/ws",
            },
        }

    @app.get("/health")
    async def health_check():
        timestamp = datetime.now(timezone.utc).isoformat()
        ok, error = await ping_database()
        if not ok:
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "timestamp": timestamp,
                    "database": "not configured" if error == "not configured" else "disconnected",
                    "error": error,
                },
            )
        return {
            "status": "healthy",
            "timestamp": timestamp,
            "database": "connected",
            "service": config.SERVICE_NAME,
            "websocket_clients": app.state.connections.connection_count(),
        }

    app.include_router(api_router, prefix="/api")
    app.include_router(ws_router)
    return app


app = create_app()
