# main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api_bridges import bridges_router
from api_routing import routing_router
from services import config
from services.datasets import build_hazard_index
from services.hazard_index import NO_TRUCK, RESIDENTIAL, HazardIndex

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("hazard_router.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Datasets are loaded once and shared read-only by every request
    if getattr(app.state, "hazard_index", None) is None:
        app.state.hazard_index = build_hazard_index(
            config.BRIDGES_PATH,
            config.NO_TRUCK_ZONES_PATH,
            config.RESIDENTIAL_ZONES_PATH,
        )
    logger.info("Truck hazard router ready (has_google_key=%s)", bool(config.GOOGLE_MAPS_API_KEY))
    yield
    logger.info("Shutting down")


def create_app(hazard_index: Optional[HazardIndex] = None) -> FastAPI:
    app = FastAPI(title="Truck Hazard Router", lifespan=lifespan)
    app.state.hazard_index = hazard_index

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],   # tighten for prod
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(routing_router)   # /api/routing/safe-route
    app.include_router(bridges_router)   # /api/bridges, /api/bridges/stats, /api/bridges/sample

    @app.get("/health")
    def health(request: Request):
        index = getattr(request.app.state, "hazard_index", None)
        return {
            "ok": index is not None,
            "service": "truck-hazard-router",
            "routes": ["/api/routing/safe-route", "/api/bridges"],
            "bridges": index.bridge_count if index else 0,
            "noTruckZones": index.zone_count(NO_TRUCK) if index else 0,
            "residentialZones": index.zone_count(RESIDENTIAL) if index else 0,
            "has_google_key": bool(config.GOOGLE_MAPS_API_KEY),
        }

    return app


app = create_app()
