import argparse
import logging
from datetime import datetime, timezone

import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db.database import init_db
from config import load_config, cors_origins
from routes import (  # Import routers
    achievements_router,
    admin_router,
    books_router,
    children_router,
    families_router,
    map_router,
    reading_logs_router,
    stats_router,
)

APP_NAME = "Passaporte do Leitor API"
APP_VERSION = "1.0.0"

logger = logging.getLogger(__name__)

app = FastAPI(title="Passaporte do Leitor", description="Family reading tracker with achievements")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
api = APIRouter(prefix="/api")
api.include_router(families_router, prefix="/family", tags=["family"])
api.include_router(children_router, prefix="/children", tags=["children"])
api.include_router(books_router, prefix="/books", tags=["books"])
api.include_router(reading_logs_router, prefix="/reading-logs", tags=["reading-logs"])
api.include_router(achievements_router, prefix="/achievements", tags=["achievements"])
api.include_router(stats_router, prefix="/stats", tags=["stats"])
api.include_router(map_router, prefix="/map", tags=["map"])
api.include_router(admin_router, prefix="/admin", tags=["admin"])
app.include_router(api)


@app.get("/")
async def root():
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: config, logging, DB
    config = load_config()
    logging.basicConfig(level=config["logging"]["level"])
    init_db()
    logger.info("%s %s ready", APP_NAME, APP_VERSION)
    yield

app.router.lifespan_context = lifespan  # For auto init on start

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Passaporte do Leitor API")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    args = parser.parse_args()
    config = load_config()  # Ensures config is copied if missing
    if args.init:
        init_db()
        print("DB initialized and config copied to ~/.passaporte/")
        sys.exit(0)
    server = config["server"]
    uvicorn.run(
        "main:app",
        host=server["host"],
        port=server["port"],
        reload=args.dev,
        log_level=config["logging"]["level"].lower(),
    )
