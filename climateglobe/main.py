# climateglobe/main.py
from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

# Load <repo>/.env (main.py is <repo>/climateglobe/main.py)
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

from climateglobe.core.settings import settings
from climateglobe.api import api_router
from climateglobe.services.aggregator import Aggregator

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Climate Globe Backend", version="1.0.0")

# ── Compression (must be added before CORS) ──
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        # Local web dev (vite)
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# ──────────────────────────────────────────────────────────────
# Shared aggregator (holds the cycle counter + latest snapshot)
# ──────────────────────────────────────────────────────────────

_aggregator = Aggregator()


def provide_aggregator() -> Aggregator:
    return _aggregator


# ──────────────────────────────────────────────────────────────
# Dependency overrides
# ──────────────────────────────────────────────────────────────

from climateglobe.api import overlay as overlay_api

app.dependency_overrides[overlay_api.get_aggregator] = provide_aggregator

# Routes
app.include_router(api_router)

logger.info("[app] climateglobe ready algo_version=%s", settings.algo_version)
