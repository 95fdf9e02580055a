import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# ✅ Import All API Routes
from app.api.routes import auth, subscription, costs, maintenance, master, modules, health
from app.core.config import CORS_ORIGINS, LOG_LEVEL, RUN_MIGRATIONS
from app.core.logging_config import setup_logging
from app.db.init_db import init_db
from app.db.migrate import run_migrations

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(LOG_LEVEL)
    if RUN_MIGRATIONS:
        run_migrations()
    else:
        init_db()
    logger.info("VehicleHub API started")
    yield


# ============================================
# ✅ FASTAPI APP INIT
# ============================================

app = FastAPI(title="VehicleHub API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["Authorization", "Content-Type"],
)


# ============================================
# ✅ REGISTER ALL ROUTERS
# ============================================

app.include_router(auth.router)
app.include_router(subscription.router)
app.include_router(costs.router)
app.include_router(maintenance.router)
app.include_router(master.router)
app.include_router(modules.router)
app.include_router(health.router)


# ============================================
# ✅ ROOT ENDPOINT
# ============================================

@app.get("/")
def root():
    return {"status": "VehicleHub API running"}
