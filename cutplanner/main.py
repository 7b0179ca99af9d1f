from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import settings
from .routers import cutting_plan

logger = logging.getLogger("cutplanner")
# Root handlers and format come from the server runner
logger.setLevel(settings.LOG_LEVEL.upper())

app = FastAPI(
    title="Cutting Planner",
    description="Stock bar cutting plans for metal fabrication quotes",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(cutting_plan.router, prefix="/api")


@app.get("/health")
def health():
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "default_stock_length": settings.DEFAULT_STOCK_LENGTH_MM,
        "kerf": settings.KERF_MM,
    }


logger.info(
    "Cutting planner ready (stock %.0f mm, kerf %.1f mm, policy %s)",
    settings.DEFAULT_STOCK_LENGTH_MM, settings.KERF_MM, settings.BAR_OPENING_POLICY,
)
