"""Retail Insights - Main Application"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from retail_insights.api.analytics import router as analytics_router
from retail_insights.api.ingestion import router as ingestion_router
from retail_insights.api.normalization import router as normalization_router
from retail_insights.common.config import settings
from retail_insights.common.database import init_db

logging.basicConfig(
    level=settings.app.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"{settings.app.name} started")
    yield


app = FastAPI(
    title="Retail Pricing & Product Insights",
    description="Pack size normalization and value analytics for retail catalogs",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(ingestion_router)
app.include_router(normalization_router)
app.include_router(analytics_router)


@app.get("/")
async def root():
    return {"message": "Retail Pricing & Product Insights", "status": "running"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
