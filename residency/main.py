"""
Residency Records - FastAPI Main Application
Evaluation & reporting engine for the residency program
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from residency.core.config import settings
from residency.core.db import SessionLocal, init_db
from residency.core.errors import EngineError
from residency.routers import annotations, catalog, grades, reports, surveys, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=settings.LOG_LEVEL)
    init_db()
    if settings.SEED_DEMO_DATA:
        from residency.seed import seed_db

        db = SessionLocal()
        try:
            seed_db(db)
        finally:
            db.close()
    logger.info("Residency records API ready")
    yield


app = FastAPI(
    title="Residency Records API",
    description="Evaluaciones, reportes y encuestas de rotacion del programa de residencia",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(users.router, prefix="/api/v1")
app.include_router(catalog.router, prefix="/api/v1")
app.include_router(grades.router, prefix="/api/v1")
app.include_router(reports.router, prefix="/api/v1")
app.include_router(surveys.router, prefix="/api/v1")
app.include_router(annotations.router, prefix="/api/v1")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # En producción, especificar dominios
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "Residency Records API",
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/health")
def health():
    """Health check endpoint"""
    return {"status": "ok"}
