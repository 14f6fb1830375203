import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError

from jobhunt.core import config
from jobhunt.core.errors import JobHuntError
from jobhunt.core.logging_config import setup_logging

# ✅ Import All API Routes
from jobhunt.api.routes import application, company, job, system, user

logger = logging.getLogger(__name__)


# ============================================
# ✅ STARTUP
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL, config.LOG_DIR)
    config.validate_config()

    if config.RUN_MIGRATIONS:
        from jobhunt.db.migrate import run_migrations
        run_migrations()
    else:
        from jobhunt.db.init_db import init_db
        init_db()

    logger.info(f"{config.APP_NAME} API started: env={config.ENV}")
    yield


# ============================================
# ✅ FASTAPI APP INIT
# ============================================

app = FastAPI(title=f"{config.APP_NAME} API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["Authorization", "Content-Type"],
)


# ============================================
# ✅ ERROR RESPONSES
# ============================================

@app.exception_handler(JobHuntError)
async def jobhunt_error_handler(request: Request, exc: JobHuntError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(OperationalError)
@app.exception_handler(PoolTimeoutError)
async def database_unavailable_handler(request: Request, exc: Exception):
    logger.error(f"Database unavailable: path={request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=503,
        content={
            "message": "The service is temporarily unavailable. Please retry shortly.",
            "success": False,
            "retryable": True,
        },
    )


# ============================================
# ✅ REGISTER ALL ROUTERS
# ============================================

app.include_router(user.router)
app.include_router(company.router)
app.include_router(job.router)
app.include_router(application.router)
app.include_router(system.router)

Path(config.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=config.UPLOAD_DIR), name="uploads")


# ============================================
# ✅ HEALTH CHECK ROOT ENDPOINT
# ============================================

@app.get("/")
def root():
    return {"status": f"{config.APP_NAME} API running"}
