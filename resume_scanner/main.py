import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from resume_scanner.api.routes import auth, resume, health
from resume_scanner.core import config
from resume_scanner.core.errors import DATABASE_UNAVAILABLE
from resume_scanner.core.logging_config import setup_logging, sanitize_log_data
from resume_scanner.db.init_db import init_db
from resume_scanner.db.session import engine
from resume_scanner.services.analysis_service import build_analyzer

logger = logging.getLogger(__name__)


# ============================================
# ✅ STARTUP / SHUTDOWN
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL, config.LOG_DIR)
    logger.info("Starting Resume Scanner API: %s", sanitize_log_data({
        "database_url": config.DATABASE_URL,
        "openai_api_key": config.OPENAI_API_KEY,
        "ai_models": ",".join(config.AI_MODELS),
        "upload_dir": config.UPLOAD_DIR,
        "environment": config.ENVIRONMENT,
    }))
    if config.SECRET_KEY == "secret":
        logger.warning("SECRET_KEY is not set - tokens are signed with the development default")

    try:
        if config.RUN_MIGRATIONS:
            from resume_scanner.db.migrate import run_migrations
            run_migrations(config.DATABASE_URL)
        else:
            init_db(engine)
    except OperationalError as e:
        # Keep serving; requests touching the store report it as unavailable
        logger.error(f"Database unavailable at startup: {e}")

    app.state.analyzer = build_analyzer()

    yield

    engine.dispose()
    logger.info("Resume Scanner API stopped")


# ============================================
# ✅ FASTAPI APP INIT
# ============================================

app = FastAPI(title="Resume Scanner API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "x-auth-token"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(resume.router)


# ============================================
# ✅ ERROR HANDLERS
# ============================================

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation failed", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(OperationalError)
async def database_exception_handler(request: Request, exc: OperationalError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": DATABASE_UNAVAILABLE},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal Server Error", "message": str(exc)},
    )


def run():
    """Console entry point: serve the API with uvicorn on PORT."""
    import uvicorn

    if config.ENVIRONMENT == "production":
        logger.warning("ENVIRONMENT=production: serve resume_scanner.main:app from the platform's ASGI server")
    uvicorn.run("resume_scanner.main:app", host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    run()
