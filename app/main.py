# app/main.py

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
import sys

from app.core.config import Settings, get_settings
from app.core.database import create_engine, create_sessionmaker, init_db, test_connection
from app.core.exceptions import FormError, form_error_handler
from app.core.rate_limiter import build_limiter
from app.core.storage import ensure_upload_dir

# Routers
from app.api.endpoints import form as form_router

# ------------------------------------------------------------
# LOGURU CONFIGURATION
# ------------------------------------------------------------
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
           "<level>{level}</level> | "
           "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
           "<level>{message}</level>",
    colorize=True,
    backtrace=True,
    diagnose=False,
)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Server error"})


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Seller Registration Backend",
        version="1.0.0",
        description="Validates and stores registration form submissions.",
    )

    # --------------------------------------------------------
    # STATE (explicit configuration, engine, sessions)
    # --------------------------------------------------------
    app.state.settings = settings
    app.state.engine = create_engine(settings)
    app.state.sessionmaker = create_sessionmaker(app.state.engine)

    # --------------------------------------------------------
    # RATE LIMITING
    # --------------------------------------------------------
    app.state.limiter = build_limiter(settings)

    # --------------------------------------------------------
    # ERROR HANDLERS
    # --------------------------------------------------------
    app.add_exception_handler(FormError, form_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # --------------------------------------------------------
    # STATIC FILES (uploaded attachments, no access control)
    # --------------------------------------------------------
    app.mount(
        settings.UPLOADS_URL_PREFIX,
        StaticFiles(directory=ensure_upload_dir(settings)),
        name="uploads",
    )

    # --------------------------------------------------------
    # CORS CONFIGURATION
    # --------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CORS_ORIGIN],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # --------------------------------------------------------
    # REGISTER ROUTERS
    # --------------------------------------------------------
    app.include_router(form_router.router)

    # --------------------------------------------------------
    # STARTUP
    # --------------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info("Starting Seller Registration Backend...")
        try:
            await test_connection(app.state.engine)
            await init_db(app.state.engine)
            logger.success("Database connection established, tables ready.")
        except Exception:
            logger.exception("Database connection failed.")
            raise

    @app.on_event("shutdown")
    async def on_shutdown():
        await app.state.engine.dispose()

    # --------------------------------------------------------
    # ROOT HEALTH CHECK
    # --------------------------------------------------------
    @app.get("/", tags=["System"])
    async def root():
        return {"success": True, "message": "hello world"}

    return app


app = create_app()
