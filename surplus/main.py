"""
main.py – FastAPI app entry point (slim wire-up only).
Connects routes, middleware, error mapping and lifespan. No business logic.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware

from .core.errors import MarketplaceError, ValidationError
from .deps import get_database, get_settings
from .routes import auth, listings, orders, system, upload, web

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)

SESSION_MAX_AGE = 14 * 24 * 60 * 60


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Connecting to store…")
    try:
        get_database().create_all()
    except SQLAlchemyError:
        # fatal: never serve without the store
        logger.critical("Store connection failed at startup, halting", exc_info=True)
        raise
    Path(get_settings().media_dir).mkdir(parents=True, exist_ok=True)
    logger.info("Ready.")
    yield
    get_database().dispose()
    logger.info("Shutdown.")


settings = get_settings()

app = FastAPI(
    title="Surplus Food Marketplace",
    description="Restaurants list surplus food, students order it.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(CORSMiddleware, allow_origins=list(settings.cors_origins), allow_methods=["*"], allow_headers=["*"])
app.add_middleware(SessionMiddleware, secret_key=settings.session_secret, max_age=SESSION_MAX_AGE)

app.mount(settings.media_url, StaticFiles(directory=settings.media_dir, check_dir=False), name="media")


# ── Error mapping ──────────────────────────────────────────────────────────────

@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    if request.url.path.startswith("/api"):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
    return web.templates.TemplateResponse(
        request,
        "error.html",
        {"user": request.session.get("user"), "message": exc.message, "status_code": exc.status_code},
        status_code=exc.status_code,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed body/query → same 400 shape as a domain ValidationError."""
    errors = exc.errors()
    if not errors:
        return await marketplace_error_handler(request, ValidationError())
    first = errors[0]
    loc = [part for part in first.get("loc", ()) if isinstance(part, str)]
    field = ".".join(part for part in loc if part not in ("body", "query", "path", "header", "cookie"))
    message = f"Invalid {field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "Invalid request")
    return await marketplace_error_handler(request, ValidationError(message))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Server error"})


app.include_router(system.router)
app.include_router(auth.router)
app.include_router(listings.router)
app.include_router(orders.router)
app.include_router(upload.router)
app.include_router(web.router)
