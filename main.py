# main.py
# Role: Application entry point for the AutoExpense backend.
#       Configures logging, builds the FastAPI app, creates database tables on
#       startup, installs the error envelope handlers, and registers all routers.

"""
Main FastAPI app for the AutoExpense backend.

Here we only:
- configure logging
- create the FastAPI app (tables are created on startup)
- install error handlers that produce the {"success": false, ...} envelope
- include route modules
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from db import DATABASE_URL, init_db
from app.errors import ApiError
from app.routes_root import router as root_router
from app.routes_user import router as user_router
from app.routes_dashboard import router as dashboard_router
from app.routes_scan import router as scan_router
from app.routes_expenses import router as expenses_router
from app.routes_settings import router as settings_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("autoexpense")


# -------------------------------------------------------------------
# Lifespan
# -------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create database tables (only if they don't exist yet)
    init_db()
    logger.info("Database: %s", DATABASE_URL)
    yield
    logger.info("Shutting down")


# -------------------------------------------------------------------
# Error envelope
# -------------------------------------------------------------------

def error_body(message: str, details=None) -> dict:
    body = {"success": False, "error": message}
    if details:
        body["details"] = details
    return body


async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.details))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    details = None
    if errors:
        first = errors[0]
        loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        details = f"{loc}: {first.get('msg')}" if loc else first.get("msg")
    return JSONResponse(status_code=400, content=error_body("Invalid request", details))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


# -------------------------------------------------------------------
# App
# -------------------------------------------------------------------

def create_app() -> FastAPI:
    app = FastAPI(
        title="AutoExpense AI",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Health check
    app.include_router(root_router)

    # Identity profile -> users table
    app.include_router(user_router)

    # Summary and scan before expenses so "/expenses/{tx_id}" doesn't swallow them
    app.include_router(dashboard_router)
    app.include_router(scan_router)

    # Transactions CRUD
    app.include_router(expenses_router)

    # Email filter settings
    app.include_router(settings_router)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=config.PORT)
