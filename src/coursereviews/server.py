#!/usr/bin/env python3

"""
Copyright 2024 Google LLC

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

     http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

import os
import sys
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .database import DatabaseManager, InMemoryReviewStore, ReviewRepository, ReviewStore
from .errors import ReviewServiceError
from .models import HealthResponse
from .routers import review_router
from .service import ReviewService

logger = logging.getLogger(__name__)

SERVICE_NAME = "coursereviews"


async def create_review_store() -> ReviewStore:
    """Create the relational store when a database is configured, else an in-memory one."""
    db_manager = DatabaseManager()
    await db_manager.initialize()
    if db_manager.engine is None:
        logger.warning("No database configured - reviews are kept in memory and lost on restart")
        return InMemoryReviewStore()
    return ReviewRepository(db_manager)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown."""
    logger.info("🚀 Starting Course Review Service...")

    store = await create_review_store()
    review_router.set_review_service(ReviewService(store))
    logger.info(f"✅ Review store ready: {type(store).__name__}")

    yield

    logger.info("🛑 Shutting down Course Review Service...")
    await store.close()


async def review_error_handler(request: Request, exc: ReviewServiceError):
    """Render a business-rule failure as a JSON error."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.title, "message": str(exc)}
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Render malformed request parameters or bodies as a 400."""
    return JSONResponse(
        status_code=400,
        content={"error": "Validation Error", "message": "Please check your input data", "details": jsonable_errors(exc)}
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "message": exc.detail},
        headers=getattr(exc, "headers", None)
    )


async def general_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        str(exc),
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error", "message": "Something went wrong"}
    )


def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


def setup_exception_handlers(app: FastAPI):
    app.add_exception_handler(ReviewServiceError, review_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)


def create_app() -> FastAPI:
    """Create and configure the HTTP application."""
    app = FastAPI(
        title="GrowNet Course Review Service",
        description="Course reviews and rating statistics for GrowNet",
        version="1.0.0",
        lifespan=lifespan
    )

    # Add CORS middleware for cross-origin requests
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)
    app.include_router(review_router.router)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(status="healthy", service=SERVICE_NAME)

    return app


app = create_app()


def serve():
    """Start the HTTP server."""
    import uvicorn

    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    port = int(os.getenv("PORT", "8080"))
    logger.info(f"🚀 Starting Course Review Service on 0.0.0.0:{port}")
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")


if __name__ == "__main__":
    try:
        serve()
    except KeyboardInterrupt:
        logger.info("🛑 Server stopped by user")
    except Exception as e:
        logger.error(f"❌ Server error: {str(e)}")
        sys.exit(1)
