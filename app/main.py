"""Signposting clinical review FastAPI application.

This service owns the clinical governance slice of the signposting toolkit:
the per-surgery effective symptom library, symptom review status, review
counts, and the enable/disable switches that review decisions cascade into.
Presentation, rich-text editing, and login flows live in the host application.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.routers import clinical_review, effective_symptoms, surgery_symptoms


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [{"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")} for err in exc.errors()]
    return JSONResponse(status_code=400, content={"error": "Invalid input", "details": details})


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Signposting Clinical Review",
        version="0.1.0",
        description="Symptom library resolution and clinical review workflow APIs.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)

    app.include_router(effective_symptoms.router)
    app.include_router(surgery_symptoms.router)
    app.include_router(clinical_review.router)

    return app


app = create_app()
