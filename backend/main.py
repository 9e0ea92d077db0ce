import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from adr_store import ADRReportStore
from clinical_ai import ClinicalAIService, TranslationService, build_generators
from config import Config, get_config
from exceptions import MedSightBaseException, handle_medsight_exception
from http_client import EMRClient
from local_data import LocalDataStore
from logging_config import RequestLogger, setup_logging
from routers import adr, ai, appointments, auth, encounters, medications, patients, pharmacy, safety, translate
from seed_data import seed_local_records
from token_broker import PrescriptionTokenBroker

logger = logging.getLogger(__name__)

def create_app(
    config: Optional[Config] = None,
    emr_client: Optional[EMRClient] = None,
    ai_service: Optional[ClinicalAIService] = None,
    translation_service: Optional[TranslationService] = None
) -> FastAPI:
    """Build the application and its in-memory state.

    Collaborators can be injected (tests pass mocks); anything not given is
    built from ``config``.
    """
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting MedSight API")
        if config.app.seed_on_startup and app.state.local_store.count("encounter") == 0:
            seed_local_records(app.state.local_store)
        app.state.token_broker.seed_demo_tokens()
        app.state.started_at = datetime.now()

        yield

        logger.info("Shutting down MedSight API")
        await app.state.emr_client.close()
        await app.state.ai_service.close()

    app = FastAPI(
        title="MedSight AI API",
        description="Clinical backend-for-frontend over the DORRA EMR",
        version="1.0.0",
        lifespan=lifespan
    )

    generators = None
    if ai_service is None or translation_service is None:
        generators = build_generators(config.ai)

    app.state.config = config
    app.state.local_store = LocalDataStore(
        encounter_id_offset=config.local_store.encounter_id_offset,
        medication_id_offset=config.local_store.medication_id_offset
    )
    app.state.token_broker = PrescriptionTokenBroker(
        ttl=timedelta(hours=config.tokens.ttl_hours),
        demo_ttl=timedelta(days=config.tokens.demo_ttl_days),
        token_prefix=config.tokens.token_prefix,
        demo_prefix=config.tokens.demo_prefix
    )
    app.state.adr_store = ADRReportStore()
    app.state.emr_client = emr_client or EMRClient(config.emr)
    app.state.ai_service = ai_service or ClinicalAIService(generators)
    app.state.translation_service = translation_service or TranslationService(generators)
    app.state.started_at = None

    # Add middleware
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    request_logger = RequestLogger()

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        await request_logger.log_request(request, response, time.perf_counter() - started)
        return response

    @app.exception_handler(MedSightBaseException)
    async def medsight_exception_handler(request: Request, exc: MedSightBaseException):
        status_code, body = handle_medsight_exception(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": "error", "error": exc.detail}
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"status": "error", "error": "Something went wrong!", "message": str(exc)}
        )

    for module in (auth, patients, encounters, medications, appointments, safety, adr, ai, translate, pharmacy):
        app.include_router(module.router)

    @app.get("/health")
    async def health_check():
        return {
            "status": "ok",
            "message": "MedSight AI API running",
            "timestamp": datetime.now().isoformat(),
            "local_store": app.state.local_store.get_stats(),
            "tokens": app.state.token_broker.get_stats(),
            "emr": app.state.emr_client.get_stats()
        }

    return app

setup_logging()
app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=get_config().app.host, port=get_config().app.port, reload=get_config().app.debug)
