import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from postbox.api.routes import router
from postbox.clients import Clients
from postbox.config import settings
from postbox.errors import ConfigurationError, PostboxError
from postbox.services.diagnostics_service import DiagnosticsService
from postbox.services.submission_pipeline import SubmissionPipeline


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    _configure_logging()
    logger = logging.getLogger(__name__)
    logger.info(
        "Postbox starting | region=%s | table=%s | bucket=%s | port=%s",
        settings.region,
        settings.table_name,
        settings.bucket_name,
        settings.PORT,
    )
    try:
        clients = Clients.from_settings(settings)
        clients_error = None
    except ConfigurationError as exc:
        logger.error("AWS clients not initialized | reason=%s", exc.message)
        clients = None
        clients_error = exc
    app.state.clients = clients
    app.state.clients_error = clients_error
    app.state.pipeline = (
        SubmissionPipeline(clients, attachment_prefix=settings.ATTACHMENT_PREFIX) if clients else None
    )
    app.state.diagnostics = DiagnosticsService(settings, clients, clients_error)
    yield
    logger.info("Postbox shutting down")


def create_app() -> FastAPI:
    app = FastAPI(title="Postbox", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    app.include_router(router)

    @app.exception_handler(PostboxError)
    async def postbox_exception_handler(request: Request, exc: PostboxError) -> JSONResponse:
        logging.getLogger(__name__).warning(
            "Request failed | path=%s | kind=%s | message=%s", request.url.path, exc.kind, exc.message
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logging.getLogger(__name__).exception("Unhandled exception")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "internal_error", "message": "Internal server error"},
        )

    return app


app = create_app()


def run() -> None:
    uvicorn.run("postbox.main:app", host="0.0.0.0", port=settings.PORT, log_level=settings.LOG_LEVEL)


if __name__ == "__main__":
    run()
