"""
FastAPI application entry point.

Run with an ASGI server, e.g. ``uvicorn mismo_ldd.api.app:app``.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..config.config_manager import get_config_manager
from ..config.processing_defaults import ValidationDefaults
from ..exceptions import UnknownActionError, UnknownSchemaPackError
from .routes import router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Set up logging without reconfiguring root if already configured."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, level, logging.INFO))


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Load the LDD contract and resolve the default pack at startup so bad configuration fails fast."""
    config_manager = get_config_manager()
    configure_logging(config_manager.settings.log_level)
    summary = config_manager.get_configuration_summary()
    logger.info(
        f"MISMO LDD rules engine v{__version__}: contract {summary['contract_version']}, "
        f"default pack {summary['default_pack_id']}"
    )
    ValidationDefaults.log_summary(logger)
    yield


app = FastAPI(
    title="MISMO LDD Rules Engine",
    description="MISMO 3.4 LDD validation and field mapping",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(router)


@app.exception_handler(UnknownActionError)
async def unknown_action_handler(request: Request, exc: UnknownActionError):
    logger.warning(f"Rejected unknown action {exc.action!r} on {request.url.path}")
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(UnknownSchemaPackError)
async def unknown_pack_handler(request: Request, exc: UnknownSchemaPackError):
    logger.warning(f"Rejected unknown schema pack {exc.pack_id!r}")
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors, reported in the same shape as other errors."""
    return JSONResponse(status_code=400, content={"error": f"Invalid request body: {exc.errors()}"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions: log and return 500 with the message."""
    logger.exception(f"Unhandled exception on {request.url.path}")
    return JSONResponse(status_code=500, content={"error": str(exc)})
