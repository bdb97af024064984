from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

# Import the conversion router
from convert_proxy.router import router as convert_router

# Import upstream settings
from convert_proxy.config import Settings

# Import centralized error handling
from convert_proxy.utils.error_handling import create_error_response, ErrorCode

# Import centralized HTTP client factory
from convert_proxy.utils.http_client import (
    HTTPClientFactory,
    ServiceType,
    lifespan_http_clients
)

# Import centralized logging configuration
from convert_proxy.utils.logging_config import get_logger

from convert_proxy.utils.orchestrator import ConversionOrchestrator
from convert_proxy.utils.upstream_client import UpstreamClient


# Set up logging
logger = get_logger("convert_proxy.app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager with centralized HTTP client setup."""
    settings = Settings.from_env()
    if settings.uses_demo_key:
        logger.warning("PDF_CO_API_KEY not set; using the trial 'demo' key (not for production)")

    factory = HTTPClientFactory(settings)
    upstream = UpstreamClient(
        api_client=factory.create_client(ServiceType.PDFCO),
        storage_client=factory.create_client(ServiceType.STORAGE)
    )
    app.state.orchestrator = ConversionOrchestrator(upstream, max_concurrency=settings.max_concurrency)

    async with lifespan_http_clients(factory):
        yield


app = FastAPI(title="Convert Proxy", lifespan=lifespan)

# Include the conversion router
app.include_router(convert_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    return create_error_response(ErrorCode.INVALID_REQUEST, message)


@app.get("/ping")
async def general_ping():
    return {"success": True, "data": "PONG!"}
