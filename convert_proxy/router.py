"""
Conversion router for the /api/convert endpoints.

The single conversion route takes a batch of base64 encoded files and hands
it to the orchestrator, which forwards each file to the upstream provider.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from .models import ConversionRequest, ConversionResponse
from .utils.endpoint_resolver import supported_conversions
from .utils.error_handling import ErrorCode, create_error_response
from .utils.logging_config import get_logger
from .utils.orchestrator import ConversionOrchestrator

logger = get_logger(__name__)

router = APIRouter(prefix="/api/convert", tags=["conversions"])


def get_orchestrator(request: Request) -> ConversionOrchestrator:
    """Orchestrator built at application startup."""
    return request.app.state.orchestrator


@router.post("", response_model=ConversionResponse, response_model_exclude_none=True)
async def convert_files(
    body: ConversionRequest,
    orchestrator: ConversionOrchestrator = Depends(get_orchestrator)
):
    """
    Convert a batch of files to the requested output format.

    Returns 200 when at least one file converted (files that failed are
    omitted), 400 for an empty batch and 500 when nothing converted.
    """
    if not body.files:
        return create_error_response(ErrorCode.MISSING_PARAMETER, "No files provided")

    try:
        outcome = await orchestrator.convert_batch(body.file_inputs(), body.outputFormat, body.quality)
    except Exception as e:
        logger.exception("Conversion API error")
        return create_error_response(ErrorCode.INTERNAL_ERROR, str(e) or "Internal server error")

    if not outcome.success:
        return create_error_response(
            ErrorCode.CONVERSION_FAILED,
            outcome.last_error or "Failed to convert any files"
        )

    if outcome.file_errors:
        logger.warning(
            f"Partial batch: {len(outcome.file_errors)} of {len(body.files)} file(s) not converted: "
            f"{[name for _, name in sorted(outcome.file_errors)]}"
        )

    return {
        "success": True,
        "files": [f.to_dict() for f in outcome.succeeded_files],
    }


@router.get("/supported")
async def get_supported_conversions_endpoint():
    """Get the supported input MIME types and output formats"""
    return JSONResponse(content=supported_conversions())
