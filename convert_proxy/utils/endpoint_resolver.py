"""
Endpoint lookup utilities for the /api/convert endpoint.

Pure mapping logic: given a declared MIME type or a requested output format,
return the upstream endpoint(s) to try. No I/O happens here.
"""

from typing import Dict, List

from ..config import FROM_PDF_CANDIDATES, OUTPUT_FORMATS, TO_PDF_ENDPOINTS
from ..models import EndpointCandidate
from .error_handling import UnsupportedInputType, UnsupportedOutputFormat


def resolve_to_pdf(declared_type: str) -> EndpointCandidate:
    """
    Get the "convert X to PDF" endpoint for a declared input MIME type.

    Only exact matches against the fixed table are accepted; there is no
    content sniffing.

    Raises:
        UnsupportedInputType: If the MIME type is not in the table
    """
    path = TO_PDF_ENDPOINTS.get(declared_type)
    if path is None:
        raise UnsupportedInputType(declared_type)
    return EndpointCandidate(path=path, target_extension=".pdf")


def resolve_from_pdf(output_format: str) -> List[EndpointCandidate]:
    """
    Get the ordered "convert PDF to X" candidates for an output format.

    Earlier candidates are preferred. A fresh list is returned on every call.

    Raises:
        UnsupportedOutputFormat: If the format has no candidates
    """
    candidates = FROM_PDF_CANDIDATES.get(output_format)
    if not candidates:
        raise UnsupportedOutputFormat(output_format)
    return [EndpointCandidate(path=path, target_extension=ext) for path, ext in candidates]


def supported_conversions() -> Dict[str, List[str]]:
    """Get the supported input MIME types and output formats."""
    return {
        "input_types": sorted(TO_PDF_ENDPOINTS.keys()),
        "output_formats": list(OUTPUT_FORMATS),
    }
