"""
Conversion configuration for the /api/convert endpoint.

This module defines the upstream endpoint tables for both conversion
directions and the environment-driven settings used to reach the
PDF.co API.
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Tuple


# Upstream provider defaults
DEFAULT_BASE_URL = "https://api.pdf.co/v1"

# Trial key accepted by PDF.co for non-production use only
DEMO_API_KEY = "demo"


@dataclass(frozen=True)
class Settings:
    """Settings for talking to the upstream conversion provider."""

    api_key: str = DEMO_API_KEY
    base_url: str = DEFAULT_BASE_URL
    read_timeout: float = 60.0
    connect_timeout: float = 10.0
    max_concurrency: int = 4

    @classmethod
    def from_env(cls) -> 'Settings':
        """Create settings from environment variables."""
        return cls(
            api_key=os.getenv('PDF_CO_API_KEY') or DEMO_API_KEY,
            base_url=(os.getenv('PDF_CO_BASE_URL') or DEFAULT_BASE_URL).rstrip('/'),
            read_timeout=float(os.getenv('CONVERT_PROXY_HTTP_TIMEOUT', '60')),
            connect_timeout=float(os.getenv('CONVERT_PROXY_CONNECT_TIMEOUT', '10')),
            max_concurrency=max(1, int(os.getenv('CONVERT_PROXY_MAX_CONCURRENCY', '4'))),
        )

    @property
    def uses_demo_key(self) -> bool:
        return self.api_key == DEMO_API_KEY


# Output format that triggers the to-PDF direction
PDF_FORMAT = "pdf"

# Last-resort output format for the from-PDF cascade
FALLBACK_FORMAT = "txt"

# Page range covering every page of the source PDF
ALL_PAGES = "1-"

# Quality hints the UI offers; none of them is sent upstream
QUALITY_LEVELS = ("low", "medium", "high")

# Input MIME type -> "convert from X to PDF" endpoint
TO_PDF_ENDPOINTS: Dict[str, str] = {
    "application/msword": "/pdf/convert/from/doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "/pdf/convert/from/docx",
    "application/vnd.ms-powerpoint": "/pdf/convert/from/ppt",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": "/pdf/convert/from/pptx",
    "application/vnd.ms-excel": "/pdf/convert/from/xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "/pdf/convert/from/xlsx",
    "text/plain": "/pdf/convert/from/text",
    "image/png": "/pdf/convert/from/image",
    "image/jpeg": "/pdf/convert/from/image",
    "image/jpg": "/pdf/convert/from/image",
    "image/gif": "/pdf/convert/from/image",
    "image/bmp": "/pdf/convert/from/image",
    "image/tiff": "/pdf/convert/from/image",
    "image/webp": "/pdf/convert/from/image",
}

# Output format -> ordered (endpoint, extension) candidates, most reliable first.
# DOCX generation from PDF is the weakest upstream capability, so it degrades
# through progressively simpler word-processor formats.
FROM_PDF_CANDIDATES: Dict[str, List[Tuple[str, str]]] = {
    "docx": [
        ("/pdf/convert/to/docx", ".docx"),
        ("/pdf/convert/to/doc", ".doc"),
        ("/pdf/convert/to/rtf", ".rtf"),
    ],
    "txt": [
        ("/pdf/convert/to/text", ".txt"),
    ],
    "png": [
        ("/pdf/convert/to/png", ".png"),
    ],
    "jpg": [
        ("/pdf/convert/to/jpg", ".jpg"),
    ],
}

# Temporary storage endpoints
UPLOAD_BASE64_PATH = "/file/upload/base64"
PRESIGNED_URL_PATH = "/file/upload/get-presigned-url"

# The base64 upload endpoint is not consistent about where it puts the URL
UPLOAD_URL_FIELDS = ("url", "fileUrl", "uploadedUrl")

OUTPUT_FORMATS = [PDF_FORMAT] + list(FROM_PDF_CANDIDATES.keys())
