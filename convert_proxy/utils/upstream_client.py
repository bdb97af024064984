"""
Thin async client for the PDF.co API.

Wraps the three kinds of upstream calls the conversion pipeline needs:
conversion requests, uploads to temporary storage, and size probes of the
converted result.
"""

import base64
import binascii
from typing import Any, Dict, Iterable, Optional, Tuple

import httpx

from ..config import PRESIGNED_URL_PATH, UPLOAD_BASE64_PATH, UPLOAD_URL_FIELDS
from .error_handling import PresignError, SizeProbeFailure, UpstreamUploadError
from .logging_config import get_logger

logger = get_logger(__name__)


def extract_result_url(body: Any, fields: Iterable[str] = ("url",)) -> Optional[str]:
    """
    Return the first non-empty URL among ``fields`` in a response body.

    The provider is not consistent about which field carries the uploaded
    file URL, so callers pass every known field name in preference order.
    """
    if not isinstance(body, dict):
        return None
    for name in fields:
        value = body.get(name)
        if isinstance(value, str) and value:
            return value
    return None


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class UpstreamClient:
    """
    Calls to the conversion provider.

    Args:
        api_client: Client preconfigured with the provider base URL and API key
        storage_client: Client for presigned uploads and result probes
    """

    def __init__(self, api_client: httpx.AsyncClient, storage_client: httpx.AsyncClient):
        self.api_client = api_client
        self.storage_client = storage_client

    async def post_json(self, path: str, payload: Dict[str, Any]) -> Tuple[httpx.Response, Dict[str, Any]]:
        """POST a JSON payload to a provider path; returns the response and its parsed body."""
        response = await self.api_client.post(path, json=payload)
        return response, _json_body(response)

    async def upload_temp_storage(self, data: str, name: str) -> str:
        """
        Upload a file to the provider's temporary storage and return its URL.

        The base64 endpoint is tried first since it costs one round trip; any
        failure there falls back to the presigned URL flow (presign, then PUT).

        Args:
            data: Base64 payload as received from the client
            name: File name to register upstream

        Raises:
            PresignError: If no presigned URL could be obtained
            UpstreamUploadError: If the payload is not valid base64 or the PUT fails
        """
        try:
            logger.info(f"Uploading {name} via {UPLOAD_BASE64_PATH}")
            response, body = await self.post_json(UPLOAD_BASE64_PATH, {"file": data, "name": name})
            url = extract_result_url(body, UPLOAD_URL_FIELDS)
            if response.is_success and url:
                return url
            logger.warning(f"Base64 upload failed: {response.status_code} {body.get('message', '')}")
        except httpx.HTTPError as e:
            logger.warning(f"Base64 upload raised {type(e).__name__}: {e}")

        logger.info(f"Requesting presigned upload URL via {PRESIGNED_URL_PATH}")
        try:
            response, body = await self.post_json(
                PRESIGNED_URL_PATH,
                {"name": name, "contenttype": "application/octet-stream"}
            )
        except httpx.HTTPError as e:
            raise PresignError(None, f"Upload presign failed at {PRESIGNED_URL_PATH}: {e}") from e

        presigned_url = extract_result_url(body, ("presignedUrl",))
        file_url = extract_result_url(body, ("url",))
        if not response.is_success or not presigned_url or not file_url:
            raise PresignError(
                response.status_code,
                f"Upload presign failed ({response.status_code}) at {PRESIGNED_URL_PATH}: "
                f"{body.get('message') or 'Unknown'}"
            )

        try:
            payload = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise UpstreamUploadError(None, f"Upload failed: payload for {name} is not valid base64") from e

        try:
            put_response = await self.storage_client.put(
                presigned_url,
                content=payload,
                headers={"Content-Type": "application/octet-stream"}
            )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise UpstreamUploadError(None, f"Upload PUT failed to presigned URL: {e}") from e

        if not put_response.is_success:
            raise UpstreamUploadError(
                put_response.status_code,
                f"Upload PUT failed ({put_response.status_code}) to presigned URL"
            )

        logger.info(f"Uploaded {name} to presigned storage; file URL: {file_url}")
        return file_url

    async def fetch_size(self, url: str) -> int:
        """
        Read the byte size of a result file with a HEAD request.

        Raises:
            SizeProbeFailure: If the size cannot be determined
        """
        try:
            response = await self.storage_client.head(url)
        except Exception as e:
            raise SizeProbeFailure(f"HEAD {url} failed: {e}") from e

        content_length = response.headers.get("content-length")
        if not content_length:
            raise SizeProbeFailure(f"HEAD {url} returned no content-length")
        try:
            return int(content_length)
        except ValueError as e:
            raise SizeProbeFailure(f"HEAD {url} returned bad content-length {content_length!r}") from e

    async def probe_size(self, url: str) -> int:
        """Byte size of a result file, or 0 when it cannot be determined."""
        try:
            return await self.fetch_size(url)
        except SizeProbeFailure as e:
            logger.debug(f"Size probe failed, reporting 0: {e}")
            return 0
