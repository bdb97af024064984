"""
Conversion orchestration for the /api/convert endpoint.

For every file in a batch this module picks the upstream endpoint(s), runs
the two-phase submission protocol (inline data URI first, then upload to
temporary storage and resubmit), and walks the ordered candidate cascade
for PDF-to-X conversions, ending with plain text as a universal fallback.
"""

import asyncio
from typing import Any, Dict, Optional, Sequence

import httpx

from ..config import ALL_PAGES, FALLBACK_FORMAT, PDF_FORMAT, QUALITY_LEVELS
from ..models import (
    ConversionOutcome,
    ConvertedFile,
    EndpointCandidate,
    FileInput,
    replace_extension,
)
from .endpoint_resolver import resolve_from_pdf, resolve_to_pdf
from .error_handling import ConversionError, UpstreamSubmissionError, describe_error
from .logging_config import format_file_size, get_logger
from .upstream_client import UpstreamClient, extract_result_url

logger = get_logger(__name__)


class ConversionOrchestrator:
    """
    Drives batch conversions against the upstream provider.

    Files in a batch are independent and run concurrently, bounded by
    ``max_concurrency``. Inside one file every step is sequential:
    phase 1 finishes before phase 2, and candidates are tried in order.

    Args:
        client: Upstream client carrying the provider credentials
        max_concurrency: Maximum number of files converted at once
    """

    def __init__(self, client: UpstreamClient, max_concurrency: int = 4):
        self.client = client
        self.max_concurrency = max(1, max_concurrency)

    async def convert_batch(
        self,
        files: Sequence[FileInput],
        output_format: str,
        quality: str = "medium"
    ) -> ConversionOutcome:
        """
        Convert every file, collecting successes and per-file failures.

        ``quality`` is accepted for forward compatibility only; no upstream
        endpoint receives it.

        Returns:
            ConversionOutcome whose ``last_error`` is the message of the last
            failed file in input order and whose ``file_errors`` is keyed by
            ``(index, name)``
        """
        if quality not in QUALITY_LEVELS:
            logger.warning(f"Unknown quality {quality!r}; ignoring it")
        logger.info(
            f"Converting batch of {len(files)} file(s) to {output_format} "
            f"(quality={quality}, concurrency={self.max_concurrency})"
        )
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _run(file: FileInput):
            async with semaphore:
                try:
                    return await self.convert_file(file, output_format)
                except Exception as e:
                    logger.error(f"Error converting file {file.name}: {describe_error(e)}")
                    return e

        results = await asyncio.gather(*(_run(file) for file in files))

        outcome = ConversionOutcome()
        for index, (file, result) in enumerate(zip(files, results)):
            if isinstance(result, ConvertedFile):
                outcome.succeeded_files.append(result)
            else:
                message = describe_error(result)
                outcome.file_errors[(index, file.name)] = message
                outcome.last_error = message

        logger.info(
            f"Batch finished: {len(outcome.succeeded_files)} converted, "
            f"{len(outcome.file_errors)} failed"
        )
        return outcome

    async def convert_file(self, file: FileInput, output_format: str) -> ConvertedFile:
        """Route one file to the to-PDF or from-PDF path."""
        if output_format == PDF_FORMAT:
            return await self.convert_to_pdf(file)
        return await self.convert_from_pdf_cascade(file, output_format)

    async def convert_to_pdf(self, file: FileInput) -> ConvertedFile:
        candidate = resolve_to_pdf(file.type)
        logger.info(f"to-PDF endpoint for {file.name}: {candidate.path}")
        return await self.submit_and_convert(file, candidate)

    async def convert_from_pdf_cascade(self, file: FileInput, output_format: str) -> ConvertedFile:
        """
        Try each candidate for ``output_format`` in order, then plain text.

        Raises:
            UnsupportedOutputFormat: Before any network call, for unknown formats
            ConversionError: The most recent failure once every candidate is exhausted
        """
        candidates = resolve_from_pdf(output_format)
        fallback_start = len(candidates)
        if output_format != FALLBACK_FORMAT:
            candidates.extend(resolve_from_pdf(FALLBACK_FORMAT))

        last_error: Optional[BaseException] = None
        for index, candidate in enumerate(candidates):
            if index == fallback_start:
                logger.warning(f"All {output_format} endpoints failed for {file.name}; falling back to text")
            logger.info(f"from-PDF endpoint for {file.name} ({index + 1}/{len(candidates)}): {candidate.path}")
            try:
                return await self.submit_and_convert(file, candidate, {"pages": ALL_PAGES})
            except Exception as e:
                logger.warning(f"Candidate {candidate.path} failed for {file.name}: {describe_error(e)}")
                last_error = e

        if last_error is not None:
            raise last_error
        raise ConversionError("Conversion failed for all attempted endpoints")

    async def submit_and_convert(
        self,
        file: FileInput,
        candidate: EndpointCandidate,
        extra: Optional[Dict[str, Any]] = None
    ) -> ConvertedFile:
        """
        Two-phase submission of one file to one endpoint.

        Phase 1 embeds the file as a data URI. If that is rejected or yields
        no result URL, phase 2 uploads the payload to temporary storage and
        resubmits with the uploaded URL.

        Raises:
            UpstreamSubmissionError: If phase 2 is rejected or yields no URL
            UpstreamUploadError: If the upload needed for phase 2 fails
        """
        target_name = replace_extension(file.name, candidate.target_extension)
        payload: Dict[str, Any] = {"url": file.data_uri(), "name": target_name}
        if extra:
            payload.update(extra)
        payload["async"] = False

        try:
            response, body = await self.client.post_json(candidate.path, payload)
            url = extract_result_url(body)
            if response.is_success and url:
                return await self._converted(target_name, url)
            logger.info(
                f"Inline submission to {candidate.path} rejected ({response.status_code}); "
                f"uploading {file.name}"
            )
        except httpx.HTTPError as e:
            logger.info(f"Inline submission to {candidate.path} raised {type(e).__name__}; uploading {file.name}")

        payload["url"] = await self.client.upload_temp_storage(file.data, file.name)
        response, body = await self.client.post_json(candidate.path, payload)

        if not response.is_success:
            raise UpstreamSubmissionError(response.status_code, body.get("message"), candidate.path)
        url = extract_result_url(body)
        if not url:
            raise UpstreamSubmissionError(None, body.get("message"))

        return await self._converted(target_name, url)

    async def _converted(self, name: str, url: str) -> ConvertedFile:
        size = await self.client.probe_size(url)
        logger.info(f"Converted {name} ({format_file_size(size)})")
        return ConvertedFile(name=name, url=url, size=size)
