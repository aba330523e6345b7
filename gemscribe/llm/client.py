"""
gemscribe.llm.client - Gemini REST client using httpx.

Covers the three remote operations the pipeline needs: multipart file
upload, bounded polling of a file's processing state, and generateContent
with optional Google Search grounding.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from gemscribe.config import DEFAULT_BASE_URL
from gemscribe.exceptions import (
    GenerationError,
    InputError,
    MissingCredentialError,
    NoTextContentError,
    PollTimeoutError,
    ProcessingError,
    SchemaError,
    TransportError,
    UploadError,
    UploadSchemaError,
)
from gemscribe.llm.models import (
    Content,
    FileState,
    GenerateContentRequest,
    GenerateContentResponse,
    GenerationResult,
    GroundingEvidence,
    GroundingMetadata,
    GroundingSource,
    RemoteFile,
    Tool,
    UploadResponse,
    UsageMetadata,
    file_content,
    text_content,
)

logger = logging.getLogger(__name__)

MODEL_PREFIX = "models/"
API_VERSION = "v1beta"


def normalize_model_id(model: str) -> str:
    """Strip a leading "models/" namespace so endpoint paths stay well formed."""
    model = model.strip()
    if model.startswith(MODEL_PREFIX):
        return model[len(MODEL_PREFIX) :]
    return model


class GeminiClient:
    """Gemini API client for uploads, processing polls, and generation."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-pro",
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        poll_max_attempts: int = 30,
        poll_interval: float = 1.0,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not api_key:
            raise MissingCredentialError("API key cannot be empty")

        self.model = model
        self.base_url = base_url.rstrip("/")
        self.poll_max_attempts = poll_max_attempts
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._http = httpx.Client(
            base_url=self.base_url,
            headers={"x-goog-api-key": api_key},
            timeout=timeout,
            transport=transport,
        )
        self._token_usage = {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}

    def __enter__(self) -> GeminiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    # Remote file transfer

    def upload_file(self, file_path: Path, mime_type: str) -> RemoteFile:
        """Upload a local file to the Files API in a single multipart request.

        Args:
            file_path: Local media file
            mime_type: MIME type declared for the data part

        Returns:
            Descriptor of the uploaded file (usually still PROCESSING)

        Raises:
            UploadError: If the file can't be read or the request fails
            UploadSchemaError: If the response isn't a file descriptor
        """
        try:
            file_bytes = file_path.read_bytes()
        except OSError as e:
            raise UploadError(f"Failed to read {file_path}: {e}") from e

        metadata = json.dumps({"file": {"displayName": file_path.name}})
        files = {
            "metadata": (None, metadata.encode("utf-8"), "application/json"),
            "data": (file_path.name, file_bytes, mime_type),
        }

        logger.info("Uploading %s (%d bytes, %s)", file_path.name, len(file_bytes), mime_type)

        try:
            response = self._http.post(
                f"/upload/{API_VERSION}/files",
                files=files,
                headers={"X-Goog-Upload-Protocol": "multipart"},
            )
        except httpx.HTTPError as e:
            raise UploadError(f"File upload failed: {e}") from e

        if not response.is_success:
            raise UploadError("File upload failed", response.status_code, response.text)

        logger.debug("Upload response: %s", response.text)

        try:
            uploaded = UploadResponse.model_validate_json(response.text)
        except ValidationError as e:
            raise UploadSchemaError(f"Failed to parse upload response: {e}", response.text) from e

        logger.info("Uploaded %s as %s", file_path.name, uploaded.file.name)
        return uploaded.file

    # Processing state poller

    def get_file(self, name: str) -> RemoteFile:
        """Read the current descriptor of an uploaded file.

        Raises:
            TransportError: On transport failure (no status) or non-2xx status
            SchemaError: If the body isn't a file descriptor
        """
        try:
            response = self._http.get(f"/{API_VERSION}/{name}")
        except httpx.HTTPError as e:
            raise TransportError(f"File status request failed: {e}") from e

        if not response.is_success:
            raise TransportError("File status request failed", response.status_code, response.text)

        try:
            return RemoteFile.model_validate_json(response.text)
        except ValidationError as e:
            raise SchemaError(f"Failed to parse file status: {e}", response.text) from e

    def wait_until_active(self, name: str) -> RemoteFile:
        """Poll a file until it is ACTIVE, sleeping a fixed interval between reads.

        Each read consumes one attempt. PROCESSING, unrecognized states, and
        non-2xx status reads are all treated as "not ready yet".

        Args:
            name: File resource name (e.g. "files/abc123")

        Returns:
            The ACTIVE descriptor

        Raises:
            ProcessingError: If the file reaches FAILED
            PollTimeoutError: If no read observes ACTIVE or FAILED
            TransportError: If a read gets no response at all
            SchemaError: If a successful read has an unparseable body
        """
        for attempt in range(1, self.poll_max_attempts + 1):
            if attempt > 1:
                self._sleep(self.poll_interval)

            try:
                remote_file = self.get_file(name)
            except TransportError as e:
                if e.status_code is None:
                    raise
                logger.debug(
                    "Status read for %s returned %s (attempt %d/%d)",
                    name,
                    e.status_code,
                    attempt,
                    self.poll_max_attempts,
                )
                continue

            if remote_file.state is FileState.ACTIVE:
                logger.info("File %s is active after %d attempt(s)", name, attempt)
                return remote_file
            if remote_file.state is FileState.FAILED:
                raise ProcessingError(name)

            logger.debug(
                "File %s is %s (attempt %d/%d)",
                name,
                remote_file.state.value,
                attempt,
                self.poll_max_attempts,
            )

        raise PollTimeoutError(name, self.poll_max_attempts)

    # Content generation

    def generate_content(
        self,
        contents: Iterable[Content],
        model: str | None = None,
        search: bool = False,
    ) -> GenerationResult:
        """Call generateContent and return the first candidate's text.

        Args:
            contents: Ordered content blocks
            model: Model id, with or without a "models/" prefix
            search: Request Google Search grounding

        Returns:
            GenerationResult with text, usage, and (if searching) grounding

        Raises:
            GenerationError: On transport failure or non-2xx status
            SchemaError: If the body isn't a generateContent response
            NoTextContentError: If there's no candidate or its first part isn't text
        """
        model_id = normalize_model_id(model or self.model)
        request = GenerateContentRequest(
            contents=list(contents),
            tools=[Tool()] if search else None,
        )

        logger.info("Generating with %s (search=%s)", model_id, search)

        try:
            response = self._http.post(
                f"/{API_VERSION}/models/{model_id}:generateContent",
                json=request.to_wire(),
            )
        except httpx.HTTPError as e:
            raise GenerationError(f"Content generation failed: {e}") from e

        if not response.is_success:
            raise GenerationError("Content generation failed", response.status_code, response.text)

        logger.debug("Generate content response: %s", response.text)

        try:
            parsed = GenerateContentResponse.model_validate_json(response.text)
        except ValidationError as e:
            raise SchemaError(f"Failed to parse generation response: {e}", response.text) from e

        self._record_usage(parsed.usage_metadata)
        return _build_result(parsed, model_id, search)

    def generate_from_file(
        self,
        remote_file: RemoteFile,
        prompt: str,
        model: str | None = None,
    ) -> GenerationResult:
        """Generate from an ACTIVE uploaded file followed by a text prompt."""
        if not remote_file.is_active:
            raise InputError(
                f"File {remote_file.name} is {remote_file.state.value}, not ACTIVE"
            )
        return self.generate_content([file_content(remote_file, prompt)], model=model)

    def generate_text(
        self,
        prompt: str,
        model: str | None = None,
        search: bool = False,
    ) -> GenerationResult:
        """Generate from a single text prompt."""
        return self.generate_content([text_content(prompt)], model=model, search=search)

    def _record_usage(self, usage: UsageMetadata | None) -> None:
        if usage is None:
            return
        self._token_usage["prompt_tokens"] += usage.prompt_token_count
        self._token_usage["completion_tokens"] += usage.candidates_token_count
        self._token_usage["total_tokens"] += usage.total_token_count

    def get_token_usage(self) -> dict[str, int]:
        """Get cumulative token usage."""
        return self._token_usage.copy()

    def reset_token_usage(self) -> None:
        """Reset token usage counters."""
        self._token_usage = {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}


def _build_result(
    response: GenerateContentResponse,
    model_id: str,
    search: bool,
) -> GenerationResult:
    if not response.candidates:
        raise NoTextContentError("No candidate found in response")

    candidate = response.candidates[0]
    parts = candidate.content.parts if candidate.content else []
    text = parts[0].get("text") if parts else None
    if not isinstance(text, str):
        raise NoTextContentError(
            f"No text content found in response (finish reason: {candidate.finish_reason})"
        )

    grounding = None
    if search and candidate.grounding_metadata is not None:
        grounding = _build_grounding(candidate.grounding_metadata)

    return GenerationResult(
        text=text,
        model=model_id,
        usage=response.usage_metadata,
        grounding=grounding,
        finish_reason=candidate.finish_reason,
    )


def _build_grounding(metadata: GroundingMetadata) -> GroundingEvidence:
    rendered = None
    if metadata.search_entry_point is not None:
        rendered = metadata.search_entry_point.rendered_content

    sources = [
        GroundingSource(uri=chunk.web.uri, title=chunk.web.title)
        for chunk in metadata.grounding_chunks or []
        if chunk.web is not None
    ]
    return GroundingEvidence(rendered_content=rendered, sources=sources)


def create_client_from_config(
    config: Any,
    api_key: str,
    transport: httpx.BaseTransport | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> GeminiClient:
    """Create a Gemini client from GemscribeConfig.

    Args:
        config: GemscribeConfig instance
        api_key: Resolved API key
        transport: Optional httpx transport (tests)
        sleep: Sleep function used between status polls

    Returns:
        Configured GeminiClient
    """
    return GeminiClient(
        api_key=api_key,
        model=config.model,
        base_url=config.base_url,
        timeout=config.request_timeout,
        poll_max_attempts=config.poll_max_attempts,
        poll_interval=config.poll_interval,
        transport=transport,
        sleep=sleep,
    )
