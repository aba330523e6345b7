"""
gemscribe.llm.models - Gemini REST wire models.

Pydantic models for file descriptors, generateContent requests, and
generateContent responses. Field aliases match the camelCase JSON keys.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WireModel(BaseModel):
    """Base for models that round-trip through camelCase JSON."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class FileState(str, Enum):
    """Processing state of an uploaded file, as reported by the service."""

    PROCESSING = "PROCESSING"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"
    UNRECOGNIZED = "UNRECOGNIZED"


class RemoteFile(WireModel):
    """Server-side descriptor of an uploaded media file."""

    name: str
    uri: str
    mime_type: str = Field(alias="mimeType")
    size_bytes: int = Field(alias="sizeBytes")
    create_time: datetime = Field(alias="createTime")
    update_time: datetime = Field(alias="updateTime")
    expiration_time: datetime = Field(alias="expirationTime")
    sha256_hash: str = Field(alias="sha256Hash")
    state: FileState
    display_name: str | None = Field(default=None, alias="displayName")
    source: str | None = None

    @field_validator("state", mode="before")
    @classmethod
    def coerce_state(cls, v: Any) -> FileState:
        try:
            return FileState(v)
        except ValueError:
            return FileState.UNRECOGNIZED

    @property
    def is_active(self) -> bool:
        return self.state is FileState.ACTIVE


class UploadResponse(WireModel):
    file: RemoteFile


class TextPart(WireModel):
    text: str


class FileData(WireModel):
    mime_type: str = Field(alias="mimeType")
    file_uri: str = Field(alias="fileUri")


class FileDataPart(WireModel):
    file_data: FileData = Field(alias="fileData")


Part = TextPart | FileDataPart


class Content(WireModel):
    """One content block: an ordered list of parts."""

    parts: list[Part]


class Tool(WireModel):
    """Capability marker; only Google Search grounding is used."""

    google_search: dict[str, Any] = Field(default_factory=dict, alias="googleSearch")


class GenerateContentRequest(WireModel):
    contents: list[Content]
    tools: list[Tool] | None = None


class UsageMetadata(WireModel):
    prompt_token_count: int = Field(default=0, alias="promptTokenCount")
    candidates_token_count: int = Field(default=0, alias="candidatesTokenCount")
    total_token_count: int = Field(default=0, alias="totalTokenCount")


class SearchEntryPoint(WireModel):
    rendered_content: str | None = Field(default=None, alias="renderedContent")


class WebChunk(WireModel):
    uri: str | None = None
    title: str | None = None


class GroundingChunk(WireModel):
    web: WebChunk | None = None


class GroundingMetadata(WireModel):
    search_entry_point: SearchEntryPoint | None = Field(default=None, alias="searchEntryPoint")
    grounding_chunks: list[GroundingChunk] | None = Field(default=None, alias="groundingChunks")


class CandidateContent(WireModel):
    # Parts are kept raw; only a leading text part is meaningful here.
    parts: list[dict[str, Any]] = Field(default_factory=list)
    role: str | None = None


class Candidate(WireModel):
    content: CandidateContent | None = None
    finish_reason: str | None = Field(default=None, alias="finishReason")
    index: int | None = None
    safety_ratings: list[dict[str, Any]] | None = Field(default=None, alias="safetyRatings")
    grounding_metadata: GroundingMetadata | None = Field(default=None, alias="groundingMetadata")


class GenerateContentResponse(WireModel):
    candidates: list[Candidate] = Field(default_factory=list)
    usage_metadata: UsageMetadata | None = Field(default=None, alias="usageMetadata")


class GroundingSource(BaseModel):
    uri: str | None = None
    title: str | None = None


class GroundingEvidence(BaseModel):
    """Search material returned alongside a grounded response."""

    rendered_content: str | None = None
    sources: list[GroundingSource] = Field(default_factory=list)


class GenerationResult(BaseModel):
    """Parsed outcome of a successful generateContent call."""

    text: str
    model: str
    usage: UsageMetadata | None = None
    grounding: GroundingEvidence | None = None
    finish_reason: str | None = None


def text_content(prompt: str) -> Content:
    """Content block holding a single text part."""
    return Content(parts=[TextPart(text=prompt)])


def file_content(remote_file: RemoteFile, prompt: str) -> Content:
    """Content block pairing an uploaded file with a text prompt."""
    file_data = FileData(mime_type=remote_file.mime_type, file_uri=remote_file.uri)
    return Content(parts=[FileDataPart(file_data=file_data), TextPart(text=prompt)])
