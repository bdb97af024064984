"""
Data types shared by the resolver, orchestrator and router.

Wire models (request/response bodies) are pydantic models so FastAPI can
validate them; the internal types are frozen dataclasses.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

_EXTENSION_RE = re.compile(r"\.[^/.]+$")


def replace_extension(name: str, extension: str) -> str:
    """Swap the final extension of ``name`` for ``extension`` (appended if absent)."""
    if _EXTENSION_RE.search(name):
        return _EXTENSION_RE.sub(extension, name)
    return f"{name}{extension}"


@dataclass(frozen=True)
class FileInput:
    """One uploaded file as supplied by the client."""

    name: str
    data: str  # base64 payload
    type: str  # declared MIME type

    def data_uri(self) -> str:
        return f"data:{self.type};base64,{self.data}"


@dataclass(frozen=True)
class EndpointCandidate:
    """One upstream path that can perform a specific format conversion."""

    path: str
    target_extension: str


@dataclass(frozen=True)
class ConvertedFile:
    name: str
    url: str
    size: int = 0

    def to_dict(self) -> Dict[str, object]:
        return {"name": self.name, "url": self.url, "size": self.size}


@dataclass
class ConversionOutcome:
    """Batch-level result: successful if at least one file converted."""

    succeeded_files: List[ConvertedFile] = field(default_factory=list)
    last_error: Optional[str] = None
    # (batch index, file name) -> message; names can repeat within a batch
    file_errors: Dict[Tuple[int, str], str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return len(self.succeeded_files) > 0


# ===== WIRE MODELS =====

class FilePayload(BaseModel):
    name: str = Field(..., min_length=1)
    data: str
    type: str

    def to_input(self) -> FileInput:
        return FileInput(name=self.name, data=self.data, type=self.type)


class ConversionRequest(BaseModel):
    files: List[FilePayload] = Field(default_factory=list)
    # Left as a free string so unknown formats fail per file, like the upstream contract
    outputFormat: str
    # Accepted for forward compatibility; not sent upstream
    quality: str = "medium"

    def file_inputs(self) -> List[FileInput]:
        return [f.to_input() for f in self.files]


class ConvertedFilePayload(BaseModel):
    name: str
    url: str
    size: int


class ConversionResponse(BaseModel):
    success: bool
    files: Optional[List[ConvertedFilePayload]] = None
    error: Optional[str] = None
