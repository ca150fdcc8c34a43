"""Core data models for the CV screener."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from src.core.errors import UnsupportedFormat

DocumentExtension = Literal["pdf", "doc", "docx"]
SUPPORTED_EXTENSIONS: tuple[str, ...] = ("pdf", "doc", "docx")

FAILED_ROLE = "Analysis Failed"
CANCELLED_ROLE = "Analysis Cancelled"
TRUNCATED_TEXT_LENGTH = 500


def file_extension(file_name: str) -> str:
    """Lower-cased extension without the dot ('' when there is none)."""
    return Path(file_name).suffix.lower().lstrip(".")


class CandidateDocument(BaseModel):
    """A résumé file admitted into a screening session."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    size_bytes: int = Field(ge=0)
    raw_blob: bytes = Field(repr=False)
    declared_extension: DocumentExtension

    @classmethod
    def from_bytes(cls, file_name: str, blob: bytes) -> "CandidateDocument":
        """Build a document, inferring the extension from the file name."""
        ext = file_extension(file_name)
        if ext not in SUPPORTED_EXTENSIONS:
            msg = f"Unsupported file format for '{file_name}': .{ext or '?'}"
            raise UnsupportedFormat(file_name, msg)
        return cls(
            file_name=file_name,
            size_bytes=len(blob),
            raw_blob=blob,
            declared_extension=ext,  # type: ignore[arg-type]
        )


class AnalysisFields(BaseModel):
    """Fields recovered from one scoring reply.

    ``parse_error`` is empty on success and carries the reason otherwise.
    """

    model_config = ConfigDict(frozen=True)

    name: str = "Unknown"
    role: str = "Unknown"
    company: str = "Unknown"
    duration: str = "Unknown"
    education: str = "Unknown"
    score: int = Field(default=0, ge=0, le=100)
    summary: str = "No summary available"
    rationale: str = "No rationale available"
    strengths: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    recommendation: str = ""
    parse_error: str = ""


class AnalysisResult(BaseModel):
    """The outcome for exactly one CandidateDocument.

    Frozen. Failures are represented by sentinel results (score 0) rather
    than by missing rows.
    """

    model_config = ConfigDict(frozen=True)

    file_name: str
    name: str = "Unknown"
    role: str = "Unknown"
    company: str = "Unknown"
    duration: str = "Unknown"
    education: str = "Unknown"
    score: int = Field(default=0, ge=0, le=100)
    summary: str = ""
    rationale: str = ""
    strengths: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    recommendation: str = ""
    truncated_text: str = ""
    source_document: CandidateDocument | None = Field(default=None, exclude=True, repr=False)
    # Set only by ``failure``.
    failed: bool = Field(default=False, exclude=True, repr=False)

    @property
    def is_failure(self) -> bool:
        return self.failed

    @classmethod
    def from_fields(
        cls,
        document: CandidateDocument,
        fields: AnalysisFields,
        text: str,
    ) -> "AnalysisResult":
        return cls(
            file_name=document.file_name,
            **fields.model_dump(exclude={"parse_error"}),
            truncated_text=text[:TRUNCATED_TEXT_LENGTH],
            source_document=document,
        )

    @classmethod
    def failure(
        cls,
        document: CandidateDocument,
        summary: str,
        rationale: str,
        *,
        role: str = FAILED_ROLE,
    ) -> "AnalysisResult":
        """Sentinel result for a document whose pipeline did not complete."""
        return cls(
            file_name=document.file_name,
            name="Error",
            role=role,
            score=0,
            summary=summary,
            rationale=rationale,
            source_document=document,
            failed=True,
        )


class ResultPage(BaseModel):
    """One page of the filtered and sorted result view."""

    number: int
    page_size: int
    total_items: int
    total_pages: int
    items: list[AnalysisResult] = Field(default_factory=list)

    @property
    def start_index(self) -> int:
        """1-based index of the first item on this page (0 when empty)."""
        if not self.items:
            return 0
        return (self.number - 1) * self.page_size + 1

    @property
    def end_index(self) -> int:
        if not self.items:
            return 0
        return self.start_index + len(self.items) - 1

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.total_pages
