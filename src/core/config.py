"""Configuration models and YAML loader for the CV screener."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024


class LLMConfig(BaseModel):
    """Remote scoring capability settings."""

    provider: str = "openai"
    model: str | None = None
    max_tokens: int = Field(default=1000, ge=1)
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    timeout_s: float | None = Field(default=60.0, gt=0)
    base_url: str | None = None  # ollama only


class BatchConfig(BaseModel):
    """Batch orchestration and pacing."""

    batch_size: int = Field(default=5, ge=1)
    batch_delay_ms: int = Field(default=1000, ge=0)
    max_concurrency: int | None = Field(default=None, ge=1)


class UploadLimits(BaseModel):
    """Admission limits for candidate documents."""

    max_file_size_bytes: int = Field(default=MAX_FILE_SIZE_BYTES, ge=1)
    max_files: int = Field(default=200, ge=1)
    supported_extensions: list[str] = Field(default_factory=lambda: ["pdf", "doc", "docx"])

    @field_validator("supported_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        return [ext.lower().strip().lstrip(".") for ext in v if ext.strip()]


class ViewConfig(BaseModel):
    """Result view defaults."""

    page_size: int = Field(default=10, ge=1)


class WeightConfiguration(BaseModel):
    """Per-category scoring weights. Must total exactly 100."""

    model_config = ConfigDict(frozen=True)

    role_match: int = Field(default=30, ge=0, le=100)
    experience: int = Field(default=25, ge=0, le=100)
    skills: int = Field(default=20, ge=0, le=100)
    education: int = Field(default=20, ge=0, le=100)
    achievements: int = Field(default=5, ge=0, le=100)

    @property
    def total(self) -> int:
        return self.role_match + self.experience + self.skills + self.education + self.achievements

    @model_validator(mode="after")
    def weights_sum_to_100(self) -> "WeightConfiguration":
        if self.total != 100:
            msg = f"weights must sum to 100, got {self.total}"
            raise ValueError(msg)
        return self

    @classmethod
    def from_csv(cls, value: str) -> "WeightConfiguration":
        """Build from 'role,experience,skills,education,achievements'."""
        parts = [p.strip() for p in value.split(",")]
        if len(parts) != 5:
            msg = f"expected 5 comma-separated weights, got {len(parts)}"
            raise ValueError(msg)
        role, experience, skills, education, achievements = (int(p) for p in parts)
        return cls(
            role_match=role,
            experience=experience,
            skills=skills,
            education=education,
            achievements=achievements,
        )


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    uploads: UploadLimits = Field(default_factory=UploadLimits)
    view: ViewConfig = Field(default_factory=ViewConfig)
    weights: WeightConfiguration = Field(default_factory=WeightConfiguration)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
