"""Job profile and priority profile models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

PRIORITY_LEVELS = ("high", "medium", "low")
FLAG_LEVELS = ("required", "preferred", "not_mentioned")
WORK_LOCATIONS = ("onsite", "remote", "hybrid")

_LEVEL_FIELDS = (
    "education_priority",
    "experience_priority",
    "technical_priority",
    "leadership_priority",
    "publications_priority",
    "certifications_priority",
)
_FLAG_FIELDS = ("team_collaboration", "fast_paced", "cross_functional")
_LIST_FIELDS = (
    "required_skills",
    "preferred_skills",
    "specific_requirements",
    "red_flags",
    "bonus_factors",
)


class PriorityProfile(BaseModel):
    """Structured weighting/preferences distilled from a job description.

    Lenient by construction: the values come from an LLM, so nulls and
    out-of-vocabulary values fall back to defaults instead of failing.
    """

    model_config = ConfigDict(frozen=True)

    industry: str = ""
    required_skills: list[str] = Field(default_factory=list)
    preferred_skills: list[str] = Field(default_factory=list)
    education_priority: str = "medium"
    experience_priority: str = "medium"
    technical_priority: str = "medium"
    leadership_priority: str = "medium"
    publications_priority: str = "medium"
    certifications_priority: str = "medium"
    work_location: str = ""
    team_collaboration: str = "not_mentioned"
    fast_paced: str = "not_mentioned"
    cross_functional: str = "not_mentioned"
    specific_requirements: list[str] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)
    bonus_factors: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator("industry", mode="before")
    @classmethod
    def normalize_industry(cls, v: Any) -> str:
        return str(v).strip() if v else ""

    @field_validator(*_LEVEL_FIELDS, mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> str:
        level = str(v).lower().strip()
        return level if level in PRIORITY_LEVELS else "medium"

    @field_validator(*_FLAG_FIELDS, mode="before")
    @classmethod
    def normalize_flag(cls, v: Any) -> str:
        flag = str(v).lower().strip().replace(" ", "_")
        return flag if flag in FLAG_LEVELS else "not_mentioned"

    @field_validator("work_location", mode="before")
    @classmethod
    def normalize_location(cls, v: Any) -> str:
        location = str(v).lower().strip().replace("-", "")
        return location if location in WORK_LOCATIONS else ""

    @field_validator(*_LIST_FIELDS, mode="before")
    @classmethod
    def normalize_list(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, list):
            return []
        return [str(item).strip() for item in v if str(item).strip()]


class JobProfile(BaseModel):
    """The job being screened for. Replaced wholesale on re-analysis."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    description: str
    extracted_priorities: PriorityProfile | None = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return v.strip()

    @field_validator("description")
    @classmethod
    def description_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "job description must not be empty"
            raise ValueError(msg)
        return v.strip()

    def with_priorities(self, priorities: PriorityProfile | None) -> "JobProfile":
        return self.model_copy(update={"extracted_priorities": priorities})
