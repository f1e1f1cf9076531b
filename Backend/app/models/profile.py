"""
Profile question catalog and decay models.

Raw records (categories, questions, option rows, answers, decay configs) come
from the catalog/answer store. ResolvedCatalogEntry and CategoryCatalog are
derived views and are never persisted.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from app.core.profile_config import APPLICABILITY_GLOBAL

QuestionType = Literal[
    "text", "select", "multiselect", "date", "number",
    "address", "email", "phone", "boolean",
]
Applicability = Literal["global", "country_specific"]


def _normalize_country(value: Any) -> Optional[str]:
    if value is None:
        return None
    trimmed = str(value).strip().upper()
    return trimmed or None


class DecayConfig(BaseModel):
    """Named staleness interval, referenced by config_key."""
    model_config = ConfigDict(frozen=True)

    config_key: str
    interval_type: str = "days"
    interval_days: Optional[int] = Field(default=None, gt=0, description="None means the data never decays")
    description: Optional[str] = None
    is_active: bool = True

    @property
    def decays(self) -> bool:
        return self.interval_days is not None


class ProfileCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    level: int = 1
    display_order: int = 0
    default_decay_config_key: Optional[str] = None
    is_active: bool = True


class ProfileQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    question_key: str
    question_text: str = ""
    question_type: QuestionType = "text"
    category_id: str
    level: int = 1
    is_required: bool = False
    is_immutable: bool = False
    decay_config_key: Optional[str] = None
    applicability: Applicability = "global"
    country_codes: List[str] = Field(default_factory=list)
    options: Optional[Any] = None
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    display_order: int = 0
    is_draft: bool = False
    is_active: bool = True

    @field_validator("country_codes", mode="before")
    @classmethod
    def normalize_country_codes(cls, v: Any) -> List[str]:
        """Uppercase ISO codes, drop blanks; None → []."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        return [code for code in (_normalize_country(c) for c in v) if code]

    def applies_to(self, country_code: Optional[str]) -> bool:
        if self.applicability == APPLICABILITY_GLOBAL:
            return True
        code = _normalize_country(country_code)
        return code is not None and code in self.country_codes


class AnswerOption(BaseModel):
    """Structured answer option row (question_answer_options)."""
    model_config = ConfigDict(frozen=True)

    question_id: str
    label: str
    value: str
    short_id: Optional[str] = None
    display_order: int = 0
    is_active: bool = True


class CountryQuestionOptions(BaseModel):
    """Country-specific option override row (country_question_options)."""
    model_config = ConfigDict(frozen=True)

    question_id: str
    country_code: str
    options: Any = None
    metadata: Optional[Any] = None

    @field_validator("country_code", mode="before")
    @classmethod
    def normalize_code(cls, v: Any) -> str:
        code = _normalize_country(v)
        if not code:
            raise ValueError("country_code cannot be empty")
        return code


class ProfileAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    question_id: str
    answer_value: Optional[str] = None
    answer_json: Optional[Any] = None
    last_updated: Optional[datetime] = None
    selected_option_short_id: Optional[str] = None

    @property
    def has_value(self) -> bool:
        if self.answer_value:
            return True
        return self.answer_json not in (None, "", [], {})


class ResolvedCatalogEntry(BaseModel):
    """A question joined with its options, answer and resolved decay config."""
    model_config = ConfigDict(frozen=True)

    question: ProfileQuestion
    options: Optional[Any] = None
    answer: Optional[ProfileAnswer] = None
    decay_config: Optional[DecayConfig] = None
    is_answered: bool = False
    is_stale: bool = False

    @property
    def question_id(self) -> str:
        return self.question.id

    @computed_field
    @property
    def decay_interval_days(self) -> Optional[int]:
        return self.decay_config.interval_days if self.decay_config else None

    @computed_field
    @property
    def decay_interval_type(self) -> Optional[str]:
        return self.decay_config.interval_type if self.decay_config else None


class CategoryCatalog(BaseModel):
    """A category populated with its resolved entries and counts."""
    model_config = ConfigDict(frozen=True)

    category: ProfileCategory
    entries: List[ResolvedCatalogEntry] = Field(default_factory=list)
    completed_count: int = 0
    total_count: int = 0
    stale_count: int = 0

    @property
    def level(self) -> int:
        return self.category.level

    @property
    def display_order(self) -> int:
        return self.category.display_order


class CatalogWarning(BaseModel):
    """Non-fatal data-integrity finding reported while aggregating."""
    code: str
    message: str
    question_id: Optional[str] = None
    category_id: Optional[str] = None


class ProfileContext(BaseModel):
    """The slice of a user profile the decay engine needs."""
    user_id: str
    country_iso: Optional[str] = None
    country_code: Optional[str] = None
    user_type: Optional[str] = None


class ProfileState(str, Enum):
    not_started = "not_started"
    in_progress = "in_progress"
    level_complete = "level_complete"
    needs_refresh = "needs_refresh"
    current = "current"


class ProfileStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: ProfileState
    level: Optional[int] = None
    stale_count: int = 0


class ProfileSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    categories: List[CategoryCatalog] = Field(default_factory=list)
    level2_categories: List[CategoryCatalog] = Field(default_factory=list)
    level3_categories: List[CategoryCatalog] = Field(default_factory=list)
    level2_complete: bool = False
    level3_percentage: int = 0
    stale_question_count: int = 0
    stale_questions: List[ResolvedCatalogEntry] = Field(default_factory=list)
    queue: List[ResolvedCatalogEntry] = Field(default_factory=list)
    status: ProfileStatus
    warnings: List[CatalogWarning] = Field(default_factory=list)


class StalenessStats(BaseModel):
    total_answers: int = 0
    stale_answers: int = 0
    staleness_rate: float = 0.0
