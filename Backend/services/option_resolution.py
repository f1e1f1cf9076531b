# Backend/services/option_resolution.py
"""
Answer option resolution for profile questions.

Options come from an ordered chain of providers; the first one that returns
options wins:
    1. structured option rows (question_answer_options)
    2. country-specific override (country_question_options), country_specific questions only
    3. the question's inline default options
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from app.core.profile_config import APPLICABILITY_COUNTRY_SPECIFIC
from app.models.profile import AnswerOption, CountryQuestionOptions, ProfileQuestion


@dataclass(frozen=True)
class OptionSources:
    """Option rows indexed by question id for one user's country."""
    structured: Dict[str, List[AnswerOption]] = field(default_factory=dict)
    country_overrides: Dict[str, CountryQuestionOptions] = field(default_factory=dict)


OptionProvider = Callable[[ProfileQuestion, OptionSources], Optional[Any]]


def index_option_sources(
    structured_options: Iterable[AnswerOption],
    country_option_overrides: Iterable[CountryQuestionOptions],
    country_code: Optional[str],
) -> OptionSources:
    structured: Dict[str, List[Tuple[int, int, AnswerOption]]] = {}
    for position, opt in enumerate(structured_options):
        if not opt.is_active:
            continue
        structured.setdefault(opt.question_id, []).append((opt.display_order, position, opt))

    code = (country_code or "").strip().upper()
    overrides: Dict[str, CountryQuestionOptions] = {}
    for row in country_option_overrides:
        if row.country_code == code:
            overrides[row.question_id] = row

    return OptionSources(
        structured={qid: [opt for _, _, opt in sorted(rows, key=lambda r: (r[0], r[1]))] for qid, rows in structured.items()},
        country_overrides=overrides,
    )


def structured_options_provider(question: ProfileQuestion, sources: OptionSources) -> Optional[List[Dict[str, Any]]]:
    rows = sources.structured.get(question.id)
    if not rows:
        return None
    return [{"label": opt.label, "value": opt.value, "short_id": opt.short_id} for opt in rows]


def country_override_provider(question: ProfileQuestion, sources: OptionSources) -> Optional[Any]:
    if question.applicability != APPLICABILITY_COUNTRY_SPECIFIC:
        return None
    row = sources.country_overrides.get(question.id)
    if row is None:
        return None
    return row.options


def inline_default_provider(question: ProfileQuestion, sources: OptionSources) -> Optional[Any]:
    return question.options


DEFAULT_OPTION_PROVIDERS: Tuple[OptionProvider, ...] = (
    structured_options_provider,
    country_override_provider,
    inline_default_provider,
)


def resolve_options(
    question: ProfileQuestion,
    sources: OptionSources,
    providers: Iterable[OptionProvider] = DEFAULT_OPTION_PROVIDERS,
) -> Optional[Any]:
    for provider in providers:
        options = provider(question, sources)
        if options is not None:
            return options
    return None
