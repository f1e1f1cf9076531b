# Backend/services/catalog_aggregator.py
"""
Profile catalog aggregation.

Joins categories, questions, option rows and a user's answers into
CategoryCatalog views with resolved decay configs, staleness flags and
per-category counts. Pure transform: fetching the raw records is up to the
caller.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Union

from app.core.logging import get_logger
from app.models.profile import (
    AnswerOption,
    CatalogWarning,
    CategoryCatalog,
    CountryQuestionOptions,
    ProfileAnswer,
    ProfileCategory,
    ProfileQuestion,
    ResolvedCatalogEntry,
)
from services.decay_resolver import (
    DecayConfigRecord,
    DecayConfigRegistry,
    as_registry,
    resolve_decay_config,
)
from services.option_resolution import index_option_sources, resolve_options
from services.staleness import as_utc, is_stale, require_clock

logger = get_logger()


def _warn(
    warnings: Optional[List[CatalogWarning]],
    code: str,
    message: str,
    *,
    question_id: Optional[str] = None,
    category_id: Optional[str] = None,
) -> None:
    logger.warning(
        "catalog_data_integrity",
        code=code,
        question_id=question_id,
        category_id=category_id,
    )
    if warnings is not None:
        warnings.append(
            CatalogWarning(code=code, message=message, question_id=question_id, category_id=category_id)
        )


def _index_answers(
    answers: Iterable[ProfileAnswer],
    warnings: Optional[List[CatalogWarning]],
) -> Dict[str, ProfileAnswer]:
    """One answer per question; on duplicates the latest update wins."""
    by_question: Dict[str, ProfileAnswer] = {}
    for answer in answers:
        existing = by_question.get(answer.question_id)
        if existing is None:
            by_question[answer.question_id] = answer
            continue

        _warn(
            warnings,
            "duplicate_answer",
            f"Multiple answers for question {answer.question_id}; keeping the most recent",
            question_id=answer.question_id,
        )
        if _update_key(answer) > _update_key(existing):
            by_question[answer.question_id] = answer
    return by_question


def _update_key(answer: ProfileAnswer) -> float:
    if answer.last_updated is None:
        return float("-inf")
    return as_utc(answer.last_updated).timestamp()


def is_question_visible(
    question: ProfileQuestion,
    country_code: Optional[str],
    include_drafts: bool = False,
) -> bool:
    if not question.is_active:
        return False
    if question.is_draft and not include_drafts:
        return False
    return question.applies_to(country_code)


def build_catalog(
    questions: Iterable[ProfileQuestion],
    categories: Iterable[ProfileCategory],
    country_option_overrides: Iterable[CountryQuestionOptions],
    structured_options: Iterable[AnswerOption],
    answers: Iterable[ProfileAnswer],
    *,
    country_code: Optional[str],
    now: datetime,
    decay_configs: Union[DecayConfigRegistry, Iterable[DecayConfigRecord], None] = None,
    include_drafts: bool = False,
    warnings: Optional[List[CatalogWarning]] = None,
) -> List[CategoryCatalog]:
    """
    Build the per-category catalog for one user.

    Args:
        questions: All question records (filtered here by status and country)
        categories: All category records (inactive ones are dropped)
        country_option_overrides: country_question_options rows
        structured_options: question_answer_options rows
        answers: The user's answers
        country_code: The user's resolved ISO country code
        now: Current time used for staleness
        decay_configs: Registry or raw decay config rows
        include_drafts: Include draft questions (admin preview)
        warnings: Optional list that collects data-integrity warnings

    Returns:
        Active categories ordered by display order, each with its entries and counts
    """
    now = require_clock(now)
    registry = as_registry(decay_configs)

    all_categories = list(categories)
    known_category_ids = {c.id for c in all_categories}
    active_categories = sorted(
        (c for c in all_categories if c.is_active),
        key=lambda c: (c.display_order, c.name, c.id),
    )

    sources = index_option_sources(structured_options, country_option_overrides, country_code)
    answer_map = _index_answers(answers, warnings)

    grouped: Dict[str, List[ProfileQuestion]] = {c.id: [] for c in active_categories}
    for question in questions:
        if not is_question_visible(question, country_code, include_drafts):
            continue
        if question.category_id not in known_category_ids:
            _warn(
                warnings,
                "missing_category",
                f"Question {question.question_key} references unknown category {question.category_id}",
                question_id=question.id,
                category_id=question.category_id,
            )
            continue
        bucket = grouped.get(question.category_id)
        if bucket is not None:
            bucket.append(question)

    catalog: List[CategoryCatalog] = []
    for category in active_categories:
        entries: List[ResolvedCatalogEntry] = []
        for question in sorted(grouped[category.id], key=lambda q: (q.display_order, q.question_key)):
            answer = answer_map.get(question.id)
            decay_config = resolve_decay_config(question, category, registry)
            entries.append(
                ResolvedCatalogEntry(
                    question=question,
                    options=resolve_options(question, sources),
                    answer=answer,
                    decay_config=decay_config,
                    is_answered=bool(answer and answer.has_value),
                    is_stale=is_stale(answer, decay_config, question.is_immutable, now),
                )
            )

        catalog.append(
            CategoryCatalog(
                category=category,
                entries=entries,
                completed_count=sum(1 for e in entries if e.is_answered),
                total_count=len(entries),
                stale_count=sum(1 for e in entries if e.is_stale),
            )
        )

    logger.debug(
        "catalog_built",
        country_code=country_code,
        categories=len(catalog),
        entries=sum(c.total_count for c in catalog),
        stale=sum(c.stale_count for c in catalog),
        include_drafts=include_drafts,
    )
    return catalog
