"""
Tests for level completion, stale questions, the prompt queue and profile state.
"""
from app.models.profile import ProfileState
from services.catalog_aggregator import build_catalog
from services.completion_policy import (
    level_complete,
    level_completion_percentage,
    prioritized_queue,
    profile_status,
    stale_questions,
)
from tests.fixtures import NOW, days_ago, make_answer, make_category, make_decay_config, make_question


CONFIGS = [
    make_decay_config("decay_monthly", 30, "monthly"),
    make_decay_config("decay_income", 90, "quarterly"),
]


def _catalog(questions, categories, answers=()):
    return build_catalog(
        questions, categories, [], [], answers,
        country_code="ZA", now=NOW, decay_configs=CONFIGS,
    )


def _demographics(answered: int):
    categories = [make_category(id="cat-demo", name="demographics", level=2)]
    questions = [make_question(id=f"q-{i}", category_id="cat-demo", display_order=i) for i in range(1, 4)]
    answers = [make_answer(f"q-{i}") for i in range(1, answered + 1)]
    return _catalog(questions, categories, answers)


def test_demographics_two_of_three_required():
    """Level 2 with 3 required questions and 2 answers: incomplete at 67%."""
    catalog = _demographics(answered=2)
    assert level_complete(catalog, 2) is False
    assert level_completion_percentage(catalog, 2) == 67


def test_all_required_answered_completes_level():
    catalog = _demographics(answered=3)
    assert level_complete(catalog, 2) is True
    assert level_completion_percentage(catalog, 2) == 100


def test_optional_questions_do_not_block_completion():
    categories = [make_category(id="cat-demo", level=2)]
    questions = [
        make_question(id="q-req", category_id="cat-demo", is_required=True),
        make_question(id="q-opt", category_id="cat-demo", is_required=False),
    ]
    catalog = _catalog(questions, categories, [make_answer("q-req")])
    assert level_complete(catalog, 2) is True
    assert level_completion_percentage(catalog, 2) == 50


def test_level_without_questions():
    catalog = _demographics(answered=1)
    assert level_completion_percentage(catalog, 3) == 0
    assert level_completion_percentage([], 2) == 0
    assert level_complete(catalog, 3) is True


def test_percentage_rounds_half_up():
    categories = [make_category(id="cat-life", name="lifestyle", level=3)]
    questions = [make_question(id=f"q-{i}", category_id="cat-life", level=3, is_required=False) for i in range(8)]
    # 1/8 = 12.5% → 13
    catalog = _catalog(questions, categories, [make_answer("q-0")])
    assert level_completion_percentage(catalog, 3) == 13
    # 1/3 = 33.3% → 33
    catalog = _catalog(questions[:3], categories, [make_answer("q-0")])
    assert level_completion_percentage(catalog, 3) == 33


def test_income_answered_95_days_ago_is_stale():
    categories = [make_category(id="cat-fin", name="finance")]
    questions = [make_question(id="q-income", category_id="cat-fin", decay_config_key="decay_income")]
    answers = [make_answer("q-income", last_updated=days_ago(95))]

    stale = stale_questions(_catalog(questions, categories, answers))
    assert [e.question.question_key for e in stale] == ["income"]


def test_immutable_date_of_birth_never_stale():
    categories = [make_category(id="cat-basic", name="basics", default_decay_config_key="decay_monthly")]
    questions = [
        make_question(
            id="q-date_of_birth", category_id="cat-basic", is_immutable=True, question_type="date",
        )
    ]
    answers = [make_answer("q-date_of_birth", answer_value="1990-01-01", last_updated=days_ago(3650))]

    assert stale_questions(_catalog(questions, categories, answers)) == []
    answers = [make_answer("q-date_of_birth", answer_value="1990-01-01", last_updated=days_ago(365 * 200))]
    assert stale_questions(_catalog(questions, categories, answers)) == []


def test_unanswered_questions_are_not_stale_questions():
    categories = [make_category(default_decay_config_key="decay_monthly")]
    questions = [make_question(id="q-1"), make_question(id="q-2")]
    answers = [make_answer("q-2", answer_value="", last_updated=days_ago(400))]

    assert stale_questions(_catalog(questions, categories, answers)) == []


def test_prioritized_queue_ordering():
    """Unanswered required in A, then stale optional in A, then category B."""
    categories = [
        make_category(id="cat-b", name="b", display_order=2, default_decay_config_key="decay_monthly"),
        make_category(id="cat-a", name="a", display_order=1, default_decay_config_key="decay_monthly"),
    ]
    questions = [
        make_question(id="q-a-stale", category_id="cat-a", is_required=False, display_order=1),
        make_question(id="q-a-missing", category_id="cat-a", is_required=True, display_order=2),
        make_question(id="q-a-fresh", category_id="cat-a", is_required=True, display_order=3),
        make_question(id="q-b-stale", category_id="cat-b", is_required=True, display_order=1),
        make_question(id="q-b-optional", category_id="cat-b", is_required=False, display_order=2),
    ]
    answers = [
        make_answer("q-a-stale", last_updated=days_ago(60)),
        make_answer("q-a-fresh", last_updated=days_ago(1)),
        make_answer("q-b-stale", last_updated=days_ago(60)),
    ]

    queue = prioritized_queue(_catalog(questions, categories, answers))
    assert [e.question_id for e in queue] == ["q-a-missing", "q-a-stale", "q-b-stale"]


def test_prioritized_queue_required_tier_spans_categories():
    categories = [
        make_category(id="cat-a", name="a", display_order=1, default_decay_config_key="decay_monthly"),
        make_category(id="cat-b", name="b", display_order=2),
    ]
    questions = [
        make_question(id="q-a-stale", category_id="cat-a", display_order=1),
        make_question(id="q-b-missing", category_id="cat-b", display_order=1),
    ]
    answers = [make_answer("q-a-stale", last_updated=days_ago(31))]

    queue = prioritized_queue(_catalog(questions, categories, answers))
    assert [e.question_id for e in queue] == ["q-b-missing", "q-a-stale"]


def test_prioritized_queue_is_stable():
    catalog = _demographics(answered=0)
    first = [e.question_id for e in prioritized_queue(catalog)]
    assert first == ["q-1", "q-2", "q-3"]
    assert [e.question_id for e in prioritized_queue(catalog)] == first


def _journey(answers):
    categories = [
        make_category(id="cat-demo", name="demographics", level=2, display_order=1,
                      default_decay_config_key="decay_monthly"),
        make_category(id="cat-life", name="lifestyle", level=3, display_order=2),
    ]
    questions = [
        make_question(id="q-income", category_id="cat-demo", level=2),
        make_question(id="q-hobby", category_id="cat-life", level=3, is_required=False),
    ]
    return _catalog(questions, categories, answers)


def test_profile_status_transitions():
    assert profile_status(_journey([])).state == ProfileState.not_started

    status = profile_status(_journey([make_answer("q-hobby")]))
    assert status.state == ProfileState.in_progress
    assert status.level == 2

    status = profile_status(_journey([make_answer("q-income")]))
    assert status.state == ProfileState.level_complete
    assert status.level == 2

    status = profile_status(_journey([make_answer("q-income", last_updated=days_ago(40)), make_answer("q-hobby")]))
    assert status.state == ProfileState.needs_refresh
    assert status.stale_count == 1

    status = profile_status(_journey([make_answer("q-income"), make_answer("q-hobby")]))
    assert status.state == ProfileState.current


def test_enrichment_level_never_blocks():
    """Required flags on level 3 questions do not gate progression."""
    categories = [make_category(id="cat-life", name="lifestyle", level=3)]
    questions = [
        make_question(id="q-1", category_id="cat-life", level=3, is_required=True),
        make_question(id="q-2", category_id="cat-life", level=3, is_required=True),
    ]
    status = profile_status(_catalog(questions, categories, [make_answer("q-1")]))
    assert status.state == ProfileState.level_complete
