from datetime import timedelta

import pytest

from conftest import make_analysis_payload, themes_json
from core.analysis import AnalysisOrchestrator, DigestAggregator
from core.exceptions import ValidationError


@pytest.fixture
def aggregator(feedback_service, analysis_service, cache_manager, fixed_now):
    return DigestAggregator(feedback_service, analysis_service, cache_manager, clock=lambda: fixed_now)


def test_digest_combines_window_statistics(aggregator, feedback_service, analysis_service):
    feedback_service.window_count = 3
    feedback_service.window_sources = [{"source": "github", "count": 2}, {"source": "email", "count": 1}]
    analysis_service.sentiment_counts = {"positive": 1, "neutral": 0, "negative": 1}
    analysis_service.average_urgency = 60.0
    analysis_service.window_themes = [
        {"feedback_id": 1, "themes_json": themes_json("API", "Performance")},
        {"feedback_id": 2, "themes_json": themes_json("Dashboard")},
    ]

    report = aggregator.digest("24h")

    assert report.total_feedback == 3
    assert report.sentiment_breakdown == {"positive": 1, "neutral": 0, "negative": 1}
    assert report.avg_urgency == 60
    assert report.top_themes == [
        {"theme": "API", "count": 1},
        {"theme": "Performance", "count": 1},
        {"theme": "Dashboard", "count": 1},
    ]
    assert report.sources[0] == {"source": "github", "count": 2}


def test_windows_map_to_hours(aggregator, feedback_service, fixed_now):
    aggregator.digest("24h")
    aggregator.digest("7d")

    assert feedback_service.cutoffs == [fixed_now - timedelta(hours=24), fixed_now - timedelta(hours=168)]


def test_unknown_window_is_rejected(aggregator):
    with pytest.raises(ValidationError):
        aggregator.digest("30d")


def test_average_urgency_rounds_half_up(aggregator, analysis_service):
    analysis_service.average_urgency = 42.5

    assert aggregator.digest().avg_urgency == 43


def test_no_analyzed_items_gives_zero_urgency(aggregator):
    assert aggregator.digest().avg_urgency == 0


def test_top_themes_limited_to_five_by_frequency(aggregator, analysis_service):
    analysis_service.window_themes = [
        {"feedback_id": 1, "themes_json": themes_json("a", "b", "c", "d")},
        {"feedback_id": 2, "themes_json": themes_json("e", "f", "d")},
        {"feedback_id": 3, "themes_json": themes_json("f", "d")},
    ]

    top = aggregator.digest().top_themes

    assert top == [
        {"theme": "d", "count": 3},
        {"theme": "f", "count": 2},
        {"theme": "a", "count": 1},
        {"theme": "b", "count": 1},
        {"theme": "c", "count": 1},
    ]


def test_labels_are_counted_exactly(aggregator, analysis_service):
    analysis_service.window_themes = [
        {"feedback_id": 1, "themes_json": themes_json("API")},
        {"feedback_id": 2, "themes_json": themes_json("api")},
    ]

    top = aggregator.digest().top_themes

    assert top == [{"theme": "API", "count": 1}, {"theme": "api", "count": 1}]


def test_malformed_theme_rows_contribute_nothing(aggregator, analysis_service):
    analysis_service.window_themes = [
        {"feedback_id": 1, "themes_json": "{not json"},
        {"feedback_id": 2, "themes_json": '[{"theme": "ok"}, {"oops": 1}]'},
        {"feedback_id": 3, "themes_json": themes_json("Billing")},
    ]

    assert aggregator.digest().top_themes == [{"theme": "Billing", "count": 1}]


def test_digest_is_served_from_cache_until_expiry(aggregator, feedback_service, clock):
    feedback_service.window_count = 3
    aggregator.digest("24h")
    feedback_service.window_count = 10

    assert aggregator.digest("24h").total_feedback == 3

    clock.advance(600)
    assert aggregator.digest("24h").total_feedback == 10


def test_windows_are_cached_separately(aggregator, feedback_service):
    feedback_service.window_count = 3
    aggregator.digest("24h")
    feedback_service.window_count = 8

    assert aggregator.digest("7d").total_feedback == 8


@pytest.fixture
def analyzed_window(feedback_service, analysis_service, cache_manager, fake_client_factory, fixed_now):
    """Three items in the last day, two of them analyzed, plus one analyzed item from two days ago."""
    feedback_service.add(1, source="github")
    feedback_service.add(2, source="email", title="Love the dashboard", body="New charts are great")
    feedback_service.add(3, source="github", title="Docs typo", body="README has a typo")
    feedback_service.add(4, source="github", title="Old report", body="Login timeouts",
                         created_at=fixed_now - timedelta(days=2))

    client = fake_client_factory([
        make_analysis_payload(label="negative", score=80, themes=["Performance", "API"]),
        make_analysis_payload(label="positive", score=40, themes=["API", "Dashboard"]),
        make_analysis_payload(label="negative", score=100, themes=["Login"]),
    ])
    orchestrator = AnalysisOrchestrator(feedback_service, analysis_service, cache_manager, client, model="test-model")
    for feedback_id in (1, 2, 4):
        orchestrator.analyze(feedback_id)


def test_digest_over_analyzed_items_in_window(aggregator, analyzed_window):
    report = aggregator.digest("24h")

    assert report.total_feedback == 3
    assert report.sentiment_breakdown == {"positive": 1, "neutral": 0, "negative": 1}
    assert report.avg_urgency == 60
    assert report.top_themes == [
        {"theme": "API", "count": 2},
        {"theme": "Performance", "count": 1},
        {"theme": "Dashboard", "count": 1},
    ]
    assert report.sources == [{"source": "github", "count": 2}, {"source": "email", "count": 1}]


def test_weekly_digest_includes_older_items(aggregator, analyzed_window):
    report = aggregator.digest("7d")

    assert report.total_feedback == 4
    assert report.sentiment_breakdown == {"positive": 1, "neutral": 0, "negative": 2}
    # (80 + 40 + 100) / 3 = 73.33
    assert report.avg_urgency == 73
    assert report.top_themes[0] == {"theme": "API", "count": 2}
