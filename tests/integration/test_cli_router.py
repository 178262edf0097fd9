import json

import pytest

from conftest import make_analysis_payload
from cli_router import CLIRouter
from core.analysis import AnalysisOrchestrator, DigestAggregator
from core.container import Container
from core.exceptions import FeedbackNotFoundError
from core.similarity import SimilarityEngine


class FakeDatabase:
    def __init__(self, feedback_service, analysis_service):
        self.feedback = feedback_service
        self.analyses = analysis_service

    def get_feedback_detail(self, feedback_id):
        item = self.feedback.get_feedback(feedback_id)
        if item is None:
            return None
        return {"feedback": item.to_dict(), "analysis": self.analyses.rows.get(feedback_id)}


@pytest.fixture
def router(feedback_service, analysis_service, cache_manager, fake_client_factory, fixed_now):
    client = fake_client_factory([make_analysis_payload(score=64)])
    container = Container()
    container.register_instance("database", FakeDatabase(feedback_service, analysis_service))
    container.register_instance("cache_manager", cache_manager)
    container.register_instance(
        "analysis_orchestrator",
        AnalysisOrchestrator(feedback_service, analysis_service, cache_manager, client, model="test-model"),
    )
    container.register_instance("similarity_engine", SimilarityEngine(analysis_service, cache_manager))
    container.register_instance(
        "digest_aggregator",
        DigestAggregator(feedback_service, analysis_service, cache_manager, clock=lambda: fixed_now),
    )
    return CLIRouter(container)


def test_analysis_run_prints_json(router, feedback_service, capsys):
    feedback_service.add(5)

    exit_code = router.route_command(["analysis", "run", "5", "--json"])

    output = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert output["urgency"]["score"] == 64


def test_analysis_run_unknown_id_maps_to_not_found_exit(router):
    assert router.route_command(["analysis", "run", "404"]) == 4


def test_similar_without_analysis_maps_to_not_found_exit(router, feedback_service):
    feedback_service.add(5)

    assert router.route_command(["analysis", "similar", "5"]) == 4


def test_invalid_limit_maps_to_invalid_exit(router, analysis_service):
    analysis_service.rows[5] = {"themes_json": json.dumps([{"theme": "API"}])}

    assert router.route_command(["analysis", "similar", "5", "--limit", "0"]) == 22


def test_digest_human_output(router, feedback_service, capsys):
    feedback_service.window_count = 2

    exit_code = router.route_command(["analysis", "digest", "--window", "7d"])

    assert exit_code == 0
    assert "Feedback Digest (7d)" in capsys.readouterr().out


def test_unsupported_window_is_rejected_by_parser(router):
    assert router.route_command(["analysis", "digest", "--window", "30d"]) == 2


def test_feedback_show_unknown_id(router):
    assert router.route_command(["feedback", "show", "12"]) == 4


def test_missing_subcommand_returns_error(router):
    assert router.route_command(["analysis"]) == 1


def test_not_found_error_is_a_domain_error():
    assert FeedbackNotFoundError(1).error_code == "NotFound"
