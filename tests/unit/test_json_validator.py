import json

import pytest

from conftest import make_analysis_payload
from core.exceptions import AnalysisParseError
from core.json_validator import FeedbackAnalysisValidator


def test_valid_json_string_parses_into_typed_analysis():
    raw = json.dumps(make_analysis_payload(label="positive", confidence=0.75, score=12))

    analysis = FeedbackAnalysisValidator.validate_and_parse(raw)

    assert analysis.sentiment.label == "positive"
    assert analysis.sentiment.confidence == 0.75
    assert analysis.urgency.score == 12
    assert [theme.theme for theme in analysis.themes] == ["Performance", "API"]
    assert analysis.next_action == "Profile the endpoint."


def test_mapping_response_is_accepted_and_extra_keys_ignored():
    payload = make_analysis_payload()
    payload["model_notes"] = "ignored"

    analysis = FeedbackAnalysisValidator.validate_and_parse(payload)

    assert analysis.summary == "Endpoint is slow."


def test_code_fenced_json_is_unwrapped():
    raw = "```json\n" + json.dumps(make_analysis_payload()) + "\n```"

    analysis = FeedbackAnalysisValidator.validate_and_parse(raw)

    assert analysis.sentiment.label == "negative"


def test_integral_float_score_is_accepted():
    payload = make_analysis_payload()
    payload["urgency"]["score"] = 40.0

    analysis = FeedbackAnalysisValidator.validate_and_parse(payload)

    assert analysis.urgency.score == 40
    assert isinstance(analysis.urgency.score, int)


def test_non_json_text_raises_parse_error():
    with pytest.raises(AnalysisParseError) as excinfo:
        FeedbackAnalysisValidator.validate_and_parse("Sure! Here is the analysis you asked for.")

    assert excinfo.value.error_code == "ParseError"


def test_top_level_array_is_rejected():
    with pytest.raises(AnalysisParseError):
        FeedbackAnalysisValidator.validate_and_parse("[1, 2, 3]")


@pytest.mark.parametrize(
    "mutate, expected_fragment",
    [
        (lambda p: p["sentiment"].update(label="angry"), "sentiment.label"),
        (lambda p: p["sentiment"].update(confidence=1.5), "sentiment.confidence"),
        (lambda p: p["sentiment"].update(confidence=True), "sentiment.confidence"),
        (lambda p: p["urgency"].update(score=101), "urgency.score"),
        (lambda p: p["urgency"].update(score=12.5), "urgency.score"),
        (lambda p: p.update(themes=[]), "themes"),
        (lambda p: p.update(themes=p["themes"] * 3), "themes"),
        (lambda p: p["themes"][0].pop("evidence_quote"), "themes[0].evidence_quote"),
        (lambda p: p.pop("next_action"), "next_action"),
        (lambda p: p.update(summary=None), "summary"),
    ],
)
def test_schema_violations_are_reported(mutate, expected_fragment):
    payload = make_analysis_payload()
    mutate(payload)

    with pytest.raises(AnalysisParseError) as excinfo:
        FeedbackAnalysisValidator.validate_and_parse(payload)

    assert any(expected_fragment in error for error in excinfo.value.validation_errors)


def test_all_violations_are_collected_at_once():
    payload = make_analysis_payload()
    payload["sentiment"]["label"] = "meh"
    payload["urgency"]["score"] = -1

    with pytest.raises(AnalysisParseError) as excinfo:
        FeedbackAnalysisValidator.validate_and_parse(payload)

    assert len(excinfo.value.validation_errors) == 2
