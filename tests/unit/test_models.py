import hashlib
import json

import pytest

from core.exceptions import AnalysisFailedError, MalformedStoredDataError
from core.models import (
    AnalysisRecord, AnalysisStatus, FeedbackItem, SimilarityResult, decode_themes, generate_fingerprint
)


def test_fingerprint_is_first_eight_bytes_of_sha256():
    expected = hashlib.sha256("github:Slow API:It is slow".encode("utf-8")).hexdigest()[:16]

    assert generate_fingerprint("github", "Slow API", "It is slow") == expected
    assert len(expected) == 16


def test_fingerprint_changes_with_any_field():
    base = generate_fingerprint("github", "t", "b")

    assert generate_fingerprint("email", "t", "b") != base
    assert generate_fingerprint("github", "t2", "b") != base
    assert generate_fingerprint("github", "t", "b2") != base


def test_feedback_item_from_row_parses_status_and_timestamp():
    item = FeedbackItem.from_row({
        "id": 4,
        "source": "email",
        "title": "Export bug",
        "body": "CSV is corrupted",
        "fingerprint": "abcd",
        "analysis_status": "failed",
        "created_at": "2026-03-01T10:00:00+00:00",
    })

    assert item.analysis_status is AnalysisStatus.FAILED
    assert item.created_at.hour == 10
    assert item.to_dict()["analysis_status"] == "failed"


def test_decode_themes_reads_stored_json():
    stored = json.dumps([{"theme": "Billing", "impact_area": "finance", "evidence_quote": "charged twice"}])

    themes = decode_themes(stored, 3)

    assert themes[0].theme == "Billing"


@pytest.mark.parametrize("stored", [None, "", "{oops", '{"theme": "x"}', '[{"impact_area": "x"}]', '["x"]'])
def test_decode_themes_rejects_malformed_values(stored):
    with pytest.raises(MalformedStoredDataError):
        decode_themes(stored, 3)


def test_error_record_keeps_only_error_fields():
    record = AnalysisRecord.from_row({"feedback_id": 9, "error": "timeout", "updated_at": None})

    assert record.sentiment_label is None
    assert record.to_dict()["error"] == "timeout"


def test_similarity_result_round_trips_through_cache_form():
    result = SimilarityResult(3, 0.5, ["api"], {"source": "github", "title": "Slow"})

    assert SimilarityResult.from_dict(result.to_dict()) == result


def test_analysis_failed_error_carries_id_and_reason():
    error = AnalysisFailedError(12, "timeout")

    assert error.feedback_id == 12
    assert error.reason == "timeout"
    assert error.to_dict()["error_code"] == "AnalysisFailed"
