import json
import sys
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from core.cache import InMemoryCache  # noqa: E402
from core.caching import CacheManager  # noqa: E402
from core.models.analysis import FeedbackAnalysis  # noqa: E402
from core.models.feedback import AnalysisStatus, FeedbackItem, generate_fingerprint  # noqa: E402

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_analysis_payload(
    label: str = "negative",
    confidence: float = 0.9,
    score: int = 80,
    themes: Optional[List[str]] = None,
) -> Dict[str, Any]:
    themes = themes if themes is not None else ["Performance", "API"]
    return {
        "sentiment": {"label": label, "confidence": confidence},
        "urgency": {"score": score, "reason": "Blocks customers"},
        "themes": [
            {"theme": theme, "impact_area": "engineering", "evidence_quote": f"quote about {theme}"}
            for theme in themes
        ],
        "summary": "Endpoint is slow.",
        "next_action": "Profile the endpoint.",
    }


def themes_json(*labels: str) -> str:
    return json.dumps([{"theme": label, "impact_area": "x", "evidence_quote": "y"} for label in labels])


class FakeFeedbackService:
    def __init__(self) -> None:
        self.items: Dict[int, FeedbackItem] = {}
        self.status_history: List[tuple] = []
        # None: computed from the stored items
        self.window_count: Optional[int] = None
        self.window_sources: Optional[List[Dict[str, Any]]] = None
        self.cutoffs: List[datetime] = []

    def add(self, feedback_id: int, source: str = "github", title: str = "Slow API",
            body: str = "The /api/users endpoint takes 5+ seconds.",
            status: AnalysisStatus = AnalysisStatus.PENDING,
            created_at: datetime = FIXED_NOW) -> FeedbackItem:
        item = FeedbackItem(
            id=feedback_id,
            source=source,
            title=title,
            body=body,
            fingerprint=generate_fingerprint(source, title, body),
            analysis_status=status,
            created_at=created_at,
        )
        self.items[feedback_id] = item
        return item

    def get_feedback(self, feedback_id: int) -> Optional[FeedbackItem]:
        return self.items.get(feedback_id)

    def update_status(self, feedback_id: int, status: AnalysisStatus) -> None:
        self.status_history.append((feedback_id, AnalysisStatus(status)))
        if feedback_id in self.items:
            self.items[feedback_id].analysis_status = AnalysisStatus(status)

    def count_since(self, cutoff: datetime) -> int:
        self.cutoffs.append(cutoff)
        if self.window_count is not None:
            return self.window_count
        return len(self._in_window(cutoff))

    def source_counts_since(self, cutoff: datetime) -> List[Dict[str, Any]]:
        if self.window_sources is not None:
            return list(self.window_sources)
        counts: Dict[str, int] = {}
        for item in self._in_window(cutoff):
            counts[item.source] = counts.get(item.source, 0) + 1
        return [{"source": source, "count": count} for source, count in counts.items()]

    def _in_window(self, cutoff: datetime) -> List[FeedbackItem]:
        return [item for item in self.items.values() if item.created_at >= cutoff]


class FakeAnalysisService:
    def __init__(self, feedback_items: Optional[Dict[int, FeedbackItem]] = None) -> None:
        self.feedback_items = feedback_items if feedback_items is not None else {}
        self.rows: Dict[int, Dict[str, Any]] = {}
        self.candidates: List[Dict[str, Any]] = []
        self.candidate_calls: List[tuple] = []
        # None: computed from the stored rows joined to feedback_items
        self.sentiment_counts: Optional[Dict[str, int]] = None
        self.average_urgency: Optional[float] = None
        self.window_themes: Optional[List[Dict[str, Any]]] = None
        self.fail_upsert: Optional[Exception] = None

    def upsert_result(self, feedback_id: int, analysis: FeedbackAnalysis, model: str) -> None:
        if self.fail_upsert is not None:
            raise self.fail_upsert
        self.rows[feedback_id] = {
            "feedback_id": feedback_id,
            "sentiment_label": analysis.sentiment.label,
            "urgency_score": analysis.urgency.score,
            "themes_json": analysis.themes_json(),
            "summary": analysis.summary,
            "model": model,
            "error": None,
        }

    def record_error(self, feedback_id: int, error: str) -> None:
        row = self.rows.setdefault(feedback_id, {"feedback_id": feedback_id})
        row["error"] = error

    def get_themes_json(self, feedback_id: int) -> Optional[str]:
        row = self.rows.get(feedback_id)
        return row.get("themes_json") if row else None

    def list_theme_candidates(self, exclude_id: int, limit: int = 50) -> List[Dict[str, Any]]:
        self.candidate_calls.append((exclude_id, limit))
        return [row for row in self.candidates if row["id"] != exclude_id][:limit]

    def _analyzed_in_window(self, cutoff: datetime) -> List[Dict[str, Any]]:
        return [
            row for feedback_id, row in self.rows.items()
            if row.get("sentiment_label") is not None
            and feedback_id in self.feedback_items
            and self.feedback_items[feedback_id].created_at >= cutoff
        ]

    def sentiment_counts_since(self, cutoff: datetime) -> Dict[str, int]:
        if self.sentiment_counts is not None:
            return dict(self.sentiment_counts)
        counts = {"positive": 0, "neutral": 0, "negative": 0}
        for row in self._analyzed_in_window(cutoff):
            counts[row["sentiment_label"]] += 1
        return counts

    def average_urgency_since(self, cutoff: datetime) -> Optional[float]:
        if self.average_urgency is not None:
            return self.average_urgency
        scores = [row["urgency_score"] for row in self._analyzed_in_window(cutoff)]
        return sum(scores) / len(scores) if scores else None

    def themes_json_since(self, cutoff: datetime) -> List[Dict[str, Any]]:
        if self.window_themes is not None:
            return list(self.window_themes)
        return [
            {"feedback_id": row["feedback_id"], "themes_json": row["themes_json"]}
            for row in self._analyzed_in_window(cutoff)
        ]


class FakeInferenceClient:
    def __init__(self, responses: List[Union[str, Dict[str, Any], Exception]]) -> None:
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def run(self, model: str, system_prompt: str, user_prompt: str, response_schema: Dict[str, Any]):
        self.calls.append({
            "model": model,
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "schema": response_schema,
        })
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeCursor:
    def __init__(self, results: List[Any]) -> None:
        self.results = results
        self.executed: List[tuple] = []

    def execute(self, sql: str, params: Any = None) -> None:
        self.executed.append((" ".join(sql.split()), params))

    def fetchone(self):
        return self.results.pop(0) if self.results else None

    def fetchall(self):
        return self.results.pop(0) if self.results else []


class FakeConnectionManager:
    """Hands out one FakeCursor whose fetch results are queued up front."""

    def __init__(self, results: Optional[List[Any]] = None) -> None:
        self.cursor = FakeCursor(list(results or []))

    @contextmanager
    def get_cursor(self):
        yield self.cursor

    @property
    def executed(self) -> List[tuple]:
        return self.cursor.executed


@pytest.fixture
def feedback_service() -> FakeFeedbackService:
    return FakeFeedbackService()


@pytest.fixture
def analysis_service(feedback_service) -> FakeAnalysisService:
    return FakeAnalysisService(feedback_service.items)


@pytest.fixture
def clock():
    class _Clock:
        def __init__(self) -> None:
            self.now = 1_000_000.0

        def __call__(self) -> float:
            return self.now

        def advance(self, seconds: float) -> None:
            self.now += seconds

    return _Clock()


@pytest.fixture
def cache_manager(clock) -> CacheManager:
    return CacheManager(InMemoryCache(clock=clock))


@pytest.fixture
def fake_client_factory():
    def _factory(responses: List[Union[str, Dict[str, Any], Exception]]) -> FakeInferenceClient:
        return FakeInferenceClient(responses)

    return _factory


@pytest.fixture
def connection_factory():
    def _factory(results: Optional[List[Any]] = None) -> FakeConnectionManager:
        return FakeConnectionManager(results)

    return _factory


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def window_start() -> datetime:
    return FIXED_NOW - timedelta(hours=24)
