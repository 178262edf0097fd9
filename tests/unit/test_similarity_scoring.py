from core.models.analysis import Theme
from core.similarity import ThemeJaccardStrategy, score_similarity
from core.similarity.strategies import round_score


def themes(*labels):
    return [Theme(theme=label, impact_area="x", evidence_quote="y") for label in labels]


def test_jaccard_score_and_sorted_matches():
    match = score_similarity(themes("Performance", "API", "Mobile"), themes("api", "performance", "Billing"))

    assert match.score == 0.5
    assert match.matching_themes == ["api", "performance"]


def test_labels_are_trimmed_and_case_folded():
    match = score_similarity(themes("  Dark Mode "), themes("dark mode"))

    assert match.score == 1.0
    assert match.matching_themes == ["dark mode"]


def test_no_shared_theme_returns_none():
    assert score_similarity(themes("Billing"), themes("Onboarding")) is None


def test_duplicate_labels_count_once():
    match = score_similarity(themes("API", "api"), themes("API"))

    assert match.score == 1.0


def test_score_is_rounded_to_two_decimals():
    match = score_similarity(themes("a", "b", "c"), themes("a"))

    assert match.score == 0.33


def test_half_rounds_up():
    assert round_score(0.125) == 0.13
    assert round_score(2 / 3) == 0.67


def test_strategy_delegates_to_scoring_function():
    strategy = ThemeJaccardStrategy()

    assert strategy.get_name() == "theme_jaccard"
    assert strategy.score(themes("API"), themes("API", "Docs")).score == 0.5
