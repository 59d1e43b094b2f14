import pytest

from sarnews.classifier import KeywordClassifier, classify
from sarnews.classifier.classifier import best_label
from sarnews.config import ClassifierConfig


@pytest.fixture
def classifier():
    return KeywordClassifier()


class TestRelevance:
    def test_regional_keyword_in_title(self, classifier):
        assert classifier.is_relevant("Flood warning issued for Sibu")

    def test_regional_keyword_in_snippet_only(self, classifier):
        assert classifier.is_relevant("Flood warning issued", "Residents of Kapit told to move")

    def test_matching_is_case_insensitive(self, classifier):
        assert classifier.is_relevant("KUCHING WATERFRONT REOPENS")

    def test_unrelated_item_is_out_of_scope(self, classifier):
        assert not classifier.is_relevant("Selangor traffic update", "Jams in Shah Alam")

    def test_always_relevant_source_skips_filter(self, classifier):
        assert classifier.is_relevant("Selangor traffic update", always_relevant=True)


class TestCategory:
    def test_bridge_in_kuching_is_infrastructure(self, classifier):
        result = classify("New bridge opens in Kuching", "The bridge was completed ahead of schedule.")
        assert result.in_scope
        assert result.category == "infrastructure"
        assert result.subregion == "kuching"

    def test_badminton_is_sports(self, classifier):
        assert classifier.detect_category("Sarawak shuttler wins badminton title") == "sports"

    def test_most_hits_wins(self, classifier):
        assert classifier.detect_category("Police arrest football fan") == "crime"

    def test_no_hits_defaults_to_general(self, classifier):
        assert classifier.detect_category("Sarawak weather today") == "general"

    def test_tie_defaults_to_general(self, classifier):
        assert classifier.detect_category("Kuching school football") == "general"


class TestSubregion:
    def test_chinese_place_name(self, classifier):
        assert classifier.detect_subregion("古晋新桥启用") == "kuching"

    def test_no_locality_defaults_to_sarawak(self, classifier):
        assert classifier.detect_subregion("Sarawak budget tabled") == "sarawak"

    def test_tie_defaults_to_sarawak(self, classifier):
        assert classifier.detect_subregion("Miri and Sibu leaders meet") == "sarawak"

    def test_source_name_counts(self, classifier):
        assert classifier.detect_subregion("Council meeting tonight", source_name="Miri Daily") == "miri"


def test_out_of_scope_item_gets_defaults(classifier):
    result = classifier.classify("Johor bridge closed for repairs")
    assert not result.in_scope
    assert result.category == "general"
    assert result.subregion == "sarawak"


def test_classification_is_deterministic(classifier):
    first = classifier.classify("Miri hospital expands", "New wing for patients", source_name="Borneo Post")
    second = classifier.classify("Miri hospital expands", "New wing for patients", source_name="Borneo Post")
    assert first == second
    assert first.category == "health"
    assert first.subregion == "miri"


def test_config_overrides_tables():
    classifier = KeywordClassifier.from_config(
        ClassifierConfig(
            default_region="kuching",
            regional_keywords=["borneo"],
            category_keywords={"weather": ["rain"]},
        )
    )
    result = classifier.classify("Heavy rain across Borneo")
    assert result.in_scope
    assert result.category == "weather"
    assert result.subregion == "kuching"
    assert not classifier.is_relevant("Sarawak news")


@pytest.mark.parametrize(
    "scores, expected",
    [
        ({}, "general"),
        ({"a": 0, "b": 0}, "general"),
        ({"a": 2, "b": 1}, "a"),
        ({"a": 1, "b": 1}, "general"),
    ],
)
def test_best_label(scores, expected):
    assert best_label(scores, "general") == expected
