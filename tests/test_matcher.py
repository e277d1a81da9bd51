"""Tests for the difflib-backed match port."""

import pytest

from anchoring.matcher import DifflibMatcher, context_score, similarity_score
from anchoring.matching import Match, MatchOptions

CORPUS = "The quick brown fox jumps over the lazy dog"


class TestSimilarityScore:
    """Tests for similarity_score and context_score."""

    def test_identical(self) -> None:
        assert similarity_score("fox", "fox") == 1.0

    def test_both_empty(self) -> None:
        assert similarity_score("", "") == 1.0

    def test_one_empty(self) -> None:
        assert similarity_score("fox", "") == 0.0

    def test_partial(self) -> None:
        assert similarity_score("The quick ", "red quick ") == pytest.approx(0.8)

    def test_flex_context_ignores_whitespace_runs(self) -> None:
        assert context_score("over  the\nlazy", "over the lazy", flex=True) == 1.0
        assert context_score("over  the\nlazy", "over the lazy", flex=False) < 1.0


class TestMatchOptions:
    """Tests for MatchOptions defaults."""

    def test_for_corpus(self) -> None:
        options = MatchOptions.for_corpus(CORPUS)
        assert options.match_distance == 2 * len(CORPUS)
        assert options.context_match_distance == 2 * len(CORPUS)
        assert options.context_match_threshold == 0.5
        assert options.pattern_match_threshold == 0.5
        assert options.flex_context is True
        assert options.with_fuzzy_comparison is True


class TestSearchFuzzy:
    """Tests for quote-only search."""

    def test_exact_occurrence(self) -> None:
        result = DifflibMatcher().search_fuzzy(CORPUS, "brown fox")
        assert result.found
        assert result.match == Match(start=10, end=19, confidence=1.0, matched_text="brown fox")

    def test_fuzzy_occurrence(self) -> None:
        text = "The quick brown fox leaps over the lazy dog"
        result = DifflibMatcher().search_fuzzy(text, "quick brown fox jumps over the lazy")
        assert result.match.start == 4
        assert result.match.end == 39
        assert result.match.confidence < 1.0

    def test_without_fuzzy_comparison_only_exact(self) -> None:
        text = "The quick brown fox leaps over the lazy dog"
        options = MatchOptions.for_corpus(text).model_copy(update={"with_fuzzy_comparison": False})
        result = DifflibMatcher().search_fuzzy(
            text, "quick brown fox jumps over the lazy", options=options
        )
        assert not result.found

    def test_bias_prefers_occurrence_near_hint(self) -> None:
        text = "fox one, fox two, fox three"
        result = DifflibMatcher().search_fuzzy(text, "fox", expected_start=17)
        assert result.match.start == 18
        assert [m.start for m in result.matches] == [18, 9, 0]

    def test_without_bias_ranks_by_position(self) -> None:
        text = "fox one, fox two, fox three"
        result = DifflibMatcher().search_fuzzy(text, "fox", expected_start=17, bias_to_hint=False)
        assert [m.start for m in result.matches] == [0, 9, 18]

    def test_match_distance_limits_candidates(self) -> None:
        text = "fox one, fox two, fox three"
        options = MatchOptions(match_distance=2, context_match_distance=2)
        result = DifflibMatcher().search_fuzzy(text, "fox", expected_start=10, options=options)
        assert [m.start for m in result.matches] == [9]

    def test_nothing_similar(self) -> None:
        result = DifflibMatcher().search_fuzzy(CORPUS, "completely unrelated words here")
        assert not result.found
        assert result.match is None

    def test_overlapping_matches_are_deduplicated(self) -> None:
        result = DifflibMatcher().search_fuzzy("aaaa", "aa", bias_to_hint=False)
        assert [(m.start, m.end) for m in result.matches] == [(0, 2), (2, 4)]


class TestSearchFuzzyWithContext:
    """Tests for context-aware search."""

    def test_context_disambiguates(self) -> None:
        text = "a red fox ran. a grey fox sat."
        result = DifflibMatcher().search_fuzzy_with_context(text, "a grey ", " sat.", "fox")
        assert result.match.start == 22

    def test_hint_breaks_ties(self) -> None:
        text = "alpha beta gamma. alpha beta gamma."
        matcher = DifflibMatcher()
        hinted = matcher.search_fuzzy_with_context(text, "alpha ", " gamma", "beta", 24, 28)
        assert hinted.match.start == 24
        unhinted = matcher.search_fuzzy_with_context(text, "alpha ", " gamma", "beta")
        assert unhinted.match.start == 6

    def test_changed_context_still_matches(self) -> None:
        text = "The red quick brown fox jumps over the lazy dog"
        result = DifflibMatcher().search_fuzzy_with_context(
            text, "The quick ", " jumps", "brown fox", 10, 19
        )
        assert (result.match.start, result.match.end) == (14, 23)
        assert result.match.confidence == pytest.approx(0.95)

    def test_unrelated_context_rejects_candidate(self) -> None:
        text = "zzzzzzzzzz brown fox qqqqqqqqqq"
        result = DifflibMatcher().search_fuzzy_with_context(
            text, "The quick ", " jumps over", "brown fox"
        )
        assert not result.found
