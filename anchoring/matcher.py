"""
Fuzzy matching for quote anchors.

Uses difflib.SequenceMatcher for similarity scoring. Candidates are scored the
same way for both searches: the quote counts for half, prefix and suffix
context for a quarter each.
"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import SequenceMatcher

from anchoring.logging_config import logger
from anchoring.matching import Match, MatchOptions, MatchResult

# Fuzzy windows may differ this much in length from the pattern
WINDOW_TOLERANCE = 0.3


def similarity_score(s1: str, s2: str) -> float:
    """
    Calculate similarity score between two strings using SequenceMatcher.

    Returns a float between 0.0 (completely different) and 1.0 (identical).
    """
    if not s1 and not s2:
        return 1.0
    if not s1 or not s2:
        return 0.0
    return SequenceMatcher(None, s1, s2, autojunk=False).ratio()


def _collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def context_score(expected: str, actual: str, flex: bool) -> float:
    """Score context text, optionally also with whitespace normalized."""
    score = similarity_score(expected, actual)
    if flex:
        score = max(
            score,
            similarity_score(_collapse_whitespace(expected), _collapse_whitespace(actual)),
        )
    return score


@dataclass
class _Search:
    """One search request against a corpus."""

    text: str
    pattern: str
    prefix: str
    suffix: str
    expected_start: int | None
    bias_to_hint: bool
    max_distance: int
    options: MatchOptions

    def run(self) -> list[Match]:
        if not self.pattern:
            return []
        # Exact occurrences first, fuzzy windows only if none qualifies
        matches = self._score(_exact_candidates(self.text, self.pattern))
        if not matches and self.options.with_fuzzy_comparison:
            matches = self._score(
                _fuzzy_candidates(
                    self.text, self.pattern, self.options.pattern_match_threshold
                )
            )
        matches.sort(key=self._rank)
        return _deduplicate_overlapping_matches(matches)

    def _rank(self, match: Match) -> tuple[float, int]:
        if self.bias_to_hint and self.expected_start is not None:
            return (-match.confidence, abs(match.start - self.expected_start))
        return (-match.confidence, match.start)

    def _score(self, candidates: list[tuple[int, int, str]]) -> list[Match]:
        matches: list[Match] = []
        for start, end, candidate_text in candidates:
            if (
                self.expected_start is not None
                and abs(start - self.expected_start) > self.max_distance
            ):
                continue

            exact_score = similarity_score(self.pattern, candidate_text)
            if exact_score < self.options.pattern_match_threshold:
                continue

            prefix_score = 1.0
            suffix_score = 1.0
            flex = self.options.flex_context
            if self.prefix:
                actual_prefix = self.text[max(0, start - len(self.prefix)) : start]
                prefix_score = context_score(self.prefix, actual_prefix, flex)
            if self.suffix:
                actual_suffix = self.text[end : end + len(self.suffix)]
                suffix_score = context_score(self.suffix, actual_suffix, flex)
            if self.prefix or self.suffix:
                scores = [
                    score
                    for score, given in ((prefix_score, self.prefix), (suffix_score, self.suffix))
                    if given
                ]
                if sum(scores) / len(scores) < self.options.context_match_threshold:
                    continue

            weighted_score = (exact_score * 0.5) + (prefix_score * 0.25) + (suffix_score * 0.25)
            matches.append(
                Match(
                    start=start,
                    end=end,
                    confidence=weighted_score,
                    matched_text=candidate_text,
                )
            )
        return matches


class DifflibMatcher:
    """MatchPort implementation backed by difflib."""

    def search_fuzzy_with_context(
        self,
        text: str,
        prefix: str,
        suffix: str,
        pattern: str,
        expected_start: int | None = None,
        expected_end: int | None = None,
        bias_to_hint: bool = True,
        options: MatchOptions | None = None,
    ) -> MatchResult:
        options = options or MatchOptions.for_corpus(text)
        search = _Search(
            text=text,
            pattern=pattern,
            prefix=prefix,
            suffix=suffix,
            expected_start=expected_start,
            bias_to_hint=bias_to_hint,
            max_distance=options.context_match_distance,
            options=options,
        )
        matches = search.run()
        logger.debug(f"Context search for '{pattern}' found {len(matches)} match(es)")
        return MatchResult(matches=matches)

    def search_fuzzy(
        self,
        text: str,
        pattern: str,
        expected_start: int | None = None,
        bias_to_hint: bool = True,
        options: MatchOptions | None = None,
    ) -> MatchResult:
        options = options or MatchOptions.for_corpus(text)
        search = _Search(
            text=text,
            pattern=pattern,
            prefix="",
            suffix="",
            expected_start=expected_start,
            bias_to_hint=bias_to_hint,
            max_distance=options.match_distance,
            options=options,
        )
        matches = search.run()
        logger.debug(f"Quote search for '{pattern}' found {len(matches)} match(es)")
        return MatchResult(matches=matches)


def _deduplicate_overlapping_matches(matches: list[Match]) -> list[Match]:
    """Remove overlapping matches, keeping the first (best ranked) of each region."""
    result: list[Match] = []
    for match in matches:
        # Two ranges overlap if: start1 < end2 AND start2 < end1
        if not any(match.start < kept.end and kept.start < match.end for kept in result):
            result.append(match)
    return result


def _exact_candidates(text: str, pattern: str) -> list[tuple[int, int, str]]:
    candidates: list[tuple[int, int, str]] = []
    search_start = 0
    while True:
        pos = text.find(pattern, search_start)
        if pos == -1:
            break
        candidates.append((pos, pos + len(pattern), pattern))
        search_start = pos + 1
    return candidates


def _fuzzy_candidates(
    text: str,
    pattern: str,
    threshold: float,
) -> list[tuple[int, int, str]]:
    """
    Find windows of text similar to pattern.

    Windows start at word boundaries and range over lengths within
    WINDOW_TOLERANCE of the pattern length. For each start only the most
    similar window is kept.

    Returns list of (start, end, candidate_text) tuples.
    """
    candidates: list[tuple[int, int, str]] = []
    pattern_len = len(pattern)
    tolerance = int(pattern_len * WINDOW_TOLERANCE)
    sizes = range(max(1, pattern_len - tolerance), pattern_len + tolerance + 1)

    matcher = SequenceMatcher(None, autojunk=False)
    matcher.set_seq2(pattern)

    for i in range(len(text)):
        if i > 0 and not (text[i - 1].isspace() or text[i] == pattern[0]):
            continue

        best: tuple[float, int] | None = None
        for size in sizes:
            if i + size > len(text):
                break
            candidate = text[i : i + size]
            if not _shares_significant_content(pattern, candidate):
                continue
            matcher.set_seq1(candidate)
            if matcher.real_quick_ratio() < threshold or matcher.quick_ratio() < threshold:
                continue
            ratio = matcher.ratio()
            if ratio >= threshold and (best is None or ratio > best[0]):
                best = (ratio, size)

        if best is not None:
            candidates.append((i, i + best[1], text[i : i + best[1]]))

    return candidates


def _shares_significant_content(s1: str, s2: str) -> bool:
    """
    Check if two strings share significant content.

    This is a quick filter to avoid expensive similarity calculations
    on completely unrelated strings. Patterns without significant words
    always pass.
    """
    words1 = {w for w in s1.lower().split() if len(w) > 3}
    if not words1:
        return True
    words2 = {w for w in s2.lower().split() if len(w) > 3}
    return bool(words1 & words2)
