"""Keyword-overlap classifier: scores issue text against every destination.

Matching is a plain case-insensitive substring test by default, so "api"
also matches inside "rapid". Confidence thresholds were tuned against that
behavior; ``match_mode="word"`` switches to word-boundary matching.
"""

import re

from issue_router.models import IssueContent, RoutingCandidate
from issue_router.registry import KeywordRegistry

MATCH_MODES = ("substring", "word")


class Classifier:
    """Ranks destinations for a piece of issue content."""

    def __init__(self, registry: KeywordRegistry, match_mode: str = "substring"):
        if match_mode not in MATCH_MODES:
            raise ValueError(f"match_mode must be one of {MATCH_MODES}, got {match_mode!r}")
        self.registry = registry
        self.match_mode = match_mode
        self._patterns: dict[str, re.Pattern] = {}

    def _matches(self, keyword: str, text: str) -> bool:
        if self.match_mode == "substring":
            return keyword in text
        pattern = self._patterns.get(keyword)
        if pattern is None:
            # \w boundaries would split "server-side"; treat hyphenated terms as one word
            pattern = re.compile(rf"(?<![\w-]){re.escape(keyword)}(?![\w-])")
            self._patterns[keyword] = pattern
        return pattern.search(text) is not None

    def _score(self, text: str, destination: str) -> RoutingCandidate:
        keywords = self.registry.keywords(destination)
        matched = tuple(kw for kw in keywords if self._matches(kw, text))
        return RoutingCandidate(
            destination=destination,
            matched_keywords=matched,
            score=len(matched),
            confidence=len(matched) / len(keywords),
        )

    def score_destination(self, content: IssueContent, destination: str) -> RoutingCandidate:
        """Score a single destination, even when nothing matches.

        Raises:
            UnknownDestination: if ``destination`` is not registered.
        """
        return self._score(content.text, destination)

    def classify(self, content: IssueContent) -> list[RoutingCandidate]:
        """Return matching destinations, best first.

        Ties on score are broken alphabetically by destination id so the
        ranking does not depend on registry declaration order.
        """
        text = content.text
        candidates = [self._score(text, d) for d in self.registry.destinations()]
        candidates = [c for c in candidates if c.score > 0]
        candidates.sort(key=lambda c: (-c.score, c.destination))
        return candidates
