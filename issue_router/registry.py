"""Keyword registry — destination repository → domain vocabulary.

Passed explicitly into the Classifier; nothing reads a process-wide registry.
"""

from __future__ import annotations

import difflib
import json
import tomllib
from collections.abc import Iterator, Mapping
from pathlib import Path

from loguru import logger

from issue_router.errors import UnknownDestination

# Registry used by the repository scan and route passes.
# Keyword order is kept so matched keywords are reported in declaration order.
DEFAULT_REGISTRY: dict[str, list[str]] = {
    "mereka-web": [
        "frontend", "ui", "web", "client", "react", "nextjs", "typescript",
        "component", "interface", "login", "dashboard", "experience", "expert",
        "job", "user", "mobile", "responsive", "css", "styling", "form",
        "validation", "routing", "navigation",
    ],
    "mereka-web-ssr": [
        "ssr", "server-side", "rendering", "nextjs", "seo", "performance",
        "hydration", "static", "generation", "pre-rendering", "meta", "og",
        "sitemap",
    ],
    "mereka-cloudfunctions": [
        "backend", "api", "server", "cloud", "functions", "firebase",
        "google-cloud", "serverless", "authentication", "auth", "database",
        "firestore", "payment", "stripe", "webhook", "cron", "scheduled",
        "email", "notification", "push",
    ],
    "Fadlan-Personal": [
        "automation", "test", "qa", "playwright", "testing", "triage",
        "routing", "bug-routing", "ci-cd", "deployment",
    ],
}


def _normalize(s: str) -> str:
    """Strip hyphens, underscores, spaces and lowercase."""
    return s.lower().replace("-", "").replace("_", "").replace(" ", "")


class KeywordRegistry(Mapping[str, frozenset[str]]):
    """Immutable mapping of destination id to its keyword set."""

    def __init__(self, mapping: Mapping[str, list[str] | tuple[str, ...] | set[str]]):
        self._keywords: dict[str, tuple[str, ...]] = {}
        for destination, raw in mapping.items():
            keywords: list[str] = []
            for kw in raw:
                kw = str(kw).strip().lower()
                if kw and kw not in keywords:
                    keywords.append(kw)
            if not keywords:
                raise ValueError(f"Destination '{destination}' has no keywords")
            self._keywords[destination] = tuple(keywords)
        self._normalized = {_normalize(d): d for d in self._keywords}

    @classmethod
    def from_file(cls, path: str | Path) -> "KeywordRegistry":
        """Load a registry from TOML (``[destinations]`` table) or JSON."""
        path = Path(path)
        raw = path.read_bytes()
        if path.suffix == ".toml":
            data = tomllib.loads(raw.decode("utf-8"))
            data = data.get("destinations", data)
        else:
            data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Registry file {path} must contain a mapping")
        registry = cls(data)
        logger.debug(f"Loaded keyword registry from {path}: {len(registry)} destinations")
        return registry

    def lookup(self, destination: str) -> frozenset[str]:
        """Return the keyword set for ``destination``.

        Raises:
            UnknownDestination: with close-match suggestions when not registered.
        """
        try:
            return frozenset(self._keywords[destination])
        except KeyError:
            raise UnknownDestination(destination, self._suggest(destination)) from None

    def keywords(self, destination: str) -> tuple[str, ...]:
        """Keywords in declaration order."""
        self.lookup(destination)
        return self._keywords[destination]

    def destinations(self) -> list[str]:
        return list(self._keywords)

    def _suggest(self, destination: str) -> list[str]:
        normed = _normalize(destination)
        if normed in self._normalized:
            return [self._normalized[normed]]
        close = difflib.get_close_matches(normed, self._normalized.keys(), n=2, cutoff=0.7)
        return [self._normalized[c] for c in close]

    def __getitem__(self, destination: str) -> frozenset[str]:
        return self.lookup(destination)

    def __iter__(self) -> Iterator[str]:
        return iter(self._keywords)

    def __len__(self) -> int:
        return len(self._keywords)

    def __repr__(self) -> str:
        return f"KeywordRegistry({self.destinations()!r})"
