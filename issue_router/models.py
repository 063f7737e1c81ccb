"""Core data models for issue-router."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class IssueContent:
    """Raw issue text as pulled from the tracker."""
    title: str
    body: str = ""

    @property
    def text(self) -> str:
        """Title and body joined and lowercased, ready for keyword matching."""
        return f"{self.title or ''} {self.body or ''}".lower()


@dataclass
class Issue:
    """An issue as seen in a tracker repository."""
    number: int
    title: str
    body: str = ""
    labels: list[str] = field(default_factory=list)
    url: str = ""
    created_at: str = ""
    state: str = "open"

    @property
    def content(self) -> IssueContent:
        return IssueContent(title=self.title, body=self.body or "")

    def has_label(self, *names: str) -> bool:
        return any(label in names for label in self.labels)

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "title": self.title,
            "body": self.body,
            "url": self.url,
            "labels": list(self.labels),
            "created_at": self.created_at,
            "state": self.state,
        }

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Issue":
        """Build from a GitHub REST issue payload."""
        labels = [
            label["name"] if isinstance(label, dict) else str(label)
            for label in data.get("labels", [])
        ]
        return cls(
            number=data["number"],
            title=data.get("title", ""),
            body=data.get("body") or "",
            labels=labels,
            url=data.get("html_url") or data.get("url", ""),
            created_at=data.get("created_at", ""),
            state=data.get("state", "open"),
        )


@dataclass(frozen=True)
class RoutingCandidate:
    """One destination scored against an issue."""
    destination: str
    matched_keywords: tuple[str, ...]
    score: int
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "repo": self.destination,
            "score": self.score,
            "confidence": self.confidence,
            "matchedKeywords": list(self.matched_keywords),
        }


class RoutingAction(str, Enum):
    AUTO_ROUTE = "auto_route"
    MANUAL_REVIEW = "manual_review"
    NO_ACTION = "no_action"


@dataclass
class RoutingDecision:
    """Result of the routing policy for a single issue."""
    candidates: list[RoutingCandidate]
    action: RoutingAction
    reason: str  # "no_candidates", "already_placed", "auto_threshold", ...
    target: str | None = None

    @property
    def best(self) -> RoutingCandidate | None:
        return self.candidates[0] if self.candidates else None

    @property
    def confidence(self) -> float:
        return self.best.confidence if self.best else 0.0


@dataclass
class CreatedIssue:
    """Minimal view of an issue the tracker just created."""
    repo: str
    number: int
    url: str


@dataclass
class RouteResult:
    """Outcome of executing one routing decision."""
    current_repo: str
    issue: Issue
    decision: RoutingDecision
    created: CreatedIssue | None = None
    success: bool = False
    partial: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Entry shape expected by the routing report consumers."""
        best = self.decision.best
        return {
            "original": {
                "repo": self.current_repo,
                "issue": self.issue.number,
                "title": self.issue.title,
            },
            "routed": {
                "repo": self.created.repo if self.created else self.decision.target,
                "issue": self.created.number if self.created else None,
                "url": self.created.url if self.created else None,
            },
            "confidence": self.decision.confidence,
            "keywords": list(best.matched_keywords) if best else [],
        }


class IssueTracker(ABC):
    """Abstract base class for issue tracker collaborators."""

    def __init__(self, org: str):
        self.org = org

    @abstractmethod
    async def list_open_issues(self, repo: str, per_page: int = 50) -> list[Issue]:
        """List open issues, newest first."""
        ...

    @abstractmethod
    async def get_issue(self, repo: str, number: int) -> Issue:
        """Fetch one issue with its current labels and state."""
        ...

    @abstractmethod
    async def create_issue(
        self, repo: str, title: str, body: str, labels: list[str] | None = None,
    ) -> CreatedIssue:
        ...

    @abstractmethod
    async def comment(self, repo: str, number: int, body: str) -> None:
        ...

    @abstractmethod
    async def add_labels(self, repo: str, number: int, labels: list[str]) -> None:
        ...

    @abstractmethod
    async def remove_label(self, repo: str, number: int, label: str) -> None:
        ...

    @abstractmethod
    async def close_issue(self, repo: str, number: int) -> None:
        ...

    @property
    def name(self) -> str:
        return self.__class__.__name__
