"""issue-router: keyword-based issue routing with confidence-gated automation."""

from issue_router.models import (
    Issue,
    IssueContent,
    IssueTracker,
    RouteResult,
    RoutingAction,
    RoutingCandidate,
    RoutingDecision,
)
from issue_router.errors import ExternalApiError, IssueRouterError, ParseError, UnknownDestination
from issue_router.registry import DEFAULT_REGISTRY, KeywordRegistry
from issue_router.classifier import Classifier
from issue_router.policy import RoutingPolicy
from issue_router.router import IssueRouter

__all__ = [
    "Issue",
    "IssueContent",
    "IssueTracker",
    "RouteResult",
    "RoutingAction",
    "RoutingCandidate",
    "RoutingDecision",
    "ExternalApiError",
    "IssueRouterError",
    "ParseError",
    "UnknownDestination",
    "DEFAULT_REGISTRY",
    "KeywordRegistry",
    "Classifier",
    "RoutingPolicy",
    "IssueRouter",
]
