"""IssueRouter — scan repositories, classify issues and execute routing decisions.

The classifier and policy are pure; everything with side effects lives here.
Each external call is made once. A failure is isolated to the issue it
belongs to and the batch moves on.

A destination issue that was created while the original failed to close is
reported as ``partial`` and left for a human; nothing is rolled back.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from loguru import logger

from issue_router.breaker import CircuitBreaker
from issue_router.classifier import Classifier
from issue_router.clickup import ClickUpClient
from issue_router.config import RouterConfig
from issue_router.errors import ExternalApiError, IssueRouterError
from issue_router.models import (
    Issue,
    IssueTracker,
    RouteResult,
    RoutingAction,
    RoutingDecision,
)
from issue_router.policy import MANUAL_REVIEW_LABEL, RoutingPolicy

NEEDS_ROUTING_LABEL = "needs-routing"


@dataclass
class ScanEntry:
    """An open issue the scan pass flagged for routing."""
    current_repo: str
    issue: Issue
    decision: RoutingDecision


@dataclass
class ScanResult:
    repositories: list[str]
    entries: list[ScanEntry] = field(default_factory=list)
    total_scanned: int = 0
    failed_repositories: list[str] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


@dataclass
class RoutingReport:
    total_candidates: int
    results: list[RouteResult] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def routed(self) -> list[RouteResult]:
        return [
            r for r in self.results
            if r.created is not None and r.decision.action is RoutingAction.AUTO_ROUTE
        ]

    @property
    def failed(self) -> list[RouteResult]:
        return [r for r in self.results if r.error is not None]


def _pct(confidence: float) -> str:
    return f"{confidence * 100:.1f}%"


class IssueRouter:
    """Runs scan and route passes against an issue tracker."""

    def __init__(
        self,
        tracker: IssueTracker,
        classifier: Classifier,
        policy: RoutingPolicy,
        config: RouterConfig | None = None,
        clickup: ClickUpClient | None = None,
        *,
        breaker: CircuitBreaker | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._tracker = tracker
        self._classifier = classifier
        self._policy = policy
        self._config = config or RouterConfig()
        self._clickup = clickup
        self._breaker = breaker or CircuitBreaker()
        self._sleep = sleep

    def decide(self, issue: Issue, current_repo: str) -> RoutingDecision:
        candidates = self._classifier.classify(issue.content)
        return self._policy.decide(candidates, current_repo)

    def entries_for(self, pairs: list[tuple[str, Issue]]) -> list[ScanEntry]:
        """Re-classify ``(current_repo, issue)`` pairs loaded from a candidates file."""
        return [ScanEntry(repo, issue, self.decide(issue, repo)) for repo, issue in pairs]

    # ------------------------------------------------------------------
    # Scan
    # ------------------------------------------------------------------

    async def scan(self, repositories: list[str] | None = None) -> ScanResult:
        repositories = list(repositories or self._config.repositories)
        result = ScanResult(repositories=repositories)
        logger.info(f"Scan: {len(repositories)} repositories in {self._tracker.org} via {self._tracker.name}")

        for repo in repositories:
            try:
                issues = await self._tracker.list_open_issues(repo, per_page=self._config.per_page)
            except ExternalApiError as e:
                logger.error(f"Scan: failed to list {self._tracker.org}/{repo}: {e}")
                result.failed_repositories.append(repo)
                continue

            result.total_scanned += len(issues)
            logger.info(f"Scan: {repo} has {len(issues)} open issues")
            for issue in issues:
                candidates = self._classifier.classify(issue.content)
                if not self._policy.needs_routing(issue, repo, candidates):
                    continue
                decision = self._policy.decide(candidates, repo)
                result.entries.append(ScanEntry(repo, issue, decision))
                logger.info(
                    f"Scan: {repo}#{issue.number} needs routing → {decision.target} "
                    f"({_pct(decision.confidence)}, {decision.action.value})"
                )

        logger.info(
            f"Scan: {result.total_scanned} issues scanned, {len(result.entries)} need routing"
        )
        return result

    # ------------------------------------------------------------------
    # Route
    # ------------------------------------------------------------------

    async def route(self, entries: list[ScanEntry]) -> RoutingReport:
        report = RoutingReport(total_candidates=len(entries))
        self._breaker.reset()
        if not entries:
            logger.info("Route: no issues need routing")
            return report

        for i, entry in enumerate(entries):
            result = await self.route_one(entry)
            report.results.append(result)
            if i < len(entries) - 1 and self._config.request_delay > 0:
                await self._sleep(self._config.request_delay)

        logger.info(
            f"Route: {len(entries)} candidates, {len(report.routed)} routed, "
            f"{len(report.failed)} failed"
        )
        return report

    async def route_one(self, entry: ScanEntry) -> RouteResult:
        """Execute one decision; never raises for per-issue failures."""
        result = RouteResult(entry.current_repo, entry.issue, entry.decision)
        logger.info(f"Route: {entry.current_repo}#{entry.issue.number} '{entry.issue.title}'")

        if entry.decision.action is RoutingAction.NO_ACTION:
            logger.info(f"Route: #{entry.issue.number} no action ({entry.decision.reason})")
            result.success = True
            return result

        try:
            # Labels and state from the scan (or a candidates file) may be stale
            current = await self._tracker.get_issue(entry.current_repo, entry.issue.number)
            if self._policy.already_handled(current, entry.decision):
                logger.info(f"Route: #{current.number} already handled, skipping")
                return result
            entry = ScanEntry(entry.current_repo, current, entry.decision)
            result.issue = current

            if entry.decision.action is RoutingAction.AUTO_ROUTE:
                await self._auto_route(entry, result)
            else:
                await self._request_review(entry)
                result.success = True
        except IssueRouterError as e:
            result.error = str(e)
            result.partial = result.created is not None
            logger.warning(f"Route: #{entry.issue.number} failed: {e}")
        return result

    async def _auto_route(self, entry: ScanEntry, result: RouteResult) -> None:
        target = entry.decision.target
        issue = entry.issue
        if self._breaker.is_open(target):
            raise ExternalApiError("GitHub", f"circuit open for {target}, not creating issue")

        try:
            created = await self._tracker.create_issue(
                target,
                f"[Re-routed] {issue.title}",
                self._rerouted_body(entry),
                ["bug", "auto-routed", f"from-{entry.current_repo}"],
            )
        except ExternalApiError:
            self._breaker.record_failure(target)
            raise
        self._breaker.record_success(target)
        result.created = created
        logger.info(f"Route: created {target}#{created.number}")

        repo, number = entry.current_repo, issue.number
        await self._tracker.comment(repo, number, self._moved_comment(created.url, target))
        await self._tracker.add_labels(
            repo, number, ["auto-routed", "closed-duplicate", "routed", f"routed-to-{target}"],
        )
        if issue.has_label(NEEDS_ROUTING_LABEL):
            await self._tracker.remove_label(repo, number, NEEDS_ROUTING_LABEL)
        await self._tracker.close_issue(repo, number)
        logger.info(f"Route: closed original {repo}#{number}")

        if self._clickup is not None:
            try:
                await self._clickup.note_routing(issue.body, created.url)
            except ExternalApiError as e:
                logger.warning(f"Route: ClickUp update failed for #{number}: {e}")

        result.success = True

    async def _request_review(self, entry: ScanEntry) -> None:
        lines = [
            "🤖 **AI Routing Analysis - Manual Review Required**",
            "",
            f"**Confidence too low for auto-routing** ({_pct(entry.decision.confidence)})",
            "",
            "**Repository Candidates**:",
        ]
        for c in entry.decision.candidates:
            lines.append(
                f"- **{c.destination}** ({_pct(c.confidence)}, score {c.score}): "
                f"{', '.join(c.matched_keywords)}"
            )
        lines += ["", "Please manually review and route this issue to the appropriate repository."]
        await self._tracker.comment(entry.current_repo, entry.issue.number, "\n".join(lines))
        await self._tracker.add_labels(entry.current_repo, entry.issue.number, [MANUAL_REVIEW_LABEL])
        logger.info(f"Route: #{entry.issue.number} flagged for manual review")

    def _rerouted_body(self, entry: ScanEntry) -> str:
        best = entry.decision.best
        return (
            "## 🤖 Automatically Re-routed Issue\n\n"
            f"**Original Issue**: {entry.issue.url}\n"
            f"**Original Repository**: {entry.current_repo}\n"
            f"**Routing Confidence**: {_pct(entry.decision.confidence)}\n"
            f"**Matched Keywords**: {', '.join(best.matched_keywords)}\n\n"
            "---\n\n"
            f"{entry.issue.body or 'No description provided.'}\n\n"
            "---\n\n"
            "*This issue was re-routed based on content analysis. The original issue "
            "will be closed with a reference to this new issue.*"
        )

    def _moved_comment(self, url: str, target: str) -> str:
        return (
            "🤖 **Automatically Routed**\n\n"
            "This issue has been moved to a more appropriate repository.\n\n"
            f"**New Location**: {url}\n"
            f"**Repository**: {self._tracker.org}/{target}\n"
            "**Reason**: Content analysis indicates this issue is better suited for the "
            "target repository.\n\n"
            "This issue will be closed to avoid duplication. Please continue the "
            "discussion in the new issue."
        )

    async def run(self, repositories: list[str] | None = None) -> tuple[ScanResult, RoutingReport]:
        scan = await self.scan(repositories)
        report = await self.route(scan.entries)
        return scan, report
