"""Routing policy — turns ranked candidates into a single decision."""

from loguru import logger

from issue_router.models import Issue, RoutingAction, RoutingCandidate, RoutingDecision

# Labels that mean an issue has already been handled by a routing pass.
ROUTED_LABELS = ("routed", "auto-routed", "closed-duplicate")
MANUAL_REVIEW_LABEL = "manual-review"

AUTOMATION_MARKER = "automatically created"


class RoutingPolicy:
    """Confidence-gated routing: auto-route, manual review or leave in place.

    Both thresholds are inclusive (``>=``).
    """

    def __init__(self, auto_threshold: float = 0.75, manual_threshold: float = 0.5):
        if not 0.0 <= manual_threshold <= auto_threshold <= 1.0:
            raise ValueError(
                "thresholds must satisfy 0 <= manual_threshold <= auto_threshold <= 1, "
                f"got manual={manual_threshold} auto={auto_threshold}"
            )
        self.auto_threshold = auto_threshold
        self.manual_threshold = manual_threshold

    def decide(
        self, candidates: list[RoutingCandidate], current_destination: str | None,
    ) -> RoutingDecision:
        if not candidates:
            return RoutingDecision(candidates, RoutingAction.NO_ACTION, "no_candidates")

        best = candidates[0]
        if best.destination == current_destination:
            return RoutingDecision(candidates, RoutingAction.NO_ACTION, "already_placed")
        if best.confidence >= self.auto_threshold:
            return RoutingDecision(
                candidates, RoutingAction.AUTO_ROUTE, "auto_threshold", best.destination,
            )
        if best.confidence >= self.manual_threshold:
            return RoutingDecision(
                candidates, RoutingAction.MANUAL_REVIEW, "manual_threshold", best.destination,
            )
        return RoutingDecision(candidates, RoutingAction.NO_ACTION, "below_threshold")

    def needs_routing(
        self, issue: Issue, current_destination: str, candidates: list[RoutingCandidate],
    ) -> bool:
        """Scan-time filter: should this open issue go to a routing pass at all?"""
        if AUTOMATION_MARKER in (issue.body or ""):
            logger.debug(f"#{issue.number}: created by automation, skipping")
            return False
        decision = self.decide(candidates, current_destination)
        if decision.action is RoutingAction.NO_ACTION:
            return False
        return not self.already_handled(issue, decision)

    def already_handled(self, issue: Issue, decision: RoutingDecision) -> bool:
        """Idempotency key: labels or state showing a previous pass acted on the issue.

        ``manual-review`` only blocks another review request; an issue whose
        content has since crossed the auto threshold is still routed.
        """
        if issue.state != "open":
            logger.debug(f"#{issue.number}: {issue.state}, skipping")
            return True
        if issue.has_label(*ROUTED_LABELS):
            logger.debug(f"#{issue.number}: already routed, skipping")
            return True
        if decision.action is RoutingAction.MANUAL_REVIEW and issue.has_label(MANUAL_REVIEW_LABEL):
            logger.debug(f"#{issue.number}: already waiting for manual review, skipping")
            return True
        return False
