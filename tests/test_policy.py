import pytest

from issue_router.models import Issue, RoutingAction, RoutingCandidate
from issue_router.policy import RoutingPolicy


def _candidate(destination, confidence, score=1):
    return RoutingCandidate(destination, ("kw",), score, confidence)


def test_empty_candidates_no_action():
    decision = RoutingPolicy().decide([], "frontend")
    assert decision.action is RoutingAction.NO_ACTION
    assert decision.reason == "no_candidates"
    assert decision.target is None


def test_auto_route_above_threshold():
    decision = RoutingPolicy(auto_threshold=0.75).decide([_candidate("backend", 0.8)], "frontend")
    assert decision.action is RoutingAction.AUTO_ROUTE
    assert decision.target == "backend"


def test_manual_review_between_thresholds():
    decision = RoutingPolicy(auto_threshold=0.75, manual_threshold=0.5).decide(
        [_candidate("backend", 0.6)], "frontend"
    )
    assert decision.action is RoutingAction.MANUAL_REVIEW
    assert decision.target == "backend"


def test_below_manual_threshold():
    decision = RoutingPolicy().decide([_candidate("backend", 0.2)], "frontend")
    assert decision.action is RoutingAction.NO_ACTION
    assert decision.reason == "below_threshold"


@pytest.mark.parametrize("confidence", [0.0, 0.5, 0.75, 1.0])
def test_already_placed_is_always_no_action(confidence):
    decision = RoutingPolicy().decide([_candidate("frontend", confidence)], "frontend")
    assert decision.action is RoutingAction.NO_ACTION
    assert decision.reason == "already_placed"


def test_thresholds_are_inclusive():
    policy = RoutingPolicy(auto_threshold=0.75, manual_threshold=0.5)
    assert policy.decide([_candidate("b", 0.75)], "a").action is RoutingAction.AUTO_ROUTE
    assert policy.decide([_candidate("b", 0.5)], "a").action is RoutingAction.MANUAL_REVIEW


def test_only_best_candidate_counts():
    candidates = [_candidate("frontend", 0.4, score=3), _candidate("backend", 1.0, score=2)]
    decision = RoutingPolicy().decide(candidates, "mobile")
    assert decision.action is RoutingAction.NO_ACTION


def test_invalid_thresholds():
    with pytest.raises(ValueError):
        RoutingPolicy(auto_threshold=0.4, manual_threshold=0.5)
    with pytest.raises(ValueError):
        RoutingPolicy(auto_threshold=1.5)


def test_needs_routing_skips_routed_and_automation_issues():
    policy = RoutingPolicy()
    candidates = [_candidate("backend", 0.9)]
    fresh = Issue(number=1, title="t", body="")
    routed = Issue(number=2, title="t", body="", labels=["auto-routed"])
    generated = Issue(number=3, title="t", body="This issue was automatically created by QA")
    assert policy.needs_routing(fresh, "frontend", candidates)
    assert not policy.needs_routing(routed, "frontend", candidates)
    assert not policy.needs_routing(generated, "frontend", candidates)
    assert not policy.needs_routing(fresh, "backend", candidates)


def test_manual_review_label_only_blocks_another_review():
    policy = RoutingPolicy(auto_threshold=0.75, manual_threshold=0.5)
    flagged = Issue(number=4, title="t", body="", labels=["manual-review"])
    assert not policy.needs_routing(flagged, "frontend", [_candidate("backend", 0.6)])
    assert policy.needs_routing(flagged, "frontend", [_candidate("backend", 0.9)])


def test_closed_issue_is_already_handled():
    policy = RoutingPolicy()
    closed = Issue(number=5, title="t", body="", state="closed")
    decision = policy.decide([_candidate("backend", 0.9)], "frontend")
    assert policy.already_handled(closed, decision)
    assert not policy.already_handled(Issue(number=6, title="t", body=""), decision)
