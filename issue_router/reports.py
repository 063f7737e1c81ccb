"""JSON report artifacts and the plain-text activity summary."""

import json
from pathlib import Path
from typing import Any

from loguru import logger

from issue_router.models import Issue
from issue_router.router import RoutingReport, ScanEntry, ScanResult

SCAN_REPORT = "scan-report.json"
ROUTING_REPORT = "routing-report.json"
ROUTING_CANDIDATES = "routing-candidates.json"


def scan_report(scan: ScanResult) -> dict[str, Any]:
    return {
        "timestamp": scan.timestamp,
        "total_repositories": len(scan.repositories),
        "total_issues_scanned": scan.total_scanned,
        "issues_needing_routing": len(scan.entries),
        "repositories": list(scan.repositories),
        "failed_repositories": list(scan.failed_repositories),
        "routing_opportunities": [
            {
                "repo": e.current_repo,
                "issue": f"#{e.issue.number}",
                "title": e.issue.title,
                "suggested_repo": e.decision.target,
                "confidence": e.decision.confidence,
                "matched_keywords": list(e.decision.best.matched_keywords) if e.decision.best else [],
                "action": e.decision.action.value,
            }
            for e in scan.entries
        ],
    }


def routing_report(report: RoutingReport) -> dict[str, Any]:
    routed = report.routed
    return {
        "timestamp": report.timestamp,
        "total_candidates": report.total_candidates,
        "successfully_routed": len(routed),
        "results": [r.to_dict() for r in routed],
        "failures": [
            {
                "repo": r.current_repo,
                "issue": r.issue.number,
                "error": r.error,
                "partial": r.partial,
            }
            for r in report.failed
        ],
    }


def candidates_payload(entries: list[ScanEntry]) -> list[dict[str, Any]]:
    """Hand-off file between the scan and route passes."""
    return [
        {
            "currentRepo": e.current_repo,
            "issue": e.issue.to_dict(),
            "suggestedRouting": e.decision.best.to_dict() if e.decision.best else None,
            "confidence": e.decision.confidence,
        }
        for e in entries
    ]


def load_candidates(path: str | Path) -> list[tuple[str, Issue]]:
    """Read a candidates file back as ``(current_repo, issue)`` pairs."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    pairs = []
    for item in data:
        raw = item["issue"]
        issue = Issue(
            number=raw["number"],
            title=raw.get("title", ""),
            body=raw.get("body") or "",
            labels=list(raw.get("labels", [])),
            url=raw.get("url", ""),
            created_at=raw.get("created_at", ""),
            state=raw.get("state", "open"),
        )
        pairs.append((item["currentRepo"], issue))
    return pairs


def write_json(path: str | Path, payload: Any) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Wrote {path}")
    return path


def load_report(path: str | Path) -> dict[str, Any] | None:
    path = Path(path)
    if not path.exists():
        logger.info(f"No report at {path}")
        return None
    return json.loads(path.read_text(encoding="utf-8"))


def render_summary(scan: dict[str, Any] | None, routing: dict[str, Any] | None) -> str:
    """Plain-text activity summary built from the two JSON reports."""
    lines = ["🤖 AI Bug Router - Activity Summary", ""]

    if scan:
        lines += [
            "🔍 Repository Scan Results:",
            f"   Repositories scanned: {scan['total_repositories']}",
            f"   Issues needing routing: {scan['issues_needing_routing']}",
        ]
        opportunities = scan.get("routing_opportunities", [])
        if opportunities:
            lines.append("   📋 Issues requiring attention:")
            for item in opportunities[:5]:
                lines.append(f"   • {item['repo']}{item['issue']}: {item['title'][:50]}")
                lines.append(
                    f"     Suggested: {item['suggested_repo']} ({item['confidence'] * 100:.1f}%)"
                )
            if len(opportunities) > 5:
                lines.append(f"   … and {len(opportunities) - 5} more")
        lines.append("")

    if routing:
        lines += [
            "🎯 Routing Results:",
            f"   Candidates processed: {routing['total_candidates']}",
            f"   Successfully routed: {routing['successfully_routed']}",
        ]
        for item in routing.get("results", [])[:5]:
            original, routed = item["original"], item["routed"]
            lines.append(
                f"   • {original['repo']}#{original['issue']} → {routed['repo']}#{routed['issue']}"
            )
        failures = routing.get("failures", [])
        if failures:
            lines.append(f"   ⚠️  Failed: {len(failures)}")
        lines.append("")

    if not scan and not routing:
        lines.append("No reports available.")

    return "\n".join(lines).rstrip() + "\n"
