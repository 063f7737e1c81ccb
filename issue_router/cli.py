"""issue-router command line."""

import asyncio
import sys
from pathlib import Path

import typer
from loguru import logger
from rich import print
from rich.table import Table

from issue_router.classifier import Classifier
from issue_router.clickup import ClickUpClient
from issue_router.config import RouterConfig
from issue_router.github import GitHubTracker
from issue_router.models import Issue, IssueContent
from issue_router.policy import RoutingPolicy
from issue_router.registry import DEFAULT_REGISTRY, KeywordRegistry
from issue_router.reports import (
    ROUTING_CANDIDATES,
    ROUTING_REPORT,
    SCAN_REPORT,
    candidates_payload,
    load_candidates,
    load_report,
    render_summary,
    routing_report,
    scan_report,
    write_json,
)
from issue_router.router import IssueRouter, ScanEntry

app = typer.Typer(add_completion=False, help="Keyword-based routing of issues between repositories.")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def _load_config() -> RouterConfig:
    try:
        return RouterConfig.from_env()
    except ValueError as e:
        print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)


def _components(config: RouterConfig) -> tuple[Classifier, RoutingPolicy]:
    try:
        registry = (
            KeywordRegistry.from_file(config.registry_path)
            if config.registry_path
            else KeywordRegistry(DEFAULT_REGISTRY)
        )
        policy = RoutingPolicy(config.auto_threshold, config.manual_threshold)
    except (OSError, ValueError) as e:
        print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)
    return Classifier(registry, match_mode=config.match_mode), policy


def _require_token(config: RouterConfig) -> str:
    if not config.github_token:
        print("[red]GITHUB_TOKEN is not set[/red]")
        raise typer.Exit(1)
    return config.github_token


async def _with_router(config: RouterConfig, work):
    classifier, policy = _components(config)
    token = _require_token(config)
    clickup = ClickUpClient(config.clickup_token) if config.clickup_token else None
    async with GitHubTracker(config.org, token) as tracker:
        router = IssueRouter(tracker, classifier, policy, config, clickup)
        try:
            return await work(router)
        finally:
            if clickup is not None:
                await clickup.aclose()


@app.command()
def classify(
    title: str = typer.Option(..., help="Issue title"),
    body: str = typer.Option("", help="Issue body"),
    current: str = typer.Option(None, help="Repository the issue currently lives in"),
):
    """Classify a single issue offline and show the routing decision."""
    config = _load_config()
    classifier, policy = _components(config)
    candidates = classifier.classify(IssueContent(title, body))
    decision = policy.decide(candidates, current)

    table = Table("destination", "score", "confidence", "matched keywords")
    for c in candidates:
        table.add_row(c.destination, str(c.score), f"{c.confidence:.2f}", ", ".join(c.matched_keywords))
    print(table)
    print(f"[bold]{decision.action.value}[/bold] ({decision.reason}) → {decision.target or '-'}")


@app.command()
def scan(out_dir: Path = typer.Option(Path("."), help="Where to write report files")):
    """Scan configured repositories for issues that belong elsewhere."""
    config = _load_config()
    out_dir.mkdir(parents=True, exist_ok=True)
    result = asyncio.run(_with_router(config, lambda r: r.scan()))
    write_json(out_dir / SCAN_REPORT, scan_report(result))
    candidates = out_dir / ROUTING_CANDIDATES
    if result.entries:
        write_json(candidates, candidates_payload(result.entries))
    elif candidates.exists():
        # A leftover file would make the next route pass act on old issues
        candidates.unlink()
        logger.info(f"Removed stale {candidates}")
    print(
        f"[bold]Scanned[/bold] {result.total_scanned} issues, "
        f"{len(result.entries)} need routing"
    )


@app.command()
def route(
    candidates: Path = typer.Option(Path(ROUTING_CANDIDATES), help="Candidates file from scan"),
    out_dir: Path = typer.Option(Path("."), help="Where to write report files"),
):
    """Route issues listed in a candidates file."""
    config = _load_config()
    out_dir.mkdir(parents=True, exist_ok=True)
    if not candidates.exists():
        typer.echo(f"No candidates file at {candidates}, run scan first")
        return
    pairs: list[tuple[str, Issue]] = load_candidates(candidates)

    async def work(router: IssueRouter):
        entries: list[ScanEntry] = router.entries_for(pairs)
        return await router.route(entries)

    report = asyncio.run(_with_router(config, work))
    write_json(out_dir / ROUTING_REPORT, routing_report(report))
    print(f"[bold]Routed[/bold] {len(report.routed)} of {report.total_candidates} candidates")


@app.command()
def run(out_dir: Path = typer.Option(Path("."), help="Where to write report files")):
    """Scan then route in one pass."""
    config = _load_config()
    out_dir.mkdir(parents=True, exist_ok=True)
    result, report = asyncio.run(_with_router(config, lambda r: r.run()))
    write_json(out_dir / SCAN_REPORT, scan_report(result))
    write_json(out_dir / ROUTING_REPORT, routing_report(report))
    print(f"[bold]Routed[/bold] {len(report.routed)} of {report.total_candidates} candidates")


@app.command()
def summary(report_dir: Path = typer.Option(Path("."), help="Directory holding report files")):
    """Print the activity summary from existing reports."""
    text = render_summary(load_report(report_dir / SCAN_REPORT), load_report(report_dir / ROUTING_REPORT))
    typer.echo(text)


if __name__ == "__main__":
    app()
