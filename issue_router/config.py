"""Runtime configuration, read from the environment."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from issue_router.classifier import MATCH_MODES

DEFAULT_ORG = "Biji-Biji-Initiative"
DEFAULT_REPOSITORIES = ("mereka-web", "mereka-web-ssr", "mereka-cloudfunctions", "Fadlan-Personal")


@dataclass
class RouterConfig:
    org: str = DEFAULT_ORG
    repositories: list[str] = field(default_factory=lambda: list(DEFAULT_REPOSITORIES))
    auto_threshold: float = 0.75
    manual_threshold: float = 0.5
    request_delay: float = 2.0   # seconds between routed issues
    match_mode: str = "substring"
    github_token: str | None = None
    clickup_token: str | None = None
    registry_path: Path | None = None
    per_page: int = 50

    def __post_init__(self) -> None:
        if self.match_mode not in MATCH_MODES:
            raise ValueError(f"match_mode must be one of {MATCH_MODES}, got {self.match_mode!r}")
        if self.request_delay < 0:
            raise ValueError("request_delay must be >= 0")

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> "RouterConfig":
        env = os.environ if env is None else env
        kwargs: dict = {
            "github_token": env.get("GITHUB_TOKEN") or None,
            "clickup_token": env.get("CLICKUP_TOKEN") or None,
        }
        if env.get("ISSUE_ROUTER_ORG"):
            kwargs["org"] = env["ISSUE_ROUTER_ORG"]
        if env.get("ISSUE_ROUTER_REPOSITORIES"):
            kwargs["repositories"] = [
                r.strip() for r in env["ISSUE_ROUTER_REPOSITORIES"].split(",") if r.strip()
            ]
        for key, name in (
            ("ISSUE_ROUTER_AUTO_THRESHOLD", "auto_threshold"),
            ("ISSUE_ROUTER_MANUAL_THRESHOLD", "manual_threshold"),
            ("ISSUE_ROUTER_DELAY", "request_delay"),
        ):
            if env.get(key):
                try:
                    kwargs[name] = float(env[key])
                except ValueError:
                    raise ValueError(f"{key} must be a number, got {env[key]!r}") from None
        if env.get("ISSUE_ROUTER_MATCH_MODE"):
            kwargs["match_mode"] = env["ISSUE_ROUTER_MATCH_MODE"]
        if env.get("ISSUE_ROUTER_REGISTRY"):
            kwargs["registry_path"] = Path(env["ISSUE_ROUTER_REGISTRY"])
        return cls(**kwargs)
