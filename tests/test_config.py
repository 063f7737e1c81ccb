from pathlib import Path

import pytest

from issue_router.config import DEFAULT_REPOSITORIES, RouterConfig


def test_defaults_from_empty_env():
    config = RouterConfig.from_env({})
    assert config.repositories == list(DEFAULT_REPOSITORIES)
    assert config.auto_threshold == 0.75
    assert config.manual_threshold == 0.5
    assert config.github_token is None


def test_env_overrides():
    config = RouterConfig.from_env({
        "GITHUB_TOKEN": "ghp",
        "ISSUE_ROUTER_ORG": "acme",
        "ISSUE_ROUTER_REPOSITORIES": "web, api ,",
        "ISSUE_ROUTER_AUTO_THRESHOLD": "0.7",
        "ISSUE_ROUTER_DELAY": "0",
        "ISSUE_ROUTER_MATCH_MODE": "word",
        "ISSUE_ROUTER_REGISTRY": "registry.toml",
    })
    assert config.github_token == "ghp"
    assert config.org == "acme"
    assert config.repositories == ["web", "api"]
    assert config.auto_threshold == 0.7
    assert config.request_delay == 0.0
    assert config.match_mode == "word"
    assert config.registry_path == Path("registry.toml")


def test_bad_values_rejected():
    with pytest.raises(ValueError):
        RouterConfig.from_env({"ISSUE_ROUTER_AUTO_THRESHOLD": "high"})
    with pytest.raises(ValueError):
        RouterConfig.from_env({"ISSUE_ROUTER_MATCH_MODE": "fuzzy"})
