"""GitHub REST issue tracker."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from issue_router.errors import ExternalApiError
from issue_router.models import CreatedIssue, Issue, IssueTracker


class GitHubTracker(IssueTracker):
    """Issue tracker backed by the GitHub REST API.

    Every call is made once; failures surface as ``ExternalApiError``.
    """

    def __init__(
        self,
        org: str,
        token: str | None,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(org)
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "issue-router",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubTracker":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: dict | None = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            raise ExternalApiError("GitHub", f"{method} {path} failed: {e}") from e
        if response.status_code >= 400:
            message = response.text[:200]
            try:
                message = response.json().get("message", message)
            except (ValueError, AttributeError):
                pass
            raise ExternalApiError("GitHub", f"{method} {path}: {message}", response.status_code)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ExternalApiError(
                "GitHub", f"{method} {path}: non-JSON response body", response.status_code,
            ) from e

    def _issues_path(self, repo: str, number: int | None = None) -> str:
        path = f"/repos/{self.org}/{repo}/issues"
        return path if number is None else f"{path}/{number}"

    @staticmethod
    def _parse_issue(item: Any, path: str) -> Issue:
        try:
            return Issue.from_api(item)
        except (KeyError, TypeError, AttributeError) as e:
            raise ExternalApiError("GitHub", f"{path}: unexpected issue payload ({e!r})") from e

    async def list_open_issues(self, repo: str, per_page: int = 50) -> list[Issue]:
        path = self._issues_path(repo)
        data = await self._request(
            "GET",
            path,
            params={"state": "open", "per_page": per_page, "sort": "created", "direction": "desc"},
        )
        if not isinstance(data, list):
            raise ExternalApiError("GitHub", f"{path}: expected a list of issues")
        # The issues endpoint also returns pull requests
        issues = [
            self._parse_issue(item, path)
            for item in data
            if not (isinstance(item, dict) and "pull_request" in item)
        ]
        logger.debug(f"GitHub: {self.org}/{repo} has {len(issues)} open issues")
        return issues

    async def get_issue(self, repo: str, number: int) -> Issue:
        path = self._issues_path(repo, number)
        return self._parse_issue(await self._request("GET", path), path)

    async def create_issue(
        self, repo: str, title: str, body: str, labels: list[str] | None = None,
    ) -> CreatedIssue:
        path = self._issues_path(repo)
        data = await self._request(
            "POST",
            path,
            json={"title": title, "body": body, "labels": labels or []},
        )
        try:
            return CreatedIssue(repo=repo, number=data["number"], url=data["html_url"])
        except (KeyError, TypeError) as e:
            raise ExternalApiError("GitHub", f"{path}: created issue payload missing {e}") from e

    async def comment(self, repo: str, number: int, body: str) -> None:
        await self._request("POST", f"{self._issues_path(repo, number)}/comments", json={"body": body})

    async def add_labels(self, repo: str, number: int, labels: list[str]) -> None:
        await self._request("POST", f"{self._issues_path(repo, number)}/labels", json={"labels": labels})

    async def remove_label(self, repo: str, number: int, label: str) -> None:
        await self._request("DELETE", f"{self._issues_path(repo, number)}/labels/{label}")

    async def close_issue(self, repo: str, number: int) -> None:
        await self._request("PATCH", self._issues_path(repo, number), json={"state": "closed"})
