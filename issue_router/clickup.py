"""ClickUp back-reference: find the linked task in an issue body and patch it."""

import re

import httpx
from loguru import logger

from issue_router.errors import ExternalApiError, ParseError

_TASK_ID_RE = re.compile(r"ClickUp.*?(\w{9})")


def extract_task_id(body: str | None) -> str:
    """Pull a 9-character ClickUp task id that follows the word "ClickUp".

    Raises:
        ParseError: when the body carries no recognizable task reference.
    """
    match = _TASK_ID_RE.search(body or "")
    if not match:
        raise ParseError("no ClickUp task reference in issue body")
    return match.group(1)


class ClickUpClient:
    """Just enough of the ClickUp v2 API to append routing info to a task."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.clickup.com/api/v2",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": token, "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def update_description(self, task_id: str, description: str) -> None:
        try:
            response = await self._client.put(f"/task/{task_id}", json={"description": description})
        except httpx.HTTPError as e:
            raise ExternalApiError("ClickUp", f"update task {task_id} failed: {e}") from e
        if response.status_code >= 400:
            raise ExternalApiError("ClickUp", response.text[:200], response.status_code)
        logger.info(f"ClickUp: updated task {task_id} with routing info")

    async def note_routing(self, issue_body: str | None, new_issue_url: str) -> str | None:
        """Append the new location to the linked task; returns the task id touched.

        A body without a task reference is not an error, the step is skipped.
        """
        try:
            task_id = extract_task_id(issue_body)
        except ParseError:
            logger.debug("ClickUp: no linked task, skipping update")
            return None
        description = (
            f"{issue_body}\n\n**Updated Routing**: Issue moved to {new_issue_url} based on AI analysis."
        )
        await self.update_description(task_id, description)
        return task_id
