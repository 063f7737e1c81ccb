import json

import httpx
import pytest

from issue_router.clickup import ClickUpClient, extract_task_id
from issue_router.errors import ExternalApiError, ParseError


def test_extract_task_id():
    assert extract_task_id("Reported via ClickUp task: 86abc1234 yesterday") == "86abc1234"


def test_extract_task_id_missing():
    with pytest.raises(ParseError):
        extract_task_id("No linked ticket here")
    with pytest.raises(ParseError):
        extract_task_id(None)


@pytest.mark.asyncio
async def test_note_routing_updates_linked_task():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={})

    client = ClickUpClient("pk_token", transport=httpx.MockTransport(handler))
    body = "ClickUp task: 86abc1234"
    task_id = await client.note_routing(body, "https://github.com/o/api/issues/5")
    await client.aclose()

    assert task_id == "86abc1234"
    assert captured["path"] == "/api/v2/task/86abc1234"
    assert captured["auth"] == "pk_token"
    assert captured["body"]["description"].startswith(body)
    assert "https://github.com/o/api/issues/5" in captured["body"]["description"]


@pytest.mark.asyncio
async def test_note_routing_without_reference_is_skipped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    client = ClickUpClient("pk_token", transport=httpx.MockTransport(handler))
    assert await client.note_routing("plain body", "https://x") is None
    await client.aclose()


@pytest.mark.asyncio
async def test_update_failure_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="unauthorized")

    client = ClickUpClient("bad", transport=httpx.MockTransport(handler))
    with pytest.raises(ExternalApiError) as exc:
        await client.update_description("86abc1234", "desc")
    await client.aclose()
    assert exc.value.status_code == 401
