import json

import httpx
import pytest

from school_portal.services.report_comment import (
    ERROR_COMMENT,
    FALLBACK_COMMENT,
    build_prompt,
    generate_report_comment,
)
from school_portal.settings import Settings

SCORES = [{"subject": "Mathematics", "total": 80, "grade": "A"}]


def _settings(enabled: bool = True) -> Settings:
    return Settings(LLM_ENABLED=enabled, OPENAI_API_KEY="sk-test", OPENAI_BASE_URL="https://llm.test/v1")


def test_build_prompt_mentions_student_and_breakdown() -> None:
    prompt = build_prompt("Ahmed Musa", SCORES, 80.0, 80.0, "Test College")
    assert "Ahmed Musa" in prompt
    assert "Mathematics: 80 (A)" in prompt
    assert "Test College" in prompt


@pytest.mark.asyncio
async def test_disabled_llm_returns_fallback_without_calling_out():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("LLM should not be called")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        comment = await generate_report_comment(_settings(enabled=False), "Ahmed", SCORES, client=client)
    assert comment == FALLBACK_COMMENT


@pytest.mark.asyncio
async def test_comment_is_read_from_chat_completion():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"choices": [{"message": {"role": "assistant", "content": "  Barakallahu feek, well done.  "}}]},
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        comment = await generate_report_comment(_settings(), "Ahmed", SCORES, 80.0, 80.0, client=client)

    assert comment == "Barakallahu feek, well done."
    assert seen["url"] == "https://llm.test/v1/chat/completions"
    assert "Ahmed" in seen["body"]["messages"][0]["content"]


@pytest.mark.asyncio
async def test_http_error_returns_error_comment():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="upstream down")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        comment = await generate_report_comment(_settings(), "Ahmed", SCORES, client=client)
    assert comment == ERROR_COMMENT


@pytest.mark.asyncio
async def test_empty_choices_fall_back():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": []})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        comment = await generate_report_comment(_settings(), "Ahmed", SCORES, client=client)
    assert comment == FALLBACK_COMMENT
