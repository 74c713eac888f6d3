"""AI-written report card comments (optional, off by default).

Used only when Settings.llm_enabled is True AND an API key is present.
Talks to an OpenAI-compatible /chat/completions endpoint. Never raises:
callers always get a printable string back.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from school_portal.settings import Settings

logger = logging.getLogger("uvicorn.error")

FALLBACK_COMMENT = "Could not generate report."
ERROR_COMMENT = "Error connecting to AI service."


def build_prompt(
    student_name: str,
    scores: list[dict[str, Any]],
    average: float | None,
    total_score: float | None,
    school_name: str,
) -> str:
    breakdown = ", ".join(f"{s.get('subject')}: {s.get('total')} ({s.get('grade')})" for s in scores)
    return (
        f"Role: You are an academic counselor at {school_name}.\n"
        f"Task: Write a short, encouraging report card comment for {student_name}.\n\n"
        "Data:\n"
        f"- Average Score: {average}%\n"
        f"- Total Marks: {total_score}\n"
        f"- Subject Breakdown: {breakdown}\n\n"
        "STRICT GUIDELINES:\n"
        "1. Even if the average is low (e.g., 25% - 40%), start with a positive and encouraging note.\n"
        "2. Focus on potential, effort, and specific areas where the student showed strength or interest.\n"
        '3. Use a growth-mindset approach: treat low marks as a "stepping stone" rather than a failure.\n'
        '4. Maintain a professional, motivating, and Islamic tone (mentioning "Barakallahu feek" '
        "or similar prayers where appropriate).\n"
        "5. Keep the remark to 2-3 warm sentences."
    )


def _extract_text(data: Any) -> str:
    """choices[0].message.content from a chat completions response."""
    if isinstance(data, dict) and isinstance(data.get("choices"), list):
        for choice in data["choices"]:
            if isinstance(choice, dict):
                msg = choice.get("message")
                if isinstance(msg, dict) and isinstance(msg.get("content"), str):
                    return msg["content"].strip()
    return ""


async def generate_report_comment(
    settings: Settings,
    student_name: str,
    scores: list[dict[str, Any]],
    average: float | None = None,
    total_score: float | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Ask the LLM for a 2-3 sentence remark for a report card."""
    if not settings.llm_enabled or not settings.openai_api_key:
        return FALLBACK_COMMENT

    url = settings.openai_base_url.rstrip("/") + "/chat/completions"
    headers = {"Authorization": f"Bearer {settings.openai_api_key}", "Content-Type": "application/json"}
    body = {
        "model": settings.openai_model_comment,
        "messages": [
            {
                "role": "user",
                "content": build_prompt(student_name, scores, average, total_score, settings.school_name),
            },
        ],
        "max_completion_tokens": 300,
    }

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=30.0) as own_client:
                r = await own_client.post(url, headers=headers, json=body)
        else:
            r = await client.post(url, headers=headers, json=body)
        r.raise_for_status()
        return _extract_text(r.json()) or FALLBACK_COMMENT
    except httpx.HTTPStatusError as e:
        logger.error(
            f"[report_comment] HTTP {e.response.status_code} model={settings.openai_model_comment} "
            f"response={e.response.text[:500]}"
        )
        return ERROR_COMMENT
    except Exception:
        logger.exception("Report comment generation failed")
        return ERROR_COMMENT
