"""Tests for health and public endpoints."""

import pytest
from httpx import AsyncClient

from school_portal.stores.tables import POSTS


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test health endpoint returns ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


@pytest.mark.asyncio
async def test_school_profile(client: AsyncClient):
    response = await client.get("/v1/public/school")
    assert response.status_code == 200
    data = response.json()

    assert data["name"]
    assert data["applicationFeeAmount"] == 1200
    assert data["schoolFeeAmount"] == 50000
    assert data["schoolFeeLink"].startswith("https://")


@pytest.mark.asyncio
async def test_posts_newest_first(client: AsyncClient, seed):
    await seed(
        POSTS,
        [
            {"id": "p1", "title": "Resumption", "content": "School resumes", "date": "2024-09-01"},
            {"id": "p2", "title": "Open day", "content": "Parents welcome", "date": "2024-10-12"},
        ],
    )
    response = await client.get("/v1/public/posts")
    assert response.status_code == 200
    assert [p["title"] for p in response.json()] == ["Open day", "Resumption"]


@pytest.mark.asyncio
async def test_public_fee_receipt_is_pdf(client: AsyncClient):
    response = await client.post(
        "/v1/public/fees/receipt",
        json={"studentName": "Ahmed Musa", "amount": 50000, "reference": "T998877"},
    )
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "Receipt_T998877.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")
