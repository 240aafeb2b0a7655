"""Tests for the upload, analyze, files and admin endpoints."""

from typing import Any
from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient

from tests.fixtures.documents import make_pdf, make_png
from typoscale.core.exceptions import InvalidVisionResponseError
from typoscale.store.file_storage import LocalFileStorage

API = "/api/v1"


async def upload(client: AsyncClient, data: bytes, name: str = "design.png", mime: str = "image/png") -> dict[str, Any]:
    response = await client.post(f"{API}/upload", files={"file": (name, data, mime)})
    assert response.status_code == 200, response.text
    return response.json()


class TestUploadEndpoint:
    @pytest.mark.asyncio
    async def test_upload_png(self, client: AsyncClient) -> None:
        body = await upload(client, make_png())

        assert body["success"] is True
        assert body["duplicate"] is False
        assert body["file"]["original_name"] == "design.png"
        assert body["file"]["mime_type"] == "image/png"
        assert body["file"]["filename"].endswith(".png")

    @pytest.mark.asyncio
    async def test_reupload_returns_existing_record(self, client: AsyncClient) -> None:
        pdf = make_pdf([24, 12])
        first = await upload(client, pdf, "a.pdf", "application/pdf")
        second = await upload(client, pdf, "b.pdf", "application/pdf")

        assert second["duplicate"] is True
        assert second["file"]["id"] == first["file"]["id"]

    @pytest.mark.asyncio
    async def test_missing_file(self, client: AsyncClient) -> None:
        response = await client.post(f"{API}/upload")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "TS4001"

    @pytest.mark.asyncio
    async def test_unsupported_type(self, client: AsyncClient) -> None:
        response = await client.post(f"{API}/upload", files={"file": ("logo.gif", b"GIF89a", "image/gif")})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "TS4002"
        assert body["error"]["message"] == "Only PDF and PNG files are allowed for accurate font analysis"


class TestAnalyzeEndpoint:
    @pytest.mark.asyncio
    async def test_analyze_then_cached(self, client: AsyncClient, mock_vision: MagicMock) -> None:
        file_id = (await upload(client, make_png()))["file"]["id"]

        first = await client.post(f"{API}/analyze", json={"file_id": file_id})
        second = await client.post(f"{API}/analyze", json={"file_id": file_id})

        assert first.status_code == 200
        assert first.json()["cached"] is False
        assert second.json()["cached"] is True
        data = first.json()["data"]
        assert data["font_sizes_detected"] == 3
        assert data["exceeds_size_limit"] is False
        assert data["compliance_summary"]["passes_limit"] is True
        assert second.json()["data"] == data
        mock_vision.analyze.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_force_refresh(self, client: AsyncClient, mock_vision: MagicMock) -> None:
        file_id = (await upload(client, make_png()))["file"]["id"]
        await client.post(f"{API}/analyze", json={"file_id": file_id})

        response = await client.post(f"{API}/analyze", json={"file_id": file_id, "force_refresh": True})

        assert response.json()["cached"] is False
        assert mock_vision.analyze.await_count == 2

    @pytest.mark.asyncio
    async def test_exact_method(self, client: AsyncClient, mock_vision: MagicMock) -> None:
        pdf = make_pdf([36, 28, 24, 18, 14, 12, 10])
        file_id = (await upload(client, pdf, "poster.pdf", "application/pdf"))["file"]["id"]

        response = await client.post(f"{API}/analyze", json={"file_id": file_id, "method": "exact"})

        data = response.json()["data"]
        assert data["font_sizes_detected"] == 7
        assert data["exceeds_size_limit"] is True
        assert data["overall_score"] == 55
        mock_vision.analyze.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_file_id(self, client: AsyncClient) -> None:
        response = await client.post(f"{API}/analyze", json={})

        assert response.status_code == 400
        assert response.json()["error"] == {
            "code": "TS4001",
            "message": "File ID is required",
            "details": {"field": "file_id"},
        }

    @pytest.mark.asyncio
    async def test_malformed_file_id(self, client: AsyncClient) -> None:
        response = await client.post(f"{API}/analyze", json={"file_id": "not-a-uuid"})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Request validation failed"

    @pytest.mark.asyncio
    async def test_unknown_file(self, client: AsyncClient) -> None:
        response = await client.post(
            f"{API}/analyze",
            json={"file_id": "00000000-0000-4000-8000-000000000000"},
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "TS5001"

    @pytest.mark.asyncio
    async def test_vision_failure_is_generic(self, client: AsyncClient, mock_vision: MagicMock) -> None:
        mock_vision.analyze.side_effect = InvalidVisionResponseError("model said hello")
        file_id = (await upload(client, make_png()))["file"]["id"]

        response = await client.post(f"{API}/analyze", json={"file_id": file_id})

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "TS9000"
        assert error["message"] == "Analysis failed. Please try again."
        assert "hello" not in response.text

    @pytest.mark.asyncio
    async def test_rate_limit_headers(self, client: AsyncClient) -> None:
        file_id = (await upload(client, make_png()))["file"]["id"]

        response = await client.post(f"{API}/analyze", json={"file_id": file_id})

        assert response.headers["X-RateLimit-Limit"] == "3"
        assert response.headers["X-RateLimit-Remaining"] == "2"
        assert "X-RateLimit-Reset" in response.headers

    @pytest.mark.asyncio
    async def test_fourth_request_is_rejected(self, client: AsyncClient) -> None:
        file_id = (await upload(client, make_png()))["file"]["id"]
        for _ in range(3):
            assert (await client.post(f"{API}/analyze", json={"file_id": file_id})).status_code == 200

        response = await client.post(f"{API}/analyze", json={"file_id": file_id})

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "3600"
        body = response.json()
        assert body["error"]["code"] == "TS8000"
        assert body["error"]["message"] == "Rate limit exceeded. Please try again later."

    @pytest.mark.asyncio
    async def test_callers_are_limited_separately(self, client: AsyncClient) -> None:
        file_id = (await upload(client, make_png()))["file"]["id"]
        for _ in range(3):
            await client.post(f"{API}/analyze", json={"file_id": file_id}, headers={"X-Forwarded-For": "203.0.113.1"})

        response = await client.post(
            f"{API}/analyze",
            json={"file_id": file_id},
            headers={"X-Forwarded-For": "203.0.113.2"},
        )

        assert response.status_code == 200


class TestRateLimitStatus:
    @pytest.mark.asyncio
    async def test_status_does_not_consume(self, client: AsyncClient) -> None:
        first = await client.get(f"{API}/rate-limit", headers={"X-Real-IP": "198.51.100.9"})
        second = await client.get(f"{API}/rate-limit", headers={"X-Real-IP": "198.51.100.9"})

        assert first.status_code == 200
        body = second.json()
        assert body["identity"] == "ip:198.51.100.9"
        assert body["enabled"] is True
        assert body["limit"] == 3
        assert body["remaining"] == 3


class TestFilesEndpoint:
    @pytest.mark.asyncio
    async def test_serves_stored_bytes(self, client: AsyncClient) -> None:
        png = make_png()
        filename = (await upload(client, png))["file"]["filename"]

        response = await client.get(f"{API}/files/{filename}")

        assert response.status_code == 200
        assert response.content == png
        assert response.headers["content-type"] == "image/png"
        assert response.headers["content-disposition"] == f'inline; filename="{filename}"'

    @pytest.mark.asyncio
    async def test_unknown_filename(self, client: AsyncClient) -> None:
        response = await client.get(f"{API}/files/0-deadbeef.png")

        assert response.status_code == 404


class TestAdminEndpoints:
    @pytest.mark.asyncio
    async def test_cleanup(self, client: AsyncClient, file_storage: LocalFileStorage) -> None:
        body = await upload(client, make_png())
        await client.post(f"{API}/analyze", json={"file_id": body["file"]["id"]})
        orphan = await upload(client, make_png(10, 10))
        file_storage.path_for(orphan["file"]["filename"]).unlink()

        response = await client.post(f"{API}/admin/cleanup")

        assert response.status_code == 200
        result = response.json()
        assert result["message"] == "Cleaned up 1 invalid files and cleared all caches"
        assert [entry["id"] for entry in result["invalid_files_removed"]] == [orphan["file"]["id"]]
        assert result["valid_files_remaining"] == 1
        assert result["cache_entries_removed"] == 1

        again = await client.post(f"{API}/analyze", json={"file_id": body["file"]["id"]})
        assert again.json()["cached"] is False

    @pytest.mark.asyncio
    async def test_purge_with_nothing_expired(self, client: AsyncClient) -> None:
        response = await client.post(f"{API}/admin/cache/purge")

        assert response.status_code == 200
        assert response.json() == {"success": True, "removed": 0}


class TestErrorEnvelope:
    @pytest.mark.asyncio
    async def test_unknown_route(self, client: AsyncClient) -> None:
        response = await client.get(f"{API}/nope")

        assert response.status_code == 404
        assert response.json()["success"] is False
        assert response.json()["error"]["code"] == "TS5000"

    @pytest.mark.asyncio
    async def test_correlation_id_is_echoed(self, client: AsyncClient) -> None:
        response = await client.post(
            f"{API}/analyze",
            json={},
            headers={"X-Correlation-ID": "corr-123"},
        )

        assert response.headers["X-Correlation-ID"] == "corr-123"
        assert response.json()["correlation_id"] == "corr-123"
        assert "X-Request-ID" in response.headers

