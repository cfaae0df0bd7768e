"""Tests for the badge and certificate image endpoints.

Tests cover:
- SVG badges and certificates, with and without query overrides
- Cache-Control and security headers
- 400 / 404 / 500 error mapping
- PNG fallback: one render + one conversion, then the persisted bytes
- Edits through the admin API clear the persisted raster images
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tests.factories import BadgeFactory, create_async

pytestmark = pytest.mark.integration


@pytest.fixture
async def softcat(session_maker: async_sessionmaker[AsyncSession]) -> str:
    async with session_maker() as session:
        await create_async(
            BadgeFactory,
            session,
            commit_id="softcat",
            software_name="Software Catalogue",
            software_version="v1.12.0",
            custom_config='{"color_left": "#003f5f", "style": "3d"}',
        )
        await session.commit()
    return "softcat"


class TestSvg:
    async def test_badge_svg(self, client: AsyncClient, softcat):
        response = await client.get(f"/badge/{softcat}")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/svg+xml"
        assert response.content.startswith(b"<svg")
        assert b"#003f5f" in response.content
        assert response.headers["cache-control"] == "public, max-age=300"

    async def test_certificate_svg(self, client: AsyncClient, softcat):
        response = await client.get(f"/certificate/{softcat}")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/svg+xml"
        assert b"Self-Assessed" in response.content

    async def test_outlook_param_switches_renderer(self, client: AsyncClient, softcat):
        as_badge = await client.get(f"/certificate/{softcat}?outlook=badge")
        badge = await client.get(f"/badge/{softcat}")
        assert as_badge.content == badge.content

    async def test_query_override(self, client: AsyncClient, softcat):
        response = await client.get(
            f"/badge/{softcat}", params={"color_left": "#aa0000", "no_cache": "true"}
        )
        assert b"#aa0000" in response.content
        assert b"#003f5f" not in response.content

    async def test_images_can_be_embedded(self, client: AsyncClient, softcat):
        response = await client.get(f"/badge/{softcat}")

        assert response.headers["cross-origin-resource-policy"] == "cross-origin"
        assert response.headers["x-content-type-options"] == "nosniff"
        assert "x-request-id" in response.headers

    async def test_repeat_request_is_served_from_cache(
        self, client: AsyncClient, softcat, render_recorder
    ):
        await client.get(f"/badge/{softcat}")
        await client.get(f"/badge/{softcat}")
        assert render_recorder.count("render") == 1

    async def test_out_of_range_font_size_falls_back_to_default(
        self, client: AsyncClient, softcat
    ):
        response = await client.get(f"/badge/{softcat}?font_size=999&no_cache=true")

        assert response.status_code == 200
        assert b'font-size="12"' in response.content

    async def test_empty_format_defaults_to_svg(self, client: AsyncClient, softcat):
        response = await client.get(f"/badge/{softcat}?format=")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/svg+xml"

    async def test_empty_outlook_uses_path_default(
        self, client: AsyncClient, softcat
    ):
        response = await client.get(f"/certificate/{softcat}?outlook=")

        assert response.status_code == 200
        assert b"Self-Assessed" in response.content


class TestErrors:
    async def test_unknown_record(self, client: AsyncClient):
        response = await client.get("/badge/nosuchbadge")
        assert response.status_code == 404
        assert response.json() == {"detail": "Badge not found"}

    async def test_unknown_format(self, client: AsyncClient, softcat):
        response = await client.get(f"/badge/{softcat}?format=gif")
        assert response.status_code == 400
        assert "format" in response.json()["detail"]

    async def test_unknown_outlook(self, client: AsyncClient, softcat):
        response = await client.get(f"/badge/{softcat}?outlook=poster")
        assert response.status_code == 400

    async def test_malformed_commit_id(self, client: AsyncClient):
        response = await client.get("/badge/bad;id")
        assert response.status_code == 400

    async def test_malformed_stored_config(
        self, client: AsyncClient, session_maker: async_sessionmaker[AsyncSession]
    ):
        async with session_maker() as session:
            await create_async(
                BadgeFactory, session, commit_id="broken", custom_config="{oops"
            )
            await session.commit()

        response = await client.get("/badge/broken")

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to render image"}


class TestRasterFallback:
    async def test_png_renders_once_then_reuses_persisted_bytes(
        self, client: AsyncClient, softcat, render_recorder, fake_convert
    ):
        first = await client.get(f"/badge/{softcat}?format=png&no_cache=true")
        second = await client.get(f"/badge/{softcat}?format=png&no_cache=true")

        assert first.status_code == second.status_code == 200
        assert first.headers["content-type"] == "image/png"
        assert first.content == second.content
        assert render_recorder.count("render") == 1
        assert render_recorder.count("convert") == 1

    async def test_jpg_certificate(
        self, client: AsyncClient, softcat, render_recorder, fake_convert
    ):
        response = await client.get(f"/certificate/{softcat}?format=jpg")

        assert response.headers["content-type"] == "image/jpeg"
        assert response.content.startswith(b"jpg:")

    async def test_override_requests_are_never_persisted(
        self, client: AsyncClient, softcat, render_recorder, fake_convert
    ):
        url = f"/badge/{softcat}?format=png&no_cache=true&style=flat"
        await client.get(url)
        await client.get(url)

        assert render_recorder.count("convert") == 2

    async def test_edit_clears_persisted_images(
        self,
        client: AsyncClient,
        softcat,
        render_recorder,
        fake_convert,
        admin_headers,
    ):
        url = f"/badge/{softcat}?format=png&no_cache=true"
        await client.get(url)

        response = await client.patch(
            f"/api/badges/{softcat}", json={"notes": "edited"}, headers=admin_headers
        )
        assert response.status_code == 200

        await client.get(url)
        await client.get(url)
        assert render_recorder.count("convert") == 2

    async def test_repeated_jpg_is_byte_identical(
        self, client: AsyncClient, softcat, render_recorder, fake_convert
    ):
        first = await client.get(f"/badge/{softcat}?format=jpg&no_cache=true")
        second = await client.get(f"/badge/{softcat}?format=jpg&no_cache=true")

        assert second.headers["content-type"] == "image/jpeg"
        assert first.content == second.content
        assert render_recorder.count("convert") == 1
