"""Tests for container wiring."""

import asyncio

from custom_frames.containers import build_container
from tests.conftest import BANNED_ID


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.frame_service is not None
    assert settings.image_dir.is_dir()
    assert container.upload_service.is_banned(BANNED_ID)
    asyncio.run(container.close_resources())
