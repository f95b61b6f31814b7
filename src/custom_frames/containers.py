"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from custom_frames.adapters.filesystem_frame_repository import (
    FilesystemFrameRepository,
)
from custom_frames.adapters.imagemagick_converter import ImageMagickConverter
from custom_frames.adapters.steam_client import HttpxSteamClient
from custom_frames.adapters.steam_openid import HttpxSteamOpenID, SteamOpenID
from custom_frames.config import Settings, parse_banned_ids
from custom_frames.services.cache import InMemoryCache
from custom_frames.services.frames import FrameService
from custom_frames.services.identity import IdentityService
from custom_frames.services.uploads import UploadService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    steam_openid: SteamOpenID
    identity_service: IdentityService
    frame_service: FrameService
    upload_service: UploadService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    frame_repository = FilesystemFrameRepository.create(resolved_settings.image_dir)
    converter = ImageMagickConverter(
        command=resolved_settings.convert_command,
        timeout_seconds=resolved_settings.conversion_timeout_seconds,
    )
    frame_service = FrameService(repository=frame_repository, converter=converter)
    steam_client = HttpxSteamClient.create(
        resolved_settings.steam_api_key,
        timeout=resolved_settings.steam_timeout_seconds,
    )
    steam_openid = HttpxSteamOpenID.create(
        resolved_settings.public_url,
        timeout=resolved_settings.steam_timeout_seconds,
    )
    identity_service = IdentityService(
        client=steam_client,
        cache=InMemoryCache(),
        cache_ttl_seconds=resolved_settings.profile_cache_ttl_seconds,
    )
    upload_service = UploadService(
        frame_service=frame_service,
        identity_service=identity_service,
        banned_ids=parse_banned_ids(resolved_settings.banned_steam_ids),
        template_path=resolved_settings.template_path,
    )

    async def close_resources() -> None:
        await steam_client.close()
        await steam_openid.close()

    return AppContainer(
        settings=resolved_settings,
        steam_openid=steam_openid,
        identity_service=identity_service,
        frame_service=frame_service,
        upload_service=upload_service,
        close_resources=close_resources,
    )
