"""Shared test fixtures."""

import io
import struct
import zlib
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from PIL import Image

from custom_frames.adapters.filesystem_frame_repository import (
    FilesystemFrameRepository,
)
from custom_frames.adapters.steam_client import SteamClient
from custom_frames.adapters.steam_openid import SteamOpenID
from custom_frames.config import Settings
from custom_frames.containers import AppContainer
from custom_frames.domain.errors import ConversionError
from custom_frames.services.cache import InMemoryCache
from custom_frames.services.frames import FrameService, TextureConverter
from custom_frames.services.identity import IdentityService
from custom_frames.services.uploads import UploadService

OWNER_ID = "76561198000000001"
OTHER_ID = "76561198000000002"
BANNED_ID = "76561198000000666"


def make_png(width: int = 512, height: int = 600, image_format: str = "PNG") -> bytes:
    """Render an in-memory image of the given size and format."""
    buffer = io.BytesIO()
    mode = "RGBA" if image_format == "PNG" else "RGB"
    Image.new(mode, (width, height), (200, 40, 40)).save(buffer, format=image_format)
    return buffer.getvalue()


def _png_chunk(kind: bytes, body: bytes) -> bytes:
    crc = zlib.crc32(kind + body) & 0xFFFFFFFF
    return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", crc)


def make_png_header(width: int, height: int) -> bytes:
    """Build a PNG whose header declares a size without any real pixel data."""
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", ihdr)
        + _png_chunk(b"IDAT", zlib.compress(b"\x00"))
        + _png_chunk(b"IEND", b"")
    )


@dataclass
class FakeTextureConverter(TextureConverter):
    """Converter that copies bytes instead of running ImageMagick."""

    fail: bool = False
    calls: list[tuple[Path, Path]] = field(default_factory=list)

    def convert(self, source: Path, target: Path) -> None:
        self.calls.append((source, target))
        if self.fail:
            target.write_bytes(b"partial")
            raise ConversionError("convert: no encode delegate for this image format")
        target.write_bytes(b"DDS " + source.read_bytes()[:16])


@dataclass
class FakeSteamClient(SteamClient):
    """Fake Steam Web API returning canned player summaries."""

    players: dict[str, dict[str, object]] = field(
        default_factory=lambda: {
            OWNER_ID: {
                "steamid": OWNER_ID,
                "personaname": "Alice",
                "profileurl": f"https://steamcommunity.com/profiles/{OWNER_ID}/",
                "avatar": "https://avatars.example/alice.jpg",
            },
            OTHER_ID: {
                "steamid": OTHER_ID,
                "personaname": "Bob",
                "profileurl": f"https://steamcommunity.com/profiles/{OTHER_ID}/",
            },
        }
    )
    error: Exception | None = None
    calls: int = 0

    async def get_player_summaries(
        self, steam_ids: list[str]
    ) -> list[dict[str, object]]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return [self.players[sid] for sid in steam_ids if sid in self.players]


@dataclass
class FakeSteamOpenID(SteamOpenID):
    """Fake sign-in that trusts an ``steam_id`` query parameter."""

    def login_url(self) -> str:
        return "https://steamcommunity.com/openid/login?openid.mode=checkid_setup"

    async def verify(self, params: Mapping[str, str]) -> str | None:
        return params.get("steam_id")


@dataclass
class StepClock:
    """Clock returning strictly increasing timestamps."""

    current: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        steam_api_key="steam-key",
        session_secret="test-secret",
        public_url="http://testserver",
        image_dir=tmp_path / "images",
        banned_steam_ids=BANNED_ID,
        environment="test",
    )


@pytest.fixture
def converter() -> FakeTextureConverter:
    return FakeTextureConverter()


@pytest.fixture
def steam_client() -> FakeSteamClient:
    return FakeSteamClient()


@pytest.fixture
def frame_repository(settings: Settings) -> FilesystemFrameRepository:
    return FilesystemFrameRepository.create(settings.image_dir)


@pytest.fixture
def frame_service(
    frame_repository: FilesystemFrameRepository, converter: FakeTextureConverter
) -> FrameService:
    return FrameService(
        repository=frame_repository, converter=converter, clock=StepClock()
    )


@pytest.fixture
def identity_service(steam_client: FakeSteamClient) -> IdentityService:
    return IdentityService(client=steam_client, cache=InMemoryCache())


@pytest.fixture
def upload_service(
    frame_service: FrameService, identity_service: IdentityService
) -> UploadService:
    return UploadService(
        frame_service=frame_service,
        identity_service=identity_service,
        banned_ids=frozenset({BANNED_ID}),
    )


@pytest.fixture
def container(
    settings: Settings,
    frame_service: FrameService,
    identity_service: IdentityService,
    upload_service: UploadService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        steam_openid=FakeSteamOpenID(),
        identity_service=identity_service,
        frame_service=frame_service,
        upload_service=upload_service,
        close_resources=close_resources,
    )
