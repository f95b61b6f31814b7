"""Domain models for uploaded frames."""

import re
from dataclasses import dataclass
from datetime import datetime

FRAME_WIDTH = 512
FRAME_HEIGHT = 600

FRAME_ID_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
FRAME_ID_LENGTH = 14
FRAME_ID_PATTERN = re.compile(rf"[0-9A-Za-z]{{{FRAME_ID_LENGTH}}}")

SOURCE_SUFFIX = ".png"
TEXTURE_SUFFIX = ".dds"
METADATA_SUFFIX = ".json"


@dataclass(frozen=True)
class FrameRecord:
    """A published frame with its ownership metadata."""

    id: str
    owner_id: str
    owner_display_name: str
    owner_profile_url: str
    created_at: datetime

    @property
    def source_name(self) -> str:
        return f"{self.id}{SOURCE_SUFFIX}"

    @property
    def texture_name(self) -> str:
        return f"{self.id}{TEXTURE_SUFFIX}"


@dataclass(frozen=True)
class SteamProfile:
    """Public Steam profile fields shown next to a frame."""

    steam_id: str
    persona_name: str
    profile_url: str
    avatar_url: str | None = None
