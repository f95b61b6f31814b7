"""Steam identity resolution."""

import logging
from dataclasses import dataclass

import httpx

from custom_frames.adapters.steam_client import SteamClient
from custom_frames.domain.errors import IdentityLookupError
from custom_frames.domain.frames import SteamProfile
from custom_frames.services.cache import Cache

logger = logging.getLogger(__name__)


@dataclass
class IdentityService:
    """Resolves Steam ids into display profiles."""

    client: SteamClient
    cache: Cache
    cache_ttl_seconds: int = 300

    async def resolve(self, steam_id: str) -> SteamProfile:
        """Return the profile for a Steam id or raise IdentityLookupError."""
        cache_key = f"steam:profile:{steam_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, SteamProfile):
            return cached
        try:
            players = await self.client.get_player_summaries([steam_id])
        except (httpx.HTTPError, RuntimeError, ValueError) as exc:
            logger.warning("Steam profile lookup failed", extra={"steam_id": steam_id})
            raise IdentityLookupError("Couldn't reach Steam") from exc
        player = next(
            (
                item
                for item in players
                if isinstance(item, dict) and str(item.get("steamid")) == steam_id
            ),
            None,
        )
        if player is None:
            raise IdentityLookupError("Unknown Steam user")
        profile = SteamProfile(
            steam_id=steam_id,
            persona_name=str(player.get("personaname", "")),
            profile_url=str(player.get("profileurl", "")),
            avatar_url=_optional_str(player.get("avatar")),
        )
        if self.cache_ttl_seconds > 0:
            self.cache.set(cache_key, profile, self.cache_ttl_seconds)
        return profile


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    return str(value)
