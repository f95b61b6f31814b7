"""Steam Web API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

STEAM_API_BASE_URL = "https://api.steampowered.com"


class SteamClient(Protocol):
    """Interface for Steam Web API interactions."""

    async def get_player_summaries(self, steam_ids: list[str]) -> list[dict[str, object]]:
        """Return raw player summary objects for the given ids."""


@dataclass
class HttpxSteamClient(SteamClient):
    """HTTPX-backed Steam Web API client."""

    api_key: str
    http_client: httpx.AsyncClient
    base_url: str = STEAM_API_BASE_URL
    timeout: float = 10.0

    @classmethod
    def create(cls, api_key: str, timeout: float = 10.0) -> "HttpxSteamClient":
        """Create a Steam client with a managed httpx session."""
        return cls(api_key=api_key, http_client=httpx.AsyncClient(), timeout=timeout)

    async def get_player_summaries(self, steam_ids: list[str]) -> list[dict[str, object]]:
        """Fetch player summaries via ISteamUser/GetPlayerSummaries."""
        url = f"{self.base_url}/ISteamUser/GetPlayerSummaries/v2/"
        response = await self.http_client.get(
            url,
            params={"key": self.api_key, "steamids": ",".join(steam_ids)},
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        body = payload.get("response") if isinstance(payload, dict) else None
        if not isinstance(body, dict):
            raise RuntimeError("Unexpected GetPlayerSummaries payload")
        players = body.get("players", [])
        if not isinstance(players, list):
            raise RuntimeError("Unexpected GetPlayerSummaries payload")
        return players

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
