"""Steam OpenID 2.0 sign-in client."""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlencode

import httpx

logger = logging.getLogger(__name__)

STEAM_OPENID_URL = "https://steamcommunity.com/openid/login"
OPENID_NS = "http://specs.openid.net/auth/2.0"
OPENID_IDENTIFIER_SELECT = "http://specs.openid.net/auth/2.0/identifier_select"
CLAIMED_ID_PATTERN = re.compile(r"^https?://steamcommunity\.com/openid/id/(\d+)/?$")


class SteamOpenID(Protocol):
    """Interface for the Steam sign-in handshake."""

    def login_url(self) -> str:
        """Return the URL that starts sign-in on Steam."""

    async def verify(self, params: Mapping[str, str]) -> str | None:
        """Verify the callback parameters and return the Steam id."""


@dataclass
class HttpxSteamOpenID(SteamOpenID):
    """Steam OpenID client verifying assertions with httpx."""

    return_to: str
    realm: str
    http_client: httpx.AsyncClient
    endpoint: str = STEAM_OPENID_URL
    timeout: float = 10.0

    @classmethod
    def create(cls, public_url: str, timeout: float = 10.0) -> "HttpxSteamOpenID":
        """Create a client whose callback is ``<public_url>/auth``."""
        base = public_url.rstrip("/")
        return cls(
            return_to=f"{base}/auth",
            realm=f"{base}/",
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    def login_url(self) -> str:
        """Build the checkid_setup redirect URL."""
        query = urlencode(
            {
                "openid.ns": OPENID_NS,
                "openid.mode": "checkid_setup",
                "openid.return_to": self.return_to,
                "openid.realm": self.realm,
                "openid.identity": OPENID_IDENTIFIER_SELECT,
                "openid.claimed_id": OPENID_IDENTIFIER_SELECT,
            }
        )
        return f"{self.endpoint}?{query}"

    async def verify(self, params: Mapping[str, str]) -> str | None:
        """Check the assertion with Steam and extract the Steam id."""
        if params.get("openid.mode") != "id_res":
            return None
        if not params.get("openid.return_to", "").startswith(self.return_to):
            logger.warning("OpenID return_to mismatch")
            return None
        match = CLAIMED_ID_PATTERN.match(params.get("openid.claimed_id", ""))
        if match is None:
            return None
        payload = dict(params)
        payload["openid.mode"] = "check_authentication"
        response = await self.http_client.post(
            self.endpoint, data=payload, timeout=self.timeout
        )
        response.raise_for_status()
        if not _is_valid_assertion(response.text):
            return None
        return match.group(1)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _is_valid_assertion(body: str) -> bool:
    """Parse the key-value form response of check_authentication."""
    for line in body.splitlines():
        key, _, value = line.partition(":")
        if key.strip() == "is_valid":
            return value.strip() == "true"
    return False
