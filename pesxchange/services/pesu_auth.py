"""Client for the PESU Academy credential verifier."""

import logging
from typing import Any, Dict, Optional

import httpx

from pesxchange.config import settings
from pesxchange.core.exceptions import AuthenticationError, IdentityProviderError, StoreError
from pesxchange.schemas.user import IdentityProfile

logger = logging.getLogger(__name__)

USER_AGENT = "PesXChange/1.0"


class PesuAuthClient:
    """Verifies SRN/password pairs and returns the student's profile."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url or settings.PESU_AUTH_URL
        self.timeout = timeout if timeout is not None else settings.OUTBOUND_TIMEOUT_SECONDS
        self._transport = transport

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await client.post(
                self.url,
                json=payload,
                headers={"User-Agent": USER_AGENT},
            )

    async def authenticate(self, srn: str, password: str) -> IdentityProfile:
        """
        Verify credentials with the identity provider.

        Raises:
            IdentityProviderError: provider unreachable, timed out or non-2xx
            AuthenticationError: provider rejected the credentials
            StoreError: provider answered with an unusable body
        """
        try:
            resp = await self._post({"username": srn.upper(), "password": password, "profile": True})
        except httpx.HTTPError as e:
            logger.error(f"PESU Auth request failed: {type(e).__name__}: {e}")
            raise IdentityProviderError(
                "Unable to connect to authentication service. Please try again later."
            ) from e

        logger.info(f"PESU Auth API response status: {resp.status_code}")
        if not resp.is_success:
            raise IdentityProviderError()

        try:
            data = resp.json()
        except ValueError as e:
            raise StoreError("Invalid authentication response") from e

        if not isinstance(data, dict) or not isinstance(data.get("status"), bool):
            logger.error("Invalid response format from PESU Auth API")
            raise StoreError("Invalid authentication response")

        if not data["status"]:
            raise AuthenticationError(data.get("message") or "Authentication failed")

        profile = data.get("profile")
        if not isinstance(profile, dict):
            raise StoreError("Profile information not available")

        try:
            return IdentityProfile.model_validate(profile)
        except ValueError as e:
            raise StoreError("Profile information not available") from e


_pesu_auth_client: Optional[PesuAuthClient] = None


def get_pesu_auth_client() -> PesuAuthClient:
    global _pesu_auth_client
    if _pesu_auth_client is None:
        _pesu_auth_client = PesuAuthClient()
    return _pesu_auth_client
