"""JWKS (JSON Web Key Set) cache for Supabase JWT verification.

Supabase publishes its asymmetric signing keys at
``<project>/auth/v1/.well-known/jwks.json``. Keys are fetched lazily and
cached for ``SUPABASE_JWKS_CACHE_TTL`` seconds.
"""

import asyncio
import time
from typing import Dict, Any, Optional

import aiohttp

from app.core.config import settings
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class JWKSService:
    """Fetches and caches the Supabase signing keys keyed by ``kid``."""

    def __init__(self, supabase_url: str, cache_ttl: int = 3600, timeout: int = 30):
        self.jwks_url = f"{supabase_url.rstrip('/')}/auth/v1/.well-known/jwks.json"
        self.cache_ttl = cache_ttl
        self.timeout = timeout

        self._keys: Optional[Dict[str, Dict[str, Any]]] = None
        self._fetched_at: float = 0.0
        self._lock = asyncio.Lock()

    async def get_key(self, kid: str) -> Optional[Dict[str, Any]]:
        """Return the raw JWK for ``kid``.

        An unknown ``kid`` forces one refresh, which covers key rotation
        inside the cache window.
        """
        keys = await self._get_keys()
        if kid not in keys:
            keys = await self._get_keys(force=True)
        return keys.get(kid)

    async def _get_keys(self, force: bool = False) -> Dict[str, Dict[str, Any]]:
        async with self._lock:
            expired = time.time() - self._fetched_at >= self.cache_ttl
            if self._keys is None or expired or force:
                self._keys = await self._fetch_keys()
                self._fetched_at = time.time()
            return self._keys

    async def _fetch_keys(self) -> Dict[str, Dict[str, Any]]:
        """Download the key set.

        Raises:
            RuntimeError: If the endpoint is unreachable or returns garbage
        """
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.get(self.jwks_url) as response:
                    if response.status != 200:
                        raise RuntimeError(f"JWKS endpoint returned {response.status}: {await response.text()}")
                    data = await response.json()
        except aiohttp.ClientError as e:
            LOGGER.error(f"Network error fetching JWKS: {e}")
            raise RuntimeError(f"Failed to fetch JWKS keys: {e}") from e

        keys = {key["kid"]: key for key in data.get("keys", []) if "kid" in key}
        LOGGER.info(f"Fetched {len(keys)} JWKS keys")
        return keys


# Global JWKS service instance
jwks_service = JWKSService(
    supabase_url=settings.supabase_url,
    cache_ttl=settings.supabase_jwks_cache_ttl,
)
