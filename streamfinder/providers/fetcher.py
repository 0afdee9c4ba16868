"""
HTTP fetcher for provider scrapers. Wraps aiohttp with a shared session,
browser User-Agent, timeouts and optional proxy. Non-2xx responses raise
aiohttp.ClientResponseError so callers see failed fetches as exceptions.
"""
from __future__ import annotations
import aiohttp
from typing import Optional

DEFAULT_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/136.0.0.0 Safari/537.36"
)

class Fetcher:
    def __init__(self, *, timeout: int = 10, proxy: str | None = None):
        self.timeout = aiohttp.ClientTimeout(total=timeout, connect=4)
        self.proxy = proxy
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": DEFAULT_UA},
                connector=aiohttp.TCPConnector(ssl=False),
                raise_for_status=True,
            )
        return self._session

    async def close(self):
        if self._session and not self._session.closed:
            await self._session.close()

    async def get(
        self,
        url: str,
        *,
        headers: dict | None = None,
        params: dict | None = None,
    ) -> str:
        """Body text of `url`, redirects followed."""
        session = await self._get_session()
        async with session.get(url, headers=headers or {}, params=params, proxy=self.proxy) as resp:
            return await resp.text()

    async def get_json(
        self,
        url: str,
        *,
        headers: dict | None = None,
        params: dict | None = None,
    ) -> dict | list:
        session = await self._get_session()
        async with session.get(url, headers=headers or {}, params=params, proxy=self.proxy) as resp:
            # providers often serve JSON as text/html
            return await resp.json(content_type=None)
