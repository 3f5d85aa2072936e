import logging

import httpx

from scalardisco.application.ports import DescriptionFetchError

LOG = logging.getLogger(__name__)


class HttpDescriptionFetcher:
    def __init__(self, timeout_s: float = 3.0, client: httpx.AsyncClient | None = None) -> None:
        self.timeout_s = timeout_s
        self._client = client

    async def fetch(self, url: str) -> str:
        try:
            if self._client is not None:
                response = await self._client.get(url, timeout=self.timeout_s)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                    response = await client.get(url)
            response.raise_for_status()
        except Exception as exc:
            raise DescriptionFetchError(f"GET {url} failed: {exc}") from exc
        LOG.debug("description fetched location=%s status=%s", url, response.status_code)
        return response.content.decode("utf-8", errors="replace")
