import asyncio
import logging

import httpx

from jobsnap.errors import FetchError

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
INITIAL_BACKOFF = 2  # seconds
HTTP_TIMEOUT = 15.0  # seconds
USER_AGENT = "JobSnap/0.3 (+https://localhost)"


async def fetch_html(
    url: str,
    max_retries: int = MAX_RETRIES,
    initial_backoff: float = INITIAL_BACKOFF,
    timeout: float = HTTP_TIMEOUT,
) -> str:
    """
    Download a job page, following redirects.

    Retries on HTTP errors (connection errors, timeouts, error statuses)
    using exponential backoff, and raises FetchError once retries run out.
    """
    for attempt in range(1, max_retries + 1):
        try:
            async with httpx.AsyncClient(
                timeout=timeout,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
            return response.text
        except httpx.HTTPError as e:
            if attempt == max_retries:
                logger.error(f"Failed to fetch {url} after {max_retries} attempts: {e}")
                raise FetchError(f"Fetch failed for {url}: {e}") from e
            backoff = initial_backoff * (2 ** (attempt - 1))
            logger.warning(
                f"Fetch attempt {attempt}/{max_retries} failed for {url}: {e}. "
                f"Retrying in {backoff}s..."
            )
            await asyncio.sleep(backoff)

    raise FetchError(f"Fetch failed for {url}: no attempts made")
