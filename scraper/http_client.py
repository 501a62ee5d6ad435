"""HTTP fetching with retry and exponential backoff."""
import logging
import time
from typing import Optional

import requests

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
BASE_DELAY = 1  # seconds


def fetch_text(url: str, timeout: int, params: Optional[dict] = None) -> str:
    """
    Fetch a URL's body as text, retrying failed requests.

    Args:
        url: URL to fetch
        timeout: Request timeout in seconds
        params: Optional query string parameters

    Returns:
        Response body as string

    Raises:
        requests.RequestException: If all retry attempts fail
    """
    for attempt in range(MAX_RETRIES):
        try:
            logger.info(f"Fetching {url} (attempt {attempt + 1}/{MAX_RETRIES})")
            response = requests.get(url, params=params, timeout=timeout)
            response.raise_for_status()
            return response.text

        except requests.RequestException as e:
            if attempt < MAX_RETRIES - 1:
                # Calculate exponential backoff delay
                delay = BASE_DELAY * (2 ** attempt)
                logger.warning(
                    f"Request failed (attempt {attempt + 1}/{MAX_RETRIES}): {e}. "
                    f"Retrying in {delay} seconds..."
                )
                time.sleep(delay)
            else:
                logger.error(
                    f"All {MAX_RETRIES} retry attempts failed. Last error: {e}"
                )
                raise
