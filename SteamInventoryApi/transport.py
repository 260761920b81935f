import time
from typing import Callable

from utils.logger import PluginLogger, handle_caught_exception
from utils.static import WEB_REQUEST_MAX_RETRIES, WEB_REQUEST_TIME_BETWEEN_RETRIES_MS

logger = PluginLogger("RetryingTransport")


class RetryingTransport:
    """
    Calls the raw fetch until it returns a non-empty body, at most
    ``max_retries`` times with ``retry_delay_ms`` between attempts.
    Returns an empty string once every attempt has failed.
    """

    def __init__(
        self,
        fetch: Callable[..., str],
        max_retries: int = WEB_REQUEST_MAX_RETRIES,
        retry_delay_ms: int = WEB_REQUEST_TIME_BETWEEN_RETRIES_MS,
    ):
        self._fetch = fetch
        self.max_retries = max(1, int(max_retries))
        self.retry_delay_ms = max(0, int(retry_delay_ms))

    def fetch(self, url: str, method: str = "GET") -> str:
        for attempt in range(1, self.max_retries + 1):
            try:
                response = self._fetch(url, method)
                if response:
                    return response
                logger.warning(f"Empty response from {url} ({attempt}/{self.max_retries})")
            except Exception as e:
                logger.warning(f"Request to {url} failed ({attempt}/{self.max_retries})")
                handle_caught_exception(e, "RetryingTransport", known=True)
            if attempt < self.max_retries:
                time.sleep(self.retry_delay_ms / 1000)
        logger.error(f"Giving up on {url} after {self.max_retries} attempts")
        return ""
