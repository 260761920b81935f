from typing import Optional

from SteamInventoryApi.exceptions import InventoryDecodeError
from SteamInventoryApi.models import AppContextPair, Inventory
from SteamInventoryApi.transport import RetryingTransport
from utils.logger import PluginLogger, handle_caught_exception
from utils.static import DEFAULT_MAX_PAGES, FOREIGN_INVENTORY_URL, INVENTORY_JSON_URL

logger = PluginLogger("PaginatingFetcher")


def with_start(url: str, start: int) -> str:
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}start={start}"


class PaginatingFetcher:
    def __init__(
        self,
        transport: RetryingTransport,
        url_template: str = INVENTORY_JSON_URL,
        foreign_url_template: str = FOREIGN_INVENTORY_URL,
        max_pages: int = DEFAULT_MAX_PAGES,
    ):
        self.transport = transport
        self.url_template = url_template
        self.foreign_url_template = foreign_url_template
        self.max_pages = max(1, int(max_pages))

    def fetch(self, pair: AppContextPair, steam_id) -> Optional[Inventory]:
        url = self.url_template.format(steam_id=steam_id, app_id=pair.app_id, context_id=pair.context_id)
        return self.fetch_url(url, pair, steam_id)

    def fetch_foreign(self, pair: AppContextPair, steam_id, session_id: str) -> Optional[Inventory]:
        url = self.foreign_url_template.format(
            steam_id=steam_id, session_id=session_id, app_id=pair.app_id, context_id=pair.context_id
        )
        return self.fetch_url(url, pair, steam_id)

    def fetch_url(self, url: str, pair: AppContextPair, steam_id) -> Optional[Inventory]:
        """
        Fetches every page of one inventory and merges them in order.
        Returns None if any page fails, or if the server keeps reporting more
        pages after ``max_pages``.
        """
        inventory = None
        start = 0
        for page_number in range(1, self.max_pages + 1):
            page = self._fetch_page(with_start(url, start), pair, steam_id)
            if page is None:
                return None
            if inventory is None:
                inventory = page
            else:
                inventory.merge_page(page)
            logger.debug(f"Inventory {pair} page {page_number}: {len(page.items)} item(s), more={page.more}")
            if not page.more:
                logger.debug(f"Inventory {pair} of {steam_id} fetched: {len(inventory.items)} item(s) in {page_number} page(s)")
                return inventory
            start = page.more_start
        logger.error(f"Inventory {pair} of {steam_id} still reports more pages after {self.max_pages}. Skipping it.")
        return None

    def _fetch_page(self, url: str, pair: AppContextPair, steam_id) -> Optional[Inventory]:
        response = self.transport.fetch(url)
        try:
            page = Inventory.from_json(response, pair.app_id, pair.context_id, _steam_id_int(steam_id))
        except InventoryDecodeError as e:
            handle_caught_exception(e, "PaginatingFetcher", known=True)
            logger.error(f"Failed to decode inventory {pair} of {steam_id}")
            return None
        if not page.success:
            logger.warning(f"Steam reported failure for inventory {pair} of {steam_id}")
            return None
        return page


def _steam_id_int(steam_id) -> int:
    try:
        return int(steam_id)
    except (TypeError, ValueError):
        return 0
