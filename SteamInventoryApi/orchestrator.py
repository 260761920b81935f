import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from SteamInventoryApi.discovery import ContextDiscovery, DiscoveryResult
from SteamInventoryApi.fetcher import PaginatingFetcher
from SteamInventoryApi.models import AppContextPair, Inventory
from SteamInventoryApi.store import AggregateStore, CompletionGate
from SteamInventoryApi.transport import RetryingTransport
from utils.logger import PluginLogger, handle_caught_exception
from utils.static import (DEFAULT_MAX_PAGES, DEFAULT_MAX_WORKERS,
                          WEB_REQUEST_MAX_RETRIES,
                          WEB_REQUEST_TIME_BETWEEN_RETRIES_MS)

logger = PluginLogger("FetchOrchestrator")


class RunState(Enum):
    DISCOVERING = "discovering"
    FETCHING_ALL = "fetching_all"
    READY = "ready"


class FetchRun:
    """
    State of one fetch of every inventory of one user.

    Readers block until the run is READY; the aggregate is never exposed while
    workers are still filling it.
    """

    def __init__(self, steam_id, app_ids: Optional[Iterable[int]] = None):
        self.steam_id = steam_id
        self.app_ids = None if app_ids is None else [int(app_id) for app_id in app_ids]
        self.state = RunState.DISCOVERING
        self.discovery: Optional[DiscoveryResult] = None
        self.store = AggregateStore()
        self.gate = CompletionGate()
        self.finished_pairs: List[AppContextPair] = []
        self.failed_pairs: List[AppContextPair] = []
        self._lock = threading.Lock()

    @property
    def success(self) -> bool:
        return self.discovery is not None and self.discovery.success

    @property
    def is_private(self) -> bool:
        return self.discovery is not None and self.discovery.is_private

    @property
    def pairs(self) -> List[AppContextPair]:
        return list(self.discovery.pairs) if self.discovery is not None else []

    @property
    def is_loaded(self) -> bool:
        return self.gate.is_fired

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self.gate.wait(timeout)

    def on_loaded(self, callback: Callable[["FetchRun"], None]):
        self.gate.add_done_callback(lambda: callback(self))

    def get_aggregate(self, timeout: Optional[float] = None) -> Dict[int, Dict[int, Inventory]]:
        if not self.gate.wait(timeout):
            raise TimeoutError(f"Inventories of {self.steam_id} are still loading")
        return self.store.snapshot()

    def get_inventory(self, app_id: int, context_id: int, timeout: Optional[float] = None) -> Inventory:
        if not self.gate.wait(timeout):
            raise TimeoutError(f"Inventories of {self.steam_id} are still loading")
        return self.store.get(int(app_id), int(context_id))

    def _mark_finished(self, pair: AppContextPair, ok: bool):
        with self._lock:
            self.finished_pairs.append(pair)
            if not ok:
                self.failed_pairs.append(pair)


class FetchOrchestrator:
    def __init__(
        self,
        web,
        max_workers: int = DEFAULT_MAX_WORKERS,
        max_pages: int = DEFAULT_MAX_PAGES,
        max_retries: int = WEB_REQUEST_MAX_RETRIES,
        retry_delay_ms: int = WEB_REQUEST_TIME_BETWEEN_RETRIES_MS,
    ):
        self.web = web
        self.max_workers = max(1, int(max_workers))
        self.transport = RetryingTransport(web.fetch, max_retries=max_retries, retry_delay_ms=retry_delay_ms)
        self.discovery = ContextDiscovery(self.transport)
        self.fetcher = PaginatingFetcher(self.transport, max_pages=max_pages)

    @classmethod
    def from_config(cls, web, config: dict) -> "FetchOrchestrator":
        fetcher_config = config.get("inventory_fetcher", {})
        return cls(
            web,
            max_workers=fetcher_config.get("max_workers", DEFAULT_MAX_WORKERS),
            max_pages=fetcher_config.get("max_pages", DEFAULT_MAX_PAGES),
            max_retries=fetcher_config.get("max_retries", WEB_REQUEST_MAX_RETRIES),
            retry_delay_ms=fetcher_config.get("retry_delay_ms", WEB_REQUEST_TIME_BETWEEN_RETRIES_MS),
        )

    def fetch_inventories(self, steam_id, app_ids: Optional[Iterable[int]] = None) -> FetchRun:
        run = FetchRun(steam_id, app_ids)
        thread = threading.Thread(target=self._run, args=(run,), name=f"FetchRun-{steam_id}")
        thread.daemon = True
        thread.start()
        return run

    def get_aggregate(self, run: FetchRun, timeout: Optional[float] = None) -> Dict[int, Dict[int, Inventory]]:
        return run.get_aggregate(timeout)

    def get_inventory(self, run: FetchRun, app_id: int, context_id: int, timeout: Optional[float] = None) -> Inventory:
        return run.get_inventory(app_id, context_id, timeout)

    def add_foreign_inventory(self, run: FetchRun, steam_id, app_id: int, context_id: int) -> bool:
        pair = AppContextPair(int(app_id), int(context_id))
        session_id = getattr(self.web, "session_id", None)
        if not session_id:
            logger.error(f"Cannot fetch foreign inventory {pair} of {steam_id} without a Steam session. Enable login in config.")
            return False
        inventory = self.fetcher.fetch_foreign(pair, steam_id, session_id)
        if inventory is None:
            logger.warning(f"Foreign inventory {pair} of {steam_id} is unavailable")
            return False
        if not run.store.add(inventory):
            logger.info(f"Inventory {pair} is already loaded. Foreign inventory of {steam_id} ignored.")
            return False
        logger.info(f"Added foreign inventory {pair} of {steam_id}: {len(inventory.items)} item(s)")
        return True

    def _run(self, run: FetchRun):
        try:
            logger.info(f"Discovering inventories of {run.steam_id}...")
            run.discovery = self.discovery.discover(run.steam_id, run.app_ids)
            if run.discovery.success and run.discovery.pairs:
                run.state = RunState.FETCHING_ALL
                self._fetch_all(run)
        except Exception as e:
            handle_caught_exception(e, "FetchOrchestrator")
            logger.error(f"Fetching inventories of {run.steam_id} stopped unexpectedly")
        finally:
            run.state = RunState.READY
            logger.info(
                f"Loaded {len(run.store)} of {len(run.pairs)} inventory(ies) of {run.steam_id}"
                + (f", {len(run.failed_pairs)} failed" if run.failed_pairs else "")
            )
            run.gate.fire()

    def _fetch_all(self, run: FetchRun):
        pairs = run.discovery.pairs
        with ThreadPoolExecutor(max_workers=max(1, min(self.max_workers, len(pairs))), thread_name_prefix="inventory") as executor:
            futures = {executor.submit(self._fetch_pair, run, pair): pair for pair in pairs}
            for future in as_completed(futures):
                pair = futures[future]
                try:
                    ok = future.result()
                except Exception as e:
                    handle_caught_exception(e, "FetchOrchestrator")
                    logger.error(f"Fetching inventory {pair} of {run.steam_id} failed")
                    ok = False
                run._mark_finished(pair, ok)

    def _fetch_pair(self, run: FetchRun, pair: AppContextPair) -> bool:
        inventory = self.fetcher.fetch(pair, run.steam_id)
        if inventory is None:
            return False
        if not run.store.add(inventory):
            logger.warning(f"Inventory {pair} of {run.steam_id} was already added by another fetch. Dropped.")
            return False
        return True
