import threading
from typing import Callable, Dict, List, Optional

from SteamInventoryApi.exceptions import InventoryNotFoundError
from SteamInventoryApi.models import Inventory
from utils.logger import PluginLogger, handle_caught_exception

logger = PluginLogger("AggregateStore")


class AggregateStore:
    """app_id -> context_id -> Inventory, safe to fill from several threads."""

    def __init__(self):
        self._lock = threading.Lock()
        self._inventories: Dict[int, Dict[int, Inventory]] = {}

    def add(self, inventory: Inventory) -> bool:
        # First writer wins
        with self._lock:
            contexts = self._inventories.setdefault(inventory.app_id, {})
            if inventory.context_id in contexts:
                logger.debug(f"Inventory {inventory.app_id}/{inventory.context_id} already stored. Keeping the first one.")
                return False
            contexts[inventory.context_id] = inventory
            return True

    def has_app_id(self, app_id: int) -> bool:
        with self._lock:
            return app_id in self._inventories

    def has_context_id(self, app_id: int, context_id: int) -> bool:
        with self._lock:
            return context_id in self._inventories.get(app_id, {})

    def get(self, app_id: int, context_id: int) -> Inventory:
        with self._lock:
            try:
                return self._inventories[app_id][context_id]
            except KeyError:
                raise InventoryNotFoundError(app_id, context_id) from None

    def snapshot(self) -> Dict[int, Dict[int, Inventory]]:
        with self._lock:
            return {app_id: dict(contexts) for app_id, contexts in self._inventories.items()}

    def __len__(self):
        with self._lock:
            return sum(len(contexts) for contexts in self._inventories.values())


class CompletionGate:
    """
    One-shot latch. ``fire`` releases every waiter and runs the registered
    callbacks; later calls do nothing.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    @property
    def is_fired(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)

    def fire(self) -> bool:
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            self._run_callback(callback)
        return True

    def add_done_callback(self, callback: Callable[[], None]):
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        self._run_callback(callback)

    @staticmethod
    def _run_callback(callback: Callable[[], None]):
        try:
            callback()
        except Exception as e:
            handle_caught_exception(e, "CompletionGate", known=True)
            logger.error("Completion callback failed")
