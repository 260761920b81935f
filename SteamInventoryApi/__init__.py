# Steam inventory fetching by Steaminv.
# Reads every inventory a Steam profile exposes (appid/contextid pairs) and
# merges them into one aggregate. Read only: nothing is ever sent to Steam
# besides GET requests.

from SteamInventoryApi.discovery import ContextDiscovery, DiscoveryResult
from SteamInventoryApi.exceptions import InventoryDecodeError, InventoryNotFoundError
from SteamInventoryApi.fetcher import PaginatingFetcher
from SteamInventoryApi.models import (AppContextPair, AppId, ContextId, Inventory, InventoryApp,
                                      InventoryItem, ItemDescription, decode_map_or_empty_array)
from SteamInventoryApi.orchestrator import FetchOrchestrator, FetchRun, RunState
from SteamInventoryApi.store import AggregateStore, CompletionGate
from SteamInventoryApi.transport import RetryingTransport

__all__ = [
    "AggregateStore",
    "AppContextPair",
    "AppId",
    "CompletionGate",
    "ContextDiscovery",
    "ContextId",
    "DiscoveryResult",
    "FetchOrchestrator",
    "FetchRun",
    "Inventory",
    "InventoryApp",
    "InventoryDecodeError",
    "InventoryItem",
    "InventoryNotFoundError",
    "ItemDescription",
    "PaginatingFetcher",
    "RetryingTransport",
    "RunState",
    "decode_map_or_empty_array",
]
