import json
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from SteamInventoryApi.models import AppContextPair, InventoryApp, decode_map_or_empty_array
from SteamInventoryApi.transport import RetryingTransport
from utils.logger import PluginLogger, handle_caught_exception
from utils.static import PROFILE_INVENTORY_URL

logger = PluginLogger("ContextDiscovery")

APP_CONTEXT_DATA_RE = re.compile(r"var g_rgAppContextData = (.*?);\s*$", re.MULTILINE)


@dataclass
class DiscoveryResult:
    success: bool = False
    is_private: bool = False
    apps: Dict[int, InventoryApp] = field(default_factory=dict)
    pairs: List[AppContextPair] = field(default_factory=list)


def parse_app_context_data(html: str) -> Optional[Dict[int, InventoryApp]]:
    """
    Returns None when the page carries no g_rgAppContextData assignment.
    Raises ValueError (json.JSONDecodeError included) when it does but the
    value cannot be decoded.
    """
    match = APP_CONTEXT_DATA_RE.search(html)
    if not match:
        return None
    data = json.loads(match.group(1))
    if not isinstance(data, (dict, list)):
        raise ValueError("g_rgAppContextData is not an object")
    apps = {}
    try:
        for app_id, app in decode_map_or_empty_array(data).items():
            apps[int(app_id)] = InventoryApp.from_dict(app)
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed g_rgAppContextData: {e!r}") from e
    return apps


def pairs_from_apps(apps: Dict[int, InventoryApp], app_ids: Optional[Iterable[int]] = None) -> List[AppContextPair]:
    allowed = None if app_ids is None else {int(app_id) for app_id in app_ids}
    pairs = []
    for app_id, app in apps.items():
        if allowed is not None and app_id not in allowed:
            continue
        for context_id in app.contexts:
            pair = AppContextPair(app_id, context_id)
            if pair not in pairs:
                pairs.append(pair)
    return pairs


class ContextDiscovery:
    def __init__(self, transport: RetryingTransport, url_template: str = PROFILE_INVENTORY_URL):
        self.transport = transport
        self.url_template = url_template

    def discover(self, steam_id, app_ids: Optional[Iterable[int]] = None) -> DiscoveryResult:
        url = self.url_template.format(steam_id=steam_id)
        html = self.transport.fetch(url)
        if not html:
            logger.error(f"Could not load the inventory page of {steam_id}")
        try:
            apps = parse_app_context_data(html)
        except ValueError as e:
            handle_caught_exception(e, "ContextDiscovery", known=True)
            logger.error(f"Failed to parse the inventory list of {steam_id}")
            return DiscoveryResult(success=False)
        if apps is None:
            logger.warning(f"No inventory list found on the profile of {steam_id}. The profile is likely private.")
            return DiscoveryResult(success=False, is_private=True)
        pairs = pairs_from_apps(apps, app_ids)
        logger.info(f"Found {len(apps)} app(s) and {len(pairs)} inventory(ies) to fetch for {steam_id}")
        return DiscoveryResult(success=True, apps=apps, pairs=pairs)
