import json
import threading

import requests

from utils.static import FOREIGN_INVENTORY_URL, INVENTORY_JSON_URL, PROFILE_INVENTORY_URL

STEAM_ID = "76561198000000001"
OTHER_STEAM_ID = "76561198000000002"


def profile_url(steam_id=STEAM_ID):
    return PROFILE_INVENTORY_URL.format(steam_id=steam_id)


def inventory_url(app_id, context_id, start=0, steam_id=STEAM_ID):
    return INVENTORY_JSON_URL.format(steam_id=steam_id, app_id=app_id, context_id=context_id) + f"?start={start}"


def foreign_url(app_id, context_id, session_id, start=0, steam_id=OTHER_STEAM_ID):
    return (
        FOREIGN_INVENTORY_URL.format(steam_id=steam_id, session_id=session_id, app_id=app_id, context_id=context_id)
        + f"&start={start}"
    )


def app_entry(app_id, name, context_ids):
    return {
        "appid": app_id,
        "name": name,
        "icon": f"https://cdn.example/{app_id}.jpg",
        "link": f"https://store.steampowered.com/app/{app_id}/",
        "asset_count": 10,
        "inventory_logo": "",
        "trade_permissions": "FULL",
        "rgContexts": {
            str(context_id): {"asset_count": 5, "id": str(context_id), "name": f"Context {context_id}"}
            for context_id in context_ids
        },
    }


def profile_html(apps):
    return (
        "<html><head><script type=\"text/javascript\">\n"
        "\t\tvar g_rgAppContextData = " + json.dumps(apps) + ";\n"
        "\t\tvar g_strInventoryLoadURL = 'https://steamcommunity.com/';\n"
        "</script></head><body></body></html>"
    )


def raw_item(item_id, class_id, instance_id="0", amount="1", pos=1):
    return {"id": str(item_id), "classid": str(class_id), "instanceid": str(instance_id), "amount": str(amount), "pos": pos}


def raw_description(class_id, instance_id="0", name="Item", market_name="", tradable=1, marketable=0, commodity=0):
    return {
        "appid": "440",
        "classid": str(class_id),
        "instanceid": str(instance_id),
        "name": name,
        "market_name": market_name,
        "market_hash_name": market_name or name,
        "type": "Level 1 Tool",
        "tradable": tradable,
        "marketable": marketable,
        "commodity": commodity,
        "descriptions": [{"type": "html", "value": "A test item"}],
        "actions": [{"name": "Inspect", "link": "steam://inspect"}],
        "tags": [{"internal_name": "Unique", "name": "Unique", "category": "Quality", "color": "7D6D00", "category_name": "Quality"}],
        "app_data": {"def_index": "5021", "quality": "6"},
    }


def page(items=None, descriptions=None, currency=None, more=False, more_start=False, success=True):
    rg_inventory = {str(item["id"]): item for item in items} if items else []
    rg_descriptions = {f"{d['classid']}_{d['instanceid']}": d for d in descriptions} if descriptions else []
    rg_currency = {str(item["id"]): item for item in currency} if currency else []
    return json.dumps(
        {
            "success": success,
            "rgInventory": rg_inventory,
            "rgCurrency": rg_currency,
            "rgDescriptions": rg_descriptions,
            "more": more,
            "more_start": more_start,
        }
    )


class FakeWeb:
    """Stands in for SteamWeb: serves canned bodies by URL and records every call."""

    def __init__(self, responses=None, session_id=None):
        self.responses = dict(responses or {})
        self.session_id = session_id
        self.calls = []
        self._lock = threading.Lock()

    def fetch(self, url, method="GET", data=None):
        with self._lock:
            self.calls.append(url)
        response = self.responses.get(url)
        if response is None:
            raise requests.exceptions.ConnectionError(f"no route for {url}")
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response()
        return response

    def count(self, url):
        with self._lock:
            return self.calls.count(url)
