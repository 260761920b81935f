import json
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional

from SteamInventoryApi.exceptions import InventoryDecodeError


class AppId(IntEnum):
    TF2 = 440
    Dota2 = 570
    Portal2 = 620
    CSGO = 730
    SpiralKnights = 99900
    H1Z1 = 295110
    Steam = 753


class ContextId(IntEnum):
    TF2 = 2
    Dota2 = 2
    Portal2 = 2
    CSGO = 2
    H1Z1 = 1
    SteamGifts = 1
    SteamCoupons = 3
    SteamCommunity = 6
    SteamItemRewards = 7


def decode_map_or_empty_array(value: Any) -> Dict[str, Any]:
    """
    Steam serializes an empty rgInventory / rgCurrency / rgDescriptions (and
    rgContexts) as ``[]`` instead of ``{}``. Anything that is not an object is
    read as an empty map.
    """
    if isinstance(value, dict):
        return value
    return {}


def _to_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    return int(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true")
    return bool(value)


@dataclass(frozen=True)
class AppContextPair:
    app_id: int
    context_id: int

    def __str__(self):
        return f"{self.app_id}/{self.context_id}"


@dataclass(frozen=True)
class InventoryItem:
    id: int
    class_id: int
    instance_id: int = 0
    amount: int = 0
    is_currency: bool = False
    position: int = 0
    owner_id: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any], is_currency: bool = False) -> "InventoryItem":
        return cls(
            id=_to_int(data["id"]),
            class_id=_to_int(data["classid"]),
            instance_id=_to_int(data.get("instanceid")),
            amount=_to_int(data.get("amount")),
            is_currency=is_currency or _to_bool(data.get("is_currency", False)),
            position=_to_int(data.get("pos")),
            owner_id=_to_int(data.get("owner")),
        )


@dataclass(frozen=True)
class DescriptionLine:
    type: str = ""
    value: str = ""


@dataclass(frozen=True)
class ItemAction:
    name: str = ""
    link: str = ""


@dataclass(frozen=True)
class ItemTag:
    internal_name: str = ""
    name: str = ""
    category: str = ""
    color: str = ""
    category_name: str = ""


@dataclass(frozen=True)
class ItemAppData:
    def_index: int = 0
    quality: int = 0


@dataclass
class ItemDescription:
    app_id: int
    class_id: int
    instance_id: int = 0
    display_name: str = ""
    market_hash_name: str = ""
    market_name: str = ""
    type: str = ""
    icon_url: str = ""
    icon_url_large: str = ""
    icon_drag_url: str = ""
    name_color: str = ""
    background_color: str = ""
    is_tradable: bool = False
    is_marketable: bool = False
    is_commodity: bool = False
    market_fee_app: int = 0
    owner_id: int = 0
    descriptions: List[DescriptionLine] = field(default_factory=list)
    actions: List[ItemAction] = field(default_factory=list)
    owner_actions: List[ItemAction] = field(default_factory=list)
    tags: List[ItemTag] = field(default_factory=list)
    app_data: Optional[ItemAppData] = None

    @property
    def name(self) -> str:
        return self.market_name or self.display_name

    @property
    def key(self) -> str:
        return f"{self.class_id}_{self.instance_id}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ItemDescription":
        app_data = data.get("app_data")
        return cls(
            app_id=_to_int(data.get("appid")),
            class_id=_to_int(data["classid"]),
            instance_id=_to_int(data.get("instanceid")),
            display_name=data.get("name") or "",
            market_hash_name=data.get("market_hash_name") or "",
            market_name=data.get("market_name") or "",
            type=data.get("type") or "",
            icon_url=data.get("icon_url") or "",
            icon_url_large=data.get("icon_url_large") or "",
            icon_drag_url=data.get("icon_drag_url") or "",
            name_color=data.get("name_color") or "",
            background_color=data.get("background_color") or "",
            is_tradable=_to_int(data.get("tradable")) == 1,
            is_marketable=_to_int(data.get("marketable")) == 1,
            is_commodity=_to_int(data.get("commodity")) == 1,
            market_fee_app=_to_int(data.get("market_fee_app")),
            owner_id=_to_int(data.get("owner")),
            descriptions=[DescriptionLine(d.get("type", ""), d.get("value", "")) for d in data.get("descriptions") or []],
            actions=[ItemAction(a.get("name", ""), a.get("link", "")) for a in data.get("actions") or []],
            owner_actions=[ItemAction(a.get("name", ""), a.get("link", "")) for a in data.get("owner_actions") or []],
            tags=[
                ItemTag(
                    internal_name=t.get("internal_name", ""),
                    name=t.get("name", ""),
                    category=t.get("category", ""),
                    color=t.get("color", ""),
                    category_name=t.get("category_name", ""),
                )
                for t in data.get("tags") or []
            ],
            app_data=ItemAppData(_to_int(app_data.get("def_index")), _to_int(app_data.get("quality"))) if isinstance(app_data, dict) else None,
        )


@dataclass(frozen=True)
class InventoryContext:
    id: int
    name: str = ""
    asset_count: int = 0


@dataclass
class InventoryApp:
    """One entry of the g_rgAppContextData table on a profile inventory page."""

    app_id: int
    name: str = ""
    icon: str = ""
    link: str = ""
    asset_count: int = 0
    inventory_logo: str = ""
    trade_permissions: str = ""
    contexts: Dict[int, InventoryContext] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InventoryApp":
        contexts = {}
        for context_id, context in decode_map_or_empty_array(data.get("rgContexts")).items():
            context = context if isinstance(context, dict) else {}
            contexts[_to_int(context_id)] = InventoryContext(
                id=_to_int(context_id),
                name=context.get("name") or "",
                asset_count=_to_int(context.get("asset_count")),
            )
        return cls(
            app_id=_to_int(data["appid"]),
            name=data.get("name") or "",
            icon=data.get("icon") or "",
            link=data.get("link") or "",
            asset_count=_to_int(data.get("asset_count")),
            inventory_logo=data.get("inventory_logo") or "",
            trade_permissions=data.get("trade_permissions") or "",
            contexts=contexts,
        )


class Inventory:
    """
    Items, currencies and descriptions of one (app_id, context_id) pair.

    ``items`` and ``descriptions`` are built from the maps on first access and
    cached; after pages are merged they hold the concatenation of every page
    in fetch order, while the maps keep the last page's entry for a repeated id.
    """

    def __init__(
        self,
        app_id: int,
        context_id: int,
        steam_id: int = 0,
        success: bool = True,
        rg_inventory: Optional[Dict[str, InventoryItem]] = None,
        rg_currency: Optional[Dict[str, InventoryItem]] = None,
        rg_descriptions: Optional[Dict[str, ItemDescription]] = None,
        more: bool = False,
        more_start: int = 0,
    ):
        self.app_id = app_id
        self.context_id = context_id
        self.steam_id = steam_id
        self.success = success
        self.rg_inventory = rg_inventory if rg_inventory is not None else {}
        self.rg_currency = rg_currency if rg_currency is not None else {}
        self.rg_descriptions = rg_descriptions if rg_descriptions is not None else {}
        self.more = more
        self.more_start = more_start if more else 0
        self._items: Optional[List[InventoryItem]] = None
        self._descriptions: Optional[List[ItemDescription]] = None

    @classmethod
    def from_dict(cls, payload: Any, app_id: int, context_id: int, steam_id: int = 0) -> "Inventory":
        if not isinstance(payload, dict):
            raise InventoryDecodeError(f"Inventory {app_id}/{context_id} is not a JSON object")
        try:
            rg_inventory = {
                str(key): InventoryItem.from_dict(value)
                for key, value in decode_map_or_empty_array(payload.get("rgInventory")).items()
            }
            rg_currency = {
                str(key): InventoryItem.from_dict(value, is_currency=True)
                for key, value in decode_map_or_empty_array(payload.get("rgCurrency")).items()
            }
            rg_descriptions = {
                str(key): ItemDescription.from_dict(value)
                for key, value in decode_map_or_empty_array(payload.get("rgDescriptions")).items()
            }
            more = _to_bool(payload.get("more", False))
            more_start = _to_int(payload.get("more_start")) if more else 0
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise InventoryDecodeError(f"Malformed inventory {app_id}/{context_id}: {e!r}") from e
        return cls(
            app_id=app_id,
            context_id=context_id,
            steam_id=steam_id,
            success=_to_bool(payload.get("success", False)),
            rg_inventory=rg_inventory,
            rg_currency=rg_currency,
            rg_descriptions=rg_descriptions,
            more=more,
            more_start=more_start,
        )

    @classmethod
    def from_json(cls, text: str, app_id: int, context_id: int, steam_id: int = 0) -> "Inventory":
        try:
            payload = json.loads(text)
        except ValueError as e:
            raise InventoryDecodeError(f"Inventory {app_id}/{context_id} is not valid JSON") from e
        return cls.from_dict(payload, app_id, context_id, steam_id)

    @property
    def pair(self) -> AppContextPair:
        return AppContextPair(self.app_id, self.context_id)

    @property
    def items(self) -> List[InventoryItem]:
        if self._items is None:
            self._items = list(self.rg_inventory.values()) + list(self.rg_currency.values())
        return self._items

    @items.setter
    def items(self, value: List[InventoryItem]):
        self._items = list(value)

    @property
    def descriptions(self) -> List[ItemDescription]:
        if self._descriptions is None:
            self._descriptions = list(self.rg_descriptions.values())
        return self._descriptions

    @descriptions.setter
    def descriptions(self, value: List[ItemDescription]):
        self._descriptions = list(value)

    def merge_page(self, page: "Inventory"):
        self.items = self.items + page.items
        self.descriptions = self.descriptions + page.descriptions
        self.rg_inventory.update(page.rg_inventory)
        self.rg_currency.update(page.rg_currency)
        self.rg_descriptions.update(page.rg_descriptions)
        self.success = self.success and page.success
        self.more = page.more
        self.more_start = page.more_start

    def get_item(self, item_id) -> Optional[InventoryItem]:
        item_id = str(item_id)
        if item_id in self.rg_currency:
            return self.rg_currency[item_id]
        return self.rg_inventory.get(item_id)

    def get_item_description(self, item_id, is_currency: bool = False) -> Optional[ItemDescription]:
        item_id = str(item_id)
        if is_currency:
            item = self.rg_currency.get(item_id)
            if item is None:
                return None
            return self.rg_descriptions.get(f"{item.class_id}_0")
        item = self.rg_inventory.get(item_id)
        if item is None:
            return None
        return self.rg_descriptions.get(f"{item.class_id}_{item.instance_id}")

    def get_item_description_by_class_id(self, class_id, is_currency: bool = False) -> Optional[ItemDescription]:
        class_id = int(class_id)
        if is_currency:
            return self.rg_descriptions.get(f"{class_id}_0")
        for item in self.rg_inventory.values():
            if item.class_id == class_id:
                return self.rg_descriptions.get(f"{class_id}_{item.instance_id}")
        return None

    def __len__(self):
        return len(self.items)

    def __repr__(self):
        return f"<Inventory {self.app_id}/{self.context_id} items={len(self.items)} descriptions={len(self.descriptions)}>"
