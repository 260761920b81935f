import json

import pytest

from helpers import page, raw_description, raw_item
from SteamInventoryApi.exceptions import InventoryDecodeError
from SteamInventoryApi.models import (AppContextPair, AppId, ContextId, Inventory, InventoryApp,
                                      InventoryItem, ItemDescription, decode_map_or_empty_array)


def test_decode_map_or_empty_array():
    assert decode_map_or_empty_array({"1": {"id": "1"}}) == {"1": {"id": "1"}}
    assert decode_map_or_empty_array([]) == {}
    assert decode_map_or_empty_array(None) == {}
    assert decode_map_or_empty_array("nope") == {}


def test_empty_array_fields_decode_to_empty_inventory():
    text = json.dumps({"success": True, "rgInventory": [], "rgCurrency": [], "rgDescriptions": [], "more": False, "more_start": False})

    inventory = Inventory.from_json(text, 440, 2)

    assert inventory.success
    assert inventory.items == []
    assert inventory.descriptions == []
    assert not inventory.more
    assert inventory.more_start == 0


def test_item_fields_are_decoded_from_strings():
    text = page(items=[raw_item(1001, 2002, instance_id="3003", amount="5", pos=7)])

    inventory = Inventory.from_json(text, 440, 2, 76561198000000001)

    assert inventory.items == [
        InventoryItem(id=1001, class_id=2002, instance_id=3003, amount=5, is_currency=False, position=7, owner_id=0)
    ]
    assert inventory.steam_id == 76561198000000001
    assert inventory.pair == AppContextPair(440, 2)


def test_missing_optional_item_fields_decode_to_zero():
    item = InventoryItem.from_dict({"id": "5", "classid": "6"})

    assert item == InventoryItem(id=5, class_id=6, instance_id=0, amount=0, is_currency=False, position=0, owner_id=0)


def test_currency_items_are_flagged_and_listed_after_regular_items():
    currency = {"id": "1", "classid": "99", "is_currency": True, "amount": "250", "pos": 1}
    text = page(items=[raw_item(1, 10)], currency=[currency])

    inventory = Inventory.from_json(text, 753, 1)

    assert [item.is_currency for item in inventory.items] == [False, True]
    assert inventory.items[1].instance_id == 0
    assert inventory.items[1].amount == 250


def test_same_id_can_exist_as_item_and_currency():
    currency = {"id": "1", "classid": "99", "amount": "3"}
    inventory = Inventory.from_json(page(items=[raw_item(1, 10)], currency=[currency]), 753, 1)

    assert len(inventory.items) == 2
    assert inventory.get_item(1).is_currency
    assert inventory.rg_inventory["1"].class_id == 10


def test_item_equality_is_structural():
    assert InventoryItem(1, 2, 3, 1, False, 4, 5) == InventoryItem(1, 2, 3, 1, False, 4, 5)
    assert InventoryItem(1, 2, 3, 1, False, 4, 5) != InventoryItem(1, 2, 3, 1, False, 5, 5)


def test_description_flags_and_name_fallback():
    description = ItemDescription.from_dict(raw_description(10, name="Mann Co. Key", tradable=1, marketable=1, commodity=0))

    assert description.name == "Mann Co. Key"
    assert description.is_tradable
    assert description.is_marketable
    assert not description.is_commodity
    assert description.key == "10_0"
    assert description.tags[0].category == "Quality"
    assert description.actions[0].name == "Inspect"
    assert description.descriptions[0].value == "A test item"
    assert description.app_data.def_index == 5021

    named = ItemDescription.from_dict(raw_description(10, name="Key", market_name="Mann Co. Supply Crate Key"))
    assert named.name == "Mann Co. Supply Crate Key"
    assert named.display_name == "Key"


def test_description_lookups():
    currency = {"id": "7", "classid": "99", "amount": "3"}
    text = page(
        items=[raw_item(1, 10, instance_id="11")],
        currency=[currency],
        descriptions=[raw_description(10, instance_id="11", name="Hat"), raw_description(99, name="Gems")],
    )
    inventory = Inventory.from_json(text, 753, 6)

    assert inventory.get_item_description(1).display_name == "Hat"
    assert inventory.get_item_description(7, is_currency=True).display_name == "Gems"
    assert inventory.get_item_description(7) is None
    assert inventory.get_item_description(404) is None
    assert inventory.get_item_description_by_class_id(10).display_name == "Hat"
    assert inventory.get_item_description_by_class_id(99, is_currency=True).display_name == "Gems"
    assert inventory.get_item_description_by_class_id(12345) is None


def test_views_are_cached_once_requested():
    inventory = Inventory.from_json(page(items=[raw_item(1, 10)]), 440, 2)

    items = inventory.items
    inventory.rg_inventory["2"] = InventoryItem(2, 10)

    assert inventory.items is items
    assert len(inventory.items) == 1


def test_merge_page_concatenates_and_last_write_wins_in_maps():
    first = Inventory.from_json(page(items=[raw_item(1, 10), raw_item(2, 10)], more=True, more_start=2), 440, 2)
    second = Inventory.from_json(page(items=[raw_item(2, 20)]), 440, 2)

    first.merge_page(second)

    assert [item.id for item in first.items] == [1, 2, 2]
    assert first.rg_inventory["2"].class_id == 20
    assert not first.more
    assert first.more_start == 0


def test_more_start_only_meaningful_when_more():
    inventory = Inventory.from_json(json.dumps({"success": True, "more": False, "more_start": 500}), 440, 2)
    assert inventory.more_start == 0

    inventory = Inventory.from_json(json.dumps({"success": True, "more": True, "more_start": 500}), 440, 2)
    assert inventory.more_start == 500


@pytest.mark.parametrize("body", ["", "null", "<html>Too Many Requests</html>", '{"rgInventory": {"1": {"classid": "1"}}}'])
def test_malformed_bodies_raise_decode_error(body):
    with pytest.raises(InventoryDecodeError):
        Inventory.from_json(body, 440, 2)


def test_inventory_app_contexts():
    app = InventoryApp.from_dict(
        {"appid": 753, "name": "Steam", "rgContexts": {"6": {"asset_count": 3, "id": "6", "name": "Community"}}}
    )

    assert app.app_id == 753
    assert list(app.contexts) == [6]
    assert app.contexts[6].name == "Community"
    assert app.contexts[6].asset_count == 3


def test_well_known_ids():
    assert AppId.TF2 == 440
    assert AppId.CSGO == 730
    assert ContextId.SteamCommunity == 6
    assert AppContextPair(AppId.TF2, ContextId.TF2) == AppContextPair(440, 2)
