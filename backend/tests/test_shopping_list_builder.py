"""
Tests for shopping_list_builder.py and owned_filter.py.

Covers the full menu → ShoppingList pipeline, owned-ingredient exclusion and
the toggle counters. No I/O, no mocking needed.
"""

import pytest

from app.models.menu import Dish, DishRole, Menu
from app.models.shopping import IngredientCategory
from app.services.consolidator import consolidate_ingredients
from app.services.ingredient_parser import parse_ingredient
from app.services.owned_filter import filter_owned, is_owned
from app.services import shopping_list_builder as builder
from app.services.shopping_list_builder import (
    ShoppingListBuildError,
    build_shopping_list,
    extract_ingredients_from_menu,
    list_menu_ingredient_names,
    toggle_item,
)


def _by_name(shopping_list):
    return {item.ingredient: item for item in shopping_list.items}


# ---------------------------------------------------------------------------
# End-to-end
# ---------------------------------------------------------------------------


class TestBuildShoppingList:
    def test_scenario(self, scenario_menu):
        sl = build_shopping_list(scenario_menu, ["にんじん"])
        items = _by_name(sl)

        assert "にんじん" not in items
        assert set(items) == {"鶏もも肉", "玉ねぎ", "わかめ"}

        chicken = items["鶏もも肉"]
        assert chicken.category == IngredientCategory.MEAT_FISH
        assert chicken.amount == "300g"

        onion = items["玉ねぎ"]
        assert onion.category == IngredientCategory.VEGETABLES
        assert onion.amount == "1.5個"
        assert onion.from_dishes == ["主菜", "副菜"]
        assert onion.original_amounts == ["1個", "1/2個"]

        wakame = items["わかめ"]
        assert wakame.category == IngredientCategory.VEGETABLES
        assert wakame.amount == "少々"

        assert sl.total_items == 3
        assert sl.checked_items == 0

    def test_items_sorted_by_priority(self, scenario_menu):
        sl = build_shopping_list(scenario_menu, [])
        priorities = [item.priority for item in sl.items]
        assert priorities == sorted(priorities)
        # vegetables in first-seen order, then meat
        assert [i.ingredient for i in sl.items] == ["玉ねぎ", "にんじん", "わかめ", "鶏もも肉"]

    def test_no_owned_ingredients(self, scenario_menu):
        sl = build_shopping_list(scenario_menu)
        assert sl.total_items == 4
        assert sl.user_ingredients == []

    def test_everything_owned(self, scenario_menu):
        sl = build_shopping_list(scenario_menu, ["鶏もも肉", "玉ねぎ", "にんじん", "わかめ"])
        assert sl.items == []
        assert sl.total_items == 0

    def test_snapshot_is_a_copy(self, scenario_menu):
        owned = ["にんじん"]
        sl = build_shopping_list(scenario_menu, owned)

        scenario_menu.main_dish.ingredients.append("豚肉（100g）")
        owned.append("玉ねぎ")

        assert "豚肉（100g）" not in sl.menu_snapshot.main_dish.ingredients
        assert sl.user_ingredients == ["にんじん"]
        assert sl.menu_snapshot is not scenario_menu

    def test_each_build_gets_a_new_id(self, scenario_menu):
        first = build_shopping_list(scenario_menu)
        second = build_shopping_list(scenario_menu)
        assert first.id != second.id

    def test_item_ids_unique(self, mixed_menu):
        sl = build_shopping_list(mixed_menu)
        assert len({i.id for i in sl.items}) == sl.total_items

    def test_menu_validated_once(self, scenario_menu, monkeypatch):
        calls = []
        original = builder._coerce_menu

        def counting(menu):
            calls.append(menu)
            return original(menu)

        monkeypatch.setattr(builder, "_coerce_menu", counting)
        build_shopping_list(scenario_menu.model_dump(), [])
        assert len(calls) == 1

    def test_accepts_dict_menu(self, scenario_menu):
        sl = build_shopping_list(scenario_menu.model_dump())
        assert sl.total_items == 4

    def test_empty_dishes(self):
        empty = Dish(name="空", ingredients=[], instructions=[])
        sl = build_shopping_list(Menu(main_dish=empty, side_dish=empty, soup=empty))
        assert sl.items == []
        assert sl.total_items == 0


class TestIncompleteMenu:
    def test_none(self):
        with pytest.raises(ShoppingListBuildError):
            build_shopping_list(None, [])

    def test_missing_dish(self, scenario_menu):
        data = scenario_menu.model_dump()
        del data["soup"]
        with pytest.raises(ShoppingListBuildError):
            build_shopping_list(data, [])

    def test_missing_ingredients(self, scenario_menu):
        data = scenario_menu.model_dump()
        del data["side_dish"]["ingredients"]
        with pytest.raises(ShoppingListBuildError):
            build_shopping_list(data, [])

    def test_unvalidated_menu(self, scenario_menu):
        menu = Menu.model_construct(main_dish=scenario_menu.main_dish, side_dish=scenario_menu.side_dish)
        with pytest.raises(ShoppingListBuildError):
            build_shopping_list(menu, [])

    def test_is_a_value_error(self):
        assert issubclass(ShoppingListBuildError, ValueError)


# ---------------------------------------------------------------------------
# Menu extraction helpers
# ---------------------------------------------------------------------------


class TestMenuExtraction:
    def test_role_order(self, scenario_menu):
        pairs = extract_ingredients_from_menu(scenario_menu)
        assert [role for _, role in pairs] == ["主菜", "主菜", "副菜", "副菜", "汁物"]
        assert pairs[0][0] == "鶏もも肉（300g）"

    def test_ingredient_names_are_distinct(self, scenario_menu):
        assert list_menu_ingredient_names(scenario_menu) == ["鶏もも肉", "玉ねぎ", "にんじん", "わかめ"]


# ---------------------------------------------------------------------------
# Owned filter
# ---------------------------------------------------------------------------


def _items(*lines):
    return consolidate_ingredients([(parse_ingredient(line), DishRole.MAIN) for line in lines])


class TestOwnedFilter:
    def test_exact_match_removed(self):
        result = filter_owned(_items("玉ねぎ（1個）", "にんじん（1本）"), ["玉ねぎ"])
        assert [i.ingredient for i in result] == ["にんじん"]

    def test_owned_contains_ingredient(self):
        # "新玉ねぎ" contains "玉ねぎ"
        assert is_owned("玉ねぎ", ["新玉ねぎ"]) is True

    def test_ingredient_contains_owned(self):
        assert is_owned("鶏もも肉", ["鶏もも"]) is True

    def test_case_sensitive(self):
        assert is_owned("Butter", ["butter"]) is False

    def test_blank_owned_entries_ignored(self):
        items = _items("玉ねぎ（1個）")
        assert filter_owned(items, ["", "   "]) == items

    def test_whitespace_entry_does_not_match_spaced_names(self):
        items = _items("5種のきのこ ミックス")
        assert filter_owned(items, [" ", "\t"]) == items

    def test_order_preserved(self):
        items = _items("キャベツ（1個）", "もやし（1袋）", "大根（1本）", "ピーマン（2個）")
        result = filter_owned(items, ["もやし"])
        assert [i.ingredient for i in result] == ["キャベツ", "大根", "ピーマン"]

    def test_idempotent(self, mixed_menu):
        owned = ["豚肉", "塩"]
        once = filter_owned(build_shopping_list(mixed_menu).items, owned)
        twice = filter_owned(once, owned)
        assert twice == once


# ---------------------------------------------------------------------------
# toggle_item
# ---------------------------------------------------------------------------


class TestToggleItem:
    def test_toggle_checks_one_item(self, scenario_menu):
        sl = build_shopping_list(scenario_menu)
        target = sl.items[1]
        updated = toggle_item(sl, target.id)

        assert updated.find_item(target.id).checked is True
        assert updated.checked_items == 1
        assert updated.total_items == sl.total_items
        assert [i.checked for i in updated.items].count(True) == 1

    def test_original_list_untouched(self, scenario_menu):
        sl = build_shopping_list(scenario_menu)
        toggle_item(sl, sl.items[0].id)
        assert sl.checked_items == 0
        assert sl.items[0].checked is False

    def test_toggle_twice_unchecks(self, scenario_menu):
        sl = build_shopping_list(scenario_menu)
        item_id = sl.items[0].id
        updated = toggle_item(toggle_item(sl, item_id), item_id)
        assert updated.find_item(item_id).checked is False
        assert updated.checked_items == 0

    def test_unknown_id_is_a_no_op(self, scenario_menu):
        sl = build_shopping_list(scenario_menu)
        assert toggle_item(sl, "does-not-exist") is sl

    def test_counters_consistent_after_every_toggle(self, mixed_menu):
        sl = build_shopping_list(mixed_menu)
        for item in list(sl.items):
            sl = toggle_item(sl, item.id)
            assert sl.checked_items == sum(1 for i in sl.items if i.checked)
            assert sl.total_items == len(sl.items)
        assert sl.checked_items == sl.total_items
