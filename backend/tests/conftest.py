"""
Shared fixtures for all test modules.
"""

import pytest

from app.models.menu import Dish, Menu
from app.services.session_manager import SessionData


# ---------------------------------------------------------------------------
# Menu fixtures
# ---------------------------------------------------------------------------


def make_dish(name: str, ingredients: list[str]) -> Dish:
    return Dish(name=name, ingredients=ingredients, instructions=["作る"])


@pytest.fixture
def scenario_menu() -> Menu:
    """Chicken main, onion/carrot side, wakame soup — onion appears twice."""
    return Menu(
        main_dish=make_dish("鶏の照り焼き", ["鶏もも肉（300g）", "玉ねぎ（1個）"]),
        side_dish=make_dish("にんじんしりしり", ["玉ねぎ（1/2個）", "にんじん（1本）"]),
        soup=make_dish("わかめスープ", ["わかめ（少々）"]),
    )


@pytest.fixture
def mixed_menu() -> Menu:
    """A menu touching every category the categoriser can return."""
    return Menu(
        main_dish=make_dish(
            "豚の生姜焼き",
            ["豚肉（200g）", "生姜（1かけ）", "醤油（大さじ2）", "キャベツ（1/4個）"],
        ),
        side_dish=make_dish("チーズ焼き", ["チーズ（30g）", "じゃがいも（2個）", "塩（少々）"]),
        soup=make_dish("味噌汁", ["豆腐（1/2丁）", "味噌（大さじ1）", "ねぎ（1本）", "うどん（1玉）"]),
    )


# ---------------------------------------------------------------------------
# Session fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fresh_session() -> SessionData:
    """A brand-new session with no menu yet."""
    return SessionData("test-session")
