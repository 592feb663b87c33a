"""
Ingredient categorisation.

Responsibility: map a parsed ingredient name to exactly one IngredientCategory.

Resolution order (first hit wins):
1. Exact lookup in INGREDIENT_CATEGORIES.
2. Substring scan of INGREDIENT_CATEGORIES in table order — the name contains a
   key, or a key contains the name.
3. Broad token patterns (protein, seasoning, dairy, grain), in that order.
4. VEGETABLES.

The table order is the tie-break for step 2. Short keys such as "塩" or "酒"
will match longer names that merely contain them ("塩鮭" → SEASONINGS); that is
the accepted behaviour, not something to special-case here.
"""

import re

from ..models.shopping import IngredientCategory

# ---------------------------------------------------------------------------
# Static lookup table
#
# Kept as an ordered tuple rather than a dict literal so the substring scan
# order is explicit. Do not sort it.
# ---------------------------------------------------------------------------

INGREDIENT_CATEGORIES: tuple[tuple[str, IngredientCategory], ...] = (
    # 野菜
    ("玉ねぎ", IngredientCategory.VEGETABLES),
    ("にんじん", IngredientCategory.VEGETABLES),
    ("人参", IngredientCategory.VEGETABLES),
    ("じゃがいも", IngredientCategory.VEGETABLES),
    ("キャベツ", IngredientCategory.VEGETABLES),
    ("もやし", IngredientCategory.VEGETABLES),
    ("ピーマン", IngredientCategory.VEGETABLES),
    ("ねぎ", IngredientCategory.VEGETABLES),
    ("ほうれん草", IngredientCategory.VEGETABLES),
    ("大根", IngredientCategory.VEGETABLES),
    ("きのこ", IngredientCategory.VEGETABLES),
    ("しいたけ", IngredientCategory.VEGETABLES),
    ("えのき", IngredientCategory.VEGETABLES),
    ("わかめ", IngredientCategory.VEGETABLES),
    # 肉・魚・卵
    ("鶏肉", IngredientCategory.MEAT_FISH),
    ("鶏もも肉", IngredientCategory.MEAT_FISH),
    ("豚肉", IngredientCategory.MEAT_FISH),
    ("牛肉", IngredientCategory.MEAT_FISH),
    ("卵", IngredientCategory.MEAT_FISH),
    ("たまご", IngredientCategory.MEAT_FISH),
    ("豆腐", IngredientCategory.MEAT_FISH),
    ("絹ごし豆腐", IngredientCategory.MEAT_FISH),
    # 調味料
    ("しょうゆ", IngredientCategory.SEASONINGS),
    ("醤油", IngredientCategory.SEASONINGS),
    ("みりん", IngredientCategory.SEASONINGS),
    ("砂糖", IngredientCategory.SEASONINGS),
    ("塩", IngredientCategory.SEASONINGS),
    ("こしょう", IngredientCategory.SEASONINGS),
    ("サラダ油", IngredientCategory.SEASONINGS),
    ("ごま油", IngredientCategory.SEASONINGS),
    ("にんにく", IngredientCategory.SEASONINGS),
    ("生姜", IngredientCategory.SEASONINGS),
    ("味噌", IngredientCategory.SEASONINGS),
    ("酢", IngredientCategory.SEASONINGS),
    ("酒", IngredientCategory.SEASONINGS),
    ("オイスターソース", IngredientCategory.SEASONINGS),
    ("かつお節", IngredientCategory.SEASONINGS),
    ("だし汁", IngredientCategory.SEASONINGS),
    ("鶏ガラスープの素", IngredientCategory.SEASONINGS),
    # 乳製品
    ("牛乳", IngredientCategory.DAIRY),
    ("チーズ", IngredientCategory.DAIRY),
    ("バター", IngredientCategory.DAIRY),
    # 穀物
    ("米", IngredientCategory.GRAINS),
    ("パン", IngredientCategory.GRAINS),
    ("うどん", IngredientCategory.GRAINS),
    ("そば", IngredientCategory.GRAINS),
    ("パスタ", IngredientCategory.GRAINS),
)

_EXACT_LOOKUP: dict[str, IngredientCategory] = dict(INGREDIENT_CATEGORIES)

# Fallback patterns, checked in this order.
_FALLBACK_PATTERNS: tuple[tuple[re.Pattern, IngredientCategory], ...] = (
    (re.compile(r"(肉|鶏|豚|牛|魚|卵|豆腐)"), IngredientCategory.MEAT_FISH),
    (re.compile(r"(しょうゆ|醤油|みりん|味噌|塩|油|酢|だし|ソース|スープ)"), IngredientCategory.SEASONINGS),
    (re.compile(r"(牛乳|チーズ|バター|ヨーグルト)"), IngredientCategory.DAIRY),
    (re.compile(r"(米|パン|麺|うどん|そば)"), IngredientCategory.GRAINS),
)

DEFAULT_CATEGORY = IngredientCategory.VEGETABLES

# ---------------------------------------------------------------------------
# Display metadata
#
# Priority drives item sort order in a built list. SEASONINGS sorts after
# GRAINS on purpose; the text export uses enum order instead.
# ---------------------------------------------------------------------------

CATEGORY_PRIORITY: dict[IngredientCategory, int] = {
    IngredientCategory.VEGETABLES: 1,
    IngredientCategory.MEAT_FISH: 2,
    IngredientCategory.DAIRY: 3,
    IngredientCategory.GRAINS: 4,
    IngredientCategory.SEASONINGS: 5,
    IngredientCategory.OTHERS: 6,
}

CATEGORY_ICONS: dict[IngredientCategory, str] = {
    IngredientCategory.VEGETABLES: "🥬",
    IngredientCategory.MEAT_FISH: "🍖",
    IngredientCategory.SEASONINGS: "🧂",
    IngredientCategory.DAIRY: "🥛",
    IngredientCategory.GRAINS: "🌾",
    IngredientCategory.OTHERS: "📦",
}


def categorize_ingredient(name: str) -> IngredientCategory:
    """
    Return the category for a parsed ingredient name. Never raises.

    Examples:
        "鶏もも肉" → MEAT_FISH (exact)
        "合いびき肉" → MEAT_FISH (pattern)
        "謎の食材" → VEGETABLES (default)
    """
    exact = _EXACT_LOOKUP.get(name)
    if exact is not None:
        return exact

    for key, category in INGREDIENT_CATEGORIES:
        if key in name or name in key:
            return category

    for pattern, category in _FALLBACK_PATTERNS:
        if pattern.search(name):
            return category

    return DEFAULT_CATEGORY


def get_category_priority(category: IngredientCategory) -> int:
    return CATEGORY_PRIORITY.get(category, CATEGORY_PRIORITY[IngredientCategory.OTHERS])


def get_category_icon(category: IngredientCategory) -> str:
    return CATEGORY_ICONS.get(category, CATEGORY_ICONS[IngredientCategory.OTHERS])
