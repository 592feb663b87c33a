"""
Ingredient line parsing.

The menu generator writes every ingredient as "<name>（<amount>）", e.g.
"鶏もも肉（300g）". Lines without parentheses may still end in a bare amount
("卵 2個"). Anything else is kept whole as the name with an unspecified amount.

Parsing never raises: ingredient text comes straight from a generative model
and must not block list construction.
"""

import re

from ..models.shopping import ParsedIngredient
from .categorizer import categorize_ingredient

# Sentinel used when a line carries no parseable amount.
UNSPECIFIED_AMOUNT = "適量"

# Either the first (full-width or ASCII) parenthesised group, or a trailing
# "<digits><non-space>" run anchored at the end of the line.
_AMOUNT_PATTERN = re.compile(r"[（(]([^）)]+)[）)]|(\d+[^\s（）()]*)\s*$")

_NUMERIC_START = re.compile(r"[\d./]")
_UNIT_PATTERN = re.compile(r"[^\d\s./]+")


def extract_unit(amount: str) -> str:
    """
    Unit token of an amount: the first non-numeric run after a numeric start.

    "300g" → "g", "1/2個" → "個", "大さじ1" → "", "適量" → "".
    """
    if not amount or not _NUMERIC_START.match(amount):
        return ""
    match = _UNIT_PATTERN.search(amount)
    return match.group(0) if match else ""


def parse_ingredient(line: str) -> ParsedIngredient:
    """
    Split a raw ingredient line into name, amount, unit and category.

    Only the first parenthesised group is treated as the amount; any later
    parenthetical text stays in the name.
    """
    text = line or ""
    match = _AMOUNT_PATTERN.search(text)

    if match:
        amount = match.group(1) if match.group(1) is not None else match.group(2)
        name = (text[: match.start()] + text[match.end():]).strip()
    else:
        amount = ""
        name = text.strip()

    if not amount.strip():
        amount = UNSPECIFIED_AMOUNT

    return ParsedIngredient(
        name=name,
        amount=amount,
        unit=extract_unit(amount),
        category=categorize_ingredient(name),
    )
