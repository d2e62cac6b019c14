import pytest

from recipe_agent.models import UnitCode
from recipe_agent.quantity_parser import parse_ingredient_line, parse_quantity, parse_unit
from recipe_agent.vocabulary import HEBREW_FRACTION_MAP


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2", 2.0),
        ("1.5", 1.5),
        ("1/2", 0.5),
        ("2/3", 0.667),
        ("1 1/2", 1.5),
        ("½", 0.5),
        ("1½", 1.5),
        ("1 ½", 1.5),
        ("⅓", 0.333),
        ("שתיים", 2.0),
        ("three", 3.0),
        ("חצי", 0.5),
        ("", None),
        (None, None),
        ("to taste", None),
        ("1/0", None),
        ("nan", None),
    ],
)
def test_parse_quantity(text, expected):
    assert parse_quantity(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("כוסות", UnitCode.CUP),
        ("tbsp", UnitCode.TBSP),
        ('מ"ל', UnitCode.ML),
        ("ק״ג", UnitCode.KG),
        ("fl oz", UnitCode.OZ),
        ("Cups", UnitCode.CUP),
        ("stuff", None),
    ],
)
def test_parse_unit(text, expected):
    assert parse_unit(text) == expected


@pytest.mark.parametrize(
    "line, item, quantity, unit, comments",
    [
        ("2 כוסות קמח", "קמח", 2, UnitCode.CUP, None),
        ("חצי כוס סוכר", "סוכר", 0.5, UnitCode.CUP, None),
        ("pinch of salt", "salt", None, UnitCode.PINCH, None),
        ("קורט מלח", "מלח", None, UnitCode.PINCH, None),
        ("מלח לפי הטעם", "מלח", None, UnitCode.TO_TASTE, None),
        ("3 ביצים", "ביצים", 3, None, None),
        ("2 שיני שום", "שום", 2, UnitCode.CLOVE, None),
        ("100 ג' חמאה (רכה)", "חמאה", 100, UnitCode.G, "רכה"),
        ("2 כפות סוכר (גדושות)", "סוכר", 2, UnitCode.TBSP, "גדושות"),
        ("250g flour", "flour", 250, UnitCode.G, None),
        ("1 ½ cups milk", "milk", 1.5, UnitCode.CUP, None),
        ("1½ כוסות מים", "מים", 1.5, UnitCode.CUP, None),
        ("2 1/2 tbsp sugar", "sugar", 2.5, UnitCode.TBSP, None),
        ("שני שליש כוס חלב", "חלב", 0.667, UnitCode.CUP, None),
        ("שלושת רבעי כוס שמן", "שמן", 0.75, UnitCode.CUP, None),
        ("two eggs", "eggs", 2, None, None),
        ("2 tablespoons olive oil", "olive oil", 2, UnitCode.TBSP, None),
        ("salt to taste", "salt", None, UnitCode.TO_TASTE, None),
    ],
)
def test_parse_ingredient_line(line, item, quantity, unit, comments):
    ing = parse_ingredient_line(line)
    assert ing.original == line
    assert ing.item == item
    assert ing.quantity == quantity
    assert ing.unit == unit
    assert ing.comments == comments


def test_comma_clause_stays_in_item():
    """Only parenthesized text becomes a comment; "softened" stays with the item."""
    ing = parse_ingredient_line("1/2 cup butter, softened")
    assert ing.quantity == 0.5
    assert ing.unit == UnitCode.CUP
    assert ing.item == "butter, softened"
    assert ing.comments is None


def test_fraction_word_inside_longer_word_is_not_a_quantity():
    # חצילים (eggplants) starts with חצי (half)
    ing = parse_ingredient_line("חצילים קלויים")
    assert ing.quantity is None
    assert ing.item == "חצילים קלויים"


def test_unresolvable_numeral_run_keeps_first_number():
    ing = parse_ingredient_line("2 3-inch cinnamon sticks")
    assert ing.quantity == 2
    assert ing.item == "3-inch cinnamon sticks"


def test_single_letter_unit_only_after_quantity():
    ing = parse_ingredient_line("1 bay leaf l")
    assert ing.unit is None
    assert ing.item == "bay leaf l"


def test_unparsed_line_keeps_original_as_item():
    ing = parse_ingredient_line("   ")
    assert ing.item == ""
    ing = parse_ingredient_line("of")
    assert ing.item == "of"


@pytest.mark.parametrize(
    "line, item, quantity, unit",
    [
        ("כוס וחצי סוכר", "סוכר", 1.5, UnitCode.CUP),
        ("1 וחצי כוסות סוכר", "סוכר", 1.5, UnitCode.CUP),
        ("2 כוסות וחצי קמח", "קמח", 2.5, UnitCode.CUP),
        ("שתי כוסות ורבע חלב", "חלב", 2.25, UnitCode.CUP),
        ("3 כפות ושליש שמן", "שמן", 3.333, UnitCode.TBSP),
    ],
)
def test_and_fraction_adds_to_whole(line, item, quantity, unit):
    ing = parse_ingredient_line(line)
    assert ing.quantity == quantity
    assert ing.unit == unit
    assert ing.item == item


def test_word_starting_with_vav_is_not_a_fraction():
    ing = parse_ingredient_line("2 כוסות ורדים")
    assert ing.quantity == 2
    assert ing.item == "ורדים"


def test_original_keeps_inner_whitespace():
    ing = parse_ingredient_line("  2  כוסות   קמח \n")
    assert ing.original == "2  כוסות   קמח"
    assert ing.quantity == 2
    assert ing.unit == UnitCode.CUP
    assert ing.item == "קמח"


@pytest.mark.parametrize("word, value", list(HEBREW_FRACTION_MAP.items()))
def test_every_hebrew_fraction_word(word, value):
    ing = parse_ingredient_line(f"{word} כוס קמח")
    assert ing.quantity == value
    assert ing.unit == UnitCode.CUP
    assert ing.item == "קמח"


@pytest.mark.parametrize(
    "line",
    [
        "2 כוסות קמח",
        "1/2 cup butter, softened",
        "pinch of salt",
        "2 tablespoons olive oil",
        "100 ג' חמאה (רכה)",
    ],
)
def test_item_is_stable_when_reparsed(line):
    item = parse_ingredient_line(line).item
    assert parse_ingredient_line(item).item == item
    assert parse_ingredient_line(f"2 cups {item}").item == item
    assert parse_ingredient_line(f"2 כוסות {item}").item == item
