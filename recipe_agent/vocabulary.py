"""
Quantity/unit vocabulary shared by the deterministic ingredient parser and the
AI prompts. Defined once, as data, so the two paths cannot drift apart:
quantity_parser reads these tables directly and prompts.py renders them into
the model instructions with render_vocabulary().

All tables are read-only.
"""
from types import MappingProxyType

from recipe_agent.models import UnitCode

# ---------------------------------------------------------------------------
# Hebrew
# ---------------------------------------------------------------------------

# Hebrew unit name -> unit code. Spellings with ASCII quotes and with
# gershayim/geresh (״ ׳) are both listed.
HEBREW_UNIT_MAP = MappingProxyType({
    # Cups
    "כוס": UnitCode.CUP,
    "כוסות": UnitCode.CUP,
    # Tablespoons
    "כף": UnitCode.TBSP,
    "כפות": UnitCode.TBSP,
    "כף גדושה": UnitCode.TBSP,
    # Teaspoons
    "כפית": UnitCode.TSP,
    "כפיות": UnitCode.TSP,
    # Milliliters / liters
    'מ"ל': UnitCode.ML,
    "מ״ל": UnitCode.ML,
    "מיליליטר": UnitCode.ML,
    "ליטר": UnitCode.L,
    "ליטרים": UnitCode.L,
    "ל'": UnitCode.L,
    "ל׳": UnitCode.L,
    # Weight
    "גרם": UnitCode.G,
    "ג'": UnitCode.G,
    "ג׳": UnitCode.G,
    'ג"ר': UnitCode.G,
    "ג״ר": UnitCode.G,
    "קילו": UnitCode.KG,
    'ק"ג': UnitCode.KG,
    "ק״ג": UnitCode.KG,
    "קילוגרם": UnitCode.KG,
    # Count
    "יחידה": UnitCode.PIECE,
    "יחידות": UnitCode.PIECE,
    "פרוסה": UnitCode.SLICE,
    "פרוסות": UnitCode.SLICE,
    "שן": UnitCode.CLOVE,
    "שיני": UnitCode.CLOVE,
    "שיניים": UnitCode.CLOVE,
    "צרור": UnitCode.BUNCH,
    "אגודה": UnitCode.BUNCH,
    "חבילה": UnitCode.PACKAGE,
    "חבילות": UnitCode.PACKAGE,
    "שקית": UnitCode.BAG,
    "שקיות": UnitCode.BAG,
    "פחית": UnitCode.CAN,
    "פחיות": UnitCode.CAN,
    "קופסה": UnitCode.CAN,
    "קופסת": UnitCode.CAN,
    "צנצנת": UnitCode.JAR,
    # Qualitative
    "קורט": UnitCode.PINCH,
    "קמצוץ": UnitCode.PINCH,
    "מעט": UnitCode.DASH,
    "לפי הטעם": UnitCode.TO_TASTE,
    "לטעימה": UnitCode.TO_TASTE,
    "כנדרש": UnitCode.AS_NEEDED,
    "לפי הצורך": UnitCode.AS_NEEDED,
})

# "and" prefix: "כוס וחצי" is one and a half cups
HEBREW_AND_PREFIX = "ו"

# Hebrew fraction word -> decimal
HEBREW_FRACTION_MAP = MappingProxyType({
    "חצי": 0.5,
    "רבע": 0.25,
    "שליש": 0.333,
    "שני שליש": 0.667,
    "שני שלישים": 0.667,
    "שלושת רבעי": 0.75,
    "שלושה רבעים": 0.75,
    "שמינית": 0.125,
})

# Hebrew number word -> decimal (absolute and construct forms)
HEBREW_NUMBER_MAP = MappingProxyType({
    "אחד": 1.0,
    "אחת": 1.0,
    "שניים": 2.0,
    "שתיים": 2.0,
    "שני": 2.0,
    "שתי": 2.0,
    "שלוש": 3.0,
    "שלושה": 3.0,
    "שלושת": 3.0,
    "ארבע": 4.0,
    "ארבעה": 4.0,
    "ארבעת": 4.0,
    "חמש": 5.0,
    "חמישה": 5.0,
    "חמשת": 5.0,
    "שש": 6.0,
    "שישה": 6.0,
    "שבע": 7.0,
    "שבעה": 7.0,
    "שמונה": 8.0,
    "תשע": 9.0,
    "תשעה": 9.0,
    "עשר": 10.0,
    "עשרה": 10.0,
})

# ---------------------------------------------------------------------------
# English
# ---------------------------------------------------------------------------

# English unit alias (lowercase) -> unit code. Plurals fold to the singular code.
ENGLISH_UNIT_MAP = MappingProxyType({
    "cup": UnitCode.CUP,
    "cups": UnitCode.CUP,
    "tablespoon": UnitCode.TBSP,
    "tablespoons": UnitCode.TBSP,
    "tbsp": UnitCode.TBSP,
    "tbsps": UnitCode.TBSP,
    "tbs": UnitCode.TBSP,
    "teaspoon": UnitCode.TSP,
    "teaspoons": UnitCode.TSP,
    "tsp": UnitCode.TSP,
    "tsps": UnitCode.TSP,
    "milliliter": UnitCode.ML,
    "milliliters": UnitCode.ML,
    "millilitre": UnitCode.ML,
    "millilitres": UnitCode.ML,
    "ml": UnitCode.ML,
    "liter": UnitCode.L,
    "liters": UnitCode.L,
    "litre": UnitCode.L,
    "litres": UnitCode.L,
    "l": UnitCode.L,
    "gram": UnitCode.G,
    "grams": UnitCode.G,
    "gr": UnitCode.G,
    "g": UnitCode.G,
    "kilogram": UnitCode.KG,
    "kilograms": UnitCode.KG,
    "kilo": UnitCode.KG,
    "kilos": UnitCode.KG,
    "kg": UnitCode.KG,
    "fluid ounce": UnitCode.OZ,
    "fluid ounces": UnitCode.OZ,
    "fl oz": UnitCode.OZ,
    "ounce": UnitCode.OZ,
    "ounces": UnitCode.OZ,
    "oz": UnitCode.OZ,
    "pound": UnitCode.LB,
    "pounds": UnitCode.LB,
    "lb": UnitCode.LB,
    "lbs": UnitCode.LB,
    "piece": UnitCode.PIECE,
    "pieces": UnitCode.PIECE,
    "slice": UnitCode.SLICE,
    "slices": UnitCode.SLICE,
    "clove": UnitCode.CLOVE,
    "cloves": UnitCode.CLOVE,
    "bunch": UnitCode.BUNCH,
    "bunches": UnitCode.BUNCH,
    "package": UnitCode.PACKAGE,
    "packages": UnitCode.PACKAGE,
    "packet": UnitCode.PACKAGE,
    "packets": UnitCode.PACKAGE,
    "can": UnitCode.CAN,
    "cans": UnitCode.CAN,
    "jar": UnitCode.JAR,
    "jars": UnitCode.JAR,
    "bag": UnitCode.BAG,
    "bags": UnitCode.BAG,
    "pinch": UnitCode.PINCH,
    "pinches": UnitCode.PINCH,
    "dash": UnitCode.DASH,
    "dashes": UnitCode.DASH,
    "to taste": UnitCode.TO_TASTE,
    "as needed": UnitCode.AS_NEEDED,
})

# Aliases too short to trust anywhere but directly after the quantity ("250g", "2 l")
POSITIONAL_UNIT_ALIASES = frozenset({"g", "l", "gr"})

ENGLISH_NUMBER_MAP = MappingProxyType({
    "one": 1.0,
    "two": 2.0,
    "three": 3.0,
    "four": 4.0,
    "five": 5.0,
    "six": 6.0,
    "seven": 7.0,
    "eight": 8.0,
    "nine": 9.0,
    "ten": 10.0,
    "eleven": 11.0,
    "twelve": 12.0,
})

# Unicode vulgar fraction -> decimal
UNICODE_FRACTION_MAP = MappingProxyType({
    "½": 0.5,
    "⅓": 0.333,
    "⅔": 0.667,
    "¼": 0.25,
    "¾": 0.75,
    "⅛": 0.125,
    "⅜": 0.375,
    "⅝": 0.625,
    "⅞": 0.875,
})

# Leading connector words stripped from the item name
CONNECTOR_WORDS = ("של", "of")


def number_words() -> dict[str, float]:
    """Hebrew and English number words in one lookup (lowercase keys)."""
    return {**HEBREW_NUMBER_MAP, **ENGLISH_NUMBER_MAP}


def _group_by_code(table) -> dict[UnitCode, list[str]]:
    grouped: dict[UnitCode, list[str]] = {}
    for word, code in table.items():
        grouped.setdefault(code, []).append(word)
    return grouped


def render_vocabulary() -> str:
    """Render the unit/fraction/number tables as prompt text (same data the parser uses)."""
    lines = ["Hebrew units -> unit code:"]
    for code, words in _group_by_code(HEBREW_UNIT_MAP).items():
        lines.append(f"   - {' / '.join(words)} -> {code.value}")
    lines.append("English units -> unit code (plurals fold to the same code):")
    for code, words in _group_by_code(ENGLISH_UNIT_MAP).items():
        lines.append(f"   - {' / '.join(words)} -> {code.value}")
    lines.append("Hebrew fraction words -> decimal quantity:")
    for word, value in HEBREW_FRACTION_MAP.items():
        lines.append(f"   - {word} = {value}")
    lines.append(f"   - {HEBREW_AND_PREFIX} + fraction word adds to the whole before it: כוס וחצי = 1.5, 2 כוסות ורבע = 2.25")
    lines.append("Fraction glyphs -> decimal quantity:")
    lines.append("   - " + ", ".join(f"{glyph} = {value}" for glyph, value in UNICODE_FRACTION_MAP.items()))
    lines.append("Number words -> decimal quantity:")
    lines.append("   - " + ", ".join(f"{word} = {value:g}" for word, value in HEBREW_NUMBER_MAP.items()))
    lines.append("   - " + ", ".join(f"{word} = {value:g}" for word, value in ENGLISH_NUMBER_MAP.items()))
    lines.append("Text fractions: 1/2 = 0.5, 1/4 = 0.25, 1 1/2 = 1.5 (always decimals, never fraction strings)")
    lines.append(f"Allowed unit codes: {', '.join(code.value for code in UnitCode)}")
    return "\n".join(lines)
