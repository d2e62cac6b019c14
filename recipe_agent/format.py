"""
Display helpers for recipes: quantities as fraction glyphs, bilingual unit and
method labels, human-readable times. Used by the CLI summary output.
"""
from typing import Optional

from recipe_agent.models import Difficulty, ExtractionMethod, Ingredient, Kashrut, Language, Recipe, UnitCode

# Unit code -> (English, Hebrew) display label
UNIT_LABELS: dict[UnitCode, tuple[str, str]] = {
    UnitCode.CUP: ("cup", "כוס"),
    UnitCode.TBSP: ("tbsp", "כף"),
    UnitCode.TSP: ("tsp", "כפית"),
    UnitCode.G: ("g", "גרם"),
    UnitCode.KG: ("kg", 'ק"ג'),
    UnitCode.ML: ("ml", 'מ"ל'),
    UnitCode.L: ("l", "ליטר"),
    UnitCode.OZ: ("oz", "אונקיה"),
    UnitCode.LB: ("lb", "ליברה"),
    UnitCode.PIECE: ("pc", "יח'"),
    UnitCode.SLICE: ("slice", "פרוסה"),
    UnitCode.CLOVE: ("clove", "שן"),
    UnitCode.BUNCH: ("bunch", "צרור"),
    UnitCode.PACKAGE: ("pkg", "חבילה"),
    UnitCode.BAG: ("bag", "שקית"),
    UnitCode.CAN: ("can", "פחית"),
    UnitCode.JAR: ("jar", "צנצנת"),
    UnitCode.PINCH: ("pinch", "קורט"),
    UnitCode.DASH: ("dash", "מעט"),
    UnitCode.TO_TASTE: ("to taste", "לפי הטעם"),
    UnitCode.AS_NEEDED: ("as needed", "לפי הצורך"),
}

METHOD_LABELS: dict[ExtractionMethod, tuple[str, str]] = {
    ExtractionMethod.STRUCTURED: ("Schema.org", "סכמה"),
    ExtractionMethod.AI: ("AI Extracted", "חילוץ AI"),
    ExtractionMethod.HYBRID: ("Hybrid", "משולב"),
    ExtractionMethod.IMAGE: ("From Image", "מתמונה"),
}

DIFFICULTY_LABELS: dict[Difficulty, tuple[str, str]] = {
    Difficulty.EASY: ("Easy", "קל"),
    Difficulty.MEDIUM: ("Medium", "בינוני"),
    Difficulty.HARD: ("Hard", "מאתגר"),
    Difficulty.UNKNOWN: ("Unknown", "לא ידוע"),
}

KASHRUT_LABELS: dict[Kashrut, tuple[str, str]] = {
    Kashrut.PARVE: ("Parve", "פרווה"),
    Kashrut.DAIRY: ("Dairy", "חלבי"),
    Kashrut.MEAT: ("Meat", "בשרי"),
    Kashrut.NOT_KOSHER: ("Not Kosher", "לא כשר"),
}

# Decimal -> glyph, matched with a small tolerance (0.333 and 0.33 both read as ⅓)
_FRACTION_GLYPHS = ((0.25, "¼"), (1 / 3, "⅓"), (0.5, "½"), (2 / 3, "⅔"), (0.75, "¾"))
_TOLERANCE = 0.01


def _glyph(frac: float) -> Optional[str]:
    for value, glyph in _FRACTION_GLYPHS:
        if abs(frac - value) < _TOLERANCE:
            return glyph
    return None


def _label(table, key, hebrew: bool) -> str:
    labels = table.get(key)
    if labels is None:
        return key.value if hasattr(key, "value") else str(key)
    return labels[1] if hebrew else labels[0]


def format_quantity(quantity: Optional[float]) -> str:
    """Format a quantity for display: 0.5 -> "½", 1.5 -> "1½", 2.0 -> "2", 1.2 -> "1.2"."""
    if quantity is None:
        return ""
    whole = int(quantity)
    frac = quantity - whole
    glyph = _glyph(frac)
    if glyph is not None:
        return f"{whole}{glyph}" if whole else glyph
    if abs(frac) < 1e-9:
        return str(whole)
    return f"{quantity:.1f}".removesuffix(".0")


def format_unit(unit: Optional[UnitCode], hebrew: bool = False) -> str:
    """Unit label in the recipe's language; empty for no unit."""
    if unit is None or unit == UnitCode.UNKNOWN:
        return ""
    return _label(UNIT_LABELS, unit, hebrew)


def format_time(minutes: Optional[int]) -> str:
    """45 -> "45 min", 90 -> "1h 30m", 120 -> "2h"; "—" when unknown."""
    if not minutes:
        return "—"
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if mins else f"{hours}h"


def format_ingredient(ingredient: Ingredient, hebrew: bool = False) -> str:
    """One display line: quantity, unit, item, then comments in parentheses."""
    parts = [format_quantity(ingredient.quantity), format_unit(ingredient.unit, hebrew), ingredient.item]
    line = " ".join(p for p in parts if p)
    if ingredient.comments:
        line += f" ({ingredient.comments})"
    return line


def method_label(method: ExtractionMethod, hebrew: bool = False) -> str:
    return _label(METHOD_LABELS, method, hebrew)


def difficulty_label(difficulty: Difficulty, hebrew: bool = False) -> str:
    return _label(DIFFICULTY_LABELS, difficulty, hebrew)


def kashrut_label(kashrut: Optional[Kashrut], hebrew: bool = False) -> str:
    """Kashrut label, empty when unknown or not determined."""
    if kashrut is None or kashrut == Kashrut.UNKNOWN:
        return ""
    return _label(KASHRUT_LABELS, kashrut, hebrew)


def format_summary(recipe: Recipe) -> str:
    """Plain-text recipe summary for terminal output."""
    hebrew = recipe.language == Language.HE
    lines = [recipe.title]
    if recipe.description:
        lines.append(recipe.description)
    lines.append("")
    meta = recipe.meta
    facts = [
        f"Prep: {format_time(meta.prep_time)}",
        f"Cook: {format_time(meta.cook_time)}",
        f"Total: {format_time(meta.total_time)}",
    ]
    if meta.servings:
        facts.append(f"Servings: {meta.servings}")
    if meta.difficulty != Difficulty.UNKNOWN:
        facts.append(f"Difficulty: {difficulty_label(meta.difficulty, hebrew)}")
    kashrut = kashrut_label(recipe.kashrut, hebrew)
    if kashrut:
        facts.append(f"Kashrut: {kashrut}")
    lines.append(" | ".join(facts))
    lines.append("")
    lines.append("Ingredients:")
    lines.extend(f"  - {format_ingredient(i, hebrew)}" for i in recipe.ingredients)
    lines.append("")
    lines.append("Steps:")
    lines.extend(f"  {n}. {step}" for n, step in enumerate(recipe.steps, start=1))
    if recipe.tips:
        lines.append("")
        lines.append("Tips:")
        lines.extend(f"  * {tip}" for tip in recipe.tips)
    lines.append("")
    lines.append(
        f"[{method_label(recipe.extraction_method, hebrew)}, confidence {recipe.confidence:.2f}] {recipe.source_url}"
    )
    return "\n".join(lines)
