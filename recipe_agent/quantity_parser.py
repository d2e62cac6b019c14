"""
Deterministic parsing of Hebrew and English ingredient lines.

parse_ingredient_line("2 כוסות קמח")  -> item="קמח", quantity=2.0, unit=cup
parse_ingredient_line("חצי כוס סוכר") -> item="סוכר", quantity=0.5, unit=cup
parse_ingredient_line("pinch of salt") -> item="salt", quantity=None, unit=pinch

Pure functions, no I/O. Vocabulary comes from recipe_agent.vocabulary.
"""
import re
from fractions import Fraction
from typing import Optional

from recipe_agent.models import Ingredient, UnitCode
from recipe_agent.vocabulary import (
    CONNECTOR_WORDS,
    ENGLISH_UNIT_MAP,
    HEBREW_AND_PREFIX,
    HEBREW_FRACTION_MAP,
    HEBREW_UNIT_MAP,
    POSITIONAL_UNIT_ALIASES,
    UNICODE_FRACTION_MAP,
    number_words,
)

_GLYPHS = "".join(UNICODE_FRACTION_MAP)
_NUMBER_WORDS = number_words()

_COMMENT_RE = re.compile(r"\(([^)]*)\)")
_NUMERAL_RUN_RE = re.compile(rf"^([\d\s/.{_GLYPHS}]+)")
_DECIMAL_RE = re.compile(r"\d+(?:\.\d+)?|\.\d+")
_SLASH_FRACTION_RE = re.compile(r"(\d+)\s*/\s*(\d+)")
_MIXED_NUMBER_RE = re.compile(r"(\d+)\s+(\d+)\s*/\s*(\d+)")
_GLYPH_NUMBER_RE = re.compile(rf"(\d+)?\s*([{_GLYPHS}])")
_CONNECTOR_RE = re.compile(rf"^(?:{'|'.join(CONNECTOR_WORDS)})\s+", re.IGNORECASE)
_LEADING_DASH_RE = re.compile(r"^\s*[-–—]\s*")


def _word_pattern(word: str, anchored: bool = False, conjunction: bool = False) -> re.Pattern:
    """Match word as a whole token: not glued to letters on either side.

    With conjunction=True the word may carry a leading "ו" ("and"), captured as group 1.
    """
    prefix = "^" if anchored else r"(?<!\w)"
    if conjunction:
        prefix += f"({HEBREW_AND_PREFIX})?"
    return re.compile(rf"{prefix}{re.escape(word)}(?!\w)", re.IGNORECASE)


def _build_patterns(table, positional=frozenset(), conjunction=False) -> list[tuple[re.Pattern, object]]:
    # Longest words first so multi-word entries win ties ("כף גדושה" over "כף")
    words = sorted(table, key=len, reverse=True)
    return [(_word_pattern(w, anchored=w in positional, conjunction=conjunction), table[w]) for w in words]


_FRACTION_PATTERNS = _build_patterns(HEBREW_FRACTION_MAP, conjunction=True)
_HEBREW_UNIT_PATTERNS = _build_patterns(HEBREW_UNIT_MAP)
_ENGLISH_UNIT_PATTERNS = _build_patterns(ENGLISH_UNIT_MAP, POSITIONAL_UNIT_ALIASES)


def _collapse(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def _round(value: float) -> float:
    return round(value, 3)


def _earliest_match(patterns, text: str) -> Optional[tuple[re.Match, object]]:
    """Earliest match in text; on equal start the longer match wins."""
    best = None
    for pattern, value in patterns:
        m = pattern.search(text)
        if m is None:
            continue
        if best is None or m.start() < best[0].start() or (
            m.start() == best[0].start() and m.end() > best[0].end()
        ):
            best = (m, value)
    return best


def _remove_span(text: str, match: re.Match) -> str:
    return _collapse(text[: match.start()] + " " + text[match.end():])


def parse_quantity(value: Optional[str]) -> Optional[float]:
    """
    Parse a quantity string to a decimal. Returns None when nothing numeric is found.

    Handles: "2", "1.5", "שתיים", "two", "1/2", "1 1/2", "½", "1½", "1 ½".
    """
    if value is None or not value.strip():
        return None
    s = _collapse(value).lower()
    # Plain decimal: "2", "1.5"
    if _DECIMAL_RE.fullmatch(s):
        return _round(float(s))
    # Number word: "שלוש", "three"
    if s in _NUMBER_WORDS:
        return _NUMBER_WORDS[s]
    if s in HEBREW_FRACTION_MAP:
        return HEBREW_FRACTION_MAP[s]
    # Simple fraction: "1/2"
    m = _SLASH_FRACTION_RE.fullmatch(s)
    if m:
        try:
            return _round(float(Fraction(int(m.group(1)), int(m.group(2)))))
        except ZeroDivisionError:
            return None
    # Mixed number: "1 1/2"
    m = _MIXED_NUMBER_RE.fullmatch(s)
    if m:
        try:
            frac = Fraction(int(m.group(2)), int(m.group(3)))
        except ZeroDivisionError:
            return None
        return _round(int(m.group(1)) + float(frac))
    # Fraction glyph, alone or after a whole number: "½", "1½", "1 ½"
    m = _GLYPH_NUMBER_RE.fullmatch(s)
    if m:
        whole = int(m.group(1)) if m.group(1) else 0
        return _round(whole + UNICODE_FRACTION_MAP[m.group(2)])
    return None


def parse_unit(text: str) -> Optional[UnitCode]:
    """Return the first unit code found in text (Hebrew table first, then English)."""
    found = _earliest_match(_HEBREW_UNIT_PATTERNS, text) or _earliest_match(_ENGLISH_UNIT_PATTERNS, text)
    return found[1] if found else None


def _take_leading_quantity(text: str) -> tuple[Optional[float], str]:
    """Consume a leading numeral run (or number word); return (quantity, remaining text)."""
    m = _NUMERAL_RUN_RE.match(text)
    if m and m.group(1).strip():
        run = m.group(1)
        value = parse_quantity(run)
        if value is not None:
            return value, text[m.end():].strip()
        # "2 3-inch sticks": the whole run is not one number, take the first token only
        first = run.split()[0]
        value = parse_quantity(first)
        if value is not None:
            return value, text[len(first):].strip()
        return None, text
    first, _, rest = text.partition(" ")
    value = _NUMBER_WORDS.get(first.lower())
    if value is not None:
        return value, rest.strip()
    return None, text


def _take_unit(text: str) -> tuple[Optional[UnitCode], str]:
    found = _earliest_match(_HEBREW_UNIT_PATTERNS, text)
    if found is None:
        found = _earliest_match(_ENGLISH_UNIT_PATTERNS, text)
    if found is None:
        return None, text
    match, code = found
    return code, _remove_span(text, match)


def _clean_item(text: str) -> str:
    item = _LEADING_DASH_RE.sub("", _collapse(text))
    item = _CONNECTOR_RE.sub("", item)
    item = _LEADING_DASH_RE.sub("", item)
    return _collapse(item.strip(" ,;:"))


def parse_ingredient_line(text: str) -> Ingredient:
    """
    Split an ingredient line into (item, quantity, unit, comments).

    Steps, each narrowing the remaining text: parenthesized comment, Hebrew
    fraction word (plus the whole before a "ו" fraction), leading numeral run, unit token, connector/dash cleanup.
    Comments are parenthesis-only: "butter, softened" stays in the item.
    """
    original = (text or "").strip()
    working = _collapse(original)
    comments = None

    m = _COMMENT_RE.search(working)
    if m:
        comments = _collapse(m.group(1)) or None
        working = _remove_span(working, m)

    found = _earliest_match(_FRACTION_PATTERNS, working)
    if found:
        match, quantity = found
        working = _remove_span(working, match)
        if match.group(1):
            # "כוס וחצי", "2 כוסות וחצי": the fraction adds to the whole before it
            whole, working = _take_leading_quantity(working)
            quantity = _round((whole if whole is not None else 1) + quantity)
    else:
        quantity, working = _take_leading_quantity(working)

    unit, working = _take_unit(working)
    item = _clean_item(working)

    return Ingredient(
        original=original,
        item=item or _collapse(original),
        quantity=quantity,
        unit=unit,
        comments=comments,
    )
