"""
Recipe extraction from schema.org JSON-LD markup.

Publisher-authored markup is the cheapest and most reliable source: when a
page carries a usable Recipe object no model call is needed at all. Every
<script type="application/ld+json"> block is scanned; a block that fails to
parse is skipped, never fatal to the page.
"""
import html
import json
import logging
import re
from typing import Any, Optional

from bs4 import BeautifulSoup

from recipe_agent.models import Difficulty, Language, Nutrition, PartialRecipe, RecipeMeta
from recipe_agent.quantity_parser import parse_ingredient_line

logger = logging.getLogger(__name__)

_DURATION_RE = re.compile(
    r"P(?=\d|T)(?:(\d+)D)?T?(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?",
    re.IGNORECASE,
)
_FIRST_INT_RE = re.compile(r"\d+")
_FIRST_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")
_HEBREW_CHAR_RE = re.compile(r"[\u0590-\u05FF]")
_LATIN_CHAR_RE = re.compile(r"[a-zA-Z]")
# Newlines, or whitespace between a sentence end and the next "N. " ordinal
_STEP_SPLIT_RE = re.compile(r"\n|(?<=[.!?])\s+(?=\d{1,3}\.\s)")
_STEP_ORDINAL_RE = re.compile(r"^\d+\.\s*")
_TAG_RE = re.compile(r"<[^>]+>")
_SCHEMA_PREFIX_RE = re.compile(r"^https?://schema\.org/", re.IGNORECASE)

# schema.org nutrition property -> Nutrition field
_NUTRITION_FIELDS = {
    "calories": "calories",
    "proteinContent": "protein",
    "carbohydrateContent": "carbohydrates",
    "fatContent": "fat",
    "fiberContent": "fiber",
    "sodiumContent": "sodium",
}


def _clean_text(value: Any) -> str:
    """Unescape entities, drop inline tags, collapse whitespace."""
    if value is None:
        return ""
    text = html.unescape(str(value))
    text = _TAG_RE.sub(" ", text)
    return re.sub(r"\s+", " ", text).strip()


def parse_duration(value: Any) -> Optional[int]:
    """ISO-8601 duration to whole minutes: "PT1H30M" -> 90, "PT90S" -> 2. None if unparseable."""
    if not isinstance(value, str) or not value.strip():
        return None
    m = next((m for m in _DURATION_RE.finditer(value.strip()) if any(m.groups())), None)
    if m is None:
        return None
    days, hours, minutes, seconds = (float(g) if g else 0 for g in m.groups())
    # Half-up: 30 seconds counts as a minute
    return int(days * 24 * 60 + hours * 60 + minutes + int(seconds / 60 + 0.5))


def parse_servings(value: Any) -> Optional[int]:
    """First integer found in a recipeYield value (number, string or list)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if value > 0 else None
    if isinstance(value, list):
        for item in value:
            parsed = parse_servings(item)
            if parsed is not None:
                return parsed
        return None
    if isinstance(value, str):
        m = _FIRST_INT_RE.search(value)
        return int(m.group()) if m else None
    return None


def detect_language(text: str) -> Language:
    """he if Hebrew code points outnumber Latin letters, else en."""
    hebrew = len(_HEBREW_CHAR_RE.findall(text or ""))
    latin = len(_LATIN_CHAR_RE.findall(text or ""))
    return Language.HE if hebrew > latin else Language.EN


def _is_recipe_type(node: Any) -> bool:
    if not isinstance(node, dict):
        return False
    declared = node.get("@type")
    types = declared if isinstance(declared, list) else [declared]
    for t in types:
        if not isinstance(t, str):
            continue
        # "Recipe", "schema:Recipe", "https://schema.org/Recipe"
        name = t.rsplit("/", 1)[-1].rsplit(":", 1)[-1]
        if name.lower() == "recipe":
            return True
    return False


def find_recipe_node(data: Any) -> Optional[dict]:
    """Depth-first search of a JSON-LD document (objects, arrays, @graph) for the first Recipe object."""
    if isinstance(data, list):
        for item in data:
            found = find_recipe_node(item)
            if found is not None:
                return found
        return None
    if not isinstance(data, dict):
        return None
    if _is_recipe_type(data):
        return data
    for key in ("@graph", "mainEntity"):
        if key in data:
            found = find_recipe_node(data[key])
            if found is not None:
                return found
    return None


def _first_url(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, dict):
        return _first_url(value.get("url") or value.get("contentUrl"))
    if isinstance(value, list):
        for item in value:
            found = _first_url(item)
            if found:
                return found
    return None


def _first_name(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return _clean_text(value) or None
    if isinstance(value, dict):
        return _first_name(value.get("name"))
    if isinstance(value, list):
        for item in value:
            found = _first_name(item)
            if found:
                return found
    return None


def _first_string(value: Any) -> Optional[str]:
    if isinstance(value, list):
        value = value[0] if value else None
    text = _clean_text(value) if isinstance(value, str) else ""
    return text or None


def _collect_steps(value: Any, steps: list[str]) -> None:
    """Flatten strings, HowToStep objects and (nested) HowToSection lists, in order."""
    if isinstance(value, str):
        text = _clean_text(value)
        if text:
            steps.append(text)
    elif isinstance(value, list):
        for item in value:
            _collect_steps(item, steps)
    elif isinstance(value, dict):
        if "itemListElement" in value:
            _collect_steps(value["itemListElement"], steps)
        elif "text" in value:
            _collect_steps(value["text"], steps)
        elif "name" in value and "step" in str(value.get("@type", "")).lower():
            _collect_steps(value["name"], steps)


def parse_instructions(value: Any) -> list[str]:
    """Normalize recipeInstructions to a flat list of non-empty step strings."""
    if isinstance(value, str):
        # Single delimited string: split on newlines and "N. " markers, strip the ordinals
        raw = html.unescape(value).replace("\r", "\n")
        raw = re.sub(r"<br\s*/?>|</p>|</li>", "\n", raw, flags=re.IGNORECASE)
        parts = (_STEP_ORDINAL_RE.sub("", _clean_text(part)) for part in _STEP_SPLIT_RE.split(raw))
        return [p for p in parts if p]
    steps: list[str] = []
    _collect_steps(value, steps)
    return steps


def _parse_ingredients(value: Any) -> list:
    if isinstance(value, str):
        value = value.splitlines()
    if not isinstance(value, list):
        return []
    lines = (_clean_text(v) for v in value if isinstance(v, (str, int, float)))
    return [parse_ingredient_line(line) for line in lines if line]


def _nutrition_value(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        m = _FIRST_NUMBER_RE.search(value.replace(",", ""))
        return float(m.group()) if m else None
    return None


def _parse_nutrition(value: Any) -> Optional[Nutrition]:
    if not isinstance(value, dict):
        return None
    fields = {field: _nutrition_value(value.get(prop)) for prop, field in _NUTRITION_FIELDS.items()}
    if all(v is None for v in fields.values()):
        return None
    return Nutrition(**fields)


def _parse_dietary(value: Any) -> list[str]:
    items = value if isinstance(value, list) else [value]
    tags = []
    for item in items:
        if isinstance(item, str) and item.strip():
            tags.append(_SCHEMA_PREFIX_RE.sub("", item.strip()))
    return tags


def _load_blocks(page_html: str) -> list[Any]:
    soup = BeautifulSoup(page_html, "html.parser")
    blocks = []
    for script in soup.find_all("script", type="application/ld+json"):
        content = script.string or script.get_text()
        if not content or not content.strip():
            continue
        try:
            blocks.append(json.loads(content, strict=False))
        except (json.JSONDecodeError, TypeError) as e:
            logger.debug("Skipping malformed JSON-LD block: %s", e)
    return blocks


def recipe_from_node(node: dict, source_url: str) -> PartialRecipe:
    """Map one schema.org Recipe object onto a PartialRecipe."""
    title = _clean_text(node.get("name")) or None
    meta = RecipeMeta(
        prep_time=parse_duration(node.get("prepTime")),
        cook_time=parse_duration(node.get("cookTime")),
        total_time=parse_duration(node.get("totalTime")),
        servings=parse_servings(node.get("recipeYield", node.get("yield"))),
        difficulty=Difficulty.UNKNOWN,
        cuisine=_first_string(node.get("recipeCuisine")),
        category=_first_string(node.get("recipeCategory")),
        dietary=_parse_dietary(node.get("suitableForDiet")),
    )
    date_published = node.get("datePublished")
    return PartialRecipe(
        source_url=source_url,
        title=title,
        description=_clean_text(node.get("description")) or None,
        language=detect_language(title or ""),
        image_url=_first_url(node.get("image")),
        author=_first_name(node.get("author")),
        date_published=date_published if isinstance(date_published, str) else None,
        ingredients=_parse_ingredients(node.get("recipeIngredient", node.get("ingredients"))),
        steps=parse_instructions(node.get("recipeInstructions")),
        meta=meta,
        nutrition=_parse_nutrition(node.get("nutrition")),
    )


def parse_structured(page_html: str, source_url: str) -> Optional[PartialRecipe]:
    """Return the first Recipe found in the page's JSON-LD blocks, or None."""
    if not page_html:
        return None
    for block in _load_blocks(page_html):
        node = find_recipe_node(block)
        if node is None:
            continue
        try:
            partial = recipe_from_node(node, source_url)
        except ValueError as e:
            # pydantic ValidationError is a ValueError
            logger.debug("Skipping Recipe block that does not map cleanly: %s", e)
            continue
        logger.info(
            "Structured data: %d ingredients, %d steps (%s)",
            len(partial.ingredients), len(partial.steps), partial.title or "untitled",
        )
        return partial
    return None


def is_valid_recipe(partial: Optional[PartialRecipe]) -> bool:
    """Title plus at least one ingredient and one step."""
    return bool(partial and partial.title and partial.ingredients and partial.steps)


def is_refine_eligible(partial: Optional[PartialRecipe]) -> bool:
    """Enough markup (2+ ingredients, 2+ steps) that a model pass should complete it rather than start over."""
    return bool(
        partial
        and partial.title
        and len(partial.ingredients) >= 2
        and len(partial.steps) >= 2
    )
