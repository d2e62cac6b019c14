"""Build system and task prompts for AI recipe extraction (text, refine, image)."""
from recipe_agent.vocabulary import render_vocabulary

TRUNCATION_MARKER = "[Content truncated...]"

_TEXT_INTRO = """You are an expert recipe parser specializing in Hebrew and English recipes.
Your task is to extract structured recipe data from raw text content."""

_VISION_INTRO = """You are an expert recipe parser specializing in Hebrew and English recipes.
Your task is to extract structured recipe data from an IMAGE of a recipe.

The image may contain:
- Printed text from a cookbook, magazine, or website screenshot
- Handwritten recipe notes
- A recipe card or index card
- A photo of a recipe page"""

_RULES = """CRITICAL RULES:
1. PRESERVE the original Hebrew/English ingredient line in the "original" field, exactly as written.
   Do NOT translate anything: title, ingredients and steps stay in the source language.

2. NORMALIZE quantities to decimal numbers (never fraction strings) and units to the unit codes below.
   Use null for quantity when none is given; use null for unit when there is no unit (e.g. "3 eggs").
   Only use to_taste / pinch / dash / as_needed when the text explicitly says so.

{vocabulary}

3. EXTRACT preparation notes as comments, keeping them out of "item":
   - "קצוץ דק" -> comments: "קצוץ דק"
   - "room temperature" -> comments: "room temperature"
   - "finely chopped" -> comments: "finely chopped"
   "item" is the ingredient name only (e.g. "flour", "קמח").

4. CLEAN instructions:
   - Remove numbering prefixes (1., 2., etc.)
   - Keep each step as a complete, clear instruction
   - Maintain original language

5. INFER reasonable values:
   - If prep/cook times are mentioned, extract them in minutes
   - Estimate difficulty from technique complexity
   - Identify dietary tags from ingredients

6. DETERMINE kashrut status:
   - parve: Contains no meat or dairy (vegetables, grains, eggs, fish)
   - dairy (חלבי): Contains dairy products (milk, cheese, butter, cream)
   - meat (בשרי): Contains meat or poultry
   - not_kosher: Contains explicitly non-kosher items (shellfish, pork, mixing meat and dairy)
   - unknown: Cannot determine from ingredients
   - Look for Hebrew indicators: חלבי, בשרי, פרווה, כשר"""

_TEXT_TAIL = """7. Handle MESSY content:
   - Ignore ads, navigation, comments and related-recipe links
   - Focus on the actual recipe content
   - If ingredients and steps are mixed together, separate them properly"""

_VISION_TAIL = """7. READ the text in the image carefully, including any handwritten text.

8. HANDLE difficult images:
   - If text is partially visible, extract what you can read
   - For handwritten text, do your best to interpret the writing
   - If measurements are unclear, make reasonable assumptions and note the uncertainty in comments
   - Focus on the recipe content, ignore watermarks or decorations"""


def build_system_prompt(vision: bool = False) -> str:
    """System prompt for text extraction, or for reading a recipe from an image."""
    intro, tail = (_VISION_INTRO, _VISION_TAIL) if vision else (_TEXT_INTRO, _TEXT_TAIL)
    return "\n\n".join([intro, _RULES.format(vocabulary=render_vocabulary()), tail])


def build_extract_prompt(text: str) -> str:
    """Full extraction from page text."""
    return f"Extract the recipe from this content:\n\n{text}"


def build_refine_prompt(partial_json: str, text: str) -> str:
    """Verify and complete structured-markup data against the page text."""
    return f"""I have partial recipe data extracted from structured metadata, but it may be incomplete or need refinement.

PARTIAL DATA:
{partial_json}

RAW CONTENT TO VERIFY AND COMPLETE:
{text}

Please verify the partial data against the raw content, fill in any missing fields, and normalize all values according to the rules."""


def build_image_prompt() -> str:
    return (
        "Extract the recipe from this image. Read all visible text carefully, "
        "including any handwritten notes. The recipe may be in Hebrew or English."
    )
