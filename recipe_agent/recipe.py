"""
AI recipe extraction: one structured-output LLM call turns page text (or a
recipe image) into a Recipe.

- extract_full: raw text only                        -> method "ai", 0.75
- refine: structured partial + raw text to verify    -> method "hybrid", 0.85
- extract_from_image: base64 image                   -> method "image", 0.70
"""
import logging
from typing import Optional

from browser_use.llm.messages import (
    ContentPartImageParam,
    ContentPartTextParam,
    ImageURL,
    SystemMessage,
    UserMessage,
)
from pydantic import BaseModel, Field

from recipe_agent.errors import ExtractionError
from recipe_agent.llm import StructuredLLM
from recipe_agent.models import (
    METHOD_CONFIDENCE,
    ExtractionMethod,
    Ingredient,
    Kashrut,
    Language,
    PartialRecipe,
    Recipe,
    RecipeMeta,
)
from recipe_agent.prompts import (
    TRUNCATION_MARKER,
    build_extract_prompt,
    build_image_prompt,
    build_refine_prompt,
    build_system_prompt,
)

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 15000


class LLMRecipe(BaseModel):
    """Output schema the model must fill. Field descriptions are part of the instructions."""
    title: str = Field(..., description="Recipe title")
    description: Optional[str] = Field(None, description="Brief description or summary")
    language: Language = Field(..., description="Primary language: he for Hebrew, en for English, mixed")
    ingredients: list[Ingredient] = Field(..., description="All ingredients with parsed details")
    steps: list[str] = Field(..., description="Ordered preparation steps, numbering removed")
    tips: list[str] = Field(default_factory=list, description="Optional cooking tips, notes, or suggestions")
    kashrut: Kashrut = Field(
        Kashrut.UNKNOWN,
        description="parve (neither meat nor dairy), dairy (חלבי), meat (בשרי), not_kosher, or unknown",
    )
    meta: RecipeMeta = Field(default_factory=RecipeMeta)


def truncate_text(text: str, limit: int = MAX_INPUT_CHARS) -> tuple[str, bool]:
    """Cap text at limit chars with a visible marker. Returns (text, was_truncated)."""
    if len(text) <= limit:
        return text, False
    return f"{text[:limit]}\n\n{TRUNCATION_MARKER}", True


def _require_content(parsed: LLMRecipe) -> None:
    if not parsed.ingredients or not parsed.steps:
        raise ExtractionError("Model response contains no ingredients or no steps")


def _partial_json(partial: PartialRecipe) -> str:
    return partial.model_dump_json(indent=2, exclude_none=True)


class AIRecipeExtractor:
    """Recipe extraction through a StructuredLLM. Raises ExtractionError on any model failure."""

    def __init__(self, llm: StructuredLLM):
        self.llm = llm

    async def _call(self, user_message: UserMessage, vision: bool = False) -> LLMRecipe:
        messages = [
            SystemMessage(content=build_system_prompt(vision=vision)),
            user_message,
        ]
        parsed = await self.llm.extract(messages, LLMRecipe)
        _require_content(parsed)
        return parsed

    async def extract_full(self, raw_text: str, source_url: str) -> Recipe:
        """Extract a recipe from page text alone."""
        if not raw_text or not raw_text.strip():
            raise ExtractionError("No page content to extract from")
        text, truncated = truncate_text(raw_text.strip())
        if truncated:
            logger.warning("Page text truncated to %d chars for %s", MAX_INPUT_CHARS, source_url)
        logger.info("AI extraction for %s (%d chars)", source_url, len(text))
        parsed = await self._call(UserMessage(content=build_extract_prompt(text)))
        return Recipe(
            title=parsed.title,
            description=parsed.description,
            language=parsed.language,
            source_url=source_url,
            ingredients=parsed.ingredients,
            steps=parsed.steps,
            tips=parsed.tips,
            meta=parsed.meta,
            extraction_method=ExtractionMethod.AI,
            confidence=METHOD_CONFIDENCE[ExtractionMethod.AI],
            kashrut=parsed.kashrut,
            raw_text=text,
        )

    async def refine(self, partial: PartialRecipe, raw_text: str, source_url: str) -> Recipe:
        """Verify and complete a structured record; image, author, date and nutrition come from the markup."""
        text, truncated = truncate_text((raw_text or "").strip())
        if truncated:
            logger.warning("Page text truncated to %d chars for %s", MAX_INPUT_CHARS, source_url)
        logger.info("AI refinement for %s", source_url)
        parsed = await self._call(UserMessage(content=build_refine_prompt(_partial_json(partial), text)))
        return Recipe(
            title=parsed.title or partial.title or "Untitled Recipe",
            description=parsed.description or partial.description,
            language=parsed.language,
            source_url=source_url,
            image_url=partial.image_url,
            author=partial.author,
            date_published=partial.date_published,
            ingredients=parsed.ingredients,
            steps=parsed.steps,
            tips=parsed.tips,
            meta=parsed.meta,
            nutrition=partial.nutrition,
            extraction_method=ExtractionMethod.HYBRID,
            confidence=METHOD_CONFIDENCE[ExtractionMethod.HYBRID],
            kashrut=parsed.kashrut,
            raw_text=text,
        )

    async def extract_from_image(self, image_b64: str, mime_type: str, source_id: str) -> Recipe:
        """Read a recipe from a photo or screenshot (printed or handwritten)."""
        logger.info("AI image extraction (%s, %d base64 chars)", mime_type, len(image_b64))
        message = UserMessage(
            content=[
                ContentPartImageParam(
                    image_url=ImageURL(url=f"data:{mime_type};base64,{image_b64}", media_type=mime_type),
                ),
                ContentPartTextParam(text=build_image_prompt()),
            ]
        )
        parsed = await self._call(message, vision=True)
        return Recipe(
            title=parsed.title,
            description=parsed.description,
            language=parsed.language,
            source_url=source_id,
            ingredients=parsed.ingredients,
            steps=parsed.steps,
            tips=parsed.tips,
            meta=parsed.meta,
            extraction_method=ExtractionMethod.IMAGE,
            confidence=METHOD_CONFIDENCE[ExtractionMethod.IMAGE],
            kashrut=parsed.kashrut,
        )
