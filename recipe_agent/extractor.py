"""
Extraction orchestrator: URL (or image) in, ExtractionResult out.

    fetch -> structured parse -> [valid]   -> refine with AI (hybrid) or accept (structured)
                              -> [invalid] -> full AI extraction (ai) or fail

A valid structured record is never thrown away because the AI step failed:
the result degrades to structured-only with a warning. When there is no
structured record, AI is the only path and its failure is terminal.

Expected failures never raise; they come back as ExtractionResult(success=False).
"""
import logging
import time
from typing import Optional

from recipe_agent.config import Settings
from recipe_agent.errors import ExtractionError, FetchError, InputError
from recipe_agent.fetch import FetchResult, RecipeFetcher, extract_image_url
from recipe_agent.llm import StructuredLLM, get_generic_llm, has_api_key
from recipe_agent.models import ErrorKind, ExtractionResult, Recipe
from recipe_agent.recipe import MAX_INPUT_CHARS, AIRecipeExtractor
from recipe_agent.structured import is_refine_eligible, is_valid_recipe, parse_structured
from recipe_agent.validation import validate_image, validate_url

logger = logging.getLogger(__name__)

NO_NUTRITION_WARNING = "No nutrition information found"


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class RecipeExtractor:
    """
    Runs the extraction pipeline. Owns its fetcher (and through it the headless
    browser) unless one is passed in; use as an async context manager or call close().
    """

    def __init__(
        self,
        settings: Settings | None = None,
        fetcher: RecipeFetcher | None = None,
        llm: StructuredLLM | None = None,
    ):
        self.settings = settings or Settings()
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or RecipeFetcher(self.settings)
        self._llm = llm

    async def __aenter__(self) -> "RecipeExtractor":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_fetcher:
            await self.fetcher.close()

    def _ai(self) -> AIRecipeExtractor:
        if self._llm is None:
            self._llm = get_generic_llm(self.settings)
        return AIRecipeExtractor(self._llm)

    def _ai_unavailable(self, ai_enabled: bool) -> Optional[ErrorKind]:
        """Why AI cannot run (disabled vs. no key), or None if it can."""
        if not ai_enabled:
            return ErrorKind.AI_DISABLED
        if not has_api_key(self.settings):
            return ErrorKind.NO_API_KEY
        return None

    async def extract(self, url: str, ai_enabled: bool | None = None) -> ExtractionResult:
        """Extract a recipe from url. ai_enabled=False forces structured-only for this call."""
        start = time.perf_counter()
        warnings: list[str] = []
        use_ai = self.settings.ai_enabled if ai_enabled is None else (ai_enabled and self.settings.ai_enabled)

        def fail(kind: ErrorKind, message: str) -> ExtractionResult:
            logger.warning("Extraction failed for %s: %s", url, message)
            return ExtractionResult(
                success=False,
                error=message,
                error_kind=kind,
                warnings=warnings,
                processing_time_ms=_elapsed_ms(start),
            )

        try:
            url = validate_url(url)
        except InputError as e:
            return fail(ErrorKind.INPUT, str(e))

        logger.info("Fetching %s", url)
        try:
            page = await self.fetcher.smart_fetch(url)
        except FetchError as e:
            return fail(ErrorKind.FETCH, f"Failed to fetch URL: {e}")

        partial = parse_structured(page.html, url)
        blocked = self._ai_unavailable(use_ai)

        if is_valid_recipe(partial):
            recipe = partial.to_recipe()
            if blocked is None:
                refine = is_refine_eligible(partial)
                try:
                    ai = self._ai()
                    if refine:
                        recipe = await ai.refine(partial, page.cleaned_text, url)
                    else:
                        # Too thin to refine: extract from the page text, markup stays the fallback
                        recipe = await ai.extract_full(page.cleaned_text, url)
                    self._note_truncation(page, warnings)
                except ExtractionError as e:
                    step = "refinement" if refine else "extraction"
                    logger.warning("AI %s failed for %s, keeping structured data: %s", step, url, e)
                    warnings.append(f"AI {step} failed, using structured data only: {e}")
            else:
                logger.info("Using structured data for %s (AI %s)", url, blocked.value)
        else:
            if blocked == ErrorKind.AI_DISABLED:
                return fail(blocked, "No structured data found and AI extraction is disabled")
            if blocked == ErrorKind.NO_API_KEY:
                return fail(blocked, "No structured data found and GOOGLE_API_KEY is not set")
            logger.info("No usable structured data on %s, extracting with AI", url)
            try:
                recipe = await self._ai().extract_full(page.cleaned_text, url)
            except ExtractionError as e:
                return fail(ErrorKind.AI, f"AI extraction failed: {e}")
            self._note_truncation(page, warnings)

        recipe = self._with_fallback_image(recipe, page)
        if recipe.nutrition is None:
            warnings.append(NO_NUTRITION_WARNING)
        logger.info(
            "Extracted %r from %s (%s, confidence %.2f)",
            recipe.title, url, recipe.extraction_method.value, recipe.confidence,
        )
        return ExtractionResult(
            success=True,
            recipe=recipe,
            warnings=warnings,
            processing_time_ms=_elapsed_ms(start),
        )

    async def extract_image(self, image_b64: str, mime_type: str) -> ExtractionResult:
        """Extract a recipe from a base64-encoded photo or screenshot."""
        start = time.perf_counter()
        warnings: list[str] = []

        def fail(kind: ErrorKind, message: str) -> ExtractionResult:
            logger.warning("Image extraction failed: %s", message)
            return ExtractionResult(
                success=False,
                error=message,
                error_kind=kind,
                warnings=warnings,
                processing_time_ms=_elapsed_ms(start),
            )

        try:
            validate_image(image_b64, mime_type)
        except InputError as e:
            return fail(ErrorKind.INPUT, str(e))

        blocked = self._ai_unavailable(self.settings.ai_enabled)
        if blocked == ErrorKind.AI_DISABLED:
            return fail(blocked, "Image extraction requires AI, which is disabled")
        if blocked == ErrorKind.NO_API_KEY:
            return fail(blocked, "Image extraction requires GOOGLE_API_KEY, which is not set")

        source_id = f"image-upload:{int(time.time() * 1000)}"
        try:
            recipe = await self._ai().extract_from_image(image_b64, mime_type, source_id)
        except ExtractionError as e:
            return fail(ErrorKind.AI, f"Image extraction failed: {e}")

        if recipe.nutrition is None:
            warnings.append(NO_NUTRITION_WARNING)
        return ExtractionResult(
            success=True,
            recipe=recipe,
            warnings=warnings,
            processing_time_ms=_elapsed_ms(start),
        )

    @staticmethod
    def _note_truncation(page: FetchResult, warnings: list[str]) -> None:
        if len(page.cleaned_text.strip()) > MAX_INPUT_CHARS:
            warnings.append(f"Page content truncated to {MAX_INPUT_CHARS} characters for AI extraction")

    @staticmethod
    def _with_fallback_image(recipe: Recipe, page: FetchResult) -> Recipe:
        """Fill a missing image from the page's meta tags; best effort, never fails the extraction."""
        if recipe.image_url:
            return recipe
        image_url = extract_image_url(page.html, page.url)
        if not image_url:
            return recipe
        logger.debug("Image from page meta tags: %s", image_url)
        return recipe.model_copy(update={"image_url": image_url})


async def extract_recipe(url: str, settings: Settings | None = None) -> ExtractionResult:
    """One-shot extraction with a fetcher that is closed afterwards."""
    async with RecipeExtractor(settings) as extractor:
        return await extractor.extract(url)
