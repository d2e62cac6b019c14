"""
Pydantic models for extracted recipes.
Recipe is the canonical output of the pipeline; PartialRecipe is what the
structured-data path produces before assembly; ExtractionResult wraps either.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class UnitCode(str, Enum):
    """Closed set of units every parser maps onto (or null)."""
    CUP = "cup"
    TBSP = "tbsp"
    TSP = "tsp"
    ML = "ml"
    L = "l"
    G = "g"
    KG = "kg"
    OZ = "oz"
    LB = "lb"
    PIECE = "piece"
    SLICE = "slice"
    CLOVE = "clove"
    BUNCH = "bunch"
    PACKAGE = "package"
    CAN = "can"
    JAR = "jar"
    BAG = "bag"
    PINCH = "pinch"
    DASH = "dash"
    TO_TASTE = "to_taste"
    AS_NEEDED = "as_needed"
    UNKNOWN = "unknown"


class Language(str, Enum):
    HE = "he"
    EN = "en"
    MIXED = "mixed"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    UNKNOWN = "unknown"


class ExtractionMethod(str, Enum):
    """How a recipe was obtained. Permanent audit field, never recomputed by consumers."""
    STRUCTURED = "structured"
    AI = "ai"
    HYBRID = "hybrid"
    IMAGE = "image"


class Kashrut(str, Enum):
    PARVE = "parve"
    DAIRY = "dairy"
    MEAT = "meat"
    NOT_KOSHER = "not_kosher"
    UNKNOWN = "unknown"


class ErrorKind(str, Enum):
    """Classification of a failed extraction, for API status codes."""
    INPUT = "input"
    FETCH = "fetch"
    NO_DATA = "no_data"
    AI_DISABLED = "ai_disabled"
    NO_API_KEY = "no_api_key"
    AI = "ai"


# Fixed, method-dependent confidence scores
METHOD_CONFIDENCE: dict[ExtractionMethod, float] = {
    ExtractionMethod.STRUCTURED: 0.9,
    ExtractionMethod.HYBRID: 0.85,
    ExtractionMethod.AI: 0.75,
    ExtractionMethod.IMAGE: 0.70,
}


class Ingredient(BaseModel):
    """A single ingredient line, normalized."""
    original: str = Field(..., description="Ingredient line exactly as found in the source")
    item: str = Field(..., description="Ingredient name only (e.g. 'flour', 'קמח')")
    quantity: Optional[float] = Field(None, description="Decimal quantity; fractions and number words resolved")
    unit: Optional[UnitCode] = Field(None, description="Standardized unit code, null if none")
    comments: Optional[str] = Field(None, description="Preparation notes (e.g. 'room temperature', 'קצוץ דק')")

    @model_validator(mode="after")
    def _item_falls_back_to_original(self):
        if self.original.strip() and not self.item.strip():
            self.item = self.original.strip()
        return self


class RecipeMeta(BaseModel):
    """Timing, serving and classification metadata."""
    prep_time: Optional[int] = Field(None, description="Preparation time in minutes")
    cook_time: Optional[int] = Field(None, description="Cooking/baking time in minutes")
    total_time: Optional[int] = Field(None, description="Total time in minutes")
    servings: Optional[int] = Field(None, description="Number of servings")
    difficulty: Difficulty = Difficulty.UNKNOWN
    cuisine: Optional[str] = None
    category: Optional[str] = None
    dietary: list[str] = Field(default_factory=list, description="Dietary tags (vegan, gluten-free, ...)")


class Nutrition(BaseModel):
    """Per-serving nutrition values as published by the source."""
    calories: Optional[float] = None
    protein: Optional[float] = None
    carbohydrates: Optional[float] = None
    fat: Optional[float] = None
    fiber: Optional[float] = None
    sodium: Optional[float] = None


class Recipe(BaseModel):
    """The canonical recipe record. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    title: str
    description: Optional[str] = None
    language: Language = Language.EN
    source_url: str = Field(..., description="Page URL or synthetic image-upload token")
    image_url: Optional[str] = None
    author: Optional[str] = None
    date_published: Optional[str] = None
    ingredients: list[Ingredient] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)
    meta: RecipeMeta = Field(default_factory=RecipeMeta)
    nutrition: Optional[Nutrition] = None
    extraction_method: ExtractionMethod
    confidence: float = Field(..., ge=0, le=1)
    kashrut: Optional[Kashrut] = None
    raw_text: Optional[str] = Field(None, description="Source text the AI saw, kept for audit")


class PartialRecipe(BaseModel):
    """Recipe fields recovered from structured markup; anything may be missing."""
    source_url: str
    title: Optional[str] = None
    description: Optional[str] = None
    language: Optional[Language] = None
    image_url: Optional[str] = None
    author: Optional[str] = None
    date_published: Optional[str] = None
    ingredients: list[Ingredient] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)
    meta: RecipeMeta = Field(default_factory=RecipeMeta)
    nutrition: Optional[Nutrition] = None

    def to_recipe(self) -> Recipe:
        """Assemble a structured-only Recipe (method 'structured', fixed confidence)."""
        return Recipe(
            title=self.title or "Untitled Recipe",
            description=self.description,
            language=self.language or Language.EN,
            source_url=self.source_url,
            image_url=self.image_url,
            author=self.author,
            date_published=self.date_published,
            ingredients=self.ingredients,
            steps=self.steps,
            tips=self.tips,
            meta=self.meta,
            nutrition=self.nutrition,
            extraction_method=ExtractionMethod.STRUCTURED,
            confidence=METHOD_CONFIDENCE[ExtractionMethod.STRUCTURED],
        )


class ExtractionResult(BaseModel):
    """What callers get back: a recipe, or a single terminal error, plus warnings."""
    success: bool
    recipe: Optional[Recipe] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    warnings: list[str] = Field(default_factory=list)
    processing_time_ms: int = 0
