"""
LLM resolution from settings, plus a thin structured-output wrapper.

- StructuredLLM: the one capability the pipeline needs, "messages + Pydantic
  schema in, validated instance out". Tests substitute a fake.
- GeminiLLM: StructuredLLM over browser-use's ChatGoogle (supports arbitrary
  Pydantic models). Requires GOOGLE_API_KEY.
- get_generic_llm(): build a GeminiLLM from settings, or raise MissingApiKeyError.
"""
import asyncio
import logging
from typing import Any, Protocol, TypeVar

from browser_use import ChatGoogle
from browser_use.llm.exceptions import ModelProviderError
from browser_use.llm.messages import BaseMessage
from pydantic import BaseModel, ValidationError

from recipe_agent.config import Settings
from recipe_agent.errors import ExtractionError, MissingApiKeyError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class StructuredLLM(Protocol):
    async def extract(self, messages: list[BaseMessage], schema: type[M]) -> M:
        """Return an instance of schema; raise ExtractionError on provider failure, timeout or schema violation."""
        ...


class GeminiLLM:
    """Gemini via browser-use ChatGoogle, with a wall-clock timeout and schema re-validation."""

    def __init__(self, chat: Any = None, api_key: str | None = None, model: str = "gemini-flash-latest",
                 timeout: float = 90.0):
        self.chat = chat or ChatGoogle(model=model, api_key=api_key)
        self.model = model
        self.timeout = timeout

    async def extract(self, messages: list[BaseMessage], schema: type[M]) -> M:
        try:
            result = await asyncio.wait_for(
                self.chat.ainvoke(messages, output_format=schema),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ExtractionError(f"Model call timed out after {self.timeout:g}s") from e
        except ModelProviderError as e:
            raise ExtractionError(f"Model provider error: {e}") from e
        except ValidationError as e:
            raise ExtractionError(f"Model output does not match schema: {e}") from e
        return _validate(result.completion, schema)


def _validate(completion: Any, schema: type[M]) -> M:
    """Re-check the completion against schema whatever form the client returned it in."""
    try:
        if isinstance(completion, str):
            return schema.model_validate_json(completion)
        if isinstance(completion, BaseModel):
            return schema.model_validate(completion.model_dump())
        return schema.model_validate(completion)
    except ValidationError as e:
        raise ExtractionError(f"Model output does not match schema: {e}") from e


def has_api_key(settings: Settings) -> bool:
    return bool(settings.google_api_key)


def get_generic_llm(settings: Settings) -> GeminiLLM:
    """
    Return an LLM that supports arbitrary structured output (Pydantic models).
    Used for recipe extraction from text and images. Requires GOOGLE_API_KEY.
    """
    if not has_api_key(settings):
        raise MissingApiKeyError(
            "Set GOOGLE_API_KEY in .env for AI recipe extraction. "
            "Get a key at https://aistudio.google.com/app/apikey"
        )
    logger.debug("Using Gemini model %s", settings.gemini_model)
    return GeminiLLM(api_key=settings.google_api_key, model=settings.gemini_model, timeout=settings.ai_timeout)
