import asyncio
import copy
import json

import pytest

from recipe_agent.config import Settings
from recipe_agent.errors import FetchError
from recipe_agent.fetch import FetchResult

AI_RESPONSE = {
    "title": "עוגת גבינה",
    "description": "עוגת גבינה אפויה",
    "language": "he",
    "ingredients": [
        {"original": "500 גרם גבינה לבנה", "item": "גבינה לבנה", "quantity": 500, "unit": "g", "comments": None},
        {"original": "חצי כוס סוכר", "item": "סוכר", "quantity": 0.5, "unit": "cup", "comments": None},
        {"original": "3 ביצים", "item": "ביצים", "quantity": 3, "unit": None, "comments": None},
    ],
    "steps": ["מערבבים את כל החומרים", "אופים 40 דקות"],
    "tips": ["מגישים קר"],
    "kashrut": "dairy",
    "meta": {
        "prep_time": 15,
        "cook_time": 40,
        "total_time": 55,
        "servings": 8,
        "difficulty": "easy",
        "cuisine": "ישראלי",
        "category": "קינוחים",
        "dietary": ["vegetarian"],
    },
}


class FakeLLM:
    """StructuredLLM stand-in: returns a canned response (or raises) and records every call."""

    def __init__(self, response: dict | None = None, error: Exception | None = None):
        self.response = copy.deepcopy(AI_RESPONSE) if response is None else response
        self.error = error
        self.calls: list[list] = []

    async def extract(self, messages, schema):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return schema.model_validate(self.response)


class FakeBrowser:
    """RenderedBrowser stand-in."""

    def __init__(self, html: str = "<html><body></body></html>", error: Exception | None = None):
        self.html = html
        self.error = error
        self.calls: list[str] = []
        self.closed = False

    async def render(self, url: str, timeout: float = 30.0) -> str:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.html

    async def close(self) -> None:
        self.closed = True


class FakeFetcher:
    """RecipeFetcher stand-in serving one prepared page."""

    def __init__(self, html: str = "", text: str = "", error: Exception | None = None):
        self.html = html
        self.text = text
        self.error = error
        self.calls: list[str] = []
        self.closed = False

    async def smart_fetch(self, url: str) -> FetchResult:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return FetchResult(url=url, html=self.html, cleaned_text=self.text)

    async def close(self) -> None:
        self.closed = True


def recipe_page(node: dict | None = None, head: str = "", body: str = "<p>recipe text</p>") -> str:
    """HTML page with an optional JSON-LD block."""
    script = ""
    if node is not None:
        script = f'<script type="application/ld+json">{json.dumps(node, ensure_ascii=False)}</script>'
    return f"<html><head>{script}{head}</head><body>{body}</body></html>"


FULL_NODE = {
    "@context": "https://schema.org",
    "@type": "Recipe",
    "name": "Shakshuka",
    "image": "https://example.com/shakshuka.jpg",
    "author": {"@type": "Person", "name": "Dana"},
    "datePublished": "2024-03-01",
    "recipeIngredient": ["4 eggs", "2 cups crushed tomatoes", "1 tsp cumin"],
    "recipeInstructions": [
        {"@type": "HowToStep", "text": "Simmer the tomatoes"},
        {"@type": "HowToStep", "text": "Crack in the eggs"},
    ],
    "nutrition": {"calories": "300 kcal"},
}

THIN_NODE = {
    "@type": "Recipe",
    "name": "Toast",
    "recipeIngredient": ["1 slice bread"],
    "recipeInstructions": "Toast the bread",
}


@pytest.fixture
def settings() -> Settings:
    return Settings(google_api_key="test-key", ai_enabled=True, min_content_length=500)


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def run():
    """Run a coroutine to completion (tests stay synchronous)."""
    return asyncio.run


@pytest.fixture
def fetch_error() -> FetchError:
    return FetchError("HTTP 404 for https://example.com/missing")
