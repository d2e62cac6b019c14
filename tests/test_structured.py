import json

import pytest

from recipe_agent.models import Language, UnitCode
from recipe_agent.structured import (
    detect_language,
    find_recipe_node,
    is_refine_eligible,
    is_valid_recipe,
    parse_duration,
    parse_instructions,
    parse_servings,
    parse_structured,
)

URL = "https://example.co.il/recipe/1"


def page(*blocks, raw: str = "") -> str:
    scripts = "".join(
        f'<script type="application/ld+json">{json.dumps(b, ensure_ascii=False)}</script>' for b in blocks
    )
    return f"<html><head>{scripts}{raw}</head><body><p>hello</p></body></html>"


HEBREW_RECIPE = {
    "@context": "https://schema.org",
    "@type": "Recipe",
    "name": "עוגת שוקולד",
    "description": "עוגה &amp; שוקולד",
    "image": [{"@type": "ImageObject", "url": "https://example.co.il/cake.jpg"}],
    "author": [{"@type": "Person", "name": "רות"}],
    "datePublished": "2024-01-01",
    "prepTime": "PT15M",
    "cookTime": "PT1H",
    "totalTime": "PT1H15M",
    "recipeYield": ["8 מנות", "8"],
    "recipeCuisine": ["ישראלי"],
    "recipeCategory": "קינוחים",
    "suitableForDiet": "https://schema.org/VegetarianDiet",
    "recipeIngredient": ["2 כוסות קמח", "חצי כוס סוכר", "3 ביצים"],
    "recipeInstructions": [
        {"@type": "HowToStep", "text": "מחממים תנור"},
        {
            "@type": "HowToSection",
            "name": "בצק",
            "itemListElement": [
                {"@type": "HowToStep", "text": "מערבבים"},
                {"@type": "HowToStep", "text": "אופים"},
            ],
        },
    ],
    "nutrition": {"@type": "NutritionInformation", "calories": "250 calories", "fatContent": "12.5 g"},
}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("PT30M", 30),
        ("PT1H30M", 90),
        ("PT2H", 120),
        ("PT45S", 1),
        ("PT1H0M30S", 61),
        ("pt20m", 20),
        ("P1DT1H", 1500),
        ("Prep: PT20M", 20),
        ("except PT15M", 15),
        (None, None),
        ("", None),
        ("20 minutes", None),
    ],
)
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (4, 4),
        ("6 servings", 6),
        ("מספיק ל-10 סועדים", 10),
        (["", "serves 3"], 3),
        ("a few", None),
        (None, None),
    ],
)
def test_parse_servings(value, expected):
    assert parse_servings(value) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("עוגת שוקולד", Language.HE),
        ("Chocolate cake", Language.EN),
        ("עוגת שוקולד עם brownies", Language.HE),
        ("", Language.EN),
    ],
)
def test_detect_language(text, expected):
    assert detect_language(text) == expected


def test_instructions_from_single_string_strip_ordinals():
    steps = parse_instructions("1. Preheat oven\n2. Mix flour\n\n3. Bake 20 minutes")
    assert steps == ["Preheat oven", "Mix flour", "Bake 20 minutes"]


def test_instructions_from_inline_numbered_string():
    assert parse_instructions("1. Mix. 2. Bake.") == ["Mix.", "Bake."]


def test_instructions_two_digit_ordinals_stay_whole():
    assert parse_instructions("9. Cool the cake\n10. Slice and serve") == ["Cool the cake", "Slice and serve"]


@pytest.mark.parametrize(
    "text",
    [
        "Preheat the oven to 180. Mix the flour.",
        "Bake for 20. Then cool on a rack.",
        "חממו תנור ל-180. ערבבו את הקמח.",
    ],
)
def test_instructions_numbers_inside_a_step_do_not_split(text):
    assert parse_instructions(text) == [text]


def test_instructions_inline_ordinal_after_sentence_end():
    assert parse_instructions("1. Bake 20 minutes. 2. Cool on a rack.") == ["Bake 20 minutes.", "Cool on a rack."]


def test_instructions_from_list_keep_text_as_is():
    steps = parse_instructions(["1. Mix", {"@type": "HowToStep", "text": "Bake"}, [" ", "Cool"]])
    assert steps == ["1. Mix", "Bake", "Cool"]


def test_parse_structured_maps_all_fields():
    partial = parse_structured(page(HEBREW_RECIPE), URL)
    assert partial is not None
    assert partial.source_url == URL
    assert partial.title == "עוגת שוקולד"
    assert partial.description == "עוגה & שוקולד"
    assert partial.language == Language.HE
    assert partial.image_url == "https://example.co.il/cake.jpg"
    assert partial.author == "רות"
    assert partial.date_published == "2024-01-01"
    assert [i.item for i in partial.ingredients] == ["קמח", "סוכר", "ביצים"]
    assert partial.ingredients[1].quantity == 0.5
    assert partial.ingredients[1].unit == UnitCode.CUP
    assert partial.steps == ["מחממים תנור", "מערבבים", "אופים"]
    assert partial.meta.prep_time == 15
    assert partial.meta.cook_time == 60
    assert partial.meta.total_time == 75
    assert partial.meta.servings == 8
    assert partial.meta.cuisine == "ישראלי"
    assert partial.meta.category == "קינוחים"
    assert partial.meta.dietary == ["VegetarianDiet"]
    assert partial.nutrition.calories == 250
    assert partial.nutrition.fat == 12.5
    assert partial.nutrition.protein is None


def test_recipe_found_inside_graph():
    graph = {
        "@context": "https://schema.org",
        "@graph": [
            {"@type": "WebSite", "name": "Site"},
            {"@type": "BreadcrumbList"},
            {"@type": "Recipe", "name": "Soup", "recipeIngredient": ["water"], "recipeInstructions": "Boil"},
        ],
    }
    partial = parse_structured(page(graph), URL)
    assert partial.title == "Soup"
    assert partial.steps == ["Boil"]


@pytest.mark.parametrize(
    "declared",
    [
        ["Recipe", "NutritionInformation"],
        "recipe",
        "schema:Recipe",
        "https://schema.org/Recipe",
    ],
)
def test_recipe_type_spellings(declared):
    assert find_recipe_node({"@type": declared, "name": "x"}) is not None


def test_non_recipe_types_are_ignored():
    assert find_recipe_node([{"@type": "Article"}, {"@type": "RecipeCollection"}]) is None


def test_malformed_block_is_skipped():
    broken = '<script type="application/ld+json">{"@type": "Recipe", </script>'
    html = page({"@type": "Recipe", "name": "Good", "recipeIngredient": ["a"], "recipeInstructions": ["b"]}, raw=broken)
    # Broken block comes after the good one in the document; also try it first
    html_first = f'<html><head>{broken}</head><body>{page({"@type": "Recipe", "name": "Good"})}</body></html>'
    assert parse_structured(html, URL).title == "Good"
    assert parse_structured(html_first, URL).title == "Good"


def test_no_structured_data():
    assert parse_structured("<html><body><h1>Cake</h1></body></html>", URL) is None
    assert parse_structured("", URL) is None


def _partial(ingredients: int, steps: int, title: str = "Cake"):
    return parse_structured(
        page({
            "@type": "Recipe",
            "name": title,
            "recipeIngredient": [f"{n + 1} cups flour" for n in range(ingredients)],
            "recipeInstructions": [f"step {n}" for n in range(steps)],
        }),
        URL,
    )


def test_validity_and_refine_thresholds():
    assert not is_valid_recipe(None)
    assert not is_valid_recipe(_partial(0, 3))
    assert not is_valid_recipe(_partial(3, 0))
    assert not is_valid_recipe(_partial(2, 2, title=""))

    thin = _partial(1, 1)
    assert is_valid_recipe(thin)
    assert not is_refine_eligible(thin)

    full = _partial(2, 2)
    assert is_valid_recipe(full)
    assert is_refine_eligible(full)
