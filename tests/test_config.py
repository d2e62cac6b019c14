import pytest

from recipe_agent.config import DEFAULT_JS_DOMAINS, Settings

ENV_VARS = [
    "GOOGLE_API_KEY",
    "GEMINI_MODEL",
    "RECIPE_FETCH_TIMEOUT",
    "RECIPE_AI_ENABLED",
    "RECIPE_AI_TIMEOUT",
    "RECIPE_MIN_CONTENT_LENGTH",
    "RECIPE_MAX_RENDERED_PAGES",
    "RECIPE_JS_DOMAINS",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()
    assert settings.google_api_key is None
    assert settings.ai_enabled is True
    assert settings.fetch_timeout == 30.0
    assert settings.min_content_length == 500
    assert settings.js_domains == DEFAULT_JS_DOMAINS


def test_from_env(clean_env):
    clean_env.setenv("GOOGLE_API_KEY", "abc")
    clean_env.setenv("GEMINI_MODEL", "gemini-2.5-pro")
    clean_env.setenv("RECIPE_FETCH_TIMEOUT", "12.5")
    clean_env.setenv("RECIPE_AI_ENABLED", "false")
    clean_env.setenv("RECIPE_MIN_CONTENT_LENGTH", "200")
    clean_env.setenv("RECIPE_JS_DOMAINS", " Example.com, foo.co.il ,")

    settings = Settings.from_env()

    assert settings.google_api_key == "abc"
    assert settings.gemini_model == "gemini-2.5-pro"
    assert settings.fetch_timeout == 12.5
    assert settings.ai_enabled is False
    assert settings.min_content_length == 200
    assert settings.js_domains == ("example.com", "foo.co.il")


def test_empty_api_key_counts_as_missing(clean_env):
    clean_env.setenv("GOOGLE_API_KEY", "")
    assert Settings.from_env().google_api_key is None


def test_bad_number(clean_env):
    clean_env.setenv("RECIPE_FETCH_TIMEOUT", "soon")
    with pytest.raises(ValueError, match="RECIPE_FETCH_TIMEOUT"):
        Settings.from_env()


@pytest.mark.parametrize(
    "host, expected",
    [
        ("foody.co.il", True),
        ("www.foody.co.il", True),
        ("WWW.MAKO.CO.IL", True),
        ("notfoody.co.il", False),
        ("example.com", False),
    ],
)
def test_requires_rendering(host, expected):
    assert Settings().requires_rendering(host) is expected


def test_replace_keeps_original():
    base = Settings()
    changed = base.replace(ai_enabled=False)
    assert base.ai_enabled is True
    assert changed.ai_enabled is False
