"""
Runtime settings read from the environment. Load .env (python-dotenv) before
calling Settings.from_env(); entry points do this at startup.
"""
import dataclasses
import os
from dataclasses import dataclass

# Hosts whose recipe content only appears after client-side rendering
DEFAULT_JS_DOMAINS = ("foody.co.il", "mako.co.il", "ynet.co.il", "10tv.co.il", "walla.co.il")

DEFAULT_GEMINI_MODEL = "gemini-flash-latest"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    """Pipeline settings. Immutable; use replace() for per-call overrides."""
    google_api_key: str | None = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    fetch_timeout: float = 30.0
    ai_enabled: bool = True
    ai_timeout: float = 90.0
    min_content_length: int = 500
    max_rendered_pages: int = 2
    js_domains: tuple[str, ...] = DEFAULT_JS_DOMAINS

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            google_api_key=os.environ.get("GOOGLE_API_KEY") or None,
            gemini_model=os.environ.get("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            fetch_timeout=_env_float("RECIPE_FETCH_TIMEOUT", 30.0),
            ai_enabled=_env_bool("RECIPE_AI_ENABLED", True),
            ai_timeout=_env_float("RECIPE_AI_TIMEOUT", 90.0),
            min_content_length=_env_int("RECIPE_MIN_CONTENT_LENGTH", 500),
            max_rendered_pages=_env_int("RECIPE_MAX_RENDERED_PAGES", 2),
            js_domains=_env_list("RECIPE_JS_DOMAINS", DEFAULT_JS_DOMAINS),
        )

    def replace(self, **changes) -> "Settings":
        return dataclasses.replace(self, **changes)

    def requires_rendering(self, host: str) -> bool:
        """True if host (or a parent domain) is on the JS-rendered list."""
        host = host.lower()
        return any(host == d or host.endswith("." + d) for d in self.js_domains)
