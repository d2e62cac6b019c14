"""
Fetch a recipe page and reduce it to main content.

smart_fetch() tries a plain HTTP GET first and only pays for a headless
browser render when the host is known to need JavaScript, when the GET fails,
or when the cleaned text is too thin to hold a recipe.
"""
import dataclasses
import logging
import re
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar
from urllib.parse import urljoin, urlparse

import httpx
import trafilatura

from recipe_agent.browser import BROWSER_USER_AGENT, HEBREW_ACCEPT_LANGUAGE, RenderedBrowser
from recipe_agent.config import Settings
from recipe_agent.errors import FetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Browser-like headers so some sites don't return 403 for bots
DEFAULT_HEADERS = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": HEBREW_ACCEPT_LANGUAGE,
}

# Whole-page text fallback is capped; the model input is truncated further downstream
MAX_FALLBACK_CHARS = 50000

# Match og:image or twitter:image meta tags (content="...")
_IMAGE_META_RE = re.compile(
    r'<meta[^>]+(?:property|name)=["\'](?:og:image|twitter:image)["\'][^>]+content=["\']([^"\']+)["\']'
    r'|<meta[^>]+content=["\']([^"\']+)["\'][^>]+(?:property|name)=["\'](?:og:image|twitter:image)["\']',
    re.IGNORECASE,
)
_ITEMPROP_IMAGE_RE = re.compile(
    r'<(?:img|meta|link)[^>]+itemprop=["\']image["\'][^>]+(?:src|content|href)=["\']([^"\']+)["\']'
    r'|<(?:img|meta|link)[^>]+(?:src|content|href)=["\']([^"\']+)["\'][^>]+itemprop=["\']image["\']',
    re.IGNORECASE,
)
_RECIPE_IMG_RE = re.compile(
    r'<img[^>]+class=["\'][^"\']*recipe[^"\']*["\'][^>]+src=["\']([^"\']+)["\']'
    r'|<img[^>]+src=["\']([^"\']+)["\'][^>]+class=["\'][^"\']*recipe[^"\']*["\']',
    re.IGNORECASE,
)


@dataclass
class FetchResult:
    """A fetched page: raw HTML plus the main-content reduction of it."""
    url: str
    html: str
    cleaned_text: str
    cleaned_html: Optional[str] = None
    title: Optional[str] = None
    byline: Optional[str] = None
    site_name: Optional[str] = None
    excerpt: Optional[str] = None
    fetch_time_ms: int = 0
    rendered: bool = False


def clean_html(html: str, url: str) -> FetchResult:
    """Extract main article text, an HTML fragment and page metadata; whole-page text if no article is found."""
    text = trafilatura.extract(
        html,
        url=url,
        include_comments=False,
        include_tables=True,
        favor_recall=True,
        output_format="txt",
    )
    fragment = trafilatura.extract(
        html,
        url=url,
        include_comments=False,
        include_tables=True,
        favor_recall=True,
        output_format="html",
    )
    if not text or not text.strip():
        # No article found: keep the whole page's text so downstream still has something
        text = (trafilatura.html2txt(html) or "")[:MAX_FALLBACK_CHARS]
        fragment = None
    metadata = trafilatura.extract_metadata(html, default_url=url)
    return FetchResult(
        url=url,
        html=html,
        cleaned_text=text.strip(),
        cleaned_html=fragment,
        title=getattr(metadata, "title", None),
        byline=getattr(metadata, "author", None),
        site_name=getattr(metadata, "sitename", None),
        excerpt=getattr(metadata, "description", None),
    )


def _resolve_image(raw: str, page_url: str) -> Optional[str]:
    raw = raw.strip()
    if not raw or raw.startswith("data:"):
        return None
    if raw.startswith("//"):
        return "https:" + raw
    if not raw.startswith("http"):
        return urljoin(page_url, raw)
    return raw


def extract_image_url(html: str, page_url: str) -> Optional[str]:
    """Main image URL from og:image/twitter:image, itemprop=image or a recipe-classed <img>, or None."""
    if not html:
        return None
    for pattern in (_IMAGE_META_RE, _ITEMPROP_IMAGE_RE, _RECIPE_IMG_RE):
        m = pattern.search(html)
        if not m:
            continue
        resolved = _resolve_image(m.group(1) or m.group(2) or "", page_url)
        if resolved:
            return resolved
    return None


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class RecipeFetcher:
    """
    Page fetcher with an HTTP-first, headless-render-fallback strategy.

    Owns an httpx client and (lazily) a shared headless browser. Use as an async
    context manager, or call close() explicitly:

        async with RecipeFetcher(settings) as fetcher:
            page = await fetcher.smart_fetch(url)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        browser: RenderedBrowser | None = None,
    ):
        self.settings = settings or Settings()
        self._client = httpx.AsyncClient(
            follow_redirects=True,
            headers=DEFAULT_HEADERS,
            timeout=self.settings.fetch_timeout,
            transport=transport,
        )
        self._browser = browser

    async def __aenter__(self) -> "RecipeFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def browser(self) -> RenderedBrowser:
        if self._browser is None:
            self._browser = RenderedBrowser(max_pages=self.settings.max_rendered_pages)
        return self._browser

    async def simple_fetch(self, url: str) -> FetchResult:
        """Plain HTTP GET, cleaned. Raises FetchError on network errors and non-2xx responses."""
        start = time.perf_counter()
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(f"HTTP {e.response.status_code} for {url}") from e
        except httpx.RequestError as e:
            raise FetchError(f"{type(e).__name__}: {e}") from e
        result = clean_html(resp.text, str(resp.url))
        return dataclasses.replace(result, fetch_time_ms=_elapsed_ms(start))

    async def rendered_fetch(self, url: str) -> FetchResult:
        """Render the page in headless Chromium, then clean it. Raises FetchError."""
        start = time.perf_counter()
        html = await self.browser.render(url, timeout=self.settings.fetch_timeout)
        result = clean_html(html, url)
        return dataclasses.replace(result, fetch_time_ms=_elapsed_ms(start), rendered=True)

    async def smart_fetch(self, url: str) -> FetchResult:
        """
        Fetch url with the cheapest strategy that yields usable content.

        JS-required host -> render. Otherwise GET; keep it if the cleaned text is
        longer than min_content_length, else (or on any GET failure) render.
        One attempt per strategy, no retries.
        """
        host = urlparse(url).hostname or ""
        if self.settings.requires_rendering(host):
            logger.info("Rendering %s (host needs JavaScript)", url)
            return await self.rendered_fetch(url)
        try:
            result = await self.simple_fetch(url)
        except FetchError as e:
            logger.warning("HTTP fetch failed for %s (%s), falling back to headless browser", url, e)
            return await self.rendered_fetch(url)
        if len(result.cleaned_text) > self.settings.min_content_length:
            logger.info("Fetched %s over HTTP (%d chars of content)", url, len(result.cleaned_text))
            return result
        logger.info(
            "Only %d chars of content from %s, rendering with headless browser",
            len(result.cleaned_text), url,
        )
        return await self.rendered_fetch(url)

    async def close(self) -> None:
        """Close the HTTP client and the browser (if one was started)."""
        try:
            await self._client.aclose()
        finally:
            if self._browser is not None:
                await self._browser.close()


async def with_fetcher(
    fn: Callable[[RecipeFetcher], Awaitable[T]],
    settings: Settings | None = None,
) -> T:
    """Run fn with a fresh fetcher that is always closed afterwards."""
    async with RecipeFetcher(settings) as fetcher:
        return await fn(fetcher)
