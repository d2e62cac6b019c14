"""
Headless Chromium rendering for pages whose recipe only appears after
client-side JavaScript runs.

One browser process is launched lazily and shared; every render gets its own
isolated context and page, which are always closed. Images, fonts, media,
stylesheets and ad/tracking hosts are blocked to keep renders fast.
"""
import asyncio
import logging

from playwright.async_api import Browser, BrowserContext, Error as PlaywrightError, Playwright, Route, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from recipe_agent.errors import FetchError

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
HEBREW_ACCEPT_LANGUAGE = "he-IL,he;q=0.9,en-US;q=0.8,en;q=0.7"

BLOCKED_RESOURCE_TYPES = frozenset({"image", "media", "font", "stylesheet"})

BLOCKED_HOST_MARKERS = (
    "googleads",
    "googlesyndication",
    "doubleclick",
    "facebook.com/tr",
    "connect.facebook",
    "analytics",
    "tracking",
    "adservice",
    "amazon-adsystem",
    "criteo",
    "taboola",
    "outbrain",
)

LAUNCH_ARGS = [
    "--disable-dev-shm-usage",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-gpu",
]

# Extra wait after the body appears, for late client-side rendering
SETTLE_DELAY_MS = 2000
BODY_WAIT_MS = 5000


def should_block(resource_type: str, url: str) -> bool:
    """True for heavy resource types and known ad/tracking hosts."""
    if resource_type in BLOCKED_RESOURCE_TYPES:
        return True
    lowered = url.lower()
    return any(marker in lowered for marker in BLOCKED_HOST_MARKERS)


async def _route_handler(route: Route) -> None:
    request = route.request
    if should_block(request.resource_type, request.url):
        await route.abort()
    else:
        await route.continue_()


class RenderedBrowser:
    """Shared headless Chromium; render(url) returns the page HTML after scripts run."""

    def __init__(self, max_pages: int = 2):
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._start_lock = asyncio.Lock()
        self._pages = asyncio.Semaphore(max(1, max_pages))

    async def _ensure_browser(self) -> Browser:
        async with self._start_lock:
            if self._browser is None or not self._browser.is_connected():
                logger.info("Launching headless Chromium")
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(headless=True, args=LAUNCH_ARGS)
            return self._browser

    async def render(self, url: str, timeout: float = 30.0) -> str:
        """Navigate to url in a fresh context and return the rendered HTML. Raises FetchError."""
        timeout_ms = int(timeout * 1000)
        async with self._pages:
            try:
                browser = await self._ensure_browser()
            except PlaywrightError as e:
                raise FetchError(f"Failed to launch browser: {e}") from e
            context: BrowserContext | None = None
            try:
                context = await browser.new_context(
                    user_agent=BROWSER_USER_AGENT,
                    locale="he-IL",
                    viewport={"width": 1280, "height": 800},
                    java_script_enabled=True,
                    extra_http_headers={"Accept-Language": HEBREW_ACCEPT_LANGUAGE},
                )
                page = await context.new_page()
                await page.route("**/*", _route_handler)
                try:
                    response = await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
                except PlaywrightTimeoutError:
                    logger.warning("DOM load timed out for %s, retrying until first response", url)
                    response = await page.goto(url, wait_until="commit", timeout=timeout_ms)
                if response is not None and response.status >= 400:
                    raise FetchError(f"HTTP {response.status} for {url}")
                try:
                    await page.wait_for_selector("body", timeout=BODY_WAIT_MS)
                except PlaywrightTimeoutError:
                    logger.debug("No <body> after %d ms on %s", BODY_WAIT_MS, url)
                await page.wait_for_timeout(SETTLE_DELAY_MS)
                return await page.content()
            except PlaywrightTimeoutError as e:
                raise FetchError(f"Navigation timed out after {timeout:g}s: {url}") from e
            except PlaywrightError as e:
                raise FetchError(str(e)) from e
            finally:
                if context is not None:
                    try:
                        await context.close()
                    except PlaywrightError as e:
                        logger.warning("Failed to close browser context for %s: %s", url, e)

    async def close(self) -> None:
        """Close the shared browser and stop playwright. Safe to call more than once."""
        if self._browser is not None:
            try:
                await self._browser.close()
            finally:
                self._browser = None
        if self._playwright is not None:
            try:
                await self._playwright.stop()
            finally:
                self._playwright = None
