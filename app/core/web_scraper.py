"""Page fetching and content-block parsing for the knowledge scrapers.

Pages are fetched either with plain HTTP (httpx) or rendered in headless
Chromium (Playwright). Both paths hand raw HTML to BeautifulSoup.
"""

from typing import Any

import httpx
from bs4 import BeautifulSoup, Tag

from app.core.config import get_settings
from app.core.logging import get_logger

logger = get_logger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
BROWSER_VIEWPORT = {"width": 1920, "height": 1080}
BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
]

HEADING_SELECTOR = "h1, h2, h3, h4"
TEXT_SELECTOR = "p, li"


async def fetch_html(url: str, timeout: int | None = None) -> str:
    """
    Fetch a page over plain HTTP.

    Raises:
        httpx.HTTPStatusError: If the server answers with an error status
        httpx.TimeoutException: If the request times out
    """
    request_timeout = timeout or get_settings().SCRAPE_TIMEOUT_SECONDS
    async with httpx.AsyncClient(
        timeout=request_timeout,
        follow_redirects=True,
        headers={"User-Agent": BROWSER_USER_AGENT},
    ) as client:
        response = await client.get(url)
        response.raise_for_status()
        return response.text


class BrowserSession:
    """
    A headless Chromium instance shared across one scraping run.

    Usage:
        async with BrowserSession() as browser:
            html = await browser.fetch_rendered_html(url, wait_selector="main")
    """

    def __init__(self) -> None:
        self._playwright = None
        self._browser = None

    async def start(self) -> None:
        from playwright.async_api import async_playwright

        logger.info("Launching headless browser")
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(headless=True, args=BROWSER_ARGS)
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise

    async def close(self) -> None:
        if self._browser is not None:
            logger.info("Closing headless browser")
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def __aenter__(self) -> "BrowserSession":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._browser is not None

    async def fetch_rendered_html(
        self,
        url: str,
        wait_selector: str | None = None,
        timeout_ms: int = 30000,
        selector_timeout_ms: int = 10000,
        settle_ms: int = 2000,
    ) -> str:
        """
        Render a page and return its HTML once the network is idle.

        A missing ``wait_selector`` is not an error; the full page is returned.

        Raises:
            RuntimeError: If the browser has not been started
        """
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError

        if self._browser is None:
            raise RuntimeError("Browser not available")

        context = await self._browser.new_context(user_agent=BROWSER_USER_AGENT, viewport=BROWSER_VIEWPORT)
        try:
            page = await context.new_page()
            await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
            if wait_selector:
                try:
                    await page.wait_for_selector(wait_selector, timeout=selector_timeout_ms)
                except PlaywrightTimeoutError:
                    logger.debug(f"No content selector found on {url}, using full page")
            await page.wait_for_timeout(settle_ms)
            return await page.content()
        finally:
            await context.close()


def _texts(element: Tag, selector: str) -> list[str]:
    return [t for t in (el.get_text(" ", strip=True) for el in element.select(selector)) if t]


def extract_content_blocks(
    html: str,
    selectors: list[str],
    tip_selector: str,
    first_match: bool = False,
    fallback_selector: str | None = None,
) -> list[dict[str, Any]]:
    """
    Pull titled text blocks out of a page.

    Args:
        html: Page HTML
        selectors: Block selectors
        tip_selector: Selector for callouts inside a block
        first_match: Use only the first selector that matches anything
        fallback_selector: Selector to use when no block selector matches

    Returns:
        List of {title, content, tips}. Blocks without a heading or body text are skipped.
    """
    soup = BeautifulSoup(html, "html.parser")

    if first_match:
        elements: list[Tag] = []
        for selector in selectors:
            elements = soup.select(selector)
            if elements:
                break
    else:
        elements = soup.select(", ".join(selectors))

    if not elements and fallback_selector:
        elements = soup.select(fallback_selector)

    blocks = []
    for element in elements:
        heading = element.select_one(HEADING_SELECTOR)
        title = heading.get_text(" ", strip=True) if heading else ""
        text = " ".join(_texts(element, TEXT_SELECTOR))
        if title and text:
            blocks.append({"title": title, "content": text, "tips": _texts(element, tip_selector)})
    return blocks
