"""
Browser session controller for the media crawler.

One CrawlSession is one Playwright driver + Chromium process + context +
page, owned by a single crawl request and torn down when the request ends.
Everything the session does to look like a regular desktop browser is
described by SessionProfile and applied once at launch.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, Tuple

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from src.extraction.dom_rules import SNAPSHOT_SCRIPT, DomSnapshot
from src.extraction.errors import CrawlTimeoutError, NavigationError
from src.utils.config import CrawlerConfig
from src.utils.logging_config import get_logger

logger = get_logger()

CHROME_ARGS = (
    # Stops Chromium from advertising navigator.webdriver
    "--disable-blink-features=AutomationControlled",
    "--disable-infobars",
    # Required in containers
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
)

STEALTH_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => false });
window.chrome = { runtime: {} };
"""

BLOCKED_RESOURCE_TYPES = frozenset({'stylesheet', 'font'})

MEDIA_READY_SELECTOR = 'img, video, iframe'


@dataclass(frozen=True)
class SessionProfile:
    """Fingerprint and launch settings applied to every new session"""
    user_agent: str
    viewport_width: int = 1920
    viewport_height: int = 1080
    headless: bool = True
    launch_args: Tuple[str, ...] = CHROME_ARGS
    init_script: str = STEALTH_SCRIPT
    blocked_resource_types: FrozenSet[str] = field(default=BLOCKED_RESOURCE_TYPES)

    @classmethod
    def from_config(cls, crawler_config: CrawlerConfig) -> 'SessionProfile':
        return cls(
            user_agent=crawler_config.user_agent,
            viewport_width=crawler_config.viewport_width,
            viewport_height=crawler_config.viewport_height,
            headless=crawler_config.headless
        )

    def browser_args(self) -> list:
        return list(self.launch_args) + [f"--window-size={self.viewport_width},{self.viewport_height}"]

    def context_options(self) -> Dict[str, Any]:
        return {
            'user_agent': self.user_agent,
            'viewport': {'width': self.viewport_width, 'height': self.viewport_height},
            'ignore_https_errors': True
        }


class CrawlSession:
    """A single-use browser session; use as ``async with CrawlSession(...)``"""

    def __init__(self, profile: SessionProfile, crawl_id: Optional[str] = None):
        self.profile = profile
        self.crawl_id = crawl_id
        self.page = None
        self._playwright = None
        self._browser = None
        self._context = None

    async def __aenter__(self) -> 'CrawlSession':
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def start(self):
        """Launch Chromium with the profile applied and open the page"""
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.profile.headless,
                args=self.profile.browser_args()
            )
            self._context = await self._browser.new_context(**self.profile.context_options())
            await self._context.add_init_script(self.profile.init_script)
            await self._context.route("**/*", self._route_request)

            self.page = await self._context.new_page()
            self.page.on("console", self._on_console)
            self.page.on("pageerror", self._on_page_error)
        except Exception:
            await self.close()
            raise

        logger.debug("Browser session started", crawl_id=self.crawl_id, stage='SESSION')
        return self.page

    async def close(self):
        """Release context, browser and driver; never raises"""
        for name, closer in (
            ('context', self._context.close if self._context else None),
            ('browser', self._browser.close if self._browser else None),
            ('playwright', self._playwright.stop if self._playwright else None),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except Exception as e:
                logger.warning(f"Failed to close {name}: {str(e)}", crawl_id=self.crawl_id, stage='SESSION')

        self.page = None
        self._context = None
        self._browser = None
        self._playwright = None
        logger.debug("Browser session closed", crawl_id=self.crawl_id, stage='SESSION')

    async def _route_request(self, route):
        if route.request.resource_type in self.profile.blocked_resource_types:
            await route.abort()
        else:
            await route.continue_()

    def _on_console(self, message):
        logger.debug(f"PAGE LOG: {message.text}", crawl_id=self.crawl_id, stage='PAGE')

    def _on_page_error(self, error):
        logger.debug(f"PAGE ERROR: {error}", crawl_id=self.crawl_id, stage='PAGE')

    async def navigate(self, url: str, timeout_ms: int):
        """Load url and wait for DOM ready and network idle within one budget.

        Raises CrawlTimeoutError when the budget runs out and NavigationError
        when the page cannot be reached or answers with status >= 400.
        """
        # Playwright treats a timeout of 0 as "wait forever"
        if timeout_ms <= 0:
            raise CrawlTimeoutError(url, timeout_ms)

        deadline = time.monotonic() + timeout_ms / 1000

        try:
            response = await self.page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise CrawlTimeoutError(url, timeout_ms) from e
        except PlaywrightError as e:
            raise NavigationError(url, reason=str(e)) from e

        if response is None:
            raise NavigationError(url)

        if response.status >= 400:
            raise NavigationError(url, status=response.status, reason=response.status_text)

        remaining_ms = int((deadline - time.monotonic()) * 1000)
        if remaining_ms <= 0:
            raise CrawlTimeoutError(url, timeout_ms)

        try:
            await self.page.wait_for_load_state("networkidle", timeout=remaining_ms)
        except PlaywrightTimeoutError as e:
            raise CrawlTimeoutError(url, timeout_ms) from e
        except PlaywrightError as e:
            raise NavigationError(url, reason=str(e)) from e

        logger.info(f"Page loaded with status {response.status}", crawl_id=self.crawl_id, stage='SESSION')
        return response

    async def wait_for_media(self, timeout_ms: int) -> bool:
        """Wait until any image, video or iframe is attached; a timeout is not an error"""
        if timeout_ms <= 0:
            # Playwright reads 0 as no timeout at all
            logger.debug("Media wait disabled", crawl_id=self.crawl_id, stage='SESSION')
            return False
        try:
            await self.page.wait_for_selector(MEDIA_READY_SELECTOR, state="attached", timeout=timeout_ms)
            return True
        except PlaywrightError as e:
            logger.debug(f"No media element appeared: {str(e)}", crawl_id=self.crawl_id, stage='SESSION')
            return False

    async def settle(self, delay_ms: int):
        await asyncio.sleep(delay_ms / 1000)

    async def snapshot(self) -> DomSnapshot:
        """Capture the current DOM state; raises PlaywrightError if the page is gone"""
        data = await self.page.evaluate(SNAPSHOT_SCRIPT)
        return DomSnapshot.from_dict(data)

    async def screenshot(self, path: str):
        try:
            await self.page.screenshot(path=path)
            logger.debug(f"Debug screenshot written to {path}", crawl_id=self.crawl_id, stage='SESSION')
        except PlaywrightError as e:
            logger.warning(f"Failed to take screenshot: {str(e)}", crawl_id=self.crawl_id, stage='SESSION')
