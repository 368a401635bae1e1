"""
Interaction explorer: clicks gallery-like elements to reveal hidden media.

Tabbed galleries and "show all photos" buttons often only render their
images after a click. The explorer walks a fixed selector table, clicks
every element whose text mentions a gallery keyword, lets the page settle and
runs another extraction pass. Every failure on the way (bad selector,
detached element, unclickable target) is logged and skipped.
"""

from typing import List, Optional

from playwright.async_api import Error as PlaywrightError

from src.extraction.aggregator import MediaAggregator
from src.extraction.dom_rules import extract_media
from src.extraction.errors import ExtractionSkip
from src.extraction.session import CrawlSession
from src.utils.config import CrawlerConfig
from src.utils.logging_config import get_logger

logger = get_logger()

# Tab and gallery patterns first, then every button and link
GALLERY_SELECTORS = [
    '[data-tab]',
    '[role="tab"]',
    '.tab',
    '[class*="tab"]',
    '[class*="gallery"]',
    '[class*="photo"]',
    'button',
    'a',
]

GALLERY_KEYWORDS = ['gallery', 'photo', 'image']


def matches_keyword(text: Optional[str], keywords: List[str] = GALLERY_KEYWORDS) -> bool:
    if not text:
        return False
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


async def extraction_pass(session: CrawlSession, aggregator: MediaAggregator, label: str,
                          crawl_id: Optional[str] = None) -> int:
    """Snapshot the page, extract media and merge it; returns the number of new URLs"""
    try:
        snapshot = await session.snapshot()
    except PlaywrightError as e:
        logger.log_skip(crawl_id, ExtractionSkip(label, f"snapshot failed: {str(e)}"))
        return 0

    batch = extract_media(snapshot)
    added = aggregator.merge(batch)
    logger.log_extraction_pass(
        crawl_id, label, len(batch.images), len(batch.videos), len(batch.floorplans), added
    )
    return added


class InteractionExplorer:
    """Drives zero or more click → settle → extract rounds on a live session"""

    def __init__(self, session: CrawlSession, aggregator: MediaAggregator, crawler_config: CrawlerConfig,
                 selectors: Optional[List[str]] = None, keywords: Optional[List[str]] = None,
                 crawl_id: Optional[str] = None):
        self.session = session
        self.aggregator = aggregator
        self.config = crawler_config
        self.selectors = selectors if selectors is not None else GALLERY_SELECTORS
        self.keywords = keywords if keywords is not None else GALLERY_KEYWORDS
        self.crawl_id = crawl_id
        self.clicks = 0
        self._idle_clicks = 0

    def _should_stop(self) -> bool:
        if self.config.max_clicks is not None and self.clicks >= self.config.max_clicks:
            logger.info(f"Click limit of {self.config.max_clicks} reached", crawl_id=self.crawl_id, stage='EXPLORE')
            return True
        idle_limit = self.config.stop_after_idle_clicks
        if idle_limit is not None and self._idle_clicks >= idle_limit:
            logger.info(f"No new media after {idle_limit} clicks, stopping", crawl_id=self.crawl_id, stage='EXPLORE')
            return True
        return False

    async def _query(self, selector: str) -> list:
        try:
            return await self.session.page.query_selector_all(selector)
        except PlaywrightError as e:
            logger.log_skip(self.crawl_id, ExtractionSkip(selector, str(e)))
            return []

    async def _text_of(self, element, selector: str) -> str:
        try:
            return await element.text_content() or ''
        except PlaywrightError as e:
            logger.log_skip(self.crawl_id, ExtractionSkip(selector, f"unreadable element: {str(e)}"))
            return ''

    async def _click(self, element, selector: str):
        if self.config.click_timeout_ms <= 0:
            # Playwright reads 0 as no timeout; an unclickable element would block forever
            logger.log_skip(self.crawl_id, ExtractionSkip(selector, "click timeout is not positive"))
            return
        try:
            await element.click(timeout=self.config.click_timeout_ms)
        except PlaywrightError as e:
            logger.log_skip(self.crawl_id, ExtractionSkip(selector, f"click failed: {str(e)}"))

    async def explore(self) -> int:
        """Run every qualifying click in selector order; returns the number of clicks"""
        for selector in self.selectors:
            for element in await self._query(selector):
                if self._should_stop():
                    return self.clicks

                text = await self._text_of(element, selector)
                if not matches_keyword(text, self.keywords):
                    continue

                logger.info(
                    f"Found potential gallery element: {' '.join(text.split())[:80]}",
                    crawl_id=self.crawl_id, stage='EXPLORE'
                )
                await self._click(element, selector)
                self.clicks += 1
                await self.session.settle(self.config.click_settle_ms)

                added = await extraction_pass(
                    self.session, self.aggregator, f"click {self.clicks} ({selector})", self.crawl_id
                )
                self._idle_clicks = 0 if added else self._idle_clicks + 1

        return self.clicks
