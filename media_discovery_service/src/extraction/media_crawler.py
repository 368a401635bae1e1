import asyncio
import time
import uuid
from typing import List, Optional

from src.extraction.aggregator import MediaAggregator
from src.extraction.assembler import assemble_assets
from src.extraction.explorer import InteractionExplorer, extraction_pass
from src.extraction.session import CrawlSession, SessionProfile
from src.models.media import MediaAsset
from src.utils.config import CrawlerConfig, get_config
from src.utils.logging_config import get_logger

logger = get_logger()


async def run_crawl(target_url: str, crawler_config: Optional[CrawlerConfig] = None,
                    crawl_id: Optional[str] = None) -> List[MediaAsset]:
    """Discover the media on one listing page.

    Steps:
        1. Launch a fresh browser session with the spoofed profile.
        2. Navigate; a bad status or a navigation timeout aborts the crawl.
        3. Wait for media elements, let the page settle, extract.
        4. Click gallery-like elements, extracting after each click.
        5. Close the browser (always, even on error) and assemble the assets.
    """
    crawler_config = crawler_config or get_config().crawler
    crawl_id = crawl_id or uuid.uuid4().hex[:8]
    aggregator = MediaAggregator()
    start_time = time.time()

    logger.log_crawl_start(crawl_id, target_url)

    try:
        async with CrawlSession(SessionProfile.from_config(crawler_config), crawl_id) as session:
            await session.navigate(target_url, crawler_config.navigation_timeout_ms)
            await session.wait_for_media(crawler_config.media_wait_timeout_ms)
            await session.settle(crawler_config.load_settle_ms)

            if crawler_config.debug_screenshot_path:
                await session.screenshot(crawler_config.debug_screenshot_path)

            await extraction_pass(session, aggregator, 'initial', crawl_id)

            explorer = InteractionExplorer(session, aggregator, crawler_config, crawl_id=crawl_id)
            clicks = await explorer.explore()
            logger.info(f"Exploration finished after {clicks} clicks", crawl_id=crawl_id, stage='EXPLORE')
    except Exception as e:
        logger.log_crawl_failed(crawl_id, str(e), time.time() - start_time)
        raise

    assets = assemble_assets(aggregator)
    counts = aggregator.counts()
    logger.log_crawl_complete(
        crawl_id, time.time() - start_time, counts['images'], counts['videos'], counts['floorplans']
    )
    return assets


def crawl_media(target_url: str, crawler_config: Optional[CrawlerConfig] = None) -> List[MediaAsset]:
    """Blocking wrapper that runs one crawl on its own event loop"""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(run_crawl(target_url, crawler_config))
    finally:
        loop.close()
