"""End-to-end crawl orchestration tests with a fake browser session"""

from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.extraction import media_crawler
from src.extraction.dom_rules import DomSnapshot, ImageCandidate
from src.extraction.errors import CrawlTimeoutError, NavigationError
from src.extraction.media_crawler import crawl_media, run_crawl
from src.models.media import MediaCategory

from conftest import make_element

URL = "https://listings.example.com/homes/42"


@pytest.fixture
def install_session(monkeypatch):
    """Swap CrawlSession for a fake; returns a function configuring it"""
    created = []

    def install(snapshots, navigate_error=None, elements=None):
        class FakeSession:
            def __init__(self, profile, crawl_id=None):
                self.profile = profile
                self.crawl_id = crawl_id
                self.closed = False
                self.page = MagicMock()
                self.page.query_selector_all = AsyncMock(
                    side_effect=lambda selector: (elements or {}).get(selector, [])
                )
                self.navigate = AsyncMock(side_effect=navigate_error)
                self.wait_for_media = AsyncMock(return_value=False)
                self.settle = AsyncMock()
                self.screenshot = AsyncMock()
                self.snapshot = AsyncMock(side_effect=list(snapshots))
                created.append(self)

            async def __aenter__(self):
                return self

            async def __aexit__(self, exc_type, exc, tb):
                self.closed = True

        monkeypatch.setattr(media_crawler, 'CrawlSession', FakeSession)
        return created

    return install


class TestRunCrawl:

    @pytest.mark.asyncio
    async def test_image_and_background_become_two_assets(self, install_session, listing_snapshot, fast_config):
        sessions = install_session([listing_snapshot])

        assets = await run_crawl(URL, fast_config)

        assert [(asset.id, asset.url) for asset in assets] == [
            ("img-0", "https://listings.example.com/a.jpg"),
            ("img-1", "https://listings.example.com/b.jpg"),
        ]
        session = sessions[0]
        assert session.closed
        session.navigate.assert_awaited_once_with(URL, fast_config.navigation_timeout_ms)
        session.wait_for_media.assert_awaited_once_with(fast_config.media_wait_timeout_ms)
        session.settle.assert_awaited_once_with(fast_config.load_settle_ms)
        session.screenshot.assert_not_called()

    @pytest.mark.asyncio
    async def test_404_fails_with_no_assets(self, install_session, listing_snapshot, fast_config):
        sessions = install_session([listing_snapshot], navigate_error=NavigationError(URL, status=404))

        with pytest.raises(NavigationError):
            await run_crawl(URL, fast_config)

        assert sessions[0].closed
        sessions[0].snapshot.assert_not_called()

    @pytest.mark.asyncio
    async def test_navigation_timeout_propagates(self, install_session, fast_config):
        sessions = install_session([], navigate_error=CrawlTimeoutError(URL, 45000))

        with pytest.raises(TimeoutError):
            await run_crawl(URL, fast_config)
        assert sessions[0].closed

    @pytest.mark.asyncio
    async def test_exploration_adds_media_across_rounds(self, install_session, listing_snapshot, fast_config):
        after_click = DomSnapshot(
            page_url=URL,
            origin="https://listings.example.com",
            images=[
                ImageCandidate(src="b.jpg"),
                ImageCandidate(src="c.jpg"),
                ImageCandidate(src="/plans/floor-plan.png"),
            ],
            videos=["/tour.mp4"]
        )
        install_session(
            [listing_snapshot, after_click],
            elements={'button': [make_element("View gallery"), make_element("Share")]}
        )

        assets = await run_crawl(URL, fast_config)

        assert [asset.to_dict() for asset in assets] == [
            {'id': 'img-0', 'url': 'https://listings.example.com/a.jpg', 'type': 'image', 'selected': False},
            {'id': 'img-1', 'url': 'https://listings.example.com/b.jpg', 'type': 'image', 'selected': False},
            {'id': 'img-2', 'url': 'https://listings.example.com/c.jpg', 'type': 'image', 'selected': False},
            {'id': 'video-0', 'url': 'https://listings.example.com/tour.mp4', 'type': 'video', 'selected': False},
            {'id': 'floorplan-0', 'url': 'https://listings.example.com/plans/floor-plan.png', 'type': 'image',
             'category': MediaCategory.FLOORPLAN.value, 'selected': False},
        ]

    @pytest.mark.asyncio
    async def test_no_gallery_elements_equals_initial_extraction(self, install_session, listing_snapshot, fast_config):
        sessions = install_session([listing_snapshot], elements={'a': [make_element("Contact us")]})

        assets = await run_crawl(URL, fast_config)

        assert [asset.url for asset in assets] == [
            "https://listings.example.com/a.jpg",
            "https://listings.example.com/b.jpg",
        ]
        assert sessions[0].snapshot.await_count == 1

    @pytest.mark.asyncio
    async def test_debug_screenshot(self, install_session, listing_snapshot, fast_config):
        sessions = install_session([listing_snapshot])

        await run_crawl(URL, replace(fast_config, debug_screenshot_path="/tmp/debug-screenshot.png"))

        sessions[0].screenshot.assert_awaited_once_with("/tmp/debug-screenshot.png")


def test_crawl_media_runs_on_its_own_loop(install_session, listing_snapshot, fast_config):
    install_session([listing_snapshot])

    assets = crawl_media(URL, fast_config)

    assert [asset.id for asset in assets] == ["img-0", "img-1"]
