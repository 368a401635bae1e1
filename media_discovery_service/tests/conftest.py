"""Shared fixtures: fake Playwright sessions and DOM snapshots."""

import os
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add the parent directory of src to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir)))

from src.extraction.dom_rules import BackgroundCandidate, DomSnapshot, ImageCandidate
from src.utils.config import CrawlerConfig


@pytest.fixture
def listing_snapshot():
    """One <img src="a.jpg"> and a div whose computed background is b.jpg"""
    return DomSnapshot(
        page_url="https://listings.example.com/homes/42",
        origin="https://listings.example.com",
        images=[ImageCandidate(src="a.jpg", alt="Front of house")],
        backgrounds=[BackgroundCandidate(value='url("b.jpg")', hint="hero")]
    )


@pytest.fixture
def fast_config():
    """Crawler config with every wait reduced to zero"""
    return CrawlerConfig(
        navigation_timeout_ms=1000,
        media_wait_timeout_ms=0,
        load_settle_ms=0,
        click_settle_ms=0,
        click_timeout_ms=100
    )


def make_element(text, click_error=None):
    """Fake ElementHandle with the given text content"""
    element = MagicMock()
    element.text_content = AsyncMock(return_value=text)
    element.click = AsyncMock(side_effect=click_error)
    return element


@pytest.fixture
def fake_session():
    """Fake CrawlSession: query results are set per selector in session.elements"""
    session = MagicMock()
    session.elements = {}
    session.page = MagicMock()

    async def query_selector_all(selector):
        result = session.elements.get(selector, [])
        if isinstance(result, Exception):
            raise result
        return result

    session.page.query_selector_all = AsyncMock(side_effect=query_selector_all)
    session.settle = AsyncMock()
    session.snapshot = AsyncMock(return_value=DomSnapshot(page_url="https://x.example.com/", origin="https://x.example.com"))
    return session
