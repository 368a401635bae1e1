"""HTTP handler tests through the Flask test client"""

import pytest

from src.extraction.errors import CrawlTimeoutError, NavigationError, ProfileFetchError
from src.main import create_app
from src.models.media import (
    AgentDetails,
    MediaAsset,
    MediaCategory,
    MediaType,
    ProfileCandidateImage,
    ProfileResult,
)
from src.routes import media as media_routes

URL = "https://listings.example.com/homes/42"


@pytest.fixture
def client():
    app = create_app()
    app.config['TESTING'] = True
    return app.test_client()


@pytest.fixture
def crawled(monkeypatch):
    """Replace the crawler; returns the list of URLs it was called with"""
    calls = []
    assets = [
        MediaAsset(id="img-0", url="https://listings.example.com/photos/1.jpg", type=MediaType.IMAGE),
        MediaAsset(id="img-1", url="https://listings.example.com/assets/logo.png", type=MediaType.IMAGE),
        MediaAsset(id="floorplan-0", url="https://listings.example.com/plan.png", type=MediaType.IMAGE,
                   category=MediaCategory.FLOORPLAN),
    ]

    def fake_crawl(url):
        calls.append(url)
        return assets

    monkeypatch.setattr(media_routes, 'crawl_media', fake_crawl)
    return calls


def failing_crawl(error):
    def crawl(url):
        raise error
    return crawl


class TestScrapeRoute:

    def test_returns_assets(self, client, crawled):
        resp = client.post('/api/scrape', json={'url': f"  {URL}  "})

        assert resp.status_code == 200
        assert crawled == [URL]
        assets = resp.get_json()['assets']
        assert [asset['id'] for asset in assets] == ["img-0", "img-1", "floorplan-0"]
        assert all(asset['selected'] is False for asset in assets)
        assert assets[2]['category'] == 'floorplan'

    def test_filter_drops_ui_images(self, client, crawled):
        resp = client.post('/api/scrape', json={'url': URL, 'filter': True})
        assert [asset['id'] for asset in resp.get_json()['assets']] == ["img-0", "floorplan-0"]

    @pytest.mark.parametrize("flag", [False, None])
    def test_false_filter_keeps_everything(self, client, crawled, flag):
        resp = client.post('/api/scrape', json={'url': URL, 'filter': flag})
        assert [asset['id'] for asset in resp.get_json()['assets']] == ["img-0", "img-1", "floorplan-0"]

    @pytest.mark.parametrize("flag", ["false", "true", 1, 0, []])
    def test_non_boolean_filter_is_rejected(self, client, crawled, flag):
        resp = client.post('/api/scrape', json={'url': URL, 'filter': flag})

        assert resp.status_code == 400
        assert resp.get_json() == {'error': "'filter' must be a boolean"}
        assert crawled == []

    @pytest.mark.parametrize("body", [None, {}, {'url': ''}, {'link': URL}])
    def test_missing_url(self, client, crawled, body):
        resp = client.post('/api/scrape', json=body) if body is not None else client.post('/api/scrape')
        assert resp.status_code == 400
        assert resp.get_json() == {'error': 'URL is required'}
        assert crawled == []

    @pytest.mark.parametrize("url", ["ftp://example.com/file", "not a url", "https://exa mple.com/listing"])
    def test_invalid_url(self, client, crawled, url):
        resp = client.post('/api/scrape', json={'url': url})
        assert resp.status_code == 400
        assert resp.get_json()['error'].startswith('Invalid URL')

    def test_navigation_error(self, client, monkeypatch):
        monkeypatch.setattr(media_routes, 'crawl_media', failing_crawl(NavigationError(URL, status=404, reason="Not Found")))

        resp = client.post('/api/scrape', json={'url': URL})

        assert resp.status_code == 502
        assert resp.get_json() == {'error': 'Failed to load page: 404 Not Found'}

    def test_timeout(self, client, monkeypatch):
        monkeypatch.setattr(media_routes, 'crawl_media', failing_crawl(CrawlTimeoutError(URL, 45000)))

        resp = client.post('/api/scrape', json={'url': URL})

        assert resp.status_code == 504
        assert 'timed out' in resp.get_json()['error']

    def test_unexpected_error(self, client, monkeypatch):
        monkeypatch.setattr(media_routes, 'crawl_media', failing_crawl(RuntimeError("browser crashed")))

        resp = client.post('/api/scrape', json={'url': URL})

        assert resp.status_code == 500
        assert 'browser crashed' in resp.get_json()['error']


class TestScrapeAgentRoute:

    def test_returns_profile(self, client, monkeypatch):
        result = ProfileResult(
            images=[ProfileCandidateImage(url="https://agency.example.com/team/jane.jpg", name="Jane")],
            agent_details=AgentDetails(name="Jane Smith", email="jane@x.com")
        )
        monkeypatch.setattr(media_routes, 'scrape_profile', lambda url: result)

        resp = client.post('/api/scrape-agent', json={'url': "https://agency.example.com/team/jane"})

        assert resp.status_code == 200
        assert resp.get_json() == {
            'images': [{'type': 'image', 'url': 'https://agency.example.com/team/jane.jpg', 'name': 'Jane',
                        'confidence': 0.5}],
            'agentDetails': {'name': 'Jane Smith', 'email': 'jane@x.com'}
        }

    def test_missing_url(self, client):
        resp = client.post('/api/scrape-agent', json={})
        assert resp.status_code == 400

    def test_fetch_failure(self, client, monkeypatch):
        def fail(url):
            raise ProfileFetchError(url, "HTTP 404")

        monkeypatch.setattr(media_routes, 'scrape_profile', fail)

        resp = client.post('/api/scrape-agent', json={'url': "https://agency.example.com/team/jane"})

        assert resp.status_code == 502
        assert 'HTTP 404' in resp.get_json()['error']

    def test_unexpected_error(self, client, monkeypatch):
        monkeypatch.setattr(media_routes, 'scrape_profile', failing_crawl(ValueError("boom")))

        resp = client.post('/api/scrape-agent', json={'url': "https://agency.example.com/team/jane"})

        assert resp.status_code == 500
        assert resp.get_json() == {'error': 'Failed to scrape agent details'}


def test_health(client):
    resp = client.get('/api/health')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['status'] in ('healthy', 'unhealthy')
    assert 'crawler' in body['configuration']['summary']
