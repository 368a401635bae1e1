"""
Media discovery routes.
Crawls listing pages for images/videos/floor plans and scrapes agent profiles.
"""

from flask import Blueprint, request, jsonify

from src.extraction.assembler import filter_noise
from src.extraction.errors import CrawlTimeoutError, NavigationError, ProfileFetchError
from src.extraction.media_crawler import crawl_media
from src.extraction.profile_extractor import scrape_profile
from src.utils.logging_config import get_logger
from src.utils.validation import RequestValidator, ValidationError

media_bp = Blueprint('media', __name__)
logger = get_logger()

@media_bp.route('/scrape', methods=['POST'])
def scrape_media():
    """Discover media assets on a listing page"""
    try:
        data = request.get_json(silent=True)
        url = RequestValidator.require_url(data)
        apply_filter = RequestValidator.optional_flag(data, 'filter')
    except ValidationError as e:
        logger.warning(f"Rejected scrape request: {str(e)}")
        return jsonify({'error': str(e)}), 400

    try:
        assets = crawl_media(url)
        if apply_filter:
            assets = filter_noise(assets)

        logger.info(f"Returning {len(assets)} assets for {url}")
        return jsonify({'assets': [asset.to_dict() for asset in assets]}), 200

    except CrawlTimeoutError as e:
        return jsonify({'error': str(e)}), 504
    except NavigationError as e:
        return jsonify({'error': str(e)}), 502
    except Exception as e:
        logger.error(f"Scraping error for {url}: {str(e)}", exc_info=True)
        return jsonify({'error': f'Failed to scrape media from URL: {str(e)}'}), 500

@media_bp.route('/scrape-agent', methods=['POST'])
def scrape_agent():
    """Extract agent details and avatar candidates from a profile page"""
    try:
        data = request.get_json(silent=True)
        url = RequestValidator.require_url(data)
    except ValidationError as e:
        logger.warning(f"Rejected scrape-agent request: {str(e)}")
        return jsonify({'error': str(e)}), 400

    try:
        result = scrape_profile(url)
        logger.info(f"Profile scraped for {url}: {len(result.images)} images, "
                    f"fields {sorted(result.agent_details.to_dict())}")
        return jsonify(result.to_dict()), 200

    except ProfileFetchError as e:
        logger.warning(str(e))
        return jsonify({'error': str(e)}), 502
    except Exception as e:
        logger.error(f"Error scraping agent details for {url}: {str(e)}", exc_info=True)
        return jsonify({'error': 'Failed to scrape agent details'}), 500
