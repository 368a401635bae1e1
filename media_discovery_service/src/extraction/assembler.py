from typing import List
from urllib.parse import urlparse

from src.extraction.aggregator import MediaAggregator
from src.models.media import MediaAsset, MediaCategory, MediaType

# URL fragments of analytics beacons and tracking pixels
NOISE_URL_KEYWORDS = ['tracker', 'tracking', 'analytics', 'pixel', 'beacon', 'data:']

# Path fragments of page chrome rather than listing photos
UI_IMAGE_KEYWORDS = ['icon', 'logo', 'button', 'social', 'avatar']


def assemble_assets(aggregator: MediaAggregator) -> List[MediaAsset]:
    """Images first, then videos, then floor plans; ids are zero-based per type"""
    assets = [
        MediaAsset(id=f"img-{index}", url=url, type=MediaType.IMAGE)
        for index, url in enumerate(aggregator.images)
    ]
    assets.extend(
        MediaAsset(id=f"video-{index}", url=url, type=MediaType.VIDEO)
        for index, url in enumerate(aggregator.videos)
    )
    assets.extend(
        MediaAsset(id=f"floorplan-{index}", url=url, type=MediaType.IMAGE, category=MediaCategory.FLOORPLAN)
        for index, url in enumerate(aggregator.floorplans)
    )
    return assets


def _is_noise(asset: MediaAsset) -> bool:
    url = asset.url.lower()
    if any(keyword in url for keyword in NOISE_URL_KEYWORDS):
        return True

    # Videos and floor plans are kept regardless of path
    if asset.type is MediaType.VIDEO or asset.category is MediaCategory.FLOORPLAN:
        return False

    path = urlparse(url).path
    return any(keyword in path for keyword in UI_IMAGE_KEYWORDS)


def filter_noise(assets: List[MediaAsset]) -> List[MediaAsset]:
    """Drop tracking pixels and obvious UI images; ids of kept assets are unchanged"""
    return [asset for asset in assets if not _is_noise(asset)]
