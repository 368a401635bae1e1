from typing import Dict, List

from src.extraction.dom_rules import MediaBatch


class MediaAggregator:
    """Accumulates media URLs across every extraction pass of one crawl.

    One insertion-ordered uniqueness set per type; the first pass that sees
    a URL fixes both its position and its classification. Floor plans and
    images share the asset type "image", so a URL is kept in only one of
    those two sets.
    """

    def __init__(self):
        # dicts keep insertion order; values are unused
        self._images: Dict[str, None] = {}
        self._videos: Dict[str, None] = {}
        self._floorplans: Dict[str, None] = {}

    def merge(self, batch: MediaBatch) -> int:
        """Merge one pass and return how many URLs were not seen before"""
        added = 0
        for url in batch.floorplans:
            if url not in self._floorplans and url not in self._images:
                self._floorplans[url] = None
                added += 1
        for url in batch.images:
            if url not in self._images and url not in self._floorplans:
                self._images[url] = None
                added += 1
        for url in batch.videos:
            if url not in self._videos:
                self._videos[url] = None
                added += 1
        return added

    @property
    def images(self) -> List[str]:
        return list(self._images)

    @property
    def videos(self) -> List[str]:
        return list(self._videos)

    @property
    def floorplans(self) -> List[str]:
        return list(self._floorplans)

    def counts(self) -> Dict[str, int]:
        return {
            'images': len(self._images),
            'videos': len(self._videos),
            'floorplans': len(self._floorplans)
        }
