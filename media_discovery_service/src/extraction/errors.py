"""
Exception types raised by the media crawler and the profile extractor.

Navigation-level failures abort a crawl and are surfaced to the caller.
ExtractionSkip describes a failure that is recovered locally during
exploration; it is logged, never raised past the explorer.
"""

from typing import Optional


class MediaDiscoveryError(Exception):
    """Base class for crawler and extractor errors"""
    pass


class NavigationError(MediaDiscoveryError):
    """The target page could not be reached or answered with an error status"""

    def __init__(self, url: str, status: Optional[int] = None, reason: Optional[str] = None):
        self.url = url
        self.status = status
        self.reason = reason
        if status is not None:
            message = f"Failed to load page: {status}"
            if reason:
                message += f" {reason}"
        else:
            message = f"Failed to load page {url}: {reason or 'no response received'}"
        super().__init__(message)


class CrawlTimeoutError(MediaDiscoveryError, TimeoutError):
    """Navigation did not finish within its time budget"""

    def __init__(self, url: str, timeout_ms: int):
        self.url = url
        self.timeout_ms = timeout_ms
        super().__init__(f"Navigation to {url} timed out after {timeout_ms / 1000:.0f} seconds")


class ExtractionSkip(MediaDiscoveryError):
    """A selector pattern or click target failed and was skipped"""

    def __init__(self, selector: str, reason: str):
        self.selector = selector
        self.reason = reason
        super().__init__(f"{selector}: {reason}")


class ProfileFetchError(MediaDiscoveryError):
    """The profile page could not be downloaded"""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")
