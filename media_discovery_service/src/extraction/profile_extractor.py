import re
import time
from typing import Callable, List, Optional
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

from src.extraction.errors import ProfileFetchError
from src.models.media import AgentDetails, ProfileCandidateImage, ProfileResult
from src.utils.config import ProfileConfig, get_config
from src.utils.logging_config import get_logger
from src.utils.validation import RequestValidator

logger = get_logger()

# Checked in order; the first acceptable element wins
NAME_SELECTORS = [
    'h1',
    '[class*="agent-name"]',
    '[class*="profile-name"]',
    '[class*="name"]',
    '[id*="agent-name"]',
    '[id*="profile-name"]',
]

POSITION_SELECTORS = [
    '[class*="position"]',
    '[class*="role"]',
    '[class*="title"]',
    '[class*="job"]',
]

EXCLUDED_IMAGE_KEYWORDS = ['icon', 'logo', 'favicon']

MAX_FIELD_LENGTH = 50

PHONE_LIKE_PATTERN = re.compile(r'^\+?\d')


def _is_short_text(text: str) -> bool:
    return 0 < len(text) < MAX_FIELD_LENGTH


def _is_position_text(text: str) -> bool:
    # Emails and phone numbers often sit in "title" elements too
    return _is_short_text(text) and '@' not in text and not PHONE_LIKE_PATTERN.match(text)


def first_match(soup: BeautifulSoup, selectors: List[str], accept: Callable[[str], bool]) -> Optional[str]:
    """Whitespace-collapsed text of the first selector whose first element passes accept"""
    for selector in selectors:
        try:
            element = soup.select_one(selector)
        except SelectorSyntaxError:
            logger.warning(f"Skipping invalid selector: {selector}", stage='PROFILE')
            continue
        if element is None:
            continue
        text = RequestValidator.sanitize_text(element.get_text())
        if accept(text):
            return text
    return None


def _first_link_target(soup: BeautifulSoup, scheme: str) -> Optional[str]:
    for anchor in soup.select(f'a[href^="{scheme}"]'):
        target = anchor['href'][len(scheme):].split('?')[0].strip()
        if target:
            return target
    return None


def _absolute_url(src: str, page_url: str) -> Optional[str]:
    try:
        url = urljoin(page_url, src.strip())
        parsed = urlparse(url)
    except ValueError:
        return None
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        return None
    return url


def _candidate_images(soup: BeautifulSoup, page_url: str) -> List[ProfileCandidateImage]:
    images = []
    for img in soup.find_all('img'):
        src = img.get('src')
        if not src:
            continue

        alt = img.get('alt') or None
        haystack = f"{src} {alt or ''}".lower()
        if any(keyword in haystack for keyword in EXCLUDED_IMAGE_KEYWORDS):
            continue

        url = _absolute_url(src, page_url)
        if url:
            images.append(ProfileCandidateImage(url=url, name=alt))
    return images


def extract_profile(html: str, page_url: str) -> ProfileResult:
    """Best-effort agent details and avatar candidates from one profile page.

    Never raises: anything unparseable degrades to empty fields.
    """
    try:
        soup = BeautifulSoup(html or '', 'html.parser')

        details = AgentDetails(
            name=first_match(soup, NAME_SELECTORS, _is_short_text),
            email=_first_link_target(soup, 'mailto:'),
            phone=_first_link_target(soup, 'tel:'),
            position=first_match(soup, POSITION_SELECTORS, _is_position_text)
        )
        return ProfileResult(images=_candidate_images(soup, page_url), agent_details=details)

    except Exception as e:
        logger.error(f"Profile extraction failed for {page_url}: {str(e)}", stage='PROFILE', exc_info=True)
        return ProfileResult()


def fetch_profile_html(url: str, profile_config: Optional[ProfileConfig] = None) -> str:
    """Fetch the profile page with retry logic; raises ProfileFetchError"""
    profile_config = profile_config or get_config().profile
    headers = {
        'User-Agent': profile_config.user_agent,
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8'
    }
    retry_delay = profile_config.retry_delay_seconds
    last_error = 'no attempts made'

    for attempt in range(profile_config.max_retries):
        try:
            resp = requests.get(url, timeout=profile_config.fetch_timeout_seconds, headers=headers)
            resp.raise_for_status()
            return resp.text
        except requests.exceptions.HTTPError as e:
            # Client errors will not change on retry
            if e.response is not None and e.response.status_code < 500:
                raise ProfileFetchError(url, f"HTTP {e.response.status_code}") from e
            last_error = str(e)
        except requests.exceptions.Timeout:
            last_error = f"timeout after {profile_config.fetch_timeout_seconds} seconds"
        except requests.exceptions.RequestException as e:
            last_error = str(e)

        logger.warning(f"Fetch attempt {attempt + 1} failed for {url}: {last_error}", stage='PROFILE')
        if attempt < profile_config.max_retries - 1:
            time.sleep(retry_delay)
            retry_delay *= 2  # Exponential backoff

    raise ProfileFetchError(url, f"{last_error} (after {profile_config.max_retries} attempts)")


def scrape_profile(url: str, profile_config: Optional[ProfileConfig] = None) -> ProfileResult:
    html = fetch_profile_html(url, profile_config)
    return extract_profile(html, url)
