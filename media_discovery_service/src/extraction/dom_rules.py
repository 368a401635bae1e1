"""
Pure extraction rules: map one DOM snapshot to classified media URLs.

A DomSnapshot is the raw material captured from a page (either by running
SNAPSHOT_SCRIPT inside the live browser or by parsing static HTML). The
rules in this module only resolve, validate and classify; they do no I/O and
never raise for a bad candidate.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import unquote, urljoin, urlparse

from bs4 import BeautifulSoup

LAZY_SOURCE_ATTRIBUTES = ['data-src', 'data-lazy-src', 'data-original']

FLOORPLAN_PATTERN = re.compile(r'floor[\s_-]?plans?', re.IGNORECASE)

CSS_URL_PATTERN = re.compile(r'url\(\s*([\'"]?)(.*?)\1\s*\)', re.IGNORECASE)

VIDEO_HOSTS = [
    'youtube.com',
    'youtube-nocookie.com',
    'youtu.be',
    'vimeo.com',
    'wistia.com',
    'wistia.net',
    'vidyard.com',
]

VIDEO_EXTENSIONS = ('.mp4', '.webm', '.ogg', '.mov', '.m3u8')

# Runs inside the page; returns a plain object matching DomSnapshot.from_dict
SNAPSHOT_SCRIPT = """
() => {
  const hintOf = el => {
    const cls = typeof el.className === 'string' ? el.className : (el.getAttribute('class') || '');
    return [el.id || '', cls].join(' ').trim();
  };
  const lazySrc = el =>
    el.getAttribute('data-src') || el.getAttribute('data-lazy-src') || el.getAttribute('data-original') || '';

  const images = Array.from(document.querySelectorAll('img')).map(img => ({
    src: img.currentSrc || img.src || '',
    lazy_src: lazySrc(img),
    alt: img.alt || '',
    hint: hintOf(img)
  }));

  const backgrounds = [];
  document.querySelectorAll('*').forEach(el => {
    const value = window.getComputedStyle(el).backgroundImage;
    if (value && value !== 'none') {
      backgrounds.push({ value, hint: hintOf(el) });
    }
  });

  const videos = [];
  document.querySelectorAll('video').forEach(video => {
    const src = video.currentSrc || video.getAttribute('src') || lazySrc(video);
    if (src) videos.push(src);
    video.querySelectorAll('source').forEach(source => {
      const sourceSrc = source.getAttribute('src') || lazySrc(source);
      if (sourceSrc) videos.push(sourceSrc);
    });
  });

  const frames = Array.from(document.querySelectorAll('iframe'))
    .map(frame => frame.getAttribute('src') || lazySrc(frame))
    .filter(Boolean);

  return {
    page_url: window.location.href,
    origin: window.location.origin,
    images,
    backgrounds,
    videos,
    frames
  };
}
"""


@dataclass(frozen=True)
class ImageCandidate:
    src: str = ''
    lazy_src: str = ''
    alt: str = ''
    hint: str = ''


@dataclass(frozen=True)
class BackgroundCandidate:
    value: str
    hint: str = ''


@dataclass
class DomSnapshot:
    """Raw media references captured from one DOM state"""
    page_url: str
    origin: str
    images: List[ImageCandidate] = field(default_factory=list)
    backgrounds: List[BackgroundCandidate] = field(default_factory=list)
    videos: List[str] = field(default_factory=list)
    frames: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DomSnapshot':
        """Build a snapshot from the object returned by SNAPSHOT_SCRIPT"""
        data = data or {}
        return cls(
            page_url=data.get('page_url') or '',
            origin=data.get('origin') or '',
            images=[
                ImageCandidate(
                    src=item.get('src') or '',
                    lazy_src=item.get('lazy_src') or '',
                    alt=item.get('alt') or '',
                    hint=item.get('hint') or ''
                )
                for item in data.get('images') or []
                if isinstance(item, dict)
            ],
            backgrounds=[
                BackgroundCandidate(value=item.get('value') or '', hint=item.get('hint') or '')
                for item in data.get('backgrounds') or []
                if isinstance(item, dict)
            ],
            videos=[src for src in data.get('videos') or [] if isinstance(src, str)],
            frames=[src for src in data.get('frames') or [] if isinstance(src, str)]
        )


@dataclass
class MediaBatch:
    """Unique, insertion-ordered URLs found by one extraction pass"""
    images: List[str] = field(default_factory=list)
    videos: List[str] = field(default_factory=list)
    floorplans: List[str] = field(default_factory=list)

    def total(self) -> int:
        return len(self.images) + len(self.videos) + len(self.floorplans)


def origin_of(url: str) -> str:
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return ''
    return f"{parsed.scheme}://{parsed.netloc}"


def resolve_url(candidate: Optional[str], origin: str) -> Optional[str]:
    """Resolve a raw reference against the document origin.

    Returns None for empty, malformed or non-HTTP(S) references (data: URIs,
    javascript: links, blob: handles), so callers can simply skip them.
    """
    if not candidate or not isinstance(candidate, str):
        return None

    candidate = candidate.strip()
    if not candidate:
        return None

    try:
        if candidate.lower().startswith(('http://', 'https://')):
            resolved = candidate
        else:
            resolved = urljoin(origin.rstrip('/') + '/', candidate)
        parsed = urlparse(resolved)
        parsed.port  # raises ValueError on a malformed port
    except ValueError:
        return None

    if parsed.scheme not in ('http', 'https') or not parsed.hostname:
        return None

    return resolved


def css_urls(value: str) -> List[str]:
    """Every url(...) reference inside a CSS background-image value"""
    if not value or value == 'none':
        return []
    return [match.group(2) for match in CSS_URL_PATTERN.finditer(value) if match.group(2)]


def looks_like_floorplan(*texts: str) -> bool:
    return any(text and FLOORPLAN_PATTERN.search(unquote(text)) for text in texts)


def is_video_embed(url: str) -> bool:
    parsed = urlparse(url)
    host = (parsed.hostname or '').lower()
    if any(host == video_host or host.endswith('.' + video_host) for video_host in VIDEO_HOSTS):
        return True
    return parsed.path.lower().endswith(VIDEO_EXTENSIONS)


def _unique(urls: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(urls))


def _image_urls(snapshot: DomSnapshot):
    """Yield (url, is_floorplan) for every image and background reference"""
    for image in snapshot.images:
        url = resolve_url(image.src, snapshot.origin) or resolve_url(image.lazy_src, snapshot.origin)
        if url:
            yield url, looks_like_floorplan(url, image.alt, image.hint)

    for background in snapshot.backgrounds:
        for raw in css_urls(background.value):
            url = resolve_url(raw, snapshot.origin)
            if url:
                yield url, looks_like_floorplan(url, background.hint)


def extract_media(snapshot: DomSnapshot) -> MediaBatch:
    """Classify every media reference in the snapshot.

    A URL classified as a floor plan anywhere in the snapshot is emitted only
    under floorplans, so it never appears twice with type image.
    """
    images = []
    floorplans = []
    for url, is_floorplan in _image_urls(snapshot):
        (floorplans if is_floorplan else images).append(url)

    floorplans = _unique(floorplans)
    floorplan_set = set(floorplans)
    images = [url for url in _unique(images) if url not in floorplan_set]

    videos = [resolve_url(src, snapshot.origin) for src in snapshot.videos]
    for src in snapshot.frames:
        url = resolve_url(src, snapshot.origin)
        if url and is_video_embed(url):
            videos.append(url)

    return MediaBatch(
        images=images,
        videos=_unique(url for url in videos if url),
        floorplans=floorplans
    )


def snapshot_from_html(html: str, page_url: str) -> DomSnapshot:
    """Capture a snapshot from static markup; only inline style backgrounds are seen"""
    soup = BeautifulSoup(html or '', 'html.parser')

    def lazy_src(tag) -> str:
        for attribute in LAZY_SOURCE_ATTRIBUTES:
            if tag.get(attribute):
                return tag[attribute]
        return ''

    def hint_of(tag) -> str:
        return ' '.join([tag.get('id') or ''] + list(tag.get('class') or [])).strip()

    images = [
        ImageCandidate(src=img.get('src') or '', lazy_src=lazy_src(img), alt=img.get('alt') or '', hint=hint_of(img))
        for img in soup.find_all('img')
    ]

    backgrounds = []
    for tag in soup.find_all(style=True):
        for declaration in tag['style'].split(';'):
            name, _, value = declaration.partition(':')
            if name.strip().lower() in ('background', 'background-image') and 'url(' in value:
                backgrounds.append(BackgroundCandidate(value=value.strip(), hint=hint_of(tag)))

    videos = []
    for video in soup.find_all('video'):
        if video.get('src') or lazy_src(video):
            videos.append(video.get('src') or lazy_src(video))
        for source in video.find_all('source'):
            if source.get('src') or lazy_src(source):
                videos.append(source.get('src') or lazy_src(source))

    frames = [frame.get('src') or lazy_src(frame) for frame in soup.find_all('iframe')]

    return DomSnapshot(
        page_url=page_url,
        origin=origin_of(page_url),
        images=images,
        backgrounds=backgrounds,
        videos=videos,
        frames=[src for src in frames if src]
    )
