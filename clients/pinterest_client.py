"""
Pinterest board scraper: RSS feed first (for boardId URLs), then page HTML.
"""
import json
import logging
import re
import xml.etree.ElementTree as ET
from typing import Any, List, Optional

import httpx
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

BOARD_ID_RE = re.compile(r"boardId=(\d+)")
IMAGE_EXT_RE = re.compile(r"\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)
INITIAL_STATE_RE = re.compile(r"__PINTEREST_INITIAL_STATE__\s*=\s*({.*?});", re.DOTALL)
PINIMG_URL_RE = re.compile(r"https?://[^\"'\s]+pinimg\.com[^\"'\s]+\.(?:jpg|jpeg|png|gif|webp)", re.IGNORECASE)
MAX_STATE_DEPTH = 10


class PinterestError(Exception):
    pass


def _is_pinterest_image(url: str) -> bool:
    return "pinimg.com" in url or "pinterest.com" in url


def _looks_like_image(url: str) -> bool:
    return "pinimg.com" in url or bool(IMAGE_EXT_RE.search(url))


def _append_unique(urls: List[str], url: Optional[str]) -> None:
    if url and url not in urls:
        urls.append(url)


def to_original_size(src: str) -> str:
    """Rewrite a pinimg.com thumbnail path (/236x/, /474x316/) to /originals/."""
    if "pinimg.com" not in src:
        return src
    src = re.sub(r"/\d+x/", "/originals/", src, count=1)
    return re.sub(r"/\d+x\d+/", "/originals/", src, count=1)


def rss_feed_url(pinterest_url: str) -> Optional[str]:
    """Board RSS feed URL for a ...?boardId=123 link, else None."""
    m = BOARD_ID_RE.search(pinterest_url)
    if not m:
        return None
    return f"https://www.pinterest.com/board/{m.group(1)}/feed.rss"


def extract_images_from_rss(rss_content: str) -> List[str]:
    """Enclosure URLs plus any <img> inside each item's description HTML."""
    urls: List[str] = []
    try:
        root = ET.fromstring(rss_content.strip())
    except ET.ParseError as e:
        logger.warning("Could not parse RSS feed: %s", e)
        return urls
    for item in root.iter("item"):
        enclosure = item.find("enclosure")
        if enclosure is not None and enclosure.get("url"):
            urls.append(enclosure.get("url"))
        description = item.findtext("description")
        if description:
            soup = BeautifulSoup(description, "html.parser")
            for img in soup.find_all("img"):
                _append_unique(urls, img.get("src"))
    return urls


def _collect_state_images(obj: Any, urls: List[str], depth: int = 0) -> None:
    if depth > MAX_STATE_DEPTH:
        return
    if isinstance(obj, str):
        if "pinimg.com" in obj or IMAGE_EXT_RE.search(obj):
            _append_unique(urls, obj)
    elif isinstance(obj, list):
        for item in obj:
            _collect_state_images(item, urls, depth + 1)
    elif isinstance(obj, dict):
        for value in obj.values():
            _collect_state_images(value, urls, depth + 1)


def _collect_json_ld_images(data: Any, urls: List[str]) -> None:
    if not isinstance(data, dict):
        return
    image = data.get("image")
    if isinstance(image, list):
        for img in image:
            _append_unique(urls, img if isinstance(img, str) else (img or {}).get("url"))
    elif isinstance(image, str):
        _append_unique(urls, image)
    elif isinstance(image, dict):
        _append_unique(urls, image.get("url"))


def extract_images_from_html(html: str) -> List[str]:
    """
    Collect image URLs from a Pinterest page: JSON-LD blocks, <img> tags,
    the embedded initial-state JSON and any raw pinimg.com URLs in scripts.
    """
    soup = BeautifulSoup(html, "html.parser")
    urls: List[str] = []

    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            data = json.loads(script.string or "{}")
        except ValueError:
            continue
        _collect_json_ld_images(data, urls)

    for img in soup.find_all("img"):
        src = img.get("src") or img.get("data-pin-media") or img.get("data-lazy")
        if src and _is_pinterest_image(src) and src not in urls:
            urls.append(to_original_size(src))

    for script in soup.find_all("script"):
        content = script.string
        if not content:
            continue
        m = INITIAL_STATE_RE.search(content)
        if m:
            try:
                _collect_state_images(json.loads(m.group(1)), urls)
            except ValueError:
                pass
        for found in PINIMG_URL_RE.finditer(content):
            _append_unique(urls, found.group(0))

    unique: List[str] = []
    for url in urls:
        if _looks_like_image(url):
            _append_unique(unique, url)
    return unique


def is_rss(content: str) -> bool:
    return "<?xml" in content or "<rss" in content


class PinterestClient:
    def __init__(self, timeout_seconds: int = 30, transport: Optional[httpx.BaseTransport] = None):
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def _get(self, client: httpx.Client, url: str, accept: bool = True) -> httpx.Response:
        headers = {"User-Agent": USER_AGENT}
        if accept:
            headers["Accept"] = ACCEPT
        return client.get(url, headers=headers)

    def fetch_images(self, pinterest_url: str) -> List[str]:
        """Fetch a board (RSS or HTML) and return the image URLs found on it."""
        logger.info("Fetching images from Pinterest: %s", pinterest_url)
        url_to_fetch = rss_feed_url(pinterest_url) or pinterest_url
        if url_to_fetch != pinterest_url:
            logger.info("Trying RSS feed format: %s", url_to_fetch)
        try:
            with httpx.Client(
                timeout=self.timeout_seconds, transport=self.transport, follow_redirects=True
            ) as client:
                r = self._get(client, url_to_fetch)
                if r.status_code >= 400:
                    if url_to_fetch == pinterest_url:
                        raise PinterestError(f"Failed to fetch Pinterest page: {r.status_code}")
                    logger.info("RSS feed failed, trying original URL: %s", pinterest_url)
                    fallback = self._get(client, pinterest_url, accept=False)
                    if fallback.status_code >= 400:
                        raise PinterestError(f"Failed to fetch Pinterest page: {fallback.status_code}")
                    return extract_images_from_html(fallback.text)
        except httpx.RequestError as e:
            raise PinterestError(f"Pinterest request failed: {e}") from e

        content = r.text
        if is_rss(content):
            return extract_images_from_rss(content)
        return extract_images_from_html(content)
