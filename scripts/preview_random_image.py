"""
Run the random image presenter against a running site and print what it shows.

Usage:
    python scripts/preview_random_image.py                     # http://localhost:8000, 1 pick
    python scripts/preview_random_image.py https://example.org 5
"""
import asyncio
import logging
import os
import sys

import httpx

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import get_settings
from services.presenter import Button, HttpImageLoader, HttpManifestFetcher, ImageSlot, RandomImagePresenter

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logging.getLogger("httpx").setLevel(logging.WARNING)


async def preview(base_url: str, clicks: int) -> ImageSlot:
    slot = ImageSlot()
    button = Button()
    async with httpx.AsyncClient(base_url=base_url, timeout=get_settings().api_timeout_seconds) as client:
        presenter = RandomImagePresenter(
            target=slot,
            loader=HttpImageLoader(client),
            fetcher=HttpManifestFetcher(client),
            trigger=button,
            image_base_path=get_settings().image_base_path,
        )
        await presenter.initialize()
        for _ in range(clicks - 1):
            button.press()
        await presenter.wait_idle()
        await asyncio.sleep(0)
    return slot


def main() -> int:
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"
    clicks = int(sys.argv[2]) if len(sys.argv) > 2 else 1
    slot = asyncio.run(preview(base_url, max(clicks, 1)))
    if not slot.visible:
        print("Status:", slot.alt or "(nothing shown)")
        return 1
    print("Showing:", slot.source, "| opacity:", slot.opacity)
    return 0


if __name__ == "__main__":
    sys.exit(main())
