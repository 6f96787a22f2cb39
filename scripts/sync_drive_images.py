"""
Download every image in GOOGLE_DRIVE_FOLDER_ID into public/images/ (resized JPEG)
and write public/images-list.json listing them. Needs GOOGLE_API_KEY in .env.
"""
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import get_settings
from services.manifest import ManifestError, generate_drive_image_list

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> int:
    try:
        images = generate_drive_image_list(get_settings())
    except ManifestError:
        return 1
    print(f"Synced {len(images)} image(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
