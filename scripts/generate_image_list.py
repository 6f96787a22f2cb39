"""Write public/images-list.json from PUBLIC_PINTEREST_URL or the local public/images/ directory."""
import logging
import os
import sys

# Ensure project root is on path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import get_settings
from services.manifest import ManifestError, generate_image_list

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> int:
    try:
        generate_image_list(get_settings())
    except ManifestError:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
