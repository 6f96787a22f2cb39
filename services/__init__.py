from .manifest import ManifestError, generate_drive_image_list, generate_image_list, list_local_images, write_manifest
from .presenter import RandomImagePresenter, SwapOutcome

__all__ = [
    "ManifestError",
    "generate_drive_image_list",
    "generate_image_list",
    "list_local_images",
    "write_manifest",
    "RandomImagePresenter",
    "SwapOutcome",
]
