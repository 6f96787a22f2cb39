from .drive_client import DriveClient, DriveError, DriveFile, resize_to_jpeg
from .netlify_client import DeployStatusError, DeployStatusNotConfigured, NetlifyClient
from .pinterest_client import PinterestClient, PinterestError

__all__ = [
    "DriveClient",
    "DriveError",
    "DriveFile",
    "resize_to_jpeg",
    "DeployStatusError",
    "DeployStatusNotConfigured",
    "NetlifyClient",
    "PinterestClient",
    "PinterestError",
]
