"""
Random image presenter – loads the manifest once, shows a random entry and
crossfades to another one on each trigger activation.

Every display attempt takes a new sequence token before it starts preloading.
A finished preload only commits if its token is still the latest one, so when
several loads overlap the most recently requested image wins regardless of
completion order. Stale loads are not cancelled, just ignored.
"""
import asyncio
import logging
import random
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Protocol

import httpx

logger = logging.getLogger(__name__)

NO_IMAGES_MESSAGE = "No images found. Please add images to public/images/."
LOAD_FAILED_MESSAGE = "Failed to load images."
DEFAULT_IMAGE_BASE_PATH = "/images"
DEFAULT_MANIFEST_PATH = "/images-list.json"


class ImageLoadError(Exception):
    pass


class ManifestUnavailable(Exception):
    pass


class SwapOutcome(str, Enum):
    COMMITTED = "committed"
    ABANDONED = "abandoned"
    FAILED = "failed"


class ImageTarget(Protocol):
    def set_source(self, source: str) -> None: ...

    def set_visible(self, visible: bool) -> None: ...

    def set_opacity(self, opacity: float) -> None: ...

    def set_alt(self, text: str) -> None: ...


class Trigger(Protocol):
    def subscribe(self, callback: Callable[[], None]) -> None: ...


class ImageLoader(Protocol):
    async def load(self, source: str) -> None: ...


class ManifestFetcher(Protocol):
    async def fetch(self) -> List[str]: ...


class ImageSlot:
    """In-memory display target; records what a rendered <img> would show."""

    def __init__(self):
        self.source: Optional[str] = None
        self.visible = False
        self.opacity = 1.0
        self.alt = ""

    def set_source(self, source: str) -> None:
        self.source = source

    def set_visible(self, visible: bool) -> None:
        self.visible = visible

    def set_opacity(self, opacity: float) -> None:
        self.opacity = opacity

    def set_alt(self, text: str) -> None:
        self.alt = text


class Button:
    def __init__(self):
        self._callbacks: List[Callable[[], None]] = []

    def subscribe(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def press(self) -> None:
        for callback in list(self._callbacks):
            callback()


class HttpManifestFetcher:
    def __init__(self, client: httpx.AsyncClient, path: str = DEFAULT_MANIFEST_PATH):
        self.client = client
        self.path = path

    async def fetch(self) -> List[str]:
        try:
            r = await self.client.get(self.path)
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise ManifestUnavailable(f"Could not load {self.path}: {e}") from e
        if not isinstance(data, list) or not all(isinstance(name, str) for name in data):
            raise ManifestUnavailable(f"{self.path} is not a JSON array of strings")
        return data


class HttpImageLoader:
    """Preloads an image by fetching it; success carries no payload."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def load(self, source: str) -> None:
        try:
            r = await self.client.get(source)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ImageLoadError(f"Failed to load image: {source}") from e
        content_type = r.headers.get("content-type", "")
        if r.status_code >= 400 or (content_type and not content_type.startswith("image/")):
            raise ImageLoadError(f"Failed to load image: {source}")


def pick_index(length: int, rng: Optional[random.Random] = None) -> int:
    """Uniform index in [0, length); draws are independent (with replacement)."""
    if length <= 0:
        raise ValueError("cannot pick from an empty manifest")
    return (rng or random).randrange(length)


def build_image_source(name: str, base_path: str = DEFAULT_IMAGE_BASE_PATH) -> str:
    # Pinterest manifests hold absolute URLs already
    if name.startswith("http://") or name.startswith("https://"):
        return name
    return f"{base_path.rstrip('/')}/{name.lstrip('/')}"


class RandomImagePresenter:
    def __init__(
        self,
        target: Optional[ImageTarget],
        loader: ImageLoader,
        fetcher: ManifestFetcher,
        trigger: Optional[Trigger] = None,
        image_base_path: str = DEFAULT_IMAGE_BASE_PATH,
        rng: Optional[random.Random] = None,
        schedule_frame: Optional[Callable[[Callable[[], None]], object]] = None,
    ):
        self.target = target
        self.loader = loader
        self.fetcher = fetcher
        self.trigger = trigger
        self.image_base_path = image_base_path
        self.rng = rng or random.Random()
        self._schedule_frame = schedule_frame
        self.images: List[str] = []
        self.sequence = 0
        self.pending: List[asyncio.Task] = []

    def initialize(self) -> Optional[Awaitable[None]]:
        """Wire the trigger and start loading the manifest. Must run inside an event loop."""
        if self.target is None:
            logger.warning("Random image target was not found; presenter disabled.")
            return None
        if self.trigger is not None:
            self.trigger.subscribe(self.show_random_image)
        return asyncio.ensure_future(self.load_images())

    def show_status(self, message: str) -> None:
        self.target.set_alt(message)
        self.target.set_visible(False)

    async def load_images(self) -> None:
        try:
            self.images = await self.fetcher.fetch()
        except ManifestUnavailable as e:
            logger.error("Failed to load images: %s", e)
            self.show_status(LOAD_FAILED_MESSAGE)
            return

        if not self.images:
            self.show_status(NO_IMAGES_MESSAGE)
            return

        task = self.show_random_image()
        if task is not None:
            await task

    def show_random_image(self) -> Optional["asyncio.Task[SwapOutcome]"]:
        if not self.images:
            return None
        index = pick_index(len(self.images), self.rng)
        return self.swap_to_image(build_image_source(self.images[index], self.image_base_path))

    def swap_to_image(self, source: str) -> "asyncio.Task[SwapOutcome]":
        """
        Start a crossfade to source. The token is taken and the fade-out applied
        before this returns; the preload and commit run in the returned task.
        """
        self.sequence += 1
        token = self.sequence
        self.target.set_opacity(0.0)
        task = asyncio.ensure_future(self._preload_and_commit(token, source))
        self.pending.append(task)
        task.add_done_callback(self.pending.remove)
        return task

    async def _preload_and_commit(self, token: int, source: str) -> SwapOutcome:
        try:
            await self.loader.load(source)
        except ImageLoadError as e:
            # Failures restore visibility whether or not they are stale.
            logger.error("%s", e)
            self.target.set_opacity(1.0)
            return SwapOutcome.FAILED
        except Exception as e:
            logger.error("Failed to load image %s: %s", source, e)
            self.target.set_opacity(1.0)
            return SwapOutcome.FAILED

        if token != self.sequence:
            logger.debug("Discarding stale image %s (token %d, latest %d)", source, token, self.sequence)
            return SwapOutcome.ABANDONED

        self.target.set_source(source)
        self.target.set_visible(True)
        self._next_frame(lambda: self.target.set_opacity(1.0))
        return SwapOutcome.COMMITTED

    def _next_frame(self, callback: Callable[[], None]) -> None:
        if self._schedule_frame is not None:
            self._schedule_frame(callback)
        else:
            asyncio.get_running_loop().call_soon(callback)

    async def wait_idle(self) -> None:
        """Wait for every in-flight swap (useful in tests and shutdown)."""
        while self.pending:
            await asyncio.gather(*list(self.pending), return_exceptions=True)
