"""
FastAPI application serving the static random-image site and its deploy-status API.
"""
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from clients import DeployStatusError, DeployStatusNotConfigured, NetlifyClient
from config import get_images_dir, get_manifest_path, get_public_dir, get_settings
from models import DeployStatusResponse, ErrorResponse

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

# Deploy status should never be cached by the browser or CDN
_NO_CACHE_HEADERS = {"Cache-Control": "no-cache, no-store, must-revalidate"}


def get_netlify_client() -> NetlifyClient:
    settings = get_settings()
    return NetlifyClient(
        site_id=settings.netlify_site_id,
        api_token=settings.netlify_api_token,
        timeout_seconds=settings.api_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("Random image site starting")
    s = get_settings()
    if not (s.netlify_site_id and s.netlify_api_token):
        logger.warning("Deploy status: Netlify not configured (set NETLIFY_SITE_ID and NETLIFY_API_TOKEN)")
    if not get_manifest_path(s).exists():
        logger.warning("Manifest %s missing; run scripts/generate_image_list.py", get_manifest_path(s))
    yield
    logger.info("Random image site shutting down")


app = FastAPI(
    title="Random Image Site",
    description="Static random image page with a Netlify deploy-status endpoint",
    version="1.0.0",
    lifespan=lifespan,
)


@app.get("/health")
async def health() -> JSONResponse:
    """Lightweight health endpoint for uptime checks."""
    return JSONResponse({"status": "ok"})


@app.get(
    "/api/deploy-status",
    response_model=DeployStatusResponse,
    responses={500: {"model": ErrorResponse}},
)
async def deploy_status(client: NetlifyClient = Depends(get_netlify_client)) -> JSONResponse:
    """Latest Netlify deploy of this site, reshaped for the status badge."""
    try:
        data = await asyncio.to_thread(client.deploy_status)
    except DeployStatusNotConfigured:
        return JSONResponse({"error": "Netlify API not configured"}, status_code=500)
    except DeployStatusError as e:
        logger.warning("Deploy status lookup failed: %s", e)
        return JSONResponse(
            {"error": "Failed to fetch deploy status"}, status_code=500, headers=_NO_CACHE_HEADERS
        )
    body = DeployStatusResponse.model_validate(data).model_dump(by_alias=True, exclude_unset=True)
    return JSONResponse(body, headers=_NO_CACHE_HEADERS)


# Mounted last so the API routes above take precedence over the static catch-all.
app.mount("/images", StaticFiles(directory=str(get_images_dir()), check_dir=False), name="images")
app.mount("/", StaticFiles(directory=str(get_public_dir()), html=True, check_dir=False), name="public")
