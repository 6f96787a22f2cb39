"""
Netlify API client for the latest deploy of a site.
"""
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.netlify.com/api/v1"


class DeployStatusError(Exception):
    pass


class DeployStatusNotConfigured(DeployStatusError):
    pass


class NetlifyClient:
    def __init__(
        self,
        site_id: Optional[str],
        api_token: Optional[str],
        base_url: Optional[str] = None,
        timeout_seconds: int = 30,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.site_id = site_id
        self.api_token = api_token
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.site_id and self.api_token)

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.api_token}"}

    def latest_deploy(self) -> Optional[Dict[str, Any]]:
        """Return the most recent deploy object, or None when the site has no deploys."""
        if not self.configured:
            raise DeployStatusNotConfigured("Netlify API not configured")
        url = f"{self.base_url}/sites/{self.site_id}/deploys"
        try:
            with httpx.Client(timeout=self.timeout_seconds, transport=self.transport) as client:
                r = client.get(url, params={"per_page": 1}, headers=self._headers())
        except httpx.RequestError as e:
            raise DeployStatusError(f"Netlify request failed: {e}") from e
        if r.status_code >= 400:
            raise DeployStatusError(f"Netlify API error: {r.status_code}")
        try:
            deploys = r.json()
        except ValueError as e:
            raise DeployStatusError(f"Netlify returned invalid JSON: {e}") from e
        if not isinstance(deploys, list):
            raise DeployStatusError(f"Unexpected Netlify response: {str(deploys)[:200]}")
        if not deploys:
            return None
        if not isinstance(deploys[0], dict):
            raise DeployStatusError(f"Unexpected Netlify deploy: {str(deploys[0])[:200]}")
        return deploys[0]

    def deploy_status(self) -> Dict[str, Any]:
        """Latest deploy reshaped for the site's status badge."""
        latest = self.latest_deploy()
        if not latest:
            return {"state": "unknown"}
        status = {
            "state": latest.get("state"),
            "error": latest.get("error_message"),
            "createdAt": latest.get("created_at"),
            "publishedAt": latest.get("published_at"),
            "deployTime": latest.get("deploy_time"),
        }
        # Missing fields are left out rather than sent as null
        return {k: v for k, v in status.items() if v is not None}
