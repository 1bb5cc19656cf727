"""Pexels search API client."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from config.constants import DEFAULT_SEARCH_CONFIG
from config.settings import get_settings
from core.errors import MalformedResponseError, MissingCredentialError, UpstreamError
from core.logging import get_logger
from photos.models import PhotoRecord, photo_from_pexels

logger = get_logger(__name__)


class PexelsClient:
    """Thin wrapper around ``GET /search`` returning normalized photos."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        settings = get_settings()
        self._api_key = settings.pexels_api_key if api_key is None else api_key
        self._base_url = (base_url or settings.pexels_api_base_url).rstrip("/")
        self._timeout = timeout_seconds or settings.pexels_request_timeout_seconds

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def search(
        self,
        query: str,
        per_page: int,
        page: int = 1,
        orientation: str = DEFAULT_SEARCH_CONFIG.ORIENTATION,
    ) -> List[PhotoRecord]:
        """
        Search photos and normalize them.

        An empty list is a valid answer (no matches). Entries that cannot be
        normalized are skipped.

        Raises:
            MissingCredentialError: No API key configured.
            UpstreamError: Non-2xx status, timeout or connection failure.
            MalformedResponseError: Body is not JSON or has no ``photos`` list.
        """
        payload = self._get(
            "/search",
            params={
                "query": query,
                "orientation": orientation,
                "per_page": per_page,
                "page": page,
            },
        )

        raw_photos = payload.get("photos")
        if not isinstance(raw_photos, list):
            raise MalformedResponseError("Pexels response has no photos list")

        photos = [p for p in (photo_from_pexels(item) for item in raw_photos) if p is not None]
        if raw_photos and not photos:
            raise MalformedResponseError(
                f"None of the {len(raw_photos)} Pexels photos carried usable image URLs"
            )

        logger.debug(
            "Pexels search",
            query=query,
            page=page,
            per_page=per_page,
            received=len(raw_photos),
            usable=len(photos),
            total_results=payload.get("total_results"),
        )
        return photos

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self._api_key:
            raise MissingCredentialError("Pexels API key is not configured")

        url = f"{self._base_url}{path}"
        try:
            resp = requests.get(
                url,
                params=params,
                headers={"Authorization": self._api_key},
                timeout=self._timeout,
            )
        except requests.Timeout as e:
            raise UpstreamError(f"Pexels request timed out after {self._timeout}s") from e
        except requests.RequestException as e:
            raise UpstreamError(f"Pexels request failed: {e}") from e

        if resp.status_code >= 400:
            raise UpstreamError(
                f"Pexels API error ({resp.status_code}): {resp.text[:200]}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponseError("Pexels returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise MalformedResponseError("Pexels returned an unexpected JSON shape")
        return data
