# Role: Destination -> representative photo URL, memoized. Cache hits and missing credentials never touch the
# network; every lookup failure collapses to one fixed fallback URL. The cache is size-capped and evicts the
# least recently used destination first.

from __future__ import annotations

import logging
import os
import threading
from collections import OrderedDict
from typing import Optional

import requests

import trip_planner.config as config
from trip_planner.tools.photo_client import UnsplashPhotoClient

logger = logging.getLogger(__name__)

FALLBACK_IMAGE_URL = (
    "https://images.unsplash.com/photo-1501785888041-af3ef285b470?q=80&w=1470&auto=format&fit=crop"
)

_UNSET = object()


class ImageResolver:
    def __init__(
        self,
        photo_client: Optional[UnsplashPhotoClient] = None,
        access_key: object = _UNSET,
        max_entries: Optional[int] = None,
    ) -> None:
        # Key line: access_key=None means "explicitly no credential"; omitted means "read the environment".
        self.photo_client = photo_client or UnsplashPhotoClient()
        self._access_key = access_key
        self._max_entries = max_entries
        self._cache: "OrderedDict[str, str]" = OrderedDict()
        self._lock = threading.Lock()

    @property
    def access_key(self) -> Optional[str]:
        if self._access_key is _UNSET:
            return os.getenv("UNSPLASH_ACCESS_KEY") or None
        return self._access_key or None  # type: ignore[return-value]

    @property
    def max_entries(self) -> int:
        return self._max_entries or config.IMAGE_CACHE_MAX_ENTRIES

    @staticmethod
    def cache_key(destination: Optional[str]) -> str:
        return (destination or "").strip().lower()

    def __len__(self) -> int:
        return len(self._cache)

    def _cache_get(self, key: str) -> Optional[str]:
        with self._lock:
            url = self._cache.get(key)
            if url is not None:
                self._cache.move_to_end(key)
            return url

    def _cache_put(self, key: str, url: str) -> None:
        with self._lock:
            self._cache[key] = url
            self._cache.move_to_end(key)
            while len(self._cache) > self.max_entries:
                self._cache.popitem(last=False)

    def resolve(self, destination: Optional[str], request_id: str = "-") -> str:
        # 1) Empty key -> fallback
        # 2) Cache hit -> cached URL (no network)
        # 3) No credential -> fallback (no network)
        # 4) Exactly one lookup; any failure -> fallback; success -> store + return
        key = self.cache_key(destination)
        if not key:
            return FALLBACK_IMAGE_URL

        cached = self._cache_get(key)
        if cached is not None:
            logger.info("[chat][%s] [CACHE HIT] Serving image for %r", request_id, destination)
            return cached
        logger.info("[chat][%s] [CACHE MISS] Fetching new image for %r", request_id, destination)

        access_key = self.access_key
        if not access_key:
            logger.warning("[chat][%s] UNSPLASH_ACCESS_KEY is not set. Returning fallback image.", request_id)
            return FALLBACK_IMAGE_URL

        try:
            urls = self.photo_client.search(f"{destination} travel", access_key)
        except requests.RequestException as e:
            logger.error("[chat][%s] Unsplash lookup failed: %s", request_id, e)
            return FALLBACK_IMAGE_URL
        except Exception as e:
            logger.error("[chat][%s] Unsplash lookup raised %r", request_id, e)
            return FALLBACK_IMAGE_URL

        if not urls:
            logger.info("[chat][%s] No Unsplash results found for %r.", request_id, destination)
            return FALLBACK_IMAGE_URL

        url = urls[0]
        logger.info("[chat][%s] Found image for %r: %s", request_id, destination, url)
        self._cache_put(key, url)
        return url
