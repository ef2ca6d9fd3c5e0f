# Role: External tool adapter for photo search. Calls the Unsplash search endpoint and returns candidate
# image URLs (regular size), best match first. Errors propagate; ImageResolver owns the fallback policy.

from __future__ import annotations

from typing import List

import requests


class UnsplashPhotoClient:
    SEARCH_URL = "https://api.unsplash.com/search/photos"
    _TIMEOUT_SECONDS = 10

    def search(self, query: str, access_key: str, per_page: int = 1) -> List[str]:
        # 1) Search landscape photos for the query
        # 2) Raise on non-success status
        # 3) Return urls.regular of each result (may be empty)
        params = {"query": query, "per_page": per_page, "orientation": "landscape"}
        headers = {"Authorization": f"Client-ID {access_key}"}
        r = requests.get(self.SEARCH_URL, params=params, headers=headers, timeout=self._TIMEOUT_SECONDS)
        r.raise_for_status()
        payload = r.json()

        urls: List[str] = []
        for result in payload.get("results") or []:
            url = ((result or {}).get("urls") or {}).get("regular")
            if isinstance(url, str) and url:
                urls.append(url)
        return urls
