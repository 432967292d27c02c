# ABOUTME: API client for the Open North Represent API (Canadian MPs, ridings and postal codes).
# ABOUTME: Follows meta.next pagination and treats 404 postal codes as "no such FSA".

import logging
from typing import Dict, List, Optional
from urllib.parse import urljoin

import requests

logger = logging.getLogger(__name__)


class RepresentAPI:
    """Thin client for the public Represent API."""

    BASE_URL = "https://represent.opennorth.ca"
    DEFAULT_PAGE_SIZE = 100
    TIMEOUT = 30

    @classmethod
    def _request(cls, path: str, params: Optional[Dict] = None) -> Dict:
        url = urljoin(cls.BASE_URL, path)
        logger.debug("GET %s params=%s", url, params)
        response = requests.get(url, params=params, timeout=cls.TIMEOUT)
        response.raise_for_status()
        return response.json()

    @classmethod
    def fetch_paginated(cls, endpoint: str) -> List[Dict]:
        results: List[Dict] = []
        path = endpoint
        params: Optional[Dict] = {'limit': cls.DEFAULT_PAGE_SIZE}
        while path:
            payload = cls._request(path, params)
            results.extend(payload.get('objects', []))
            path = (payload.get('meta') or {}).get('next')
            # meta.next already carries limit/offset
            params = None
        return results

    @classmethod
    def get_house_of_commons_members(cls) -> List[Dict]:
        return cls.fetch_paginated('/representatives/house-of-commons/')

    @classmethod
    def get_federal_boundaries(cls) -> List[Dict]:
        return cls.fetch_paginated('/boundaries/federal-electoral-districts/')

    @classmethod
    def get_postcode(cls, postal_code: str) -> Optional[Dict]:
        """Return the postcode payload, or None when the code does not exist."""
        try:
            return cls._request(f'/postcodes/{postal_code}/')
        except requests.HTTPError as exc:
            if exc.response is not None and exc.response.status_code == 404:
                return None
            raise
