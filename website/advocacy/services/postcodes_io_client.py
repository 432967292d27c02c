# ABOUTME: API client for postcodes.io, used to find the Westminster constituency of a UK postcode.
# ABOUTME: UK postcodes are too granular for a bundled mapping, so lookups happen at request time.

import logging
from typing import Dict, Optional
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)


class PostcodesIO:
    """Thin client for the public postcodes.io API (ONS data)."""

    BASE_URL = "https://api.postcodes.io"
    TIMEOUT = 10

    @classmethod
    def get_postcode(cls, postcode: str) -> Optional[Dict]:
        """Return the ``result`` object for a postcode, or None when it does not exist."""
        url = f"{cls.BASE_URL}/postcodes/{quote(postcode)}"
        logger.debug("GET %s", url)
        response = requests.get(url, timeout=cls.TIMEOUT)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json().get('result')
