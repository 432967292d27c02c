# ABOUTME: Fetches a publicly shared Google Sheet as CSV text for the target importer.
# ABOUTME: Only "anyone with the link" sheets work; private sheets come back as an HTML login page.

import logging
import re
from typing import Optional, Tuple
from urllib.parse import parse_qs, urlparse

import requests
from django.conf import settings

from .targets import TargetImportError

logger = logging.getLogger('advocacy.services')

SHEET_PATH_PATTERN = re.compile(r'/spreadsheets/d/([a-zA-Z0-9_-]+)')
FRAGMENT_GID_PATTERN = re.compile(r'gid=([0-9]+)')
EXPORT_URL = "https://docs.google.com/spreadsheets/d/{id}/export?format=csv&gid={gid}"

ACCESS_ERROR = (
    "Could not access the Google Sheet. "
    "Make sure it's shared as 'Anyone with the link can view'."
)


def parse_google_sheet_url(url: str) -> Optional[Tuple[str, str]]:
    """
    Extract ``(spreadsheet_id, gid)`` from a Google Sheets URL.

    The tab id comes from the ``gid`` query parameter and is overridden by a
    ``#gid=`` fragment; it defaults to "0". Returns None when the URL does not
    point at a spreadsheet.
    """
    if not isinstance(url, str):
        return None
    parsed = urlparse(url.strip())
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        return None

    match = SHEET_PATH_PATTERN.search(parsed.path)
    if not match:
        return None

    gid = (parse_qs(parsed.query).get('gid') or ['0'])[0] or '0'
    if parsed.fragment:
        fragment_match = FRAGMENT_GID_PATTERN.search(parsed.fragment)
        if fragment_match:
            gid = fragment_match.group(1)
    return match.group(1), gid


def build_export_url(spreadsheet_id: str, gid: str = '0') -> str:
    return EXPORT_URL.format(id=spreadsheet_id, gid=gid)


def fetch_google_sheet_csv(url: str) -> str:
    """Download the CSV export of a shared sheet or raise ``TargetImportError``."""
    if not (url or '').strip():
        raise TargetImportError("Missing Google Sheets URL.")

    parsed = parse_google_sheet_url(url)
    if parsed is None:
        raise TargetImportError("Invalid Google Sheets URL.")

    export_url = build_export_url(*parsed)
    timeout = getattr(settings, 'GOOGLE_SHEETS_TIMEOUT', 30)
    try:
        response = requests.get(export_url, timeout=timeout)
    except requests.RequestException as exc:
        logger.error("Error fetching Google Sheet %s: %s", export_url, exc)
        raise TargetImportError("Failed to fetch Google Sheet.", status_code=500) from exc

    if not response.ok:
        logger.info("Google Sheet %s returned HTTP %s", export_url, response.status_code)
        raise TargetImportError(ACCESS_ERROR)

    text = response.text
    head = text.strip().lower()
    if head.startswith('<!doctype') or head.startswith('<html'):
        logger.info("Google Sheet %s is not publicly shared", export_url)
        raise TargetImportError(ACCESS_ERROR)

    return text
