# ABOUTME: Locates and reads the bundled per-country JSON datasets.
# ABOUTME: Also resolves the configured load-time party exclusion policy per country.

import json
import logging
from pathlib import Path
from typing import Any

from django.conf import settings

from .directory import PartyExclusion

logger = logging.getLogger('advocacy.services')

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / 'data'


def get_data_dir() -> Path:
    configured = getattr(settings, 'ADVOCACY_DATA_DIR', None)
    return Path(configured) if configured else DEFAULT_DATA_DIR


def load_json(path: Path, default: Any) -> Any:
    """Read a bundled dataset; a missing file yields ``default`` with a warning."""
    if not path.exists():
        logger.warning("Dataset %s not found", path)
        return default
    with path.open('r', encoding='utf-8') as data_file:
        return json.load(data_file)


def excluded_parties_for(country: str) -> PartyExclusion:
    policy = getattr(settings, 'ADVOCACY_EXCLUDED_PARTIES', {}) or {}
    return PartyExclusion(policy.get(country.upper(), ()))
