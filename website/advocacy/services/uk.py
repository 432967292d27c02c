# ABOUTME: Resolves UK postcodes to Westminster constituencies and their MP.
# ABOUTME: Constituencies come from postcodes.io at lookup time; MPs come from the bundled dataset.

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

import requests

from .datasets import excluded_parties_for, get_data_dir, load_json
from .directory import RepresentativeDirectory, collation_key
from .postcodes_io_client import PostcodesIO

logger = logging.getLogger('advocacy.services')

POSTCODE_PATTERN = re.compile(r'^[A-Z]{1,2}[0-9][0-9A-Z]?\s?[0-9][A-Z]{2}$', re.IGNORECASE)
SEARCH_LIMIT = 10


@dataclass(frozen=True)
class UKMP:
    id: str
    name: str
    full_title: str
    email: str
    party: str
    party_abbrev: str
    constituency_id: str
    constituency_name: str
    image_url: str = ''


@dataclass(frozen=True)
class Constituency:
    name: str
    country: str = ''


def is_valid_uk_postcode(postcode) -> bool:
    """Loose format check that accepts "SW1A 1AA", "sw1a1aa" and similar."""
    if not isinstance(postcode, str):
        return False
    return bool(POSTCODE_PATTERN.match(postcode.strip()))


def normalize_postcode(postcode: str) -> str:
    """Uppercase with a single space before the inward code ("sw1a1aa" → "SW1A 1AA")."""
    cleaned = re.sub(r'\s+', '', postcode or '').upper()
    if len(cleaned) >= 5:
        return f"{cleaned[:-3]} {cleaned[-3:]}"
    return cleaned


def constituency_key(name) -> str:
    return ' '.join(str(name or '').split()).casefold()


def lookup_constituency(postcode) -> Optional[Constituency]:
    """
    Ask postcodes.io for the 2024 constituency of a postcode.

    Returns None for malformed or unknown postcodes and when the API cannot
    be reached, so a failed lookup reads the same as "not found".
    """
    if not is_valid_uk_postcode(postcode):
        return None
    try:
        result = PostcodesIO.get_postcode(normalize_postcode(postcode).replace(' ', ''))
    except (requests.RequestException, ValueError) as e:
        logger.warning("Constituency lookup failed for %s: %s", postcode, e)
        return None

    name = (result or {}).get('parliamentary_constituency_2024')
    if not name:
        return None
    return Constituency(name=name, country=result.get('country') or '')


class ConstituencyIndex:
    """Constituency name → MP directory; every constituency has exactly one seat."""

    def __init__(self, mps: Iterable[Mapping], exclude=None):
        self.mps = RepresentativeDirectory(
            (self._build_mp(raw) for raw in mps),
            district_of=lambda mp: constituency_key(mp.constituency_name),
            exclude=exclude,
        )
        logger.info("Loaded %s UK MPs", len(self.mps))

    @staticmethod
    def _build_mp(raw: Mapping) -> UKMP:
        return UKMP(
            id=str(raw.get('id', '')),
            name=raw.get('name', '') or '',
            full_title=raw.get('fullTitle', '') or raw.get('name', '') or '',
            email=raw.get('email', '') or '',
            party=raw.get('party', '') or '',
            party_abbrev=raw.get('partyAbbrev', '') or '',
            constituency_id=str(raw.get('constituencyId', '') or ''),
            constituency_name=raw.get('constituencyName', '') or '',
            image_url=raw.get('imageUrl', '') or '',
        )

    @classmethod
    def from_directory(cls, data_dir: Path, exclude=None) -> 'ConstituencyIndex':
        logger.info("Loading UK datasets from %s", data_dir)
        return cls(mps=load_json(data_dir / 'mp-data.json', []), exclude=exclude)

    def find_mps_by_constituency(self, constituency_name) -> List[UKMP]:
        return self.mps.find_by_district(constituency_key(constituency_name))

    def find_mp_by_constituency(self, constituency_name) -> Optional[UKMP]:
        mps = self.find_mps_by_constituency(constituency_name)
        return mps[0] if mps else None

    def get_mp_by_id(self, mp_id) -> Optional[UKMP]:
        return next((mp for mp in self.mps if mp.id == str(mp_id)), None)

    def search_mps_by_name(self, query, limit: int = SEARCH_LIMIT) -> List[UKMP]:
        """Autocomplete over MP and constituency names; needs at least two characters."""
        needle = (query or '').strip().casefold()
        if len(needle) < 2:
            return []
        matches = [
            mp for mp in self.mps
            if needle in mp.name.casefold() or needle in mp.constituency_name.casefold()
        ]
        matches.sort(key=lambda mp: collation_key(mp.name))
        return matches[:limit]


class UKDataRepository:
    """Lazy loader that caches the MP index in memory."""

    _index: Optional[ConstituencyIndex] = None
    _path: Optional[str] = None

    @classmethod
    def get_index(cls) -> ConstituencyIndex:
        data_dir = get_data_dir() / 'uk'
        if cls._index is None or cls._path != str(data_dir):
            cls._index = ConstituencyIndex.from_directory(data_dir, exclude=excluded_parties_for('UK'))
            cls._path = str(data_dir)
        return cls._index

    @classmethod
    def reset(cls) -> None:
        cls._index = None
        cls._path = None


def find_mps_by_constituency(constituency_name) -> List[UKMP]:
    return UKDataRepository.get_index().find_mps_by_constituency(constituency_name)


def find_mps_by_postcode(postcode) -> List[UKMP]:
    constituency = lookup_constituency(postcode)
    if constituency is None:
        return []
    return find_mps_by_constituency(constituency.name)


def search_mps_by_name(query) -> List[UKMP]:
    return UKDataRepository.get_index().search_mps_by_name(query)
