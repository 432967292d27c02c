# ABOUTME: Resolves US ZIP codes to congressional districts, their House member and the state's senators.
# ABOUTME: A ZIP code can span several districts; the first listed district is the primary one.

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..constants import US_STATE_NAMES
from .datasets import excluded_parties_for, get_data_dir, load_json
from .directory import RepresentativeDirectory, collation_key

logger = logging.getLogger('advocacy.services')

AT_LARGE_MARKERS = ('0', 'AL')


@dataclass(frozen=True)
class Representative:
    id: str
    name: str
    first_name: str
    last_name: str
    email: str
    party: str
    state: str
    state_code: str
    district: str
    district_number: int
    image_url: str = ''
    phone: str = ''
    office: str = ''
    website: str = ''
    contact_form: str = ''


@dataclass(frozen=True)
class Senator:
    id: str
    name: str
    first_name: str
    last_name: str
    email: str
    party: str
    state: str
    state_code: str
    senate_class: int
    state_rank: str
    image_url: str = ''
    phone: str = ''
    office: str = ''
    website: str = ''
    contact_form: str = ''


@dataclass(frozen=True)
class DistrictLookup:
    district_id: str
    state_code: str
    district_number: int
    all_districts: Tuple[str, ...] = field(default=())

    @property
    def is_multi_district(self) -> bool:
        return len(self.all_districts) > 1


@dataclass
class ZipRepresentatives:
    district: Optional[DistrictLookup] = None
    representatives: List[Representative] = field(default_factory=list)
    senators: List[Senator] = field(default_factory=list)

    @property
    def representative(self) -> Optional[Representative]:
        return self.representatives[0] if self.representatives else None


def normalize_zip_code(zip_code) -> Optional[str]:
    """First five digits of a ZIP or ZIP+4, zero-padded ("2134" → "02134")."""
    if not isinstance(zip_code, str):
        return None
    digits = re.sub(r'\D', '', zip_code)[:5]
    if not digits:
        return None
    return digits.zfill(5)


def parse_district_id(district_id: str) -> Tuple[str, int]:
    """Split "CA-12" into ("CA", 12); at-large seats ("AK-AL", "WY-0") are number 0."""
    state_code, _, number = (district_id or '').upper().partition('-')
    if number in AT_LARGE_MARKERS or not number.isdigit():
        return state_code, 0
    return state_code, int(number)


def ordinal_suffix(n: int) -> str:
    if 10 <= n % 100 <= 20:
        return 'th'
    return {1: 'st', 2: 'nd', 3: 'rd'}.get(n % 10, 'th')


def format_district_name(district_id: str) -> str:
    """Human-readable district name, e.g. "California's 12th Congressional District"."""
    state_code, _, number = (district_id or '').upper().partition('-')
    state_name = US_STATE_NAMES.get(state_code, state_code)
    if number in AT_LARGE_MARKERS:
        return f"{state_name} At-Large"
    _, district_number = parse_district_id(district_id)
    return f"{state_name}'s {district_number}{ordinal_suffix(district_number)} Congressional District"


def _text(raw: Mapping, key: str) -> str:
    return raw.get(key) or ''


class CongressIndex:
    """ZIP → districts mapping plus House and Senate directories for one dataset."""

    def __init__(
        self,
        zip_districts: Mapping[str, object],
        representatives: Iterable[Mapping],
        senators: Iterable[Mapping],
        exclude=None,
    ):
        self._zip_districts: Dict[str, Tuple[str, ...]] = {}
        for zip_code, districts in zip_districts.items():
            values = districts if isinstance(districts, list) else [districts]
            cleaned = tuple(str(value).upper() for value in values if value)
            if cleaned:
                self._zip_districts[str(zip_code).zfill(5)] = cleaned

        self.house = RepresentativeDirectory(
            (self._build_representative(raw) for raw in representatives),
            district_of=lambda rep: rep.district,
            exclude=exclude,
        )
        # Senior senator first
        self.senate = RepresentativeDirectory(
            (self._build_senator(raw) for raw in senators),
            district_of=lambda senator: senator.state_code,
            exclude=exclude,
            order_by=lambda senator: (senator.state_rank != 'senior', collation_key(senator.name)),
        )

        logger.info(
            "Loaded %s ZIP codes, %s representatives, %s senators",
            len(self._zip_districts), len(self.house), len(self.senate),
        )

    @staticmethod
    def _build_representative(raw: Mapping) -> Representative:
        district = str(raw.get('district', '') or '').upper()
        state_code, number = parse_district_id(district)
        state_code = (raw.get('stateCode') or state_code).upper()
        return Representative(
            id=str(raw.get('id', '')),
            name=_text(raw, 'name'),
            first_name=_text(raw, 'firstName'),
            last_name=_text(raw, 'lastName'),
            email=_text(raw, 'email'),
            party=_text(raw, 'party'),
            state=raw.get('state') or US_STATE_NAMES.get(state_code, ''),
            state_code=state_code,
            district=district,
            district_number=raw.get('districtNumber', number) or 0,
            image_url=_text(raw, 'imageUrl'),
            phone=_text(raw, 'phone'),
            office=_text(raw, 'office'),
            website=_text(raw, 'website'),
            contact_form=_text(raw, 'contactForm'),
        )

    @staticmethod
    def _build_senator(raw: Mapping) -> Senator:
        state_code = (raw.get('stateCode') or '').upper()
        return Senator(
            id=str(raw.get('id', '')),
            name=_text(raw, 'name'),
            first_name=_text(raw, 'firstName'),
            last_name=_text(raw, 'lastName'),
            email=_text(raw, 'email'),
            party=_text(raw, 'party'),
            state=raw.get('state') or US_STATE_NAMES.get(state_code, ''),
            state_code=state_code,
            senate_class=raw.get('senateClass') or 0,
            state_rank=_text(raw, 'stateRank'),
            image_url=_text(raw, 'imageUrl'),
            phone=_text(raw, 'phone'),
            office=_text(raw, 'office'),
            website=_text(raw, 'website'),
            contact_form=_text(raw, 'contactForm'),
        )

    @classmethod
    def from_directory(cls, data_dir: Path, exclude=None) -> 'CongressIndex':
        logger.info("Loading US datasets from %s", data_dir)
        return cls(
            zip_districts=load_json(data_dir / 'zip-district.json', {}),
            representatives=load_json(data_dir / 'representative-data.json', []),
            senators=load_json(data_dir / 'senator-data.json', []),
            exclude=exclude,
        )

    def find_district_by_zip_code(self, zip_code) -> Optional[DistrictLookup]:
        zip5 = normalize_zip_code(zip_code)
        districts = self._zip_districts.get(zip5) if zip5 else None
        if not districts:
            return None
        state_code, number = parse_district_id(districts[0])
        return DistrictLookup(
            district_id=districts[0],
            state_code=state_code,
            district_number=number,
            all_districts=districts,
        )

    def find_representative_by_district(self, district_id) -> Optional[Representative]:
        members = self.house.find_by_district(str(district_id or '').upper())
        return members[0] if members else None

    def find_representative_by_zip_code(self, zip_code) -> Optional[Representative]:
        district = self.find_district_by_zip_code(zip_code)
        if district is None:
            return None
        return self.find_representative_by_district(district.district_id)

    def find_senators_by_state(self, state_code) -> List[Senator]:
        return self.senate.find_by_district(str(state_code or '').upper())

    def find_senators_by_zip_code(self, zip_code) -> List[Senator]:
        district = self.find_district_by_zip_code(zip_code)
        if district is None:
            return []
        return self.find_senators_by_state(district.state_code)

    def find_all_representatives_by_zip_code(self, zip_code) -> ZipRepresentatives:
        """House members for every district of the ZIP plus the state's two senators."""
        district = self.find_district_by_zip_code(zip_code)
        if district is None:
            return ZipRepresentatives()
        representatives = []
        for district_id in district.all_districts:
            representative = self.find_representative_by_district(district_id)
            if representative is not None:
                representatives.append(representative)
        return ZipRepresentatives(
            district=district,
            representatives=representatives,
            senators=self.find_senators_by_state(district.state_code),
        )


class USDataRepository:
    """Lazy loader that caches the congressional index in memory."""

    _index: Optional[CongressIndex] = None
    _path: Optional[str] = None

    @classmethod
    def get_index(cls) -> CongressIndex:
        data_dir = get_data_dir() / 'us'
        if cls._index is None or cls._path != str(data_dir):
            cls._index = CongressIndex.from_directory(data_dir, exclude=excluded_parties_for('US'))
            cls._path = str(data_dir)
        return cls._index

    @classmethod
    def reset(cls) -> None:
        cls._index = None
        cls._path = None


def find_district_by_zip_code(zip_code) -> Optional[DistrictLookup]:
    return USDataRepository.get_index().find_district_by_zip_code(zip_code)


def find_all_representatives_by_zip_code(zip_code) -> ZipRepresentatives:
    return USDataRepository.get_index().find_all_representatives_by_zip_code(zip_code)


def find_senators_by_state(state_code) -> List[Senator]:
    return USDataRepository.get_index().find_senators_by_state(state_code)
