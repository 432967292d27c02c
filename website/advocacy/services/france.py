# ABOUTME: Resolves French postal codes to départements and their deputies (Assemblée nationale).
# ABOUTME: No postal code → circonscription data exists, so lookups stop at the département level.

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from ..constants import CORSICA_SPLIT_POSTAL_CODE, FRENCH_DEPARTMENTS, FRENCH_OVERSEAS_DEPARTMENTS
from .datasets import excluded_parties_for, get_data_dir, load_json
from .directory import RepresentativeDirectory

logger = logging.getLogger('advocacy.services')

POSTAL_CODE_PATTERN = re.compile(r'^\d{5}$')


@dataclass(frozen=True)
class Depute:
    id: str
    name: str
    first_name: str
    last_name: str
    email: str
    department: str
    department_code: str
    constituency: int
    party: str
    party_short: str = ''


def _clean(postal_code) -> str:
    if not isinstance(postal_code, str):
        return ''
    return re.sub(r'\s', '', postal_code)


def is_valid_french_postal_code(postal_code) -> bool:
    return bool(POSTAL_CODE_PATTERN.match(_clean(postal_code)))


def get_department_from_postal_code(postal_code) -> Optional[str]:
    """
    Derive the département code from a French postal code.

    - 97xxx: overseas départements, three-digit code (971-974, 976 only)
    - 20xxx: Corsica, 2A below 20200 and 2B from 20200 on
    - 01xxx-95xxx: the first two digits
    Anything that is not exactly five digits yields None.
    """
    normalized = _clean(postal_code)
    if not POSTAL_CODE_PATTERN.match(normalized):
        return None

    prefix2 = normalized[:2]
    prefix3 = normalized[:3]

    if prefix2 == '97':
        return prefix3 if prefix3 in FRENCH_OVERSEAS_DEPARTMENTS else None

    if prefix2 == '20':
        return '2A' if int(normalized) < CORSICA_SPLIT_POSTAL_CODE else '2B'

    if 1 <= int(prefix2) <= 95:
        return prefix2

    return None


def get_department_name(code: str) -> Optional[str]:
    return FRENCH_DEPARTMENTS.get(code)


def get_circonscription_name(depute: Depute) -> str:
    ordinal = '1ère' if depute.constituency == 1 else f"{depute.constituency}e"
    return f"{ordinal} circonscription – {depute.department}"


class DeputeIndex:
    """Département → deputies, ordered by circonscription number."""

    def __init__(self, deputes: Iterable[Mapping], exclude=None):
        self.deputes = RepresentativeDirectory(
            (self._build_depute(raw) for raw in deputes),
            district_of=lambda depute: depute.department_code,
            district_width=2,
            exclude=exclude,
            order_by=lambda depute: depute.constituency,
        )
        logger.info("Loaded %s deputies in %s départements", len(self.deputes), len(self.deputes.district_ids()))

    @staticmethod
    def _build_depute(raw: Mapping) -> Depute:
        try:
            constituency = int(raw.get('constituency') or 0)
        except (TypeError, ValueError):
            constituency = 0
        return Depute(
            id=str(raw.get('id', '')),
            name=raw.get('name', '') or '',
            first_name=raw.get('firstName', '') or '',
            last_name=raw.get('lastName', '') or '',
            email=raw.get('email', '') or '',
            department=raw.get('department', '') or '',
            department_code=str(raw.get('departmentCode', '') or ''),
            constituency=constituency,
            party=raw.get('party', '') or '',
            party_short=raw.get('partyShort', '') or '',
        )

    @classmethod
    def from_directory(cls, data_dir: Path, exclude=None) -> 'DeputeIndex':
        logger.info("Loading French datasets from %s", data_dir)
        return cls(load_json(data_dir / 'depute-data.json', []), exclude=exclude)

    def find_deputes_by_department(self, department_code) -> List[Depute]:
        return self.deputes.find_by_district(department_code)

    def find_depute_by_circonscription(self, department_code, constituency: int) -> Optional[Depute]:
        for depute in self.find_deputes_by_department(department_code):
            if depute.constituency == constituency:
                return depute
        return None

    def find_deputes_by_postal_code(self, postal_code) -> List[Depute]:
        department_code = get_department_from_postal_code(postal_code)
        if not department_code:
            return []
        return self.find_deputes_by_department(department_code)

    def get_circonscription_count(self, department_code) -> int:
        return len(self.find_deputes_by_department(department_code))


class FrenchDataRepository:
    """Lazy loader that caches the deputy index in memory."""

    _index: Optional[DeputeIndex] = None
    _path: Optional[str] = None

    @classmethod
    def get_index(cls) -> DeputeIndex:
        data_dir = get_data_dir() / 'fr'
        if cls._index is None or cls._path != str(data_dir):
            cls._index = DeputeIndex.from_directory(data_dir, exclude=excluded_parties_for('FR'))
            cls._path = str(data_dir)
        return cls._index

    @classmethod
    def reset(cls) -> None:
        cls._index = None
        cls._path = None


def find_deputes_by_department(department_code) -> List[Depute]:
    return FrenchDataRepository.get_index().find_deputes_by_department(department_code)


def find_depute_by_circonscription(department_code, constituency: int) -> Optional[Depute]:
    return FrenchDataRepository.get_index().find_depute_by_circonscription(department_code, constituency)


def find_deputes_by_postal_code(postal_code) -> List[Depute]:
    return FrenchDataRepository.get_index().find_deputes_by_postal_code(postal_code)


def get_circonscription_count(department_code) -> int:
    return FrenchDataRepository.get_index().get_circonscription_count(department_code)
