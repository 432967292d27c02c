# ABOUTME: Resolves Canadian postal codes to federal ridings via their FSA (first three characters).
# ABOUTME: The FSA → riding mapping is produced offline by the fetch_canada_data command.

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from ..constants import province_from_riding_id
from .datasets import excluded_parties_for, get_data_dir, load_json
from .directory import RepresentativeDirectory

logger = logging.getLogger('advocacy.services')

RIDING_ID_LENGTH = 5
FSA_PATTERN = re.compile(r'^[A-Z]\d[A-Z]$')


@dataclass(frozen=True)
class Riding:
    id: str
    name: str
    name_fr: str
    province: str
    province_code: str
    postal_codes: tuple = field(default=(), compare=False)


@dataclass(frozen=True)
class MP:
    id: str
    name: str
    first_name: str
    last_name: str
    email: str
    party: str
    riding_id: str
    riding_name: str
    province: str
    image_url: str = ''


def fsa_from_postal_code(postal_code) -> Optional[str]:
    """Return the Forward Sortation Area of a postal code ("m5v 2h1" → "M5V")."""
    if not isinstance(postal_code, str):
        return None
    fsa = re.sub(r'\s', '', postal_code).upper()[:3]
    if not FSA_PATTERN.match(fsa):
        return None
    return fsa


class RidingIndex:
    """FSA → ridings plus the MP directory for one dataset."""

    def __init__(
        self,
        ridings: Iterable[Mapping],
        fsa_mapping: Mapping[str, Mapping],
        mps: Iterable[Mapping],
        exclude=None,
    ):
        postal_codes: Dict[str, List[str]] = {}
        base: Dict[str, Mapping] = {}
        for raw in ridings:
            riding_id = str(raw.get('id', ''))
            base[riding_id] = raw
            postal_codes[riding_id] = [fsa for fsa in raw.get('postalCodes', []) or []]

        for fsa, mapping in fsa_mapping.items():
            riding_id = str(mapping.get('ridingId', ''))
            if riding_id in postal_codes and fsa not in postal_codes[riding_id]:
                postal_codes[riding_id].append(fsa)

        self._ridings: Dict[str, Riding] = {}
        for riding_id, raw in sorted(base.items()):
            province_code = raw.get('provinceCode') or riding_id[:2]
            self._ridings[riding_id] = Riding(
                id=riding_id,
                name=raw.get('name', ''),
                name_fr=raw.get('nameFr', '') or raw.get('name', ''),
                province=raw.get('province') or province_from_riding_id(riding_id),
                province_code=province_code,
                postal_codes=tuple(postal_codes[riding_id]),
            )

        self._fsa_to_ridings: Dict[str, List[Riding]] = {}
        for riding in self._ridings.values():
            for fsa in riding.postal_codes:
                self._fsa_to_ridings.setdefault(fsa.upper(), []).append(riding)

        self.mps = RepresentativeDirectory(
            (self._build_mp(raw) for raw in mps),
            district_of=lambda mp: mp.riding_id,
            district_width=RIDING_ID_LENGTH,
            exclude=exclude,
        )

        logger.info(
            "Loaded %s ridings, %s FSAs, %s MPs",
            len(self._ridings), len(self._fsa_to_ridings), len(self.mps),
        )

    @staticmethod
    def _build_mp(raw: Mapping) -> MP:
        riding_id = str(raw.get('ridingId', '') or '')
        return MP(
            id=str(raw.get('id', '')),
            name=raw.get('name', '') or '',
            first_name=raw.get('firstName', '') or '',
            last_name=raw.get('lastName', '') or '',
            email=raw.get('email', '') or '',
            party=raw.get('party', '') or '',
            riding_id=riding_id,
            riding_name=raw.get('ridingName', '') or '',
            province=raw.get('province') or province_from_riding_id(riding_id),
            image_url=raw.get('imageUrl', '') or '',
        )

    @classmethod
    def from_directory(cls, data_dir: Path, exclude=None) -> 'RidingIndex':
        logger.info("Loading Canadian datasets from %s", data_dir)
        return cls(
            ridings=load_json(data_dir / 'ridings-data.json', []),
            fsa_mapping=load_json(data_dir / 'postal-code-riding.json', {}),
            mps=load_json(data_dir / 'mp-data.json', []),
            exclude=exclude,
        )

    @property
    def ridings(self) -> List[Riding]:
        return list(self._ridings.values())

    def get_riding(self, riding_id) -> Optional[Riding]:
        return self._ridings.get(str(riding_id)) if riding_id is not None else None

    def find_ridings_by_postal_code(self, postal_code) -> List[Riding]:
        fsa = fsa_from_postal_code(postal_code)
        if fsa is None:
            return []
        return list(self._fsa_to_ridings.get(fsa, ()))

    def find_riding_by_postal_code(self, postal_code) -> Optional[Riding]:
        candidates = self.find_ridings_by_postal_code(postal_code)
        return min(candidates, key=lambda riding: riding.id) if candidates else None

    def find_mps_by_riding(self, riding_id) -> List[MP]:
        return self.mps.find_by_district(riding_id)

    def find_mp_by_postal_code(self, postal_code) -> Optional[MP]:
        riding = self.find_riding_by_postal_code(postal_code)
        if riding is None:
            return None
        mps = self.find_mps_by_riding(riding.id)
        return mps[0] if mps else None


class CanadianDataRepository:
    """Lazy loader that caches the riding index in memory."""

    _index: Optional[RidingIndex] = None
    _path: Optional[str] = None

    @classmethod
    def get_index(cls) -> RidingIndex:
        data_dir = get_data_dir() / 'ca'
        if cls._index is None or cls._path != str(data_dir):
            cls._index = RidingIndex.from_directory(data_dir, exclude=excluded_parties_for('CA'))
            cls._path = str(data_dir)
        return cls._index

    @classmethod
    def reset(cls) -> None:
        cls._index = None
        cls._path = None


def find_ridings_by_postal_code(postal_code) -> List[Riding]:
    return CanadianDataRepository.get_index().find_ridings_by_postal_code(postal_code)


def find_riding_by_postal_code(postal_code) -> Optional[Riding]:
    return CanadianDataRepository.get_index().find_riding_by_postal_code(postal_code)


def find_mps_by_riding(riding_id) -> List[MP]:
    return CanadianDataRepository.get_index().find_mps_by_riding(riding_id)


def find_mp_by_postal_code(postal_code) -> Optional[MP]:
    return CanadianDataRepository.get_index().find_mp_by_postal_code(postal_code)
