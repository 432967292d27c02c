# ABOUTME: Resolves German postal codes (PLZ) to Bundestag Wahlkreise and their MdBs.
# ABOUTME: Data is the bundled Wahlkreis list merged with the PLZ geodata mapping, indexed once.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from .datasets import excluded_parties_for, get_data_dir, load_json
from .directory import RepresentativeDirectory, collation_key

logger = logging.getLogger('advocacy.services')

PLZ_LENGTH = 5
WAHLKREIS_ID_LENGTH = 3


@dataclass(frozen=True)
class Wahlkreis:
    id: str
    name: str
    land: str
    plz_list: tuple = field(default=(), compare=False)


@dataclass(frozen=True)
class MdB:
    id: str
    name: str
    email: str
    party: str
    wahlkreis_id: str
    image_url: str = ''


def normalize_plz(plz) -> Optional[str]:
    """Zero-pad a PLZ to five digits; None for anything that is not 1-5 digits."""
    if not isinstance(plz, str):
        return None
    cleaned = ''.join(plz.split())
    if not cleaned or not cleaned.isdigit() or len(cleaned) > PLZ_LENGTH:
        return None
    return cleaned.zfill(PLZ_LENGTH)


class WahlkreisIndex:
    """
    PLZ → Wahlkreis lookup plus the MdB directory for one dataset.

    A PLZ can straddle several Wahlkreise; ``find_wahlkreise_by_plz`` always
    returns the full candidate set, ``find_wahlkreis_by_plz`` breaks ties by
    the smallest Wahlkreis number.
    """

    def __init__(
        self,
        wahlkreise: Iterable[Mapping],
        plz_geodata: Mapping[str, Mapping],
        mdbs: Iterable[Mapping],
        exclude=None,
    ):
        plz_lists: Dict[str, List[str]] = {}
        base: Dict[str, Mapping] = {}
        for raw in wahlkreise:
            wk_id = str(raw.get('id', '')).zfill(WAHLKREIS_ID_LENGTH)
            base[wk_id] = raw
            plz_lists[wk_id] = []
            for plz in raw.get('plzList', []) or []:
                normalized = normalize_plz(str(plz))
                if normalized and normalized not in plz_lists[wk_id]:
                    plz_lists[wk_id].append(normalized)

        for plz, mapping in plz_geodata.items():
            wk_id = str(mapping.get('wahlkreisId', '')).zfill(WAHLKREIS_ID_LENGTH)
            normalized = normalize_plz(str(plz))
            if wk_id not in plz_lists or normalized is None:
                continue
            if normalized not in plz_lists[wk_id]:
                plz_lists[wk_id].append(normalized)

        self._wahlkreise: Dict[str, Wahlkreis] = {
            wk_id: Wahlkreis(
                id=wk_id,
                name=raw.get('name', ''),
                land=raw.get('land', ''),
                plz_list=tuple(plz_lists[wk_id]),
            )
            for wk_id, raw in sorted(base.items())
        }

        self._plz_to_wahlkreise: Dict[str, List[Wahlkreis]] = {}
        for wahlkreis in self._wahlkreise.values():
            for plz in wahlkreis.plz_list:
                self._plz_to_wahlkreise.setdefault(plz, []).append(wahlkreis)

        self.mdbs = RepresentativeDirectory(
            (self._build_mdb(raw) for raw in mdbs),
            district_of=lambda mdb: mdb.wahlkreis_id,
            district_width=WAHLKREIS_ID_LENGTH,
            exclude=exclude,
        )

        logger.info(
            "Loaded %s Wahlkreise, %s PLZ, %s MdBs",
            len(self._wahlkreise), len(self._plz_to_wahlkreise), len(self.mdbs),
        )

    @staticmethod
    def _build_mdb(raw: Mapping) -> MdB:
        name = raw.get('name') or f"{raw.get('vorname', '')} {raw.get('nachname', '')}".strip()
        return MdB(
            id=str(raw.get('id', '')),
            name=name,
            email=raw.get('email', '') or '',
            party=raw.get('party', '') or '',
            wahlkreis_id=str(raw.get('wahlkreisId', '') or ''),
            image_url=raw.get('imageUrl', '') or '',
        )

    @classmethod
    def from_directory(cls, data_dir: Path, exclude=None) -> 'WahlkreisIndex':
        logger.info("Loading German datasets from %s", data_dir)
        return cls(
            wahlkreise=load_json(data_dir / 'wahlkreise-data.json', []),
            plz_geodata=load_json(data_dir / 'plz-wahlkreis-geo.json', {}),
            mdbs=load_json(data_dir / 'mdb-data.json', []),
            exclude=exclude,
        )

    @property
    def wahlkreise(self) -> List[Wahlkreis]:
        return list(self._wahlkreise.values())

    def get_wahlkreis(self, wahlkreis_id) -> Optional[Wahlkreis]:
        if wahlkreis_id is None:
            return None
        return self._wahlkreise.get(str(wahlkreis_id).strip().zfill(WAHLKREIS_ID_LENGTH))

    def find_wahlkreise_by_plz(self, plz) -> List[Wahlkreis]:
        normalized = normalize_plz(plz)
        if normalized is None:
            return []
        return list(self._plz_to_wahlkreise.get(normalized, ()))

    def find_wahlkreis_by_plz(self, plz) -> Optional[Wahlkreis]:
        candidates = self.find_wahlkreise_by_plz(plz)
        if not candidates:
            return None
        return min(candidates, key=lambda wk: int(wk.id) if wk.id.isdigit() else float('inf'))

    def find_mdbs_by_wahlkreis(self, wahlkreis_id) -> List[MdB]:
        return self.mdbs.find_by_district(wahlkreis_id)

    def find_mdbs_by_plz(self, plz) -> List[MdB]:
        seen = set()
        result: List[MdB] = []
        for wahlkreis in self.find_wahlkreise_by_plz(plz):
            for mdb in self.find_mdbs_by_wahlkreis(wahlkreis.id):
                if mdb.id not in seen:
                    seen.add(mdb.id)
                    result.append(mdb)
        return sorted(result, key=lambda mdb: collation_key(mdb.name))


class GermanDataRepository:
    """Lazy loader that caches the Wahlkreis index in memory."""

    _index: Optional[WahlkreisIndex] = None
    _path: Optional[str] = None

    @classmethod
    def get_index(cls) -> WahlkreisIndex:
        data_dir = get_data_dir() / 'de'
        if cls._index is None or cls._path != str(data_dir):
            cls._index = WahlkreisIndex.from_directory(data_dir, exclude=excluded_parties_for('DE'))
            cls._path = str(data_dir)
        return cls._index

    @classmethod
    def reset(cls) -> None:
        cls._index = None
        cls._path = None


def find_wahlkreise_by_plz(plz) -> List[Wahlkreis]:
    return GermanDataRepository.get_index().find_wahlkreise_by_plz(plz)


def find_wahlkreis_by_plz(plz) -> Optional[Wahlkreis]:
    return GermanDataRepository.get_index().find_wahlkreis_by_plz(plz)


def find_mdbs_by_wahlkreis(wahlkreis_id) -> List[MdB]:
    return GermanDataRepository.get_index().find_mdbs_by_wahlkreis(wahlkreis_id)


def find_mdbs_by_plz(plz) -> List[MdB]:
    return GermanDataRepository.get_index().find_mdbs_by_plz(plz)
