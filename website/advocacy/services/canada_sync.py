# ABOUTME: Offline ETL that builds the Canadian MP, riding and FSA → riding datasets.
# ABOUTME: Probes the Represent API in rate-limited batches; not used at request time.

from __future__ import annotations

import json
import logging
import string
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import requests
from tqdm import tqdm

from ..constants import normalize_canadian_party, province_from_riding_id
from .represent_api_client import RepresentAPI

logger = logging.getLogger('advocacy.services')

# Letters never used as the first / third character of an FSA.
FSA_FIRST_LETTERS = 'ABCEGHJKLMNPRSTVXY'
FSA_THIRD_LETTERS = 'ABCEGHJKLMNPRSTVWXYZ'

# Local Delivery Unit suffixes tried, in order, to find one real postal code per FSA.
CANDIDATE_LDU_SUFFIXES = ('1A1', '0A1', '1B1', '2A1', '1A2', '1C1')

SAMPLE_FSAS = (
    'A1A', 'A1C', 'A0A', 'B3H', 'B3K', 'B0J', 'C1A', 'C0A', 'E1A', 'E3B', 'E0A',
    'G1A', 'G1R', 'G0A', 'H1A', 'H2X', 'H3A', 'J1H', 'J4B', 'J0A',
    'K1A', 'K2P', 'K0A', 'L3R', 'L5B', 'L0A', 'M4W', 'M5V', 'M6K', 'N2L', 'N0A', 'P3E', 'P0A',
    'R2C', 'R3C', 'R0A', 'S4P', 'S7K', 'S0A', 'T2P', 'T5J', 'T0A', 'V5K', 'V6B', 'V0A',
    'Y1A', 'X1A', 'X0A',
)

LATEST_REPRESENTATION_ORDER = 'federal-electoral-districts-2023'
BATCH_SIZE = 10
BATCH_DELAY_SECONDS = 1.0


def generate_all_fsas() -> List[str]:
    return [
        f"{first}{digit}{third}"
        for first in FSA_FIRST_LETTERS
        for digit in string.digits
        for third in FSA_THIRD_LETTERS
    ]


def select_federal_boundary(payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Pick the federal electoral district from a postcode payload.

    The most recent representation order wins when several boundary sets are
    returned; centroid matches are preferred over concordance matches.
    """
    centroid = payload.get('boundaries_centroid') or []
    concordance = payload.get('boundaries_concordance') or []

    def is_federal(boundary):
        return 'federal electoral district' in (boundary.get('boundary_set_name') or '').lower()

    for boundary in centroid:
        if LATEST_REPRESENTATION_ORDER in (boundary.get('url') or ''):
            return boundary
    for boundary in centroid:
        if (boundary.get('boundary_set_name') == 'Federal electoral district'
                and 'representation-order' not in (boundary.get('url') or '')):
            return boundary
    for boundary in list(centroid) + list(concordance):
        if is_federal(boundary):
            return boundary
    return None


class CanadaDataFetcher:
    """Fetch MPs, ridings and the FSA mapping and write them as bundled JSON."""

    def __init__(
        self,
        batch_size: int = BATCH_SIZE,
        batch_delay: float = BATCH_DELAY_SECONDS,
        candidate_suffixes: Sequence[str] = CANDIDATE_LDU_SUFFIXES,
        sleep=time.sleep,
    ):
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.candidate_suffixes = tuple(candidate_suffixes)
        self._sleep = sleep
        self.stats = {'checked': 0, 'found': 0, 'errors': 0}

    # --------------------------------------
    def fetch_ridings(self) -> List[Dict[str, Any]]:
        boundaries = RepresentAPI.get_federal_boundaries()
        ridings = []
        for boundary in boundaries:
            riding_id = str(boundary.get('external_id', ''))
            metadata = boundary.get('metadata') or {}
            ridings.append({
                'id': riding_id,
                'name': metadata.get('FEDENAME') or boundary.get('name', ''),
                'nameFr': metadata.get('FEDFNAME') or boundary.get('name', ''),
                'province': province_from_riding_id(riding_id) or metadata.get('PROVCODE', ''),
                'provinceCode': riding_id[:2],
                'postalCodes': [],
            })
        logger.info("Fetched %s ridings", len(ridings))
        return ridings

    def fetch_mps(self, ridings: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        riding_ids_by_name = {riding['name'].lower(): riding['id'] for riding in ridings}
        members = RepresentAPI.get_house_of_commons_members()
        mps = []
        for index, member in enumerate(members, start=1):
            district_name = member.get('district_name', '') or ''
            riding_id = riding_ids_by_name.get(district_name.lower(), '')
            if not riding_id:
                logger.warning("No riding id for MP %s (%s)", member.get('name'), district_name)
            mps.append({
                'id': str(index),
                'name': member.get('name', ''),
                'firstName': member.get('first_name', ''),
                'lastName': member.get('last_name', ''),
                'email': member.get('email') or '',
                'party': normalize_canadian_party(member.get('party_name', '')),
                'ridingId': riding_id,
                'ridingName': district_name,
                'province': province_from_riding_id(riding_id),
                'imageUrl': member.get('photo_url') or '',
            })
        logger.info("Fetched %s MPs", len(mps))
        return mps

    # --------------------------------------
    def probe_fsa(self, fsa: str) -> Optional[Dict[str, str]]:
        """Try candidate postal codes for one FSA until one yields a federal district."""
        for suffix in self.candidate_suffixes:
            postal_code = f"{fsa}{suffix}"
            try:
                payload = RepresentAPI.get_postcode(postal_code)
            except requests.RequestException as exc:
                self.stats['errors'] += 1
                logger.warning("Error fetching %s: %s", postal_code, exc)
                continue
            if payload is None:
                continue
            boundary = select_federal_boundary(payload)
            if boundary:
                return {
                    'ridingId': str(boundary.get('external_id', '')),
                    'ridingName': boundary.get('name', ''),
                    'province': payload.get('province', ''),
                }
        return None

    def build_fsa_mapping(self, fsas: Sequence[str]) -> Dict[str, Dict[str, str]]:
        mapping: Dict[str, Dict[str, str]] = {}
        batches = [fsas[i:i + self.batch_size] for i in range(0, len(fsas), self.batch_size)]
        with ThreadPoolExecutor(max_workers=self.batch_size) as executor:
            for batch_number, batch in enumerate(tqdm(batches, desc="FSA batches", unit="batch")):
                results: List[Tuple[str, Optional[Dict[str, str]]]] = list(
                    zip(batch, executor.map(self.probe_fsa, batch))
                )
                for fsa, result in results:
                    self.stats['checked'] += 1
                    if result:
                        mapping[fsa] = result
                        self.stats['found'] += 1
                if batch_number < len(batches) - 1:
                    self._sleep(self.batch_delay)
        logger.info(
            "FSA mapping: checked %s, found %s, errors %s",
            self.stats['checked'], self.stats['found'], self.stats['errors'],
        )
        return mapping

    # --------------------------------------
    @staticmethod
    def attach_postal_codes(ridings: List[Dict[str, Any]], mapping: Dict[str, Dict[str, str]]) -> None:
        by_id = {riding['id']: riding for riding in ridings}
        for fsa, data in sorted(mapping.items()):
            riding = by_id.get(data['ridingId'])
            if riding is not None and fsa not in riding['postalCodes']:
                riding['postalCodes'].append(fsa)

    @staticmethod
    def write(output_dir: Path, name: str, data: Any) -> Path:
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / name
        path.write_text(json.dumps(data, ensure_ascii=False, indent='\t'), encoding='utf-8')
        return path
