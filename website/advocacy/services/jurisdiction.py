# ABOUTME: Country-agnostic facade that resolves a postal code to districts and representatives.
# ABOUTME: Falls back to the broader region when no precise district is known; never raises.

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from ..constants import SUPPORTED_COUNTRIES, US_STATE_NAMES
from . import canada, france, germany, uk, us

logger = logging.getLogger('advocacy.services')


@dataclass(frozen=True)
class District:
    id: str
    name: str
    region: str = ''


@dataclass
class Resolution:
    country: str
    postal_code: str
    districts: List[District] = field(default_factory=list)
    representatives: List = field(default_factory=list)
    precise: bool = False

    @property
    def found(self) -> bool:
        return bool(self.districts)

    def to_dict(self) -> Dict:
        return {
            'country': self.country,
            'postal_code': self.postal_code,
            'precise': self.precise,
            'districts': [asdict(district) for district in self.districts],
            'representatives': [asdict(rep) for rep in self.representatives],
        }


class JurisdictionResolver:
    """
    Resolve a postal code for one of the supported countries.

    Germany, Canada and the US resolve to one or more districts (a postal
    code, FSA or ZIP code may straddle several). The UK asks postcodes.io
    for the single constituency. France only resolves to the département, so
    every French answer is a coarse one and the caller must let the user pick
    the circonscription.
    """

    def resolve(self, postal_code, country: Optional[str]) -> Resolution:
        country_code = (country or '').strip().upper()
        raw = postal_code if isinstance(postal_code, str) else ''
        resolution = Resolution(country=country_code, postal_code=raw.strip())

        if country_code not in SUPPORTED_COUNTRIES:
            logger.debug("Unsupported country %r for postal code lookup", country)
            return resolution

        handler = getattr(self, f'_resolve_{country_code.lower()}')
        try:
            handler(raw, resolution)
        except (ValueError, KeyError, TypeError, AttributeError, OSError) as exc:
            # Broken or missing datasets degrade to "not found"
            logger.warning("Lookup of %r in %s failed: %s", raw, country_code, exc)
            return Resolution(country=country_code, postal_code=raw.strip())

        logger.debug(
            "Resolved %r in %s to %s district(s), %s representative(s)",
            raw, country_code, len(resolution.districts), len(resolution.representatives),
        )
        return resolution

    def representatives_for_district(self, country: Optional[str], district_id) -> List:
        """
        Representatives of one district; [] when unknown.

        US districts ("NY-12") include the state's senators after the House member.
        """
        country_code = (country or '').strip().upper()
        if country_code == 'DE':
            return germany.GermanDataRepository.get_index().find_mdbs_by_wahlkreis(district_id)
        if country_code == 'FR':
            return france.FrenchDataRepository.get_index().find_deputes_by_department(district_id)
        if country_code == 'CA':
            return canada.CanadianDataRepository.get_index().find_mps_by_riding(district_id)
        if country_code == 'UK':
            return uk.UKDataRepository.get_index().find_mps_by_constituency(district_id)
        if country_code == 'US':
            index = us.USDataRepository.get_index()
            state_code, _ = us.parse_district_id(str(district_id or ''))
            house = index.find_representative_by_district(district_id)
            return ([house] if house else []) + index.find_senators_by_state(state_code)
        return []

    def _resolve_de(self, postal_code: str, resolution: Resolution) -> None:
        index = germany.GermanDataRepository.get_index()
        wahlkreise = index.find_wahlkreise_by_plz(postal_code)
        resolution.postal_code = germany.normalize_plz(postal_code) or resolution.postal_code
        resolution.districts = [District(id=wk.id, name=wk.name, region=wk.land) for wk in wahlkreise]
        resolution.representatives = index.find_mdbs_by_plz(postal_code)
        resolution.precise = len(wahlkreise) == 1

    def _resolve_fr(self, postal_code: str, resolution: Resolution) -> None:
        department_code = france.get_department_from_postal_code(postal_code)
        if department_code is None:
            return
        index = france.FrenchDataRepository.get_index()
        resolution.districts = [
            District(
                id=department_code,
                name=france.get_department_name(department_code) or department_code,
                region=department_code,
            )
        ]
        resolution.representatives = index.find_deputes_by_department(department_code)
        resolution.precise = False

    def _resolve_ca(self, postal_code: str, resolution: Resolution) -> None:
        index = canada.CanadianDataRepository.get_index()
        ridings = index.find_ridings_by_postal_code(postal_code)
        resolution.districts = [
            District(id=riding.id, name=riding.name, region=riding.province) for riding in ridings
        ]
        seen = set()
        for riding in ridings:
            for mp in index.find_mps_by_riding(riding.id):
                if mp.id not in seen:
                    seen.add(mp.id)
                    resolution.representatives.append(mp)
        resolution.precise = len(ridings) == 1

    def _resolve_uk(self, postal_code: str, resolution: Resolution) -> None:
        constituency = uk.lookup_constituency(postal_code)
        if constituency is None:
            return
        resolution.postal_code = uk.normalize_postcode(postal_code)
        resolution.districts = [
            District(id=constituency.name, name=constituency.name, region=constituency.country)
        ]
        resolution.representatives = uk.UKDataRepository.get_index().find_mps_by_constituency(constituency.name)
        resolution.precise = True

    def _resolve_us(self, postal_code: str, resolution: Resolution) -> None:
        found = us.USDataRepository.get_index().find_all_representatives_by_zip_code(postal_code)
        if found.district is None:
            return
        resolution.postal_code = us.normalize_zip_code(postal_code)
        resolution.districts = [
            District(
                id=district_id,
                name=us.format_district_name(district_id),
                region=US_STATE_NAMES.get(found.district.state_code, found.district.state_code),
            )
            for district_id in found.district.all_districts
        ]
        resolution.representatives = found.representatives + found.senators
        resolution.precise = not found.district.is_multi_district


def resolve_postal_code(postal_code, country) -> Resolution:
    return JurisdictionResolver().resolve(postal_code, country)
