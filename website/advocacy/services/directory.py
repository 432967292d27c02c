# ABOUTME: Read-only in-memory directory of representatives grouped by district id.
# ABOUTME: Load-time filtering (missing district, excluded parties) happens once, never per query.

from __future__ import annotations

import logging
import unicodedata
from typing import Callable, Dict, Generic, Iterable, List, Optional, TypeVar

logger = logging.getLogger('advocacy.services')

T = TypeVar('T')


def collation_key(value: str):
    """Accent- and case-insensitive sort key, close to a locale-aware comparison."""
    value = value or ''
    decomposed = unicodedata.normalize('NFKD', value)
    folded = ''.join(char for char in decomposed if not unicodedata.combining(char))
    return folded.casefold(), value


def normalize_district_id(district_id, width: Optional[int]) -> Optional[str]:
    """Zero-pad a district id to the canonical width; None for blank or all-zero ids."""
    if district_id is None:
        return None
    value = str(district_id).strip()
    if not value or set(value) == {'0'}:
        return None
    if width:
        value = value.zfill(width)
    return value


class PartyExclusion:
    """
    Named load-time policy that drops representatives of the given parties.

    Kept as an object rather than an inline filter so the policy can be
    inspected, logged and tested on its own.
    """

    def __init__(self, parties: Iterable[str]):
        self.parties = frozenset(party.strip().casefold() for party in parties if party and party.strip())

    def __call__(self, representative) -> bool:
        party = getattr(representative, 'party', '') or ''
        return party.strip().casefold() in self.parties

    def __bool__(self) -> bool:
        return bool(self.parties)

    def __repr__(self) -> str:
        return f"PartyExclusion({sorted(self.parties)!r})"


def exclude_parties(*parties: str) -> PartyExclusion:
    return PartyExclusion(parties)


class RepresentativeDirectory(Generic[T]):
    """Immutable district id → representatives index built once from a dataset."""

    def __init__(
        self,
        representatives: Iterable[T],
        district_of: Callable[[T], Optional[str]],
        district_width: Optional[int] = None,
        exclude: Optional[Callable[[T], bool]] = None,
        order_by: Callable[[T], object] = None,
    ):
        self._district_width = district_width
        self._order_by = order_by or (lambda rep: collation_key(getattr(rep, 'name', '')))
        self._by_district: Dict[str, List[T]] = {}
        self._all: List[T] = []

        dropped_district = 0
        dropped_policy = 0
        for representative in representatives:
            district_id = normalize_district_id(district_of(representative), district_width)
            if district_id is None:
                dropped_district += 1
                continue
            if exclude is not None and exclude(representative):
                dropped_policy += 1
                continue
            self._by_district.setdefault(district_id, []).append(representative)
            self._all.append(representative)

        for district_id, members in self._by_district.items():
            members.sort(key=self._order_by)

        logger.debug(
            "Built representative directory: %s kept, %s without district, %s excluded by %r",
            len(self._all), dropped_district, dropped_policy, exclude,
        )

    def find_by_district(self, district_id) -> List[T]:
        """Return the ordered representatives for a district, or an empty list."""
        normalized = normalize_district_id(district_id, self._district_width)
        if normalized is None:
            return []
        return list(self._by_district.get(normalized, ()))

    def district_ids(self) -> List[str]:
        return sorted(self._by_district)

    def all(self) -> List[T]:
        return list(self._all)

    def __len__(self) -> int:
        return len(self._all)

    def __iter__(self):
        return iter(list(self._all))

    def __contains__(self, district_id) -> bool:
        normalized = normalize_district_id(district_id, self._district_width)
        return normalized is not None and normalized in self._by_district
