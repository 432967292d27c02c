"""Point-in-polygon utilities for building the PLZ → Wahlkreis geodata mapping."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from shapely.errors import GEOSException
from shapely.geometry import Point, shape
from shapely.prepared import prep

from .constants import normalize_german_state

logger = logging.getLogger(__name__)


@dataclass
class BoundaryFeature:
    """A single Wahlkreis polygon with prepared geometry and its bounding box."""

    properties: Dict[str, Any]
    minx: float
    miny: float
    maxx: float
    maxy: float
    prepared_geometry: Any

    def contains(self, point: Point) -> bool:
        if point.x < self.minx or point.x > self.maxx:
            return False
        if point.y < self.miny or point.y > self.maxy:
            return False
        return self.prepared_geometry.contains(point)


class BoundaryIndex:
    """Spatial index over Wahlkreis polygon features."""

    def __init__(self, features: Iterable[Dict[str, Any]]):
        self._features: List[BoundaryFeature] = []
        skipped = 0
        for feature in features:
            geometry_mapping = feature.get("geometry")
            if not geometry_mapping:
                skipped += 1
                continue

            try:
                geometry = shape(geometry_mapping)
                if not geometry.is_valid:
                    geometry = geometry.buffer(0)
            except (GEOSException, ValueError, TypeError) as exc:
                logger.debug("Skipping invalid boundary geometry: %s", exc)
                skipped += 1
                continue

            minx, miny, maxx, maxy = geometry.bounds
            self._features.append(
                BoundaryFeature(
                    properties=feature.get("properties") or {},
                    minx=minx,
                    miny=miny,
                    maxx=maxx,
                    maxy=maxy,
                    prepared_geometry=prep(geometry),
                )
            )

        logger.debug("Loaded %s boundary features (%s skipped)", len(self._features), skipped)

    @classmethod
    def from_geojson(cls, path: Path) -> "BoundaryIndex":
        logger.info("Loading Wahlkreis boundaries from %s", path)
        with path.open("r", encoding="utf-8") as geojson_file:
            data = json.load(geojson_file)

        features = data.get("features", [])
        if not features:
            logger.warning("Boundary dataset at %s contains no features", path)
        return cls(features)

    def __len__(self) -> int:
        return len(self._features)

    def lookup(self, latitude: float, longitude: float) -> Optional[Dict[str, Any]]:
        """Return feature properties for the polygon containing the given point."""
        point = Point(longitude, latitude)
        for feature in self._features:
            if feature.contains(point):
                return feature.properties
        return None


def wahlkreis_from_properties(properties: Dict[str, Any]) -> Dict[str, str]:
    """Read Wahlkreis number, name and state from upper- or lower-case property names."""
    number = properties.get("WKR_NR") or properties.get("wkr_nr") or ""
    name = properties.get("WKR_NAME") or properties.get("wkr_name") or ""
    land = properties.get("LAND_NAME") or properties.get("land_name") or ""
    return {
        "wahlkreisId": str(number).zfill(3),
        "wahlkreisName": name,
        "land": normalize_german_state(land) or "",
    }


def postal_code_of(properties: Dict[str, Any]) -> Optional[str]:
    code = properties.get("postcode") or properties.get("plz") or properties.get("PLZ")
    return str(code).zfill(5) if code else None


def feature_anchor(geometry) -> Point:
    """Centroid of the polygon, or a point guaranteed inside it when the centroid falls outside."""
    centroid = geometry.centroid
    if geometry.contains(centroid):
        return centroid
    return geometry.representative_point()


def map_postal_areas(
    postal_features: Iterable[Dict[str, Any]],
    boundaries: BoundaryIndex,
    progress=None,
) -> Tuple[Dict[str, Dict[str, str]], List[str]]:
    """
    Assign every PLZ polygon to the Wahlkreis containing its anchor point.

    Returns the mapping and the list of PLZ that fell into no Wahlkreis.
    """
    mapping: Dict[str, Dict[str, str]] = {}
    unmatched: List[str] = []
    features = progress(postal_features) if progress else postal_features

    for feature in features:
        postal_code = postal_code_of(feature.get("properties") or {})
        if not postal_code or not feature.get("geometry"):
            continue

        try:
            anchor = feature_anchor(shape(feature["geometry"]))
        except (GEOSException, ValueError, TypeError) as exc:
            logger.debug("Invalid PLZ geometry for %s: %s", postal_code, exc)
            unmatched.append(postal_code)
            continue

        properties = boundaries.lookup(anchor.y, anchor.x)
        if properties is None:
            unmatched.append(postal_code)
            continue
        mapping[postal_code] = wahlkreis_from_properties(properties)

    logger.info("Mapped %s PLZ to Wahlkreise, %s unmatched", len(mapping), len(unmatched))
    return mapping, unmatched
