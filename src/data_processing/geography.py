"""
State boundaries for the choropleth charts.

The GeoJSON is fetched once per context from a public repository. If the
fetch fails, a single rectangle around the mainland is used instead so the
chart still renders (without meaningful geography).

Each feature's display name (``STATE_NAME`` or ``name``) is resolved to a
jurisdiction code and written to ``properties.jurisdiction``; figures join
on that property, so "New South Wales" and "NSW" land on the same region.
Features sharing a code are merged, leaving one feature per jurisdiction.
"""

import copy
from typing import Optional

import numpy as np
import requests

from core.logging_config import get_logger
from data_processing.schema import JURISDICTION_NAMES, resolve_jurisdiction

logger = get_logger(__name__)

FEATURE_ID_PROPERTY = "jurisdiction"
# Unique per feature, used to draw the no-data base layer
OUTLINE_ID_PROPERTY = "outline_id"
NAME_PROPERTIES = ("STATE_NAME", "name", "NAME", "STE_NAME16", "STE_NAME21")

FALLBACK_GEOJSON = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"name": "Australia"},
            "geometry": {
                "type": "Polygon",
                "coordinates": [[[113, -10], [153, -10], [153, -44], [113, -44], [113, -10]]],
            },
        }
    ],
}


class GeoLoadError(Exception):
    """The boundaries GeoJSON could not be fetched or was not a FeatureCollection."""


def feature_name(feature: dict) -> Optional[str]:
    properties = feature.get("properties") or {}
    for key in NAME_PROPERTIES:
        if properties.get(key):
            return str(properties[key])
    return None


def _polygons(geometry: dict) -> Optional[list]:
    if geometry.get("type") == "Polygon":
        return [geometry["coordinates"]]
    if geometry.get("type") == "MultiPolygon":
        return list(geometry["coordinates"])
    return None


def _merge_into(target: dict, feature: dict) -> bool:
    """Append feature's polygons to target as one MultiPolygon; False if either is not polygonal."""
    target_polygons = _polygons(target.get("geometry") or {})
    extra = _polygons(feature.get("geometry") or {})
    if target_polygons is None or extra is None:
        return False
    target["geometry"] = {"type": "MultiPolygon", "coordinates": target_polygons + extra}
    return True


def annotate_features(geojson: dict) -> dict:
    """
    Return a copy with ``properties.jurisdiction`` set on every resolvable feature.

    Plotly fills only the first feature carrying a given location id, so
    features resolving to the same code ("New South Wales" and "NSW", or a
    state split into parts) are merged into one MultiPolygon. Every feature
    also gets a unique ``outline_id`` for the no-data layer.
    """
    source = copy.deepcopy(geojson)
    features = []
    by_code: dict[str, dict] = {}
    seen_outlines: set[str] = set()

    for index, feature in enumerate(source.get("features", [])):
        properties = feature.setdefault("properties", {})
        name = feature_name(feature)
        code = resolve_jurisdiction(name)

        if code is not None and code in by_code and _merge_into(by_code[code], feature):
            logger.debug(f"Merged feature {name!r} into {code}")
            continue

        outline_id = name or f"feature-{index}"
        if outline_id in seen_outlines:
            outline_id = f"{outline_id}-{index}"
        seen_outlines.add(outline_id)
        properties[OUTLINE_ID_PROPERTY] = outline_id

        if code is not None and code not in by_code:
            properties[FEATURE_ID_PROPERTY] = code
            by_code[code] = feature
        elif code is None:
            logger.debug(f"No jurisdiction for feature {name!r}")
        features.append(feature)

    source["features"] = features
    return source


def fetch_geojson(url: str, timeout: int = 30) -> dict:
    """
    Download a GeoJSON FeatureCollection.

    Raises:
        GeoLoadError: On network failure, bad status or an unexpected payload
    """
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        raise GeoLoadError(f"Failed to fetch boundaries from {url}: {e}") from e

    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        raise GeoLoadError(f"{url} did not return a GeoJSON FeatureCollection")
    return data


def _ring_centroid(ring) -> tuple[float, float, float]:
    """Signed area and centroid of one polygon ring (shoelace formula)."""
    points = np.asarray(ring, dtype=float)[:, :2]
    x, y = points[:, 0], points[:, 1]
    x_next, y_next = np.roll(x, -1), np.roll(y, -1)
    cross = x * y_next - x_next * y
    area = cross.sum() / 2
    if area == 0:
        return 0.0, float(x.mean()), float(y.mean())
    cx = ((x + x_next) * cross).sum() / (6 * area)
    cy = ((y + y_next) * cross).sum() / (6 * area)
    return float(area), float(cx), float(cy)


def feature_centroid(feature: dict) -> Optional[tuple[float, float]]:
    """Area-weighted (lon, lat) centroid of a Polygon or MultiPolygon feature."""
    geometry = feature.get("geometry") or {}
    if geometry.get("type") == "Polygon":
        polygons = [geometry["coordinates"]]
    elif geometry.get("type") == "MultiPolygon":
        polygons = geometry["coordinates"]
    else:
        return None

    total_area = 0.0
    weighted_x = 0.0
    weighted_y = 0.0
    for polygon in polygons:
        if not polygon:
            continue
        area, cx, cy = _ring_centroid(polygon[0])
        weight = abs(area)
        total_area += weight
        weighted_x += cx * weight
        weighted_y += cy * weight

    if total_area == 0:
        points = np.asarray([pt for polygon in polygons for pt in polygon[0]], dtype=float)
        if points.size == 0:
            return None
        return float(points[:, 0].mean()), float(points[:, 1].mean())
    return weighted_x / total_area, weighted_y / total_area


class GeographyProvider:
    """
    Fetches and annotates the boundaries once, then serves them from memory.

    Args:
        url: GeoJSON address
        timeout: Request timeout in seconds
        enabled: When False the fallback outline is always used
    """

    def __init__(self, url: str, timeout: int = 30, enabled: bool = True):
        self.url = url
        self.timeout = timeout
        self.enabled = enabled
        self._geojson: Optional[dict] = None
        self.is_fallback = False

    def get(self) -> dict:
        """Annotated boundaries; the fallback outline if the fetch failed."""
        if self._geojson is None:
            self._geojson = self._load()
        return self._geojson

    def _load(self) -> dict:
        if not self.enabled:
            logger.info("Geography fetch disabled, using fallback outline")
            self.is_fallback = True
            return annotate_features(FALLBACK_GEOJSON)

        try:
            raw = fetch_geojson(self.url, timeout=self.timeout)
        except GeoLoadError as e:
            logger.warning(f"{e}. Using fallback outline.")
            self.is_fallback = True
            return annotate_features(FALLBACK_GEOJSON)

        self.is_fallback = False
        annotated = annotate_features(raw)
        matched = {
            f["properties"].get(FEATURE_ID_PROPERTY)
            for f in annotated["features"]
        } - {None}
        unmatched = sorted(set(JURISDICTION_NAMES) - matched)
        if unmatched:
            logger.warning(f"Boundaries have no feature for: {', '.join(unmatched)}")
        logger.info(f"Loaded {len(annotated['features'])} boundary features from {self.url}")
        return annotated

    def centroids(self) -> dict[str, tuple[float, float]]:
        """Label position per jurisdiction code."""
        positions = {}
        for feature in self.get().get("features", []):
            code = (feature.get("properties") or {}).get(FEATURE_ID_PROPERTY)
            if code and code not in positions:
                centroid = feature_centroid(feature)
                if centroid is not None:
                    positions[code] = centroid
        return positions

    def outline_ids(self) -> list[str]:
        return [f["properties"][OUTLINE_ID_PROPERTY] for f in self.get().get("features", [])]

    def reset(self) -> None:
        self._geojson = None
        self.is_fallback = False
