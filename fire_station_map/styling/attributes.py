#!/usr/bin/env python3
"""
Attribute Resolver

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Look up a logical field (station id, incident count, area...)
across inconsistent attribute spellings, and coerce station identities.

Each upstream export names its station column differently, so every lookup
takes an ordered candidate list (most specific first) and matches keys
case-insensitively. Values are returned verbatim; only station identities are
coerced (digit strings -> int, pseudo-station tokens -> canonical token,
everything else -> None).

Navigation Guide:
- get_attribute: Case-insensitive multi-candidate lookup
- coerce_station_identity: Raw value -> StationIdentity
- resolve_station_identity: Lookup + coercion for polygons
- parse_station_point_identity: Station id from a station point's name
- resolve_numeric: Lookup + float conversion (NaN when not numeric)
"""

import math
import re
from typing import Any, Collection, Dict, Mapping, Optional, Sequence

from fire_station_map.models.data_models import StationIdentity

# Candidates tried after a layer's own station keys
SERVICE_AREA_STATION_FIELDS = (
    "Station",
    "Fire Station",
    "Fire_Station",
    "Station_ID",
    "STATION",
)
SPREAD_STATION_FIELDS = ("STATION",)
STATION_POINT_NAME_FIELDS = (
    "STATION",
    "Station",
    "Station_ID",
    "StationID",
    "NAME",
    "LANDMARKNA",
)
STATION_POINT_FALLBACK_FIELDS = ("OBJECTID", "FID")

_DIGITS = re.compile(r"\d+", re.ASCII)
_STATION_NUMBER_IN_NAME = re.compile(r"\b1?\d{2,3}\b", re.ASCII)


# ═══════════════════════════════════════════════════════════════════════════
# 🔎 LOOKUP
# ═══════════════════════════════════════════════════════════════════════════


def build_key_index(attributes: Mapping[str, Any]) -> Dict[str, str]:
    """Lower-cased key -> real key. On collisions the later key wins."""
    return {str(key).lower(): key for key in attributes}


def get_attribute(
    attributes: Optional[Mapping[str, Any]],
    candidates: Sequence[str],
    default: Any = None,
) -> Any:
    """
    Return the value of the first candidate present, matching keys case-insensitively.

    Args:
        attributes: Attribute mapping (may be None)
        candidates: Field names, most specific first
        default: Returned when no candidate matches

    Returns:
        The matching value verbatim, or default
    """
    if not attributes:
        return default
    index = build_key_index(attributes)
    for candidate in candidates:
        real_key = index.get(str(candidate).lower())
        if real_key is not None:
            return attributes[real_key]
    return default


# ═══════════════════════════════════════════════════════════════════════════
# 🚒 STATION IDENTITY
# ═══════════════════════════════════════════════════════════════════════════


def coerce_station_identity(
    value: Any, pseudo_tokens: Collection[str] = ()
) -> StationIdentity:
    """
    Coerce a raw station value into a StationIdentity.

    Args:
        value: Raw attribute value
        pseudo_tokens: Known pseudo-station tokens (upper case)

    Returns:
        int for integers, digit strings and integral floats; the canonical
        token for a known pseudo-station; None otherwise
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    if isinstance(value, str):
        if _DIGITS.fullmatch(value):
            try:
                return int(value)
            except ValueError:
                # Beyond the interpreter's int string-conversion limit
                return None
        token = value.strip().upper()
        if token in pseudo_tokens:
            return token
    return None


def resolve_station_identity(
    attributes: Optional[Mapping[str, Any]],
    station_keys: Sequence[str] = (),
    pseudo_tokens: Collection[str] = (),
    fallback_fields: Sequence[str] = SERVICE_AREA_STATION_FIELDS,
) -> StationIdentity:
    """
    Resolve the owning station of a polygon feature.

    Args:
        attributes: Feature attributes
        station_keys: Layer-specific candidates, tried first
        pseudo_tokens: Known pseudo-station tokens (upper case)
        fallback_fields: Generic candidates tried after station_keys

    Returns:
        StationIdentity
    """
    raw = get_attribute(attributes, tuple(station_keys) + tuple(fallback_fields))
    return coerce_station_identity(raw, pseudo_tokens)


def parse_station_point_identity(
    attributes: Optional[Mapping[str, Any]],
) -> StationIdentity:
    """
    Resolve the station number of a fire-station point from its name.

    The first 2-3 digit number (optionally prefixed by 1) on a word boundary is
    the station id, e.g. "Station 101" -> 101. A name without such a number is
    returned as-is ("Headquarters"), so the point is styled as an unrecognized
    station rather than an unowned one. Without any name field the numeric
    OBJECTID/FID is used.
    """
    name = get_attribute(attributes, STATION_POINT_NAME_FIELDS)
    if name is not None:
        match = _STATION_NUMBER_IN_NAME.search(str(name))
        return int(match.group(0)) if match else name
    return coerce_station_identity(
        get_attribute(attributes, STATION_POINT_FALLBACK_FIELDS)
    )


# ═══════════════════════════════════════════════════════════════════════════
# 🔢 NUMERIC FIELDS
# ═══════════════════════════════════════════════════════════════════════════


def to_number(value: Any) -> float:
    """Convert a raw attribute value to float; NaN when it is not numeric."""
    if value is None or isinstance(value, bool):
        return math.nan
    try:
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            return float(value.strip())
    except (ValueError, OverflowError):
        return math.nan
    return math.nan


def resolve_numeric(
    attributes: Optional[Mapping[str, Any]], candidates: Sequence[str]
) -> float:
    """Lookup + to_number. NaN when missing or not numeric."""
    return to_number(get_attribute(attributes, candidates))
