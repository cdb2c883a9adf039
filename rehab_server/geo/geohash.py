"""Geohash encoding, radius query bounds and great-circle distance.

A geohash interleaves longitude and latitude bisection bits (longitude
first) and writes them five at a time in base32. Points sharing a prefix
share a cell, so a lexical range over stored hashes is a coarse spatial
query. `query_bounds` returns the small set of [start, end] ranges whose
union covers a disk of the given radius; the cover is square and larger
than the disk, so callers must post-filter with `distance_km`.
"""
import math
from typing import List, Tuple

BASE32 = '0123456789bcdefghjkmnpqrstuvwxyz'
BITS_PER_CHAR = 5
MAX_BITS_PRECISION = 22 * BITS_PER_CHAR

EARTH_RADIUS_KM = 6371.0
EARTH_MERIDIONAL_CIRCUMFERENCE_M = 40007860.0
EARTH_EQUATORIAL_RADIUS_M = 6378137.0
EARTH_ECCENTRICITY_SQUARED = 0.00669447819799
METERS_PER_DEGREE_LATITUDE = 110574.0
EPSILON = 1e-12


def encode(lat: float, lng: float, precision: int = 10) -> str:
    """Encode a coordinate into a geohash of `precision` characters."""
    if precision < 1:
        raise ValueError('precision must be >= 1')
    if not -90.0 <= lat <= 90.0:
        raise ValueError('lat must be between -90 and 90')
    if not -180.0 <= lng <= 180.0:
        raise ValueError('lng must be between -180 and 180')

    lat_range = [-90.0, 90.0]
    lng_range = [-180.0, 180.0]
    chars = []
    value = 0
    bits = 0
    even = True
    while len(chars) < precision:
        rng, coord = (lng_range, lng) if even else (lat_range, lat)
        mid = (rng[0] + rng[1]) / 2
        if coord > mid:
            value = (value << 1) + 1
            rng[0] = mid
        else:
            value = value << 1
            rng[1] = mid
        even = not even
        bits += 1
        if bits == BITS_PER_CHAR:
            chars.append(BASE32[value])
            value = 0
            bits = 0
    return ''.join(chars)


def distance_km(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """Haversine distance between two (lat, lng) points in kilometers."""
    lat1, lng1 = a
    lat2, lng2 = b
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)
    h = (math.sin(dlat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(dlng / 2) ** 2)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def _meters_to_longitude_degrees(distance_m: float, latitude: float) -> float:
    radians = math.radians(latitude)
    numerator = math.cos(radians) * EARTH_EQUATORIAL_RADIUS_M * math.pi / 180
    denominator = 1 / math.sqrt(1 - EARTH_ECCENTRICITY_SQUARED * math.sin(radians) ** 2)
    delta_deg = numerator * denominator
    if delta_deg < EPSILON:
        return 360.0 if distance_m > 0 else 0.0
    return min(360.0, distance_m / delta_deg)


def _longitude_bits_for_resolution(resolution_m: float, latitude: float) -> float:
    degrees = _meters_to_longitude_degrees(resolution_m, latitude)
    return max(1.0, math.log2(360 / degrees)) if abs(degrees) > 0.000001 else 1.0


def _latitude_bits_for_resolution(resolution_m: float) -> float:
    return min(math.log2(EARTH_MERIDIONAL_CIRCUMFERENCE_M / 2 / resolution_m), MAX_BITS_PRECISION)


def _wrap_longitude(lng: float) -> float:
    if -180.0 <= lng <= 180.0:
        return lng
    adjusted = lng + 180
    if adjusted > 0:
        return (adjusted % 360) - 180
    return 180 - (-adjusted % 360)


def _bounding_box_bits(center: Tuple[float, float], size_m: float) -> int:
    lat_delta = size_m / METERS_PER_DEGREE_LATITUDE
    lat_north = min(90.0, center[0] + lat_delta)
    lat_south = max(-90.0, center[0] - lat_delta)
    bits_lat = math.floor(_latitude_bits_for_resolution(size_m)) * 2
    bits_lng_north = math.floor(_longitude_bits_for_resolution(size_m, lat_north)) * 2 - 1
    bits_lng_south = math.floor(_longitude_bits_for_resolution(size_m, lat_south)) * 2 - 1
    return min(bits_lat, bits_lng_north, bits_lng_south, MAX_BITS_PRECISION)


def _bounding_box_coordinates(center: Tuple[float, float], radius_m: float) -> List[Tuple[float, float]]:
    lat, lng = center
    lat_degrees = radius_m / METERS_PER_DEGREE_LATITUDE
    lat_north = min(90.0, lat + lat_degrees)
    lat_south = max(-90.0, lat - lat_degrees)
    lng_degrees = max(_meters_to_longitude_degrees(radius_m, lat_north),
                      _meters_to_longitude_degrees(radius_m, lat_south))
    west = _wrap_longitude(lng - lng_degrees)
    east = _wrap_longitude(lng + lng_degrees)
    return [
        (lat, lng), (lat, west), (lat, east),
        (lat_north, lng), (lat_north, west), (lat_north, east),
        (lat_south, lng), (lat_south, west), (lat_south, east),
    ]


def _range_for_hash(geohash: str, bits: int) -> Tuple[str, str]:
    precision = math.ceil(bits / BITS_PER_CHAR)
    if len(geohash) < precision:
        return geohash, geohash + '~'
    geohash = geohash[:precision]
    base = geohash[:-1]
    last_value = BASE32.index(geohash[-1])
    significant_bits = bits - len(base) * BITS_PER_CHAR
    unused_bits = BITS_PER_CHAR - significant_bits
    start_value = (last_value >> unused_bits) << unused_bits
    end_value = start_value + (1 << unused_bits)
    if end_value > 31:
        # '~' sorts after every base32 character
        return base + BASE32[start_value], base + '~'
    return base + BASE32[start_value], base + BASE32[end_value]


def query_bounds(center: Tuple[float, float], radius_km: float) -> List[Tuple[str, str]]:
    """Geohash ranges covering a disk of `radius_km` around `center`.

    Each range is inclusive on both ends. Duplicates are removed, but ranges
    may still overlap near the poles or the antimeridian, so results from
    different ranges must be merged by identity.
    """
    if radius_km <= 0:
        raise ValueError('radius_km must be positive')
    radius_m = radius_km * 1000
    query_bits = max(1, _bounding_box_bits(center, radius_m))
    precision = math.ceil(query_bits / BITS_PER_CHAR)
    ranges = []
    for coordinate in _bounding_box_coordinates(center, radius_m):
        bound = _range_for_hash(encode(coordinate[0], coordinate[1], precision), query_bits)
        if bound not in ranges:
            ranges.append(bound)
    return ranges
