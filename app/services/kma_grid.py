from __future__ import annotations

import math
from dataclasses import dataclass


# 대한민국 영역: 위도 33~39, 경도 124~132
COVERAGE_LAT_MIN = 33.0
COVERAGE_LAT_MAX = 39.0
COVERAGE_LON_MIN = 124.0
COVERAGE_LON_MAX = 132.0

# 기상청 격자 Lambert Conformal Conic 투영 상수
EARTH_RADIUS_KM = 6371.00877
GRID_SPACING_KM = 5.0
STANDARD_PARALLEL_1 = 30.0
STANDARD_PARALLEL_2 = 60.0
ORIGIN_LON = 126.0
ORIGIN_LAT = 38.0
ORIGIN_X = 43
ORIGIN_Y = 136

_DEGRAD = math.pi / 180.0


@dataclass(frozen=True, slots=True)
class GridPoint:
    nx: int
    ny: int


def is_in_regional_coverage(lat: float, lon: float) -> bool:
    return COVERAGE_LAT_MIN <= lat <= COVERAGE_LAT_MAX and COVERAGE_LON_MIN <= lon <= COVERAGE_LON_MAX


def _projection_constants() -> tuple[float, float, float, float]:
    re = EARTH_RADIUS_KM / GRID_SPACING_KM
    slat1 = STANDARD_PARALLEL_1 * _DEGRAD
    slat2 = STANDARD_PARALLEL_2 * _DEGRAD
    olat = ORIGIN_LAT * _DEGRAD

    sn = math.tan(math.pi * 0.25 + slat2 * 0.5) / math.tan(math.pi * 0.25 + slat1 * 0.5)
    sn = math.log(math.cos(slat1) / math.cos(slat2)) / math.log(sn)
    sf = math.tan(math.pi * 0.25 + slat1 * 0.5)
    sf = math.pow(sf, sn) * math.cos(slat1) / sn
    ro = math.tan(math.pi * 0.25 + olat * 0.5)
    ro = re * sf / math.pow(ro, sn)
    return re, sn, sf, ro


_RE, _SN, _SF, _RO = _projection_constants()


def to_provider_grid(lat: float, lon: float) -> GridPoint:
    """Project WGS84 coordinates onto the KMA 5 km forecast grid."""
    ra = math.tan(math.pi * 0.25 + lat * _DEGRAD * 0.5)
    ra = _RE * _SF / math.pow(ra, _SN)
    theta = lon * _DEGRAD - ORIGIN_LON * _DEGRAD
    if theta > math.pi:
        theta -= 2.0 * math.pi
    if theta < -math.pi:
        theta += 2.0 * math.pi
    theta *= _SN

    nx = math.floor(ra * math.sin(theta) + ORIGIN_X + 0.5)
    ny = math.floor(_RO - ra * math.cos(theta) + ORIGIN_Y + 0.5)
    return GridPoint(nx=int(nx), ny=int(ny))


__all__ = ["GridPoint", "is_in_regional_coverage", "to_provider_grid"]
